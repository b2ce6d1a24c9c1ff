"""Menu document loading and validation.

The YAML document describes a root menu plus a mapping of named menus.
Items are a tagged union on `type` (command, submenu, back, separator).
Structural problems are caught by the pydantic models; `validate_config`
adds the semantic checks that need the whole tree.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("menuworks.config")

ROOT = "root"
PLATFORMS = ("windows", "linux", "mac")
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default_config.yaml"

THEME_FIELDS = (
    "background",
    "text",
    "border",
    "highlight_bg",
    "highlight_fg",
    "hotkey",
    "shadow",
    "disabled",
)

# VGA colour names accepted in themes, mapped to rich colour names.
COLOR_NAMES = {
    "black": "black",
    "maroon": "red",
    "green": "green",
    "olive": "yellow",
    "navy": "blue",
    "purple": "magenta",
    "teal": "cyan",
    "silver": "white",
    "gray": "bright_black",
    "grey": "bright_black",
    "red": "bright_red",
    "lime": "bright_green",
    "yellow": "bright_yellow",
    "blue": "bright_blue",
    "fuchsia": "bright_magenta",
    "aqua": "bright_cyan",
    "cyan": "bright_cyan",
    "white": "bright_white",
}


class ConfigError(Exception):
    """Raised when a menu document cannot be read, parsed or validated."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")


def current_platform() -> str:
    """Return the running platform as used by `exec` variants."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "mac"
    return sys.platform


# ═══════════════════════════════════════════════════════════════════════════════
# MODELS
# ═══════════════════════════════════════════════════════════════════════════════

class ExecConfig(BaseModel):
    """OS-specific command variants for a command item."""

    model_config = ConfigDict(extra="forbid")

    windows: str = ""
    linux: str = ""
    mac: str = ""
    workdir: str = ""

    def command_for(self, platform: str) -> str:
        """Return the command for `platform`, or "" if there is none."""
        if platform not in PLATFORMS:
            return ""
        return getattr(self, platform) or ""

    def has_any(self) -> bool:
        return any(getattr(self, p) for p in PLATFORMS)


class _LabelledItem(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    label: str = ""
    hotkey: str | None = None
    help: str = ""

    @field_validator("hotkey")
    @classmethod
    def _single_letter(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        if len(value) != 1 or not value.isalpha():
            raise ValueError("hotkey must be a single letter")
        return value


class CommandItem(_LabelledItem):
    type: Literal["command"] = "command"
    exec: ExecConfig = Field(default_factory=ExecConfig)
    show_output: bool = Field(default=True, alias="showOutput")


class SubmenuItem(_LabelledItem):
    type: Literal["submenu"] = "submenu"
    target: str = ""


class BackItem(_LabelledItem):
    type: Literal["back"] = "back"


class SeparatorItem(BaseModel):
    """A pure visual divider; it may not carry a label, hotkey or anything else."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["separator"] = "separator"

    @property
    def label(self) -> str:
        return ""

    @property
    def hotkey(self) -> None:
        return None

    @property
    def help(self) -> str:
        return ""


MenuItem = Annotated[
    Union[CommandItem, SubmenuItem, BackItem, SeparatorItem],
    Field(discriminator="type"),
]


def is_selectable(item: MenuItem) -> bool:
    return item.type != "separator"


class Menu(BaseModel):
    title: str = ""
    items: list[MenuItem] = Field(default_factory=list)


class ThemeColors(BaseModel):
    background: str = ""
    text: str = ""
    border: str = ""
    highlight_bg: str = ""
    highlight_fg: str = ""
    hotkey: str = ""
    shadow: str = ""
    disabled: str = ""


class MenuTree(BaseModel):
    """The whole menu document: the root menu, named menus and display options.

    Built once per load; the navigator treats it as immutable.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    items: list[MenuItem] = Field(default_factory=list)
    menus: dict[str, Menu] = Field(default_factory=dict)
    theme: str = ""
    themes: dict[str, ThemeColors] = Field(default_factory=dict)
    initial_menu: str = ""
    splash_screen: bool = True

    @property
    def root(self) -> Menu:
        return Menu(title=self.title, items=self.items)

    def has_menu(self, name: str) -> bool:
        return name == ROOT or name in self.menus

    def menu(self, name: str) -> Menu | None:
        """Look up a menu by name; "root" is the unnamed root menu."""
        if name == ROOT:
            return self.root
        return self.menus.get(name)

    def menu_names(self) -> list[str]:
        return [ROOT, *self.menus.keys()]


# ═══════════════════════════════════════════════════════════════════════════════
# LOADING
# ═══════════════════════════════════════════════════════════════════════════════

def default_config_text() -> str:
    return DEFAULT_CONFIG_PATH.read_text(encoding="utf-8")


def write_default_config(path: Path) -> None:
    """Write the bundled default document to `path`, creating parent dirs."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config_text(), encoding="utf-8")
    logger.info("wrote default config to %s", path)


def _format_validation_error(exc: ValidationError) -> list[str]:
    out: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        out.append(f"{loc}: {msg}" if loc else msg)
    return out


def parse_config(text: str) -> MenuTree:
    """Parse and validate a YAML menu document."""
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse YAML: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("failed to parse YAML: top level must be a mapping")
    # `menus:` with nothing under it parses as None.
    for key in ("items", "menus", "themes"):
        if key in raw and raw[key] is None:
            raw.pop(key)

    try:
        tree = MenuTree.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc

    errors = validate_config(tree)
    if errors:
        raise ConfigError(errors)
    return tree


def load_config(path: Path) -> tuple[MenuTree, bool]:
    """Read the menu document at `path`.

    Returns:
        (tree, created) where `created` is True when the file was missing
        and the bundled default was written in its place.

    Raises:
        ConfigError: the file is unreadable or the document is invalid.
    """
    path = Path(path)
    created = False
    if not path.exists():
        try:
            write_default_config(path)
        except OSError as exc:
            raise ConfigError(f"failed to write default config: {exc}") from exc
        created = True

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file: {exc}") from exc

    try:
        tree = parse_config(text)
    except ConfigError as exc:
        logger.warning("config %s rejected: %s", path, exc)
        raise
    logger.info("loaded config %s (%d named menus)", path, len(tree.menus))
    return tree, created


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def _validate_item(item: MenuItem, index: int, tree: MenuTree) -> list[str]:
    errs: list[str] = []
    if item.type == "command":
        if not item.label:
            errs.append(f"item {index}: command missing label")
        if not item.exec.has_any():
            errs.append(f"item {index}: command missing exec variant (windows, linux, or mac)")
    elif item.type == "submenu":
        if not item.label:
            errs.append(f"item {index}: submenu missing label")
        if not item.target:
            errs.append(f"item {index}: submenu missing target")
        elif not tree.menus:
            errs.append(f"item {index}: submenu target '{item.target}' not found (no menus defined)")
        # A target missing from a non-empty `menus` mapping is disabled at runtime.
    elif item.type == "back":
        if not item.label:
            errs.append(f"item {index}: back missing label")
    return errs


def validate_config(tree: MenuTree) -> list[str]:
    """Check labels, exec variants and submenu targets across the tree."""
    errs: list[str] = []

    for i, item in enumerate(tree.items):
        errs.extend(_validate_item(item, i, tree))

    for name, menu in tree.menus.items():
        if name == ROOT:
            errs.append(f"{name}: menu name 'root' is reserved for the top-level menu")
        for i, item in enumerate(menu.items):
            errs.extend(f"{name}: {e}" for e in _validate_item(item, i, tree))

    return errs


def parse_color_name(name: str | None) -> str | None:
    """Convert a VGA colour name to a rich colour name, or None if unknown."""
    if not name:
        return None
    return COLOR_NAMES.get(name.strip().lower())


def validate_theme(tree: MenuTree) -> list[str]:
    """Return non-fatal warnings about the selected theme."""
    warnings: list[str] = []

    if not tree.theme:
        return warnings

    if not tree.themes:
        warnings.append(f"theme: selected theme '{tree.theme}' but no themes defined")
        return warnings

    theme = tree.themes.get(tree.theme)
    if theme is None:
        warnings.append(f"theme: selected theme '{tree.theme}' not found in themes")
        return warnings

    for field_name in THEME_FIELDS:
        color = getattr(theme, field_name)
        if not color:
            warnings.append(f"theme '{tree.theme}': {field_name} color not specified")
        elif parse_color_name(color) is None:
            warnings.append(f"theme '{tree.theme}': invalid color name '{color}' for {field_name}")

    return warnings


def selected_theme(tree: MenuTree) -> ThemeColors | None:
    if not tree.theme:
        return None
    return tree.themes.get(tree.theme)

"""Renderables for the menu, dialogs and full-screen views."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Sequence

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from ..config import THEME_FIELDS, MenuTree, parse_color_name, selected_theme

if TYPE_CHECKING:
    from .navigator import Navigator


# ═══════════════════════════════════════════════════════════════════════════════
# THEME
# ═══════════════════════════════════════════════════════════════════════════════

# VGA-style defaults, used for any theme colour that is missing or invalid.
DEFAULT_COLORS = {
    "background": "blue",
    "text": "grey74",
    "border": "bright_cyan",
    "highlight_bg": "cyan",
    "highlight_fg": "bright_white",
    "hotkey": "bright_yellow",
    "shadow": "grey35",
    "disabled": "grey50",
}

FOOTER_TEXT = "↑↓ Navigate | PgUp/PgDn Page | ENTER Select | ESC Back | F5 Reload | F2 Help"


@dataclass(frozen=True)
class Palette:
    """Resolved rich styles for one theme."""

    background: str
    text: str
    border: str
    highlight_bg: str
    highlight_fg: str
    hotkey: str
    shadow: str
    disabled: str

    @property
    def normal(self) -> str:
        return f"{self.text} on {self.background}"

    @property
    def frame(self) -> str:
        return f"{self.border} on {self.background}"

    @property
    def highlight(self) -> str:
        return f"bold {self.highlight_fg} on {self.highlight_bg}"

    @property
    def hotkey_normal(self) -> str:
        return f"bold {self.hotkey} on {self.background}"

    @property
    def hotkey_highlight(self) -> str:
        return f"bold {self.hotkey} on {self.highlight_bg}"

    @property
    def dimmed(self) -> str:
        return f"{self.disabled} on {self.background}"


DEFAULT_PALETTE = Palette(**DEFAULT_COLORS)


def palette_for(tree: MenuTree | None) -> Palette:
    """Build the palette for the tree's selected theme."""
    theme = selected_theme(tree) if tree is not None else None
    if theme is None:
        return DEFAULT_PALETTE
    colors = {}
    for name in THEME_FIELDS:
        colors[name] = parse_color_name(getattr(theme, name)) or DEFAULT_COLORS[name]
    return Palette(**colors)


# ═══════════════════════════════════════════════════════════════════════════════
# TEXT HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def truncate(text: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if len(text) <= max_width:
        return text
    if max_width == 1:
        return "…"
    return text[: max_width - 1] + "…"


def hotkey_position(label: str, hotkey: str | None) -> int:
    """Index of the first character of `label` matching `hotkey`, or -1."""
    if not hotkey:
        return -1
    for i, ch in enumerate(label):
        if ch.upper() == hotkey:
            return i
    return -1


# ═══════════════════════════════════════════════════════════════════════════════
# MENU
# ═══════════════════════════════════════════════════════════════════════════════

def _item_row(nav: Navigator, index: int, width: int, palette: Palette) -> Text:
    item = nav.current_items[index]

    if item.type == "separator":
        return Text("─" * width, style=palette.frame)

    disabled = nav.is_item_disabled(index)
    selected = index == nav.selection_index and nav.has_selectable()
    if disabled:
        style, hk_style = palette.dimmed, palette.dimmed
    elif selected:
        style, hk_style = palette.highlight, palette.hotkey_highlight
    else:
        style, hk_style = palette.normal, palette.hotkey_normal

    label = item.label
    if item.type == "back" and nav.is_at_root() and nav.root_is_empty:
        label = "Quit"
    label = truncate(label, width - 4)

    row = Text(" ", style=style)
    pos = hotkey_position(label, nav.hotkey_for(index))
    if pos >= 0:
        row.append(label[:pos])
        row.append(label[pos], style=hk_style)
        row.append(label[pos + 1 :])
    else:
        row.append(label)
    row.truncate(width - 2, pad=True)

    if item.type == "submenu" and not disabled:
        row.append(" ►", style=style if selected else palette.frame)
    else:
        row.append("  ")
    return row


def _empty_placeholder(nav: Navigator, max_visible: int, width: int, palette: Palette) -> list[Text]:
    rows = [Text(" " * width, style=palette.normal) for _ in range(max_visible)]
    middle = max(0, max_visible // 2 - 1)
    rows[middle] = Text("(No items)".center(width), style=palette.normal)
    if middle + 2 < max_visible:
        action = "[Q]uit" if nav.is_at_root() else "[B]ack"
        rows[middle + 2] = Text(action.center(width), style=palette.normal)
    return rows


def render_menu(
    nav: Navigator,
    max_visible: int,
    palette: Palette = DEFAULT_PALETTE,
    width: int = 60,
    notice: str = "",
    now: datetime | None = None,
) -> RenderableType:
    """Render the current menu as a fixed-size framed window.

    Args:
        nav: Navigator supplying the menu, selection and scroll offset
        max_visible: Number of item rows in the window
        palette: Resolved theme styles
        width: Total window width including the frame
        notice: Transient one-line message shown under the footer
        now: Clock value for the header (defaults to the current time)
    """
    inner = width - 4
    now = now or datetime.now()
    items = nav.current_items
    offset = nav.scroll_offset

    header = Table.grid(expand=True)
    header.add_column(justify="left")
    header.add_column(justify="right")
    header.add_row(now.strftime("%a %d %b %Y") + "     MenuWorks", now.strftime("%H:%M"))

    lines: list[RenderableType] = [header, Text("═" * inner, style=palette.frame)]

    if not nav.has_selectable():
        lines.append(Text(""))
        lines.extend(_empty_placeholder(nav, max_visible, inner, palette))
        lines.append(Text(""))
    else:
        end = min(len(items), offset + max_visible)
        lines.append(Text("▲".center(inner) if offset > 0 else "", style=palette.frame))
        for i in range(offset, end):
            lines.append(_item_row(nav, i, inner, palette))
        for _ in range(max_visible - (end - offset)):
            lines.append(Text(""))
        lines.append(Text("▼".center(inner) if end < len(items) else "", style=palette.frame))

    subtitle = nav.breadcrumbs() if not nav.is_at_root() else None
    panel = Panel(
        Group(*lines),
        title=f" {nav.current_title} " if nav.current_title else None,
        subtitle=subtitle,
        width=width,
        box=box.DOUBLE,
        border_style=palette.frame,
        style=palette.normal,
        padding=(0, 1),
    )

    footer = Text(FOOTER_TEXT, style=palette.shadow)
    parts: list[RenderableType] = [Align.center(panel), Align.center(footer)]
    if notice:
        parts.append(Align.center(Text(notice, style=f"bold {palette.hotkey}")))
    return Group(*parts)


# ═══════════════════════════════════════════════════════════════════════════════
# DIALOGS & SCREENS
# ═══════════════════════════════════════════════════════════════════════════════

def render_dialog(
    title: str,
    message: str,
    buttons: Sequence[str] = ("OK",),
    selected: int = 0,
    palette: Palette = DEFAULT_PALETTE,
    width: int = 50,
    is_error: bool = False,
) -> RenderableType:
    """Render a modal dialog with a row of buttons."""
    body = Text(message, style=palette.normal)

    row = Text(justify="center")
    for i, label in enumerate(buttons):
        if i:
            row.append("   ")
        row.append(f"[{label}]", style=palette.highlight if i == selected else palette.normal)

    border = "bold red" if is_error else palette.frame
    panel = Panel(
        Group(body, Text(""), row),
        title=f" {title} ",
        width=width,
        box=box.DOUBLE,
        border_style=border,
        style=palette.normal,
        padding=(1, 2),
    )
    return Align.center(panel)


def render_item_help(command: str, help_text: str, palette: Palette = DEFAULT_PALETTE) -> RenderableType:
    message = "Command:\n" + (command or "(none for this platform)")
    if help_text:
        message += "\n\n" + help_text
    return render_dialog("Item Info", message, palette=palette, width=60)


def render_output(
    lines: Sequence[str],
    offset: int,
    visible: int,
    palette: Palette = DEFAULT_PALETTE,
) -> RenderableType:
    """Render a window of command output lines with a position footer."""
    shown = [Text(line, no_wrap=True, overflow="crop") for line in lines[offset : offset + visible]]

    if len(lines) <= visible:
        footer = "Press any key to return"
    else:
        end = min(offset + visible, len(lines))
        footer = f"Lines {offset + 1}-{end} of {len(lines)} | ↑↓ or PgUp/PgDn to scroll"

    return Group(
        Rule("Command Output", style=palette.border),
        *shown,
        Align.center(Text(footer, style=palette.border)),
    )


def render_running(label: str, command: str, palette: Palette = DEFAULT_PALETTE) -> RenderableType:
    content = Text.assemble(("Running ", palette.normal), (label, palette.hotkey_normal), ("\n\n", ""), (command, palette.dimmed))
    return Align.center(Panel(content, width=60, box=box.DOUBLE, border_style=palette.frame, style=palette.normal))


def render_splash(version: str, palette: Palette = DEFAULT_PALETTE) -> RenderableType:
    content = Group(
        Text(""),
        Text("MenuWorks 3.X", style=palette.highlight, justify="center"),
        Text(""),
        Text(f"Version: {version}", style=palette.normal, justify="center"),
        Text(""),
        Text("A Retro DOS-Style TUI", style=palette.normal, justify="center"),
        Text(""),
    )
    return Align.center(Panel(content, width=50, box=box.DOUBLE, border_style=palette.frame, style=palette.normal))


def render_too_small(width: int, height: int, min_width: int, min_height: int) -> RenderableType:
    content = Text(
        f"Please resize your terminal to at least {min_width}×{min_height}\n\n"
        f"Current size: {width}×{height}\n\n"
        "Press ESC to quit",
        justify="center",
    )
    return Panel(content, title=" Terminal Too Small ", border_style="yellow")

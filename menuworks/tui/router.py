"""Main loop and key-handler registry for the TUI."""
from __future__ import annotations

import logging
import queue
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from ..config import ConfigError, MenuTree, load_config, validate_theme, write_default_config
from ..executor import CommandResult, execute_and_capture
from .components import DEFAULT_PALETTE, palette_for, render_menu, render_too_small
from .dialogs import choose, show_error, show_message, show_splash
from .navigator import Navigator

if TYPE_CHECKING:
    from rich.console import Console, RenderableType

    from ..settings import Settings

logger = logging.getLogger("menuworks.router")

# Rows the menu window needs besides its items: frame, header, rule,
# scroll indicators, footer and notice line.
CHROME_ROWS = 8

# Registry key for the fallback handler that receives unbound single characters.
HOTKEY = "<hotkey>"


class Router:
    """Main loop with key dispatch.

    The router owns the navigator, pulls key tokens from the input queue and
    dispatches them to registered handlers until one of them returns "exit".
    Reload swaps in a new navigator; everything else mutates the current one.
    """

    def __init__(
        self,
        console: Console,
        settings: Settings,
        events: queue.Queue,
        nav: Navigator | None = None,
        config_path: Path | None = None,
        runner: Callable[[str, str], CommandResult] = execute_and_capture,
    ):
        """Initialize router with dependencies.

        Args:
            console: Rich Console for output
            settings: Application settings
            events: Queue of key tokens filled by the input poller
            nav: Navigator to start with; loaded from the config when omitted
            config_path: Menu document path (defaults to MENUWORKS_CONFIG)
            runner: Executes a command string in a working directory
        """
        self.console = console
        self.settings = settings
        self.events = events
        self.nav = nav
        self.config_path = Path(config_path or settings.MENUWORKS_CONFIG)
        self.runner = runner
        self.palette = palette_for(nav.tree) if nav is not None else DEFAULT_PALETTE
        self.notice = ""
        self.notice_until = 0.0

    # ── main loop ───────────────────────────────────────────────────────

    def run(self) -> None:
        """Run the menu until a handler asks to exit."""
        if not self.ensure_terminal_size():
            return
        if self.nav is None and not self.boot():
            return

        while True:
            if not self.ensure_terminal_size():
                break

            self.draw()
            key = self.next_event(timeout=self.notice_remaining() or None)
            if key is None:
                # Notice expired; redraw without it.
                continue

            if self.dispatch(key) == "exit":
                logger.info("exit requested from menu '%s'", self.nav.current_menu_name)
                break

    def dispatch(self, key: str) -> str | None:
        """Route one key token to its handler."""
        handler = KEYS.get(key)
        if handler is None and len(key) == 1:
            handler = KEYS.get(HOTKEY)
        if handler is None:
            return None
        return handler(self, key)

    # ── startup & reload ────────────────────────────────────────────────

    def boot(self) -> bool:
        """Load the menu document and create the navigator.

        Returns False when the user chose to exit from the config error dialog.
        """
        tree = self._load_initial_tree()
        if tree is None:
            return False
        self.apply_tree(tree)

        if tree.splash_screen and self.settings.MENUWORKS_SPLASH_MS > 0:
            show_splash(self, self.settings.MENUWORKS_SPLASH_MS)

        self.nav = Navigator(tree, self.settings.MENUWORKS_PLATFORM)
        if tree.initial_menu and not self.nav.navigate_to_menu(tree.initial_menu):
            logger.warning("initial_menu '%s' not found; starting at root", tree.initial_menu)
        return True

    def _load_initial_tree(self) -> MenuTree | None:
        while True:
            try:
                tree, created = load_config(self.config_path)
            except ConfigError as exc:
                message = "Failed to load configuration.\n\n" + "\n".join(exc.errors[:5])
                choice = choose(self, "Config Error", message, ["Retry", "Use Default", "Exit"], is_error=True)
                if choice is None or choice == 2:
                    return None
                if choice == 1:
                    try:
                        write_default_config(self.config_path)
                    except OSError as write_exc:
                        logger.error("failed to write default config: %s", write_exc)
                        show_error(self, "Config Error", f"Failed to write default config:\n{write_exc}")
                        return None
                continue

            if created:
                show_message(self, "Config Created", f"A default configuration was written to:\n{self.config_path}")
            return tree

    def apply_tree(self, tree: MenuTree) -> None:
        self.palette = palette_for(tree)
        for warning in validate_theme(tree):
            logger.warning(warning)

    def reload_config(self) -> bool:
        """Reload the menu document, keeping the old tree if it is rejected."""
        try:
            tree, _ = load_config(self.config_path)
        except ConfigError as exc:
            logger.warning("reload rejected: %s", exc)
            show_error(self, "Reload Error", "Failed to reload config:\n\n" + "\n".join(exc.errors[:5]))
            return False

        self.nav = self.nav.reload(tree)
        self.apply_tree(tree)
        show_message(self, "Config Reloaded", "Configuration reloaded successfully.")
        return True

    # ── drawing ─────────────────────────────────────────────────────────

    def max_visible(self) -> int:
        height = self.console.size.height
        return max(1, min(self.settings.MENUWORKS_MAX_VISIBLE_ITEMS, height - CHROME_ROWS))

    def show(self, renderable: RenderableType) -> None:
        self.console.clear()
        self.console.print(renderable)

    def draw(self) -> None:
        max_visible = self.max_visible()
        self.nav.ensure_visible(max_visible)
        self.show(
            render_menu(
                self.nav,
                max_visible,
                self.palette,
                width=self.settings.MENUWORKS_MENU_WIDTH,
                notice=self.current_notice(),
            )
        )

    def ensure_terminal_size(self) -> bool:
        """Block until the terminal is large enough; False if the user quits."""
        min_w = self.settings.MENUWORKS_MIN_WIDTH
        min_h = self.settings.MENUWORKS_MIN_HEIGHT
        while True:
            width, height = self.console.size
            if width >= min_w and height >= min_h:
                return True
            self.show(render_too_small(width, height, min_w, min_h))
            key = self.next_event(timeout=0.25)
            if key in ("escape", "c-c"):
                return False

    # ── events & notices ────────────────────────────────────────────────

    def next_event(self, timeout: float | None = None) -> str | None:
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain_events(self) -> None:
        while True:
            try:
                self.events.get_nowait()
            except queue.Empty:
                return

    def flash(self, message: str) -> None:
        """Show a transient one-line notice under the menu."""
        self.notice = message
        self.notice_until = time.monotonic() + self.settings.MENUWORKS_NOTICE_SECONDS

    def notice_remaining(self) -> float:
        return max(0.0, self.notice_until - time.monotonic()) if self.notice else 0.0

    def current_notice(self) -> str:
        if self.notice and self.notice_remaining() > 0:
            return self.notice
        self.notice = ""
        return ""


# Key registry - maps key tokens to handler functions
# Populated by the screen modules
KEYS: dict[str, Callable[[Router, str], str | None]] = {}


def register_key(*tokens: str):
    """Decorator to register a key handler for one or more tokens.

    Usage:
        @register_key("up")
        def move_up(router: Router, key: str) -> str | None:
            ...
    """
    def decorator(fn: Callable[[Router, str], str | None]):
        for token in tokens:
            KEYS[token] = fn
        return fn
    return decorator

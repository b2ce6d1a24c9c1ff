"""Modal dialogs and the splash screen.

Each dialog draws itself, then blocks on the router's event queue until it
is dismissed; the menu view gets no keys while a dialog is up.
"""
from __future__ import annotations

import time
from typing import TYPE_CHECKING, Sequence

from .. import __version__
from .components import render_dialog, render_item_help, render_splash

if TYPE_CHECKING:
    from .router import Router


def show_message(router: Router, title: str, message: str, is_error: bool = False) -> None:
    """Show a one-button dialog; any key dismisses it."""
    router.show(render_dialog(title, message, ("OK",), 0, router.palette, is_error=is_error))
    router.next_event()


def show_error(router: Router, title: str, message: str) -> None:
    show_message(router, title, message, is_error=True)


def choose(router: Router, title: str, message: str, buttons: Sequence[str], is_error: bool = False) -> int | None:
    """Let the user pick one of `buttons` with Left/Right and Enter.

    Returns:
        The chosen button index; Escape picks the first button, Ctrl+C
        returns None.
    """
    selected = 0
    while True:
        router.show(render_dialog(title, message, buttons, selected, router.palette, width=60, is_error=is_error))
        key = router.next_event()
        if key == "left":
            selected = (selected - 1) % len(buttons)
        elif key == "right":
            selected = (selected + 1) % len(buttons)
        elif key == "enter":
            return selected
        elif key == "escape":
            return 0
        elif key == "c-c":
            return None


def show_item_help(router: Router) -> None:
    """Show the selected item's command for this platform and its help text."""
    nav = router.nav
    item = nav.selected_item
    if item is None or item.type == "separator":
        return
    command = item.exec.command_for(nav.platform) if item.type == "command" else ""
    if item.type == "submenu":
        command = f"(opens menu '{item.target}')"
    elif item.type == "back":
        command = "(quits MenuWorks)" if nav.is_at_root() else "(returns to the previous menu)"
    router.show(render_item_help(command, item.help, router.palette))
    while router.next_event() not in ("enter", "escape", "c-c"):
        pass


def show_splash(router: Router, duration_ms: int) -> None:
    """Show the splash screen; keys pressed meanwhile are discarded."""
    router.show(render_splash(__version__, router.palette))
    deadline = time.monotonic() + duration_ms / 1000.0
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        router.next_event(timeout=min(remaining, 0.01))
    router.drain_events()

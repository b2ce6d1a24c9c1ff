"""Menu view: key bindings and item activation."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...config import CommandItem
from ..components import render_running
from ..dialogs import show_error, show_item_help, show_message
from ..navigator import OpenResult
from ..router import HOTKEY, register_key
from .output import show_command_output

if TYPE_CHECKING:
    from ..router import Router

logger = logging.getLogger("menuworks.menu")


# ═══════════════════════════════════════════════════════════════════════════════
# MOVEMENT
# ═══════════════════════════════════════════════════════════════════════════════

@register_key("up")
def move_up(router: Router, key: str) -> str | None:
    router.nav.prev_selectable()
    return None


@register_key("down")
def move_down(router: Router, key: str) -> str | None:
    router.nav.next_selectable()
    return None


@register_key("pageup")
def page_up(router: Router, key: str) -> str | None:
    router.nav.page_up(router.max_visible())
    return None


@register_key("pagedown")
def page_down(router: Router, key: str) -> str | None:
    router.nav.page_down(router.max_visible())
    return None


@register_key("home")
def select_first(router: Router, key: str) -> str | None:
    router.nav.select_first()
    return None


@register_key("end")
def select_last(router: Router, key: str) -> str | None:
    router.nav.select_last()
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# ACTIONS
# ═══════════════════════════════════════════════════════════════════════════════

@register_key("enter", "right")
def activate_selected(router: Router, key: str) -> str | None:
    if not router.nav.has_selectable():
        # Empty menu: Enter behaves like the [Q]uit / [B]ack placeholder.
        return go_back(router, key)
    return activate(router)


@register_key("escape", "left")
def go_back(router: Router, key: str) -> str | None:
    if router.nav.back() is None:
        return "exit"
    return None


@register_key("f5", "c-r")
def reload(router: Router, key: str) -> str | None:
    router.reload_config()
    return None


@register_key("f2")
def item_help(router: Router, key: str) -> str | None:
    show_item_help(router)
    return None


@register_key("c-c")
def quit_app(router: Router, key: str) -> str | None:
    return "exit"


@register_key(HOTKEY)
def hotkey(router: Router, key: str) -> str | None:
    """Select and activate the item bound to `key` in one step."""
    nav = router.nav
    if not nav.has_selectable():
        if key.upper() in ("Q", "B"):
            return go_back(router, key)
        return None

    idx = nav.select_item_by_hotkey(key)
    if idx is None:
        target = nav.hotkey_target(key)
        if target is not None:
            router.flash(f"Cannot access '{nav.current_items[target].label}'")
        return None

    nav.set_selection_index(idx)
    return activate(router)


# ═══════════════════════════════════════════════════════════════════════════════
# ACTIVATION
# ═══════════════════════════════════════════════════════════════════════════════

def activate(router: Router) -> str | None:
    """Activate the selected item.

    Returns:
        "exit" when a back item is activated at root, otherwise None.
    """
    nav = router.nav
    item = nav.selected_item
    if item is None:
        return None

    if item.type == "submenu":
        if nav.open() is OpenResult.TARGET_NOT_FOUND:
            menu_name = nav.current_menu_name
            if nav.is_target_error_reported(menu_name):
                router.flash(f"Cannot access '{item.label}'")
            else:
                nav.mark_target_error_reported(menu_name)
                show_error(router, "Menu Error", f"Submenu target '{item.target}' not found.")
        return None

    if item.type == "command":
        if nav.is_item_disabled(nav.selection_index):
            router.flash(f"'{item.label}' is not available on {nav.platform}")
            return None
        run_command(router, item)
        return None

    if item.type == "back":
        if nav.back() is None:
            return "exit"
        return None

    return None


def run_command(router: Router, item: CommandItem) -> None:
    """Run a command item to completion, then show its output or status."""
    command = item.exec.command_for(router.nav.platform)
    router.show(render_running(item.label, command, router.palette))

    result = router.runner(command, item.exec.workdir)
    # Keys pressed while the command ran are not meant for the menu.
    router.drain_events()

    if item.show_output and result.output:
        show_command_output(router, result.output)
        return

    if result.ok:
        message = "Command finished successfully."
    elif result.returncode is None:
        message = result.output
    else:
        message = f"Command exited with status {result.returncode}."
    show_message(router, "Command Executed", message, is_error=not result.ok)

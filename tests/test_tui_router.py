"""Unit tests for Router class and the menu key handlers."""
from __future__ import annotations

import io
import queue
from unittest.mock import MagicMock

import pytest
from rich.console import Console

import menuworks.tui.screens  # noqa: F401  (registers key handlers)
from conftest import SEPARATOR, back, command, submenu
from menuworks.config import write_default_config
from menuworks.executor import CommandResult
from menuworks.settings import Settings
from menuworks.tui.navigator import Navigator
from menuworks.tui.router import HOTKEY, KEYS, Router, register_key
from menuworks.tui.screens import menu as menu_screen


@pytest.fixture
def settings(tmp_path):
    """Settings with no splash and a config path inside tmp_path."""
    return Settings(
        MENUWORKS_CONFIG=tmp_path / "config.yaml",
        MENUWORKS_SPLASH_MS=0,
        MENUWORKS_PLATFORM="linux",
    )


@pytest.fixture
def tree(make_tree):
    return make_tree(
        [
            submenu("Tools", "tools"),
            submenu("Broken", "missing", hotkey="K"),
            SEPARATOR,
            command("Disk Usage", linux="df -h"),
            command("Windows Thing", windows="dir"),
            back("Quit"),
        ],
        menus={
            "tools": [command("Echo", linux="echo hi"), back()],
            "empty": [],
        },
    )


@pytest.fixture
def runner():
    return MagicMock(return_value=CommandResult(command="", output="", returncode=0))


def _router(settings, keys, nav=None, runner=None, width=100, height=40):
    events: queue.Queue = queue.Queue()
    for key in keys:
        events.put(key)
    console = Console(file=io.StringIO(), width=width, height=height, force_terminal=False)
    kwargs = {"runner": runner} if runner is not None else {}
    return Router(console=console, settings=settings, events=events, nav=nav, **kwargs)


def test_router_initialization(settings, tree):
    """Router keeps its collaborators and derives the config path."""
    nav = Navigator(tree, platform="linux")
    router = _router(settings, [], nav=nav)

    assert router.nav is nav
    assert router.settings is settings
    assert router.config_path == settings.MENUWORKS_CONFIG
    assert router.notice == ""


def test_register_key_decorator():
    """register_key binds every token to the handler."""
    saved = KEYS.copy()
    try:
        @register_key("x-test", "y-test")
        def handler(router, key):
            return "exit"

        assert KEYS["x-test"] is handler
        assert KEYS["y-test"] is handler
    finally:
        KEYS.clear()
        KEYS.update(saved)


def test_screens_register_menu_bindings():
    for token in ("up", "down", "pageup", "pagedown", "home", "end", "enter", "right",
                  "escape", "left", "f2", "f5", "c-r", "c-c", HOTKEY):
        assert token in KEYS


def test_escape_at_root_exits(settings, tree):
    router = _router(settings, ["escape"], nav=Navigator(tree, platform="linux"))
    router.run()
    assert router.nav.is_at_root()


def test_enter_opens_submenu_and_escape_goes_back(settings, tree):
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["enter", "c-c"], nav=nav)
    router.run()
    assert nav.state.path == ["root", "tools"]

    router = _router(settings, ["left", "c-c"], nav=nav)
    router.run()
    assert nav.state.path == ["root"]


def test_arrow_keys_move_selection(settings, tree):
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["down", "down", "down", "up", "c-c"], nav=nav)
    router.run()
    assert nav.selection_index == 3

    router = _router(settings, ["end", "c-c"], nav=nav)
    router.run()
    assert nav.selection_index == 5


def test_page_keys_move_by_viewport(settings, make_tree):
    """PageDown moves by the number of visible rows."""
    nav = Navigator(make_tree([command(f"Item {i}") for i in range(40)]), platform="linux")
    router = _router(settings, ["pagedown", "c-c"], nav=nav)
    assert router.max_visible() == 14
    router.run()
    assert nav.selection_index == 14
    assert nav.scroll_offset == 1


def test_broken_submenu_reports_once(settings, tree, monkeypatch):
    """The first failed Open shows a dialog; later ones only flash a notice."""
    show_error = MagicMock()
    monkeypatch.setattr(menu_screen, "show_error", show_error)
    nav = Navigator(tree, platform="linux")
    nav.set_selection_index(1)

    router = _router(settings, ["enter", "enter", "c-c"], nav=nav)
    router.run()

    assert show_error.call_count == 1
    assert "missing" in show_error.call_args.args[2]
    assert nav.is_target_error_reported("root")
    assert "Cannot access" in router.notice
    assert nav.state.path == ["root"]


def test_hotkey_on_disabled_item_flashes_notice(settings, tree, monkeypatch):
    show_error = MagicMock()
    monkeypatch.setattr(menu_screen, "show_error", show_error)
    nav = Navigator(tree, platform="linux")

    router = _router(settings, ["k", "c-c"], nav=nav)
    router.run()

    show_error.assert_not_called()
    assert "Broken" in router.notice
    assert nav.selection_index == 0
    assert nav.state.path == ["root"]


def test_unmapped_key_is_ignored(settings, tree):
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["z", "7", "c-c"], nav=nav)
    router.run()
    assert nav.selection_index == 0
    assert router.notice == ""


def test_hotkey_selects_and_opens_submenu(settings, tree):
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["T", "c-c"], nav=nav)
    router.run()
    assert nav.state.path == ["root", "tools"]


def test_hotkey_runs_command_and_shows_status(settings, tree, runner, monkeypatch):
    """A command with no output reports its status in a dialog."""
    show_message = MagicMock()
    monkeypatch.setattr(menu_screen, "show_message", show_message)
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["d", "c-c"], nav=nav, runner=runner)
    router.drain_events = MagicMock()
    router.run()

    runner.assert_called_once_with("df -h", "")
    router.drain_events.assert_called_once()
    assert nav.selection_index == 3
    title, message = show_message.call_args.args[1:3]
    assert title == "Command Executed"
    assert message == "Command finished successfully."


def test_failed_command_reports_exit_status(settings, tree, monkeypatch):
    show_message = MagicMock()
    monkeypatch.setattr(menu_screen, "show_message", show_message)
    failing = MagicMock(return_value=CommandResult(command="df -h", output="", returncode=2))
    router = _router(settings, ["d", "c-c"], nav=Navigator(tree, platform="linux"), runner=failing)
    router.drain_events = MagicMock()
    router.run()

    assert show_message.call_args.args[2] == "Command exited with status 2."
    assert show_message.call_args.kwargs["is_error"] is True


def test_command_output_is_shown_in_viewer(settings, tree, monkeypatch):
    viewer = MagicMock()
    monkeypatch.setattr(menu_screen, "show_command_output", viewer)
    echo = MagicMock(return_value=CommandResult(command="echo hi", output="hi", returncode=0))
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["enter", "e", "c-c"], nav=nav, runner=echo)
    router.drain_events = MagicMock()
    router.run()

    echo.assert_called_once_with("echo hi", "")
    viewer.assert_called_once_with(router, "hi")


def test_unsupported_command_is_not_run(settings, tree, runner):
    nav = Navigator(tree, platform="linux")
    nav.set_selection_index(4)
    router = _router(settings, ["enter", "c-c"], nav=nav, runner=runner)
    router.run()

    runner.assert_not_called()
    assert "not available" in router.notice


def test_back_item_at_root_exits(settings, tree):
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["q"], nav=nav)
    router.run()
    assert nav.selection_index == 5


def test_back_item_in_submenu_returns(settings, tree):
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["t", "b", "c-c"], nav=nav)
    router.run()
    assert nav.state.path == ["root"]


def test_enter_in_empty_menu_goes_back(settings, tree):
    nav = Navigator(tree, platform="linux")
    nav.navigate_to_menu("empty")
    router = _router(settings, ["enter", "c-c"], nav=nav)
    router.run()
    assert nav.state.path == ["root"]


def test_terminal_too_small_exits_on_escape(settings):
    router = _router(settings, ["escape"], width=40, height=10)
    router.run()
    assert router.nav is None


# ── startup & reload ─────────────────────────────────────────────────────


def test_boot_creates_default_config(settings):
    """First start writes the default config and tells the user."""
    router = _router(settings, ["enter", "c-c"])
    router.run()

    assert settings.MENUWORKS_CONFIG.exists()
    assert router.nav is not None
    assert router.nav.current_title == "Main Menu"


def test_boot_honours_initial_menu(settings, tmp_path):
    settings.MENUWORKS_CONFIG.write_text(
        "items: [{type: submenu, label: Tools, target: tools}]\n"
        "menus: {tools: {title: Tools, items: [{type: back, label: Back}]}}\n"
        "initial_menu: tools\n",
        encoding="utf-8",
    )
    router = _router(settings, ["c-c"])
    router.run()
    assert router.nav.state.path == ["root", "tools"]


def test_boot_config_error_exit(settings):
    settings.MENUWORKS_CONFIG.write_text("items: [oops", encoding="utf-8")
    router = _router(settings, ["right", "right", "enter"])
    router.run()
    assert router.nav is None


def test_boot_config_error_use_default(settings):
    """'Use Default' overwrites the broken file and starts normally."""
    settings.MENUWORKS_CONFIG.write_text("items: [oops", encoding="utf-8")
    router = _router(settings, ["right", "enter", "c-c"])
    router.run()
    assert router.nav is not None
    assert router.nav.tree.title == "Main Menu"


def test_reload_replaces_navigator(settings, tree):
    """F5 reloads from disk and reconciles the position."""
    write_default_config(settings.MENUWORKS_CONFIG)
    nav = Navigator(tree, platform="linux")
    router = _router(settings, ["f5", "enter", "c-c"], nav=nav)
    router.run()

    assert router.nav is not nav
    assert router.nav.tree.title == "Main Menu"
    assert router.nav.platform == "linux"


def test_reload_error_keeps_old_state(settings, tree):
    settings.MENUWORKS_CONFIG.write_text("items: [{type: command, label: x}]\n", encoding="utf-8")
    nav = Navigator(tree, platform="linux")
    nav.open()
    router = _router(settings, ["c-r", "enter", "c-c"], nav=nav)
    router.run()

    assert router.nav is nav
    assert nav.state.path == ["root", "tools"]


def test_notice_expires(settings, tree, monkeypatch):
    """A flashed notice disappears once its time is up."""
    router = _router(settings, [], nav=Navigator(tree, platform="linux"))
    clock = iter([100.0, 100.5, 102.0])
    monkeypatch.setattr("menuworks.tui.router.time.monotonic", lambda: next(clock))

    router.flash("hello")
    assert router.current_notice() == "hello"
    assert router.current_notice() == ""

"""Unit tests for NavigationState class."""
from __future__ import annotations

from menuworks.tui.state import DisabledReason, NavigationState


def test_navigation_state_initial_state():
    """NavigationState starts at root with empty memory."""
    state = NavigationState()

    assert state.path == ["root"]
    assert state.current() == "root"
    assert state.depth() == 1
    assert state.selection_by_menu == {}
    assert state.scroll_offset_by_menu == {}
    assert state.hotkey_index == {}
    assert state.disabled_index == {}
    assert state.reported_broken_targets == set()


def test_navigation_state_instances_do_not_share_memory():
    """Each state gets its own containers."""
    a = NavigationState()
    b = NavigationState()

    a.path.append("tools")
    a.selection_by_menu["tools"] = 3
    a.reported_broken_targets.add("root")

    assert b.path == ["root"]
    assert b.selection_by_menu == {}
    assert b.reported_broken_targets == set()


def test_navigation_state_current_tracks_top_of_path():
    state = NavigationState()
    state.path.extend(["tools", "deep"])

    assert state.current() == "deep"
    assert state.depth() == 3


def test_disabled_reason_values():
    """Reasons compare equal to their string values."""
    assert DisabledReason.MISSING_TARGET == "missing_target"
    assert DisabledReason.UNSUPPORTED_PLATFORM == "unsupported_platform"

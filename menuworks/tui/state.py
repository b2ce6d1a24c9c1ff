"""Navigation state owned by the menu navigator."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..config import ROOT


class DisabledReason(str, Enum):
    """Why a selectable item cannot be activated."""

    MISSING_TARGET = "missing_target"
    UNSUPPORTED_PLATFORM = "unsupported_platform"


@dataclass
class NavigationState:
    """Where the user is in the menu tree, plus per-menu memory.

    This state lives as long as one navigator instance. A reload builds a
    fresh state and carries over only the surviving part of `path`.
    """

    # Stack of menu names; path[0] is always "root".
    path: list[str] = field(default_factory=lambda: [ROOT])

    # Last selected item index per menu (kept across Back/Open).
    selection_by_menu: dict[str, int] = field(default_factory=dict)

    # Topmost visible item index per menu.
    scroll_offset_by_menu: dict[str, int] = field(default_factory=dict)

    # hotkey_index[menu][LETTER] = item index; rebuilt per tree.
    hotkey_index: dict[str, dict[str, int]] = field(default_factory=dict)

    # (menu, item index) -> reason; rebuilt per tree.
    disabled_index: dict[tuple[str, int], DisabledReason] = field(default_factory=dict)

    # Menus whose broken submenu link has already been reported this session.
    reported_broken_targets: set[str] = field(default_factory=set)

    def current(self) -> str:
        return self.path[-1]

    def depth(self) -> int:
        return len(self.path)

"""Menu navigation engine: traversal stack, selection memory, hotkeys, scrolling."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from ..config import ROOT, Menu, MenuItem, MenuTree, current_platform, is_selectable
from .state import DisabledReason, NavigationState

logger = logging.getLogger("menuworks.navigator")


class OpenResult(str, Enum):
    OPENED = "opened"
    NOT_SUBMENU = "not_submenu"
    TARGET_NOT_FOUND = "target_not_found"


def first_selectable(items: Sequence[MenuItem]) -> int | None:
    """Index of the first non-separator item, or None if there is none."""
    for i, item in enumerate(items):
        if is_selectable(item):
            return i
    return None


def last_selectable(items: Sequence[MenuItem]) -> int | None:
    for i in range(len(items) - 1, -1, -1):
        if is_selectable(items[i]):
            return i
    return None


def nearest_selectable(items: Sequence[MenuItem], index: int) -> int | None:
    """Closest selectable index at or before `index`, else the first one after it."""
    index = max(0, min(index, len(items) - 1))
    for i in range(index, -1, -1):
        if is_selectable(items[i]):
            return i
    for i in range(index + 1, len(items)):
        if is_selectable(items[i]):
            return i
    return None


def build_hotkeys(items: Sequence[MenuItem]) -> dict[str, int]:
    """Map uppercase letters to item indexes for one menu.

    Explicit hotkeys are registered first (the first item claiming a letter
    keeps it). Items without one take the first unclaimed letter of their
    label, scanning left to right. Separators never take or block a letter.
    """
    hotkeys: dict[str, int] = {}

    for i, item in enumerate(items):
        if not is_selectable(item) or not item.hotkey:
            continue
        hotkeys.setdefault(item.hotkey.upper(), i)

    for i, item in enumerate(items):
        if not is_selectable(item) or item.hotkey:
            continue
        for ch in item.label:
            if not ch.isalpha():
                continue
            letter = ch.upper()
            if len(letter) == 1 and letter not in hotkeys:
                hotkeys[letter] = i
                break

    return hotkeys


def build_disabled(tree: MenuTree, platform: str) -> dict[tuple[str, int], DisabledReason]:
    """Find submenu items with missing targets and commands with no variant for `platform`."""
    disabled: dict[tuple[str, int], DisabledReason] = {}
    for name in tree.menu_names():
        for i, item in enumerate(tree.menu(name).items):
            if item.type == "submenu":
                if item.target not in tree.menus:
                    disabled[(name, i)] = DisabledReason.MISSING_TARGET
            elif item.type == "command":
                if not item.exec.command_for(platform):
                    disabled[(name, i)] = DisabledReason.UNSUPPORTED_PLATFORM
    return disabled


class Navigator:
    """Tracks where the user is in a menu tree.

    - Open pushes a submenu name onto the path; Back pops it (never past root)
    - Each menu remembers its own selection and scroll offset
    - Hotkey and disabled-item indexes are built once per tree
    - A reload produces a new navigator reconciled against the old state

    Broken submenu links and commands without a variant for this platform are
    disabled items, never errors.
    """

    def __init__(self, tree: MenuTree, platform: str | None = None):
        self.tree = tree
        self.platform = platform or current_platform()
        self.state = NavigationState()

        for name in tree.menu_names():
            self.state.hotkey_index[name] = build_hotkeys(tree.menu(name).items)
        self.state.disabled_index = build_disabled(tree, self.platform)

        root_sel = first_selectable(tree.items)
        if root_sel is not None:
            self.state.selection_by_menu[ROOT] = root_sel

    # ── reload ──────────────────────────────────────────────────────────

    @classmethod
    def reconcile(cls, tree: MenuTree, old: NavigationState, platform: str | None = None) -> Navigator:
        """Build a navigator for `tree` positioned as close as possible to `old`.

        The old path is kept down to the deepest menu that still exists.
        Menus on that path keep their selection when it still points at a
        selectable item, otherwise they fall back to their first selectable
        item. Memory for every other menu, and the reported-links set, is dropped.
        """
        nav = cls(tree, platform)
        state = nav.state

        path = [ROOT]
        for name in old.path[1:]:
            if name not in tree.menus:
                break
            path.append(name)
        state.path = path
        state.selection_by_menu.clear()

        for name in path:
            items = tree.menu(name).items
            sel = old.selection_by_menu.get(name)
            if sel is None or not (0 <= sel < len(items)) or not is_selectable(items[sel]):
                if sel is not None:
                    logger.debug("stale selection %s in menu %s reset", sel, name)
                sel = first_selectable(items)
            if sel is not None:
                state.selection_by_menu[name] = sel

            offset = old.scroll_offset_by_menu.get(name)
            if offset is not None and items:
                state.scroll_offset_by_menu[name] = max(0, min(offset, len(items) - 1))

        logger.info(
            "navigation reconciled: %s -> %s",
            " > ".join(old.path),
            " > ".join(state.path),
        )
        return nav

    def reload(self, tree: MenuTree) -> Navigator:
        """Return a new navigator for `tree`, reconciled against this one."""
        return Navigator.reconcile(tree, self.state, self.platform)

    # ── current menu ────────────────────────────────────────────────────

    @property
    def current_menu_name(self) -> str:
        return self.state.current()

    @property
    def current_menu(self) -> Menu:
        menu = self.tree.menu(self.current_menu_name)
        return menu if menu is not None else self.tree.root

    @property
    def current_items(self) -> list[MenuItem]:
        return self.current_menu.items

    @property
    def current_title(self) -> str:
        return self.current_menu.title

    @property
    def selection_index(self) -> int:
        return self.state.selection_by_menu.get(self.current_menu_name, 0)

    def set_selection_index(self, index: int) -> None:
        """Select item `index` in the current menu.

        Raises:
            IndexError: the index is out of range or points at a separator.
        """
        items = self.current_items
        if not (0 <= index < len(items)) or not is_selectable(items[index]):
            raise IndexError(f"no selectable item at index {index} in menu '{self.current_menu_name}'")
        self.state.selection_by_menu[self.current_menu_name] = index

    @property
    def selected_item(self) -> MenuItem | None:
        items = self.current_items
        idx = self.selection_index
        if 0 <= idx < len(items):
            return items[idx]
        return None

    @property
    def scroll_offset(self) -> int:
        return self.state.scroll_offset_by_menu.get(self.current_menu_name, 0)

    def is_item_disabled(self, index: int) -> bool:
        return (self.current_menu_name, index) in self.state.disabled_index

    def disabled_reason(self, index: int) -> DisabledReason | None:
        return self.state.disabled_index.get((self.current_menu_name, index))

    def has_selectable(self) -> bool:
        return first_selectable(self.current_items) is not None

    @property
    def root_is_empty(self) -> bool:
        """True when the root offers nothing but back items and separators."""
        return not any(item.type in ("command", "submenu") for item in self.tree.items)

    # ── selection movement ──────────────────────────────────────────────

    def _step(self, direction: int) -> None:
        items = self.current_items
        if not self.has_selectable():
            return
        current = self.selection_index
        for step in range(1, len(items) + 1):
            idx = (current + direction * step) % len(items)
            if is_selectable(items[idx]):
                self.state.selection_by_menu[self.current_menu_name] = idx
                return

    def next_selectable(self) -> None:
        """Move to the next non-separator item, wrapping around."""
        self._step(1)

    def prev_selectable(self) -> None:
        """Move to the previous non-separator item, wrapping around."""
        self._step(-1)

    def page_down(self, n: int) -> None:
        items = self.current_items
        if not self.has_selectable():
            return
        target = nearest_selectable(items, self.selection_index + max(1, n))
        self.state.selection_by_menu[self.current_menu_name] = target

    def page_up(self, n: int) -> None:
        items = self.current_items
        if not self.has_selectable():
            return
        target = nearest_selectable(items, self.selection_index - max(1, n))
        self.state.selection_by_menu[self.current_menu_name] = target

    def select_first(self) -> None:
        idx = first_selectable(self.current_items)
        if idx is not None:
            self.state.selection_by_menu[self.current_menu_name] = idx

    def select_last(self) -> None:
        idx = last_selectable(self.current_items)
        if idx is not None:
            self.state.selection_by_menu[self.current_menu_name] = idx

    # ── hotkeys ─────────────────────────────────────────────────────────

    def hotkey_target(self, key: str) -> int | None:
        """Item index bound to `key` in the current menu, disabled or not."""
        if not key or len(key) != 1:
            return None
        return self.state.hotkey_index.get(self.current_menu_name, {}).get(key.upper())

    def hotkey_for(self, index: int) -> str | None:
        """The letter bound to item `index` in the current menu, if any."""
        for letter, idx in self.state.hotkey_index.get(self.current_menu_name, {}).items():
            if idx == index:
                return letter
        return None

    def select_item_by_hotkey(self, key: str) -> int | None:
        """Resolve a hotkey press in the current menu.

        Returns:
            The item index, or None if the key is unmapped or its item is disabled.
            Selection is never changed here; the caller selects and activates.
        """
        idx = self.hotkey_target(key)
        if idx is None or self.is_item_disabled(idx):
            return None
        return idx

    # ── traversal ───────────────────────────────────────────────────────

    def _enter(self, name: str) -> None:
        self.state.path.append(name)
        if name not in self.state.selection_by_menu:
            items = self.tree.menu(name).items
            sel = first_selectable(items)
            if sel is not None:
                self.state.selection_by_menu[name] = sel
            if items:
                self.state.scroll_offset_by_menu[name] = 0

    def open(self) -> OpenResult:
        """Enter the submenu under the selection.

        Returns:
            OPENED on success; NOT_SUBMENU or TARGET_NOT_FOUND otherwise, in
            which case the path is unchanged.
        """
        item = self.selected_item
        if item is None or item.type != "submenu":
            return OpenResult.NOT_SUBMENU

        if self.is_item_disabled(self.selection_index):
            logger.warning(
                "submenu target '%s' not found (from menu '%s')",
                item.target,
                self.current_menu_name,
            )
            return OpenResult.TARGET_NOT_FOUND

        self._enter(item.target)
        return OpenResult.OPENED

    def back(self) -> str | None:
        """Go back to the parent menu.

        Returns:
            The menu that was left, or None if already at root
        """
        if len(self.state.path) > 1:
            return self.state.path.pop()
        return None

    def is_at_root(self) -> bool:
        return len(self.state.path) == 1

    def navigate_to_menu(self, name: str) -> bool:
        """Jump straight to a named menu, one level below root.

        "" and "root" leave the navigator at root. Unknown names return False
        and change nothing.
        """
        if not name or name == ROOT:
            del self.state.path[1:]
            return True
        if name not in self.tree.menus:
            return False
        del self.state.path[1:]
        self._enter(name)
        return True

    def depth(self) -> int:
        return self.state.depth()

    def breadcrumbs(self) -> str:
        """Breadcrumb path like "Main Menu > Tools"."""
        labels = []
        for name in self.state.path:
            menu = self.tree.menu(name)
            labels.append((menu.title if menu is not None else "") or name)
        return " > ".join(labels)

    # ── scrolling ───────────────────────────────────────────────────────

    def ensure_visible(self, max_visible: int) -> int:
        """Adjust the current menu's scroll offset so the selection is on screen.

        Returns the new offset, clamped to [0, max(0, item_count - max_visible)].
        """
        max_visible = max(1, int(max_visible))
        name = self.current_menu_name
        count = len(self.current_items)
        offset = self.scroll_offset
        sel = self.selection_index

        if sel < offset:
            offset = sel
        elif sel >= offset + max_visible:
            offset = sel - max_visible + 1
        offset = max(0, min(offset, max(0, count - max_visible)))

        if count:
            self.state.scroll_offset_by_menu[name] = offset
        else:
            self.state.scroll_offset_by_menu.pop(name, None)
        return offset

    # ── broken link reporting ───────────────────────────────────────────

    def is_target_error_reported(self, menu_name: str) -> bool:
        return menu_name in self.state.reported_broken_targets

    def mark_target_error_reported(self, menu_name: str) -> None:
        self.state.reported_broken_targets.add(menu_name)

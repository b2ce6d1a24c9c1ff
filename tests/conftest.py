from __future__ import annotations

import os
import sys

import pytest


def _ensure_project_root_on_path() -> None:
    # When running via the venv's pytest entrypoint, the CWD is not guaranteed to
    # be on sys.path. Ensure the repository root (containing `menuworks/`) is importable.
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_path()


def command(label: str, hotkey: str | None = None, **exec_variants) -> dict:
    """Command item runnable on every platform unless variants are given."""
    item = {
        "type": "command",
        "label": label,
        "exec": exec_variants or {"windows": "echo ok", "linux": "echo ok", "mac": "echo ok"},
    }
    if hotkey:
        item["hotkey"] = hotkey
    return item


def submenu(label: str, target: str, hotkey: str | None = None) -> dict:
    item = {"type": "submenu", "label": label, "target": target}
    if hotkey:
        item["hotkey"] = hotkey
    return item


def back(label: str = "Back") -> dict:
    return {"type": "back", "label": label}


SEPARATOR = {"type": "separator"}


@pytest.fixture
def make_tree():
    """Build a MenuTree from plain item dicts, skipping semantic validation."""
    from menuworks.config import MenuTree

    def _make(items, menus=None, title="Main Menu", **extra):
        doc = {"title": title, "items": items, **extra}
        if menus:
            doc["menus"] = {
                name: {"title": name.title(), "items": menu_items}
                for name, menu_items in menus.items()
            }
        return MenuTree.model_validate(doc)

    return _make


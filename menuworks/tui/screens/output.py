"""Scrollable viewer for captured command output."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ..components import render_output

if TYPE_CHECKING:
    from ..router import Router

# Rows taken by the viewer's rule and footer.
VIEWER_CHROME_ROWS = 3


def show_command_output(router: Router, output: str) -> None:
    """Page through `output` until a non-scrolling key is pressed.

    Args:
        router: Router instance
        output: Captured command output
    """
    lines = output.splitlines()
    visible = max(1, router.console.size.height - VIEWER_CHROME_ROWS)
    max_offset = max(0, len(lines) - visible)
    offset = 0

    while True:
        router.show(render_output(lines, offset, visible, router.palette))
        key = router.next_event()
        if key == "up":
            offset = max(0, offset - 1)
        elif key == "down":
            offset = min(max_offset, offset + 1)
        elif key == "pageup":
            offset = max(0, offset - visible)
        elif key == "pagedown":
            offset = min(max_offset, offset + visible)
        else:
            return

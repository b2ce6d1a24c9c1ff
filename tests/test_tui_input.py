"""Tests for translating raw key presses into router tokens."""
from __future__ import annotations

import contextlib
from unittest.mock import MagicMock, patch

import pytest
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

from menuworks.tui.input import InputPoller, key_token


@pytest.mark.parametrize(
    "key, token",
    [
        (Keys.Up, "up"),
        (Keys.PageDown, "pagedown"),
        (Keys.ControlM, "enter"),
        (Keys.ControlJ, "enter"),
        (Keys.Escape, "escape"),
        (Keys.F5, "f5"),
        (Keys.ControlR, "c-r"),
        (Keys.ControlC, "c-c"),
        ("a", "a"),
        ("Z", "Z"),
        ("7", "7"),
    ],
)
def test_key_token(key, token):
    assert key_token(key) == token


def test_key_token_drops_unknown_keys():
    assert key_token(Keys.ControlX) is None
    assert key_token("\x00") is None
    assert key_token("ab") is None


def test_input_poller_queues_tokens():
    """The poller thread pushes translated tokens onto its queue."""
    fake_input = MagicMock()
    fake_input.raw_mode.return_value = contextlib.nullcontext()
    batches = iter([[KeyPress(Keys.Down), KeyPress("q"), KeyPress(Keys.ControlX)]])
    fake_input.read_keys.side_effect = lambda: next(batches, [])
    fake_input.flush_keys.return_value = []

    with patch("menuworks.tui.input.create_input", return_value=fake_input):
        poller = InputPoller(poll_interval=0.001).start()
        try:
            assert poller.events.get(timeout=2) == "down"
            assert poller.events.get(timeout=2) == "q"
        finally:
            poller.stop()

    assert poller.events.empty()
    fake_input.raw_mode.assert_called_once()

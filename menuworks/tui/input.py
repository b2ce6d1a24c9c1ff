"""Keyboard input: a background poller feeding key tokens to the main loop."""
from __future__ import annotations

import logging
import queue
import threading
import time

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.keys import Keys

logger = logging.getLogger("menuworks.input")

# prompt_toolkit key -> token understood by the router.
_KEY_TOKENS: dict[Keys, str] = {
    Keys.Up: "up",
    Keys.Down: "down",
    Keys.Left: "left",
    Keys.Right: "right",
    Keys.PageUp: "pageup",
    Keys.PageDown: "pagedown",
    Keys.Home: "home",
    Keys.End: "end",
    Keys.ControlM: "enter",
    Keys.ControlJ: "enter",
    Keys.Escape: "escape",
    Keys.F2: "f2",
    Keys.F5: "f5",
    Keys.ControlR: "c-r",
    Keys.ControlC: "c-c",
}


def key_token(key: Keys | str) -> str | None:
    """Translate a prompt_toolkit key into a router token.

    Named keys map to short names ("up", "enter", ...); printable characters
    pass through as themselves. Anything else is dropped.
    """
    if isinstance(key, Keys):
        return _KEY_TOKENS.get(key)
    if isinstance(key, str) and len(key) == 1 and key.isprintable():
        return key
    return None


class InputPoller:
    """Reads raw key presses on a daemon thread and queues them as tokens.

    The main loop is the only consumer of `events`.
    """

    def __init__(self, events: queue.Queue | None = None, poll_interval: float = 0.01):
        self.events: queue.Queue = events if events is not None else queue.Queue()
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> InputPoller:
        self._thread = threading.Thread(target=self._poll, name="menuworks-input", daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)

    def _poll(self) -> None:
        inp: Input = create_input()
        logger.debug("input poller started")
        with inp.raw_mode():
            while not self._stop.is_set():
                presses = inp.read_keys()
                if not presses:
                    # A lone Escape is held back until flushed.
                    presses = inp.flush_keys()
                for press in presses:
                    token = key_token(press.key)
                    if token is not None:
                        self.events.put(token)
                if not presses:
                    time.sleep(self.poll_interval)
        logger.debug("input poller stopped")

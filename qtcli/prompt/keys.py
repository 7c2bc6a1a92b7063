"""Key sources for the interactive widgets.

Widgets consume normalized key names (``"enter"``, ``"up"``, ``"ctrl+c"``,
single printable characters, ...) from a :class:`KeyReader`.
:class:`TerminalKeys` reads the real keyboard through ``readchar``;
:class:`ScriptedKeys` replays a fixed sequence, which is how the widgets
are driven without a terminal.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Protocol

import readchar

ENTER = "enter"
UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
SPACE = " "
BACKSPACE = "backspace"
CLEAR_LINE = "ctrl+u"
INTERRUPT = "ctrl+c"
ESCAPE = "esc"

_READCHAR_NAMES: dict[str, str] = {
    readchar.key.ENTER: ENTER,
    readchar.key.CR: ENTER,
    readchar.key.LF: ENTER,
    readchar.key.UP: UP,
    readchar.key.DOWN: DOWN,
    readchar.key.LEFT: LEFT,
    readchar.key.RIGHT: RIGHT,
    readchar.key.BACKSPACE: BACKSPACE,
    "\x08": BACKSPACE,
    "\x7f": BACKSPACE,
    readchar.key.CTRL_U: CLEAR_LINE,
    readchar.key.CTRL_C: INTERRUPT,
    readchar.key.ESC: ESCAPE,
}


class KeyReader(Protocol):
    """Anything that yields one normalized key name per call."""

    def read(self) -> str: ...


class TerminalKeys:
    """Reads keys from the controlling terminal."""

    def read(self) -> str:
        try:
            raw = readchar.readkey()
        except KeyboardInterrupt:
            return INTERRUPT
        return _READCHAR_NAMES.get(raw, raw)


class ScriptedKeys:
    """Replays a fixed sequence of key names.

    Multi-character strings that are not key names are typed one character
    at a time, so ``ScriptedKeys("abc", ENTER)`` types ``abc`` and submits.
    Once the script runs out every read returns ``ctrl+c``.
    """

    _NAMED = {ENTER, UP, DOWN, LEFT, RIGHT, BACKSPACE, CLEAR_LINE, INTERRUPT, ESCAPE}

    def __init__(self, *keys: str) -> None:
        self._pending: deque[str] = deque()
        self.feed(keys)

    def feed(self, keys: Iterable[str]) -> None:
        for key in keys:
            if key in self._NAMED or len(key) <= 1:
                self._pending.append(key)
            else:
                self._pending.extend(key)

    @property
    def remaining(self) -> int:
        return len(self._pending)

    def read(self) -> str:
        if not self._pending:
            return INTERRUPT
        return self._pending.popleft()

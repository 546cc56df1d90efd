"""Keyboard input: raw-mode handling, byte decoding and key dispatch."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TextIO

if os.name != "nt":
    import termios
    import tty


@dataclass(frozen=True)
class KeyEvent:
    name: str
    ctrl: bool = False


_ESCAPES: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_SPECIAL: dict[str, str] = {
    "\r": "return",
    "\n": "return",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    " ": "space",
}


def decode_keys(data: bytes) -> list[KeyEvent]:
    """Split a chunk read from a raw-mode terminal into key events."""
    text = data.decode("utf-8", errors="ignore")
    events: list[KeyEvent] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\x1b":
            if text[i + 1 : i + 2] == "[" and i + 2 < len(text):
                final = text[i + 2]
                events.append(KeyEvent(_ESCAPES.get(final, "undefined")))
                i += 3
                continue
            events.append(KeyEvent("escape"))
        elif ch in _SPECIAL:
            events.append(KeyEvent(_SPECIAL[ch]))
        elif "\x01" <= ch <= "\x1a":
            events.append(KeyEvent(chr(ord(ch) + 96), ctrl=True))
        elif ch.isprintable():
            events.append(KeyEvent(ch.lower()))
        i += 1
    return events


class InputDispatcher:
    """Maps Ctrl+C to quit and ``r`` to a full refresh; ignores the rest."""

    def __init__(self, on_quit: Callable[[], None], on_refresh: Callable[[], None]) -> None:
        self.on_quit = on_quit
        self.on_refresh = on_refresh

    def dispatch(self, event: KeyEvent) -> None:
        if event.ctrl and event.name == "c":
            self.on_quit()
        elif event.name == "r":
            self.on_refresh()

    def feed(self, data: bytes) -> None:
        for event in decode_keys(data):
            self.dispatch(event)


@contextmanager
def raw_mode(stream: TextIO = sys.stdin) -> Iterator[None]:
    """Put a tty *stream* into raw mode for the duration of the block."""
    if os.name == "nt" or not stream.isatty():
        yield
        return
    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)

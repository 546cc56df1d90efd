"""A character-cell canvas driven by ANSI/VT100 escape sequences.

The canvas keeps its own record of the cursor so that every positioned
write is emitted as an absolute move; it never asks the terminal where the
cursor is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TextIO

# ── ANSI palette ───────────────────────────────────────────────────────────

ESC = "\x1b"
RESET = "\x1b[0m"
BOLD = "\x1b[1m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
BLUE = "\x1b[34m"
PINK = "\x1b[35m"

RED_BACKGROUND = "\x1b[47m\x1b[41m"
GREEN_BACKGROUND = "\x1b[47m\x1b[42m"
YELLOW_BACKGROUND = "\x1b[47m\x1b[43m"

HEADER_ACCENT = "\x1b[1m\x1b[30m\x1b[42m"

CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


def move_to(x: int, y: int) -> str:
    """Absolute positioning sequence for 0-based cell ``(x, y)``."""
    return f"\x1b[{y + 1};{x + 1}H"


# ── Data types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TerminalSize:
    width: int
    height: int


@dataclass
class CursorPosition:
    x: int = 0
    y: int = 0


# ── Canvas ─────────────────────────────────────────────────────────────────


class Canvas:
    """Terminal dimensions plus the believed absolute cursor position."""

    def __init__(self, stream: TextIO, size: TerminalSize | None = None) -> None:
        self.stream = stream
        self.size = size or TerminalSize(80, 24)
        self.cursor = CursorPosition()

    @property
    def width(self) -> int:
        return self.size.width

    @property
    def height(self) -> int:
        return self.size.height

    def resize(self, size: TerminalSize) -> None:
        self.size = size
        self.cursor.x = min(self.cursor.x, size.width)
        self.cursor.y = min(self.cursor.y, size.height)

    def set_cursor(self, x: int | None = None, y: int | None = None) -> None:
        """Move to ``(x, y)``; omitted axes keep their stored value.

        Out-of-range coordinates are clamped to the nearest cell.
        """
        if x is None:
            x = self.cursor.x
        if y is None:
            y = self.cursor.y
        x = max(0, min(int(x), self.width))
        y = max(0, min(int(y), self.height))
        self.cursor.x = x
        self.cursor.y = y
        self.stream.write(move_to(x, y))

    def move_cursor(self, dx: int, dy: int) -> None:
        self.set_cursor(self.cursor.x + dx, self.cursor.y + dy)

    def reset_cursor(self) -> None:
        self.stream.write(CURSOR_HOME)
        self.cursor = CursorPosition()

    def write(self, text: str) -> None:
        self.stream.write(text)

    def clear(self) -> None:
        self.stream.write(CLEAR_SCREEN)

    def hide_cursor(self) -> None:
        self.stream.write(HIDE_CURSOR)

    def show_cursor(self) -> None:
        self.stream.write(SHOW_CURSOR)

    def flush(self) -> None:
        self.stream.flush()

    def restore(self) -> None:
        """Leave the terminal usable: plain style, blank screen, visible cursor."""
        self.write(RESET)
        self.clear()
        self.reset_cursor()
        self.show_cursor()
        self.flush()

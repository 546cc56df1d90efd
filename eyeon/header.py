"""Title and host status line at the top of the screen."""

from __future__ import annotations

import platform
import socket
from collections.abc import Callable

from eyeon.canvas import BOLD, HEADER_ACCENT, RESET, Canvas

STATUS_ROW = 1


def format_uptime(seconds: float) -> str:
    """``93784`` → ``"01d 02h 03m 04s"``."""
    total = max(0, int(seconds))
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{days:02d}d {hours:02d}h {minutes:02d}m {secs:02d}s"


def host_identity() -> str:
    return f"Server: {socket.gethostname()} ({platform.system()})"


def status_line(identity: str, uptime: str, width: int) -> str:
    """Identity on the left, uptime on the right, exactly *width* columns."""
    left = f" {identity}"
    right = f"Uptime: {uptime} "
    gap = max(0, width - len(left) - len(right))
    line = left + " " * gap + right
    return line[:width].ljust(width)


class Header:
    def __init__(
        self,
        canvas: Canvas,
        title: str,
        uptime: Callable[[], float],
        identity: Callable[[], str] = host_identity,
    ) -> None:
        self.canvas = canvas
        self.title = title
        self.uptime = uptime
        self.identity = identity

    def draw(self) -> None:
        width = self.canvas.width
        self.canvas.set_cursor((width - len(self.title)) // 2, 0)
        self.canvas.write(f"{BOLD}{self.title}{RESET}")

        line = status_line(self.identity(), format_uptime(self.uptime()), width)
        self.canvas.set_cursor(0, STATUS_ROW)
        self.canvas.write(f"{HEADER_ACCENT}{line}{RESET}")
        self.canvas.flush()

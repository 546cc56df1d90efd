"""Bordered regions that scroll their content one row per refresh tick."""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from eyeon.canvas import BOLD, PINK, RESET, Canvas, TerminalSize
from eyeon.text import ContentTree, clip, fit, flatten

logger = logging.getLogger(__name__)

BOX_TOP = 2
PLACEHOLDER = "Loading..."

ContentProducer = Callable[[], "Awaitable[ContentTree] | ContentTree"]
OriginFn = Callable[[TerminalSize], int]


class BoxState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    DRAWN = "drawn"
    REFRESHING = "refreshing"
    IDLE = "idle"


@dataclass
class BoxRegion:
    id: str
    origin_x: int = 0
    width: int = 0
    height: int = 0
    scroll_offset: int = 0

    @property
    def interior_height(self) -> int:
        return max(0, self.height - 2)

    @property
    def content_width(self) -> int:
        # border + one column of padding on each side
        return max(0, self.width - 4)


class ScrollingBox:
    """A half-screen bordered box fed by a content-producing callable.

    The box owns its scroll offset; nothing else writes to it. Refreshes
    are serialised so two ticks of the same box never interleave.
    """

    def __init__(
        self,
        canvas: Canvas,
        box_id: str,
        origin: OriginFn,
        content: ContentProducer,
        top: int = BOX_TOP,
        border_color: str = PINK,
    ) -> None:
        self.canvas = canvas
        self.origin = origin
        self.content = content
        self.top = top
        self.border_color = border_color
        self.region = BoxRegion(id=box_id)
        self.state = BoxState.UNINITIALIZED
        self._lock = asyncio.Lock()

    @property
    def id(self) -> str:
        return self.region.id

    # ── Layout & frame ─────────────────────────────────────────────────────

    def layout(self, size: TerminalSize) -> None:
        self.region.origin_x = int(self.origin(size))
        self.region.width = size.width // 2
        self.region.height = max(0, size.height - self.top)

    def draw_frame(self) -> None:
        region = self.region
        inner = max(0, region.width - 2)
        x, y = region.origin_x, self.top
        color = self.border_color

        if region.height == 0:
            self.state = BoxState.DRAWN
            return
        self.canvas.set_cursor(x, y)
        self.canvas.write(f"{color}╔{'═' * inner}╗{RESET}")
        for row in range(region.interior_height):
            self.canvas.set_cursor(x, y + 1 + row)
            self.canvas.write(f"{color}║{RESET}{' ' * inner}{color}║{RESET}")
        # a one-row region has no room for a bottom border
        if region.height >= 2:
            self.canvas.set_cursor(x, y + region.height - 1)
            self.canvas.write(f"{color}╚{'═' * inner}╝{RESET}")
        self.canvas.flush()
        self.state = BoxState.DRAWN

    # ── Refresh tick ───────────────────────────────────────────────────────

    async def _produce(self) -> ContentTree:
        try:
            result = self.content()
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.warning("box %s: content unavailable", self.id, exc_info=True)
            return [PLACEHOLDER]
        if not isinstance(result, (list, tuple)):
            logger.warning("box %s: unexpected content %s", self.id, type(result).__name__)
            return [PLACEHOLDER]
        return result

    def visible_rows(self, lines: list[str]) -> list[str]:
        """The rows shown for the current offset, blank-filled past the end."""
        region = self.region
        if region.scroll_offset > max(0, len(lines) - region.interior_height):
            region.scroll_offset = 0
        blank = " " * region.content_width
        rows: list[str] = []
        for row in range(region.interior_height):
            index = region.scroll_offset + row
            rows.append(lines[index] if index < len(lines) else blank)
        return rows

    def advance(self, total: int) -> None:
        region = self.region
        region.scroll_offset += 1
        if region.scroll_offset >= total - region.interior_height + 1:
            region.scroll_offset = 0

    async def refresh(self) -> None:
        async with self._lock:
            self.state = BoxState.REFRESHING
            try:
                tree = await self._produce()
                width = self.region.content_width
                lines = [clip(fit(line, width), width) for line in flatten(tree)]

                x = self.region.origin_x + 2
                for row, text in enumerate(self.visible_rows(lines)):
                    self.canvas.set_cursor(x, self.top + 1 + row)
                    self.canvas.write(f"{BOLD}{text}{RESET}")
                self.canvas.flush()

                self.advance(len(lines))
            finally:
                self.state = BoxState.IDLE

    async def wait_idle(self) -> None:
        async with self._lock:
            pass

"""Eyeon: a terminal dashboard for host metrics.

A header with the host name and uptime sits above two bordered boxes that
split the screen into left and right halves. The left box shows CPU,
processes, memory and network; the right box shows disk usage. Each box
refreshes on its own timer and scrolls one row per tick when its content
is taller than the box.

Keys: ``r`` redraws everything, Ctrl+C quits. Resizing the terminal
redraws everything too.

Usage:
    eyeon
    eyeon 1000 --config path/to/config.toml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import shutil
import signal
import sys
from pathlib import Path
from typing import Any, TextIO

from eyeon.boxes import ScrollingBox
from eyeon.canvas import Canvas, TerminalSize
from eyeon.config import DEFAULT_CONFIG, dump_default_config, load_config
from eyeon.header import Header
from eyeon.keys import InputDispatcher, raw_mode
from eyeon.metrics import MetricsProvider
from eyeon.panels import DisksPanel, SystemPanel
from eyeon.scheduler import TimerRegistry

logger = logging.getLogger(__name__)

HEADER_TIMER = "header"


def _terminal_size() -> TerminalSize:
    size = shutil.get_terminal_size()
    return TerminalSize(size.columns, size.lines)


def parse_delay(raw: str | None, default: int) -> int:
    """Refresh delay in ms from the command line; anything unusable is *default*."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# ── Dashboard ──────────────────────────────────────────────────────────────


class Dashboard:
    """Header, two scrolling boxes, their timers and the input wiring."""

    def __init__(
        self,
        canvas: Canvas,
        provider: MetricsProvider,
        config: dict[str, Any],
        delay_ms: int | None = None,
        registry: TimerRegistry | None = None,
        size_source: Any = _terminal_size,
    ) -> None:
        self.canvas = canvas
        self.provider = provider
        self.config = config
        self.delay = (delay_ms or int(config.get("delay_ms", DEFAULT_CONFIG["delay_ms"]))) / 1000
        self.header_interval = (
            int(config.get("header_interval_ms", DEFAULT_CONFIG["header_interval_ms"])) / 1000
        )
        self.stagger = int(config.get("stagger_ms", DEFAULT_CONFIG["stagger_ms"])) / 1000
        self.size_source = size_source

        self.registry = registry or TimerRegistry()
        self.registry.on_failure = self._timer_failed

        self.header = Header(
            canvas, str(config.get("title", DEFAULT_CONFIG["title"])), provider.uptime
        )
        self.boxes = [
            ScrollingBox(canvas, "left", lambda size: 0, SystemPanel(provider, config)),
            ScrollingBox(
                canvas, "right", lambda size: size.width // 2, DisksPanel(provider, config)
            ),
        ]
        self.dispatcher = InputDispatcher(self.quit, self.request_reinit)

        self.redraws = 0
        self.reinit_task: asyncio.Future[None] | None = None
        self._reinit_requested = False
        self._stopped: asyncio.Future[None] | None = None

    # ── Layout ─────────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Clear the screen and draw everything from scratch.

        Timers are only created for regions that don't have one yet; a box
        whose timer survives from an earlier layout is refreshed right away
        instead.
        """
        self.canvas.resize(self.size_source())
        self.canvas.hide_cursor()
        self.canvas.clear()
        self.canvas.reset_cursor()

        self.header.draw()
        self.registry.register_if_absent(
            HEADER_TIMER, self.header_interval, self.header.draw, delay=self.header_interval
        )

        stale: list[ScrollingBox] = []
        for index, box in enumerate(self.boxes):
            box.layout(self.canvas.size)
            box.draw_frame()
            created = self.registry.register_if_absent(
                box.id, self.delay, box.refresh, delay=index * self.stagger
            )
            if not created:
                stale.append(box)

        self.redraws += 1
        logger.info(
            "layout %dx%d (redraw #%d)", self.canvas.width, self.canvas.height, self.redraws
        )
        for box in stale:
            await box.refresh()

    def request_reinit(self) -> None:
        """Schedule a full redraw once no box tick is in flight.

        Requests that arrive while one is already waiting collapse into it.
        """
        self._reinit_requested = True
        if self.reinit_task is None or self.reinit_task.done():
            self.reinit_task = asyncio.ensure_future(self._run_reinit())

    async def _run_reinit(self) -> None:
        while self._reinit_requested:
            for box in self.boxes:
                await box.wait_idle()
            self._reinit_requested = False
            await self.initialize()

    # ── Lifecycle ──────────────────────────────────────────────────────────

    def quit(self) -> None:
        if self._stopped is not None and not self._stopped.done():
            self._stopped.set_result(None)

    def _timer_failed(self, timer_id: str, exc: BaseException) -> None:
        if self._stopped is not None and not self._stopped.done():
            self._stopped.set_exception(exc)

    def _on_input(self, fd: int) -> None:
        data = os.read(fd, 1024)
        if not data:
            asyncio.get_running_loop().remove_reader(fd)
            return
        self.dispatcher.feed(data)

    def _install_signals(self, loop: asyncio.AbstractEventLoop) -> list[int]:
        handlers = {
            getattr(signal, "SIGWINCH", None): self.request_reinit,
            signal.SIGINT: self.quit,
            getattr(signal, "SIGTERM", None): self.quit,
        }
        installed: list[int] = []
        for sig, handler in handlers.items():
            if sig is None:
                continue
            try:
                loop.add_signal_handler(sig, handler)
            except (NotImplementedError, RuntimeError):
                continue
            installed.append(sig)
        return installed

    async def run(self, stdin: TextIO | None = None) -> None:
        """Draw, then serve timers and input until :meth:`quit` is called."""
        loop = asyncio.get_running_loop()
        self._stopped = loop.create_future()

        fd: int | None = None
        if stdin is not None and stdin.isatty():
            fd = stdin.fileno()
            loop.add_reader(fd, self._on_input, fd)
        installed = self._install_signals(loop)

        try:
            await self.initialize()
            await self._stopped
        finally:
            if fd is not None:
                loop.remove_reader(fd)
            for sig in installed:
                loop.remove_signal_handler(sig)
            if self.reinit_task is not None:
                self.reinit_task.cancel()
            await self.registry.cancel_all()


# ── CLI entry point ────────────────────────────────────────────────────────


def _configure_logging(log_file: str | None, level: str) -> None:
    # stdout belongs to the canvas, so records only ever go to a file
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Terminal dashboard for CPU, memory, process, network and disk usage.",
    )
    parser.add_argument(
        "delay",
        nargs="?",
        default=None,
        help="Milliseconds between box refreshes (default: 2000)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to TOML config file",
    )
    parser.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the default configuration as TOML and exit",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        metavar="PATH",
        help="Write log records to this file",
    )
    args = parser.parse_args()

    if args.dump_config:
        print(dump_default_config(), end="")
        return

    config = load_config(args.config)
    _configure_logging(
        args.log_file or config.get("log_file") or None,
        str(config.get("log_level", DEFAULT_CONFIG["log_level"])),
    )
    delay_ms = parse_delay(args.delay, int(config.get("delay_ms", DEFAULT_CONFIG["delay_ms"])))

    canvas = Canvas(sys.stdout)
    dashboard = Dashboard(canvas, MetricsProvider(), config, delay_ms=delay_ms)
    try:
        with raw_mode(sys.stdin):
            asyncio.run(dashboard.run(sys.stdin))
    except KeyboardInterrupt:
        pass
    finally:
        canvas.restore()


if __name__ == "__main__":
    main()

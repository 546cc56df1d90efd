"""Content producers for the two dashboard boxes.

Each producer returns a fresh content tree per tick. A metric that cannot
be read is logged and shown as a placeholder; the rest of the box still
renders.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from eyeon.boxes import PLACEHOLDER
from eyeon.bytes import ByteCount
from eyeon.canvas import (
    GREEN,
    GREEN_BACKGROUND,
    RED,
    RED_BACKGROUND,
    RESET,
    YELLOW,
    YELLOW_BACKGROUND,
)
from eyeon.config import DEFAULT_CONFIG
from eyeon.metrics import CpuTemperature, MetricsProvider, ProcessInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")

Thresholds = dict[str, float]

_FOREGROUND = (GREEN, YELLOW, RED)
_BACKGROUND = (GREEN_BACKGROUND, YELLOW_BACKGROUND, RED_BACKGROUND)


# ── Colour helpers ─────────────────────────────────────────────────────────


def severity(value: float, thresholds: Thresholds) -> int:
    """0 = normal, 1 = warning, 2 = critical."""
    if value >= thresholds["critical"]:
        return 2
    if value >= thresholds["warning"]:
        return 1
    return 0


def severity_color(value: float, thresholds: Thresholds) -> str:
    return _FOREGROUND[severity(value, thresholds)]


def color_percent(value: float, thresholds: Thresholds, end: str = RESET) -> str:
    return f"{severity_color(value, thresholds)}{value:5.2f}%{end}"


def color_temp(value: float, thresholds: Thresholds, end: str = RESET) -> str:
    return f"{severity_color(value, thresholds)}{round(value):2d}°C{end}"


def percent_bar(value: float, thresholds: Thresholds, width: int = 12) -> str:
    """``[`` + coloured cells proportional to *value* + ``]``."""
    fill = _BACKGROUND[severity(value, thresholds)]
    cells = max(0, width - 2)
    parts = ["["]
    for i in range(cells):
        parts.append(fill + " " if i < value / 100 * cells else RESET + " ")
    parts.append(RESET + "]")
    return "".join(parts)


def fmt_bytes(value: float) -> str:
    return ByteCount(value).format(2)


async def _guarded(call: Awaitable[T], what: str) -> T | None:
    try:
        return await call
    except Exception:
        logger.warning("%s unavailable", what, exc_info=True)
        return None


def _thresholds(config: dict[str, Any], key: str) -> Thresholds:
    table = config.get("thresholds", DEFAULT_CONFIG["thresholds"])
    levels = {**DEFAULT_CONFIG["thresholds"][key], **table.get(key, {})}
    return {"warning": float(levels["warning"]), "critical": float(levels["critical"])}


# ── Left box ───────────────────────────────────────────────────────────────


class SystemPanel:
    """CPU, top processes, memory and network."""

    def __init__(self, provider: MetricsProvider, config: dict[str, Any]) -> None:
        self.provider = provider
        self.top_n = int(config.get("top_processes", DEFAULT_CONFIG["top_processes"]))
        self.pct = _thresholds(config, "percent")
        self.temp = _thresholds(config, "temperature")

    async def __call__(self) -> list[Any]:
        load = await _guarded(self.provider.current_load(), "cpu load")
        temps = await _guarded(self.provider.cpu_temperature(), "cpu temperature")
        mem = await _guarded(self.provider.mem(), "memory")
        procs = await _guarded(self.provider.processes(), "process list")
        network = await _guarded(self.provider.network_stats(), "network stats")

        tree: list[Any] = []
        tree.extend(self._cpu(load, temps))
        tree += ["", "Top Processes CPU Usage", self._top(procs, key="cpu")]
        tree += ["", "Memory"]
        if mem is None:
            tree.append([PLACEHOLDER])
        else:
            tree.append(
                [
                    f"{fmt_bytes(mem.active)}/{fmt_bytes(mem.total)} "
                    f"({fmt_bytes(mem.available)} available)"
                ]
            )
        tree += ["", "Top Processes Memory Usage", self._top(procs, key="mem")]
        tree += ["", "Network"]
        if network is None:
            tree.append([PLACEHOLDER])
        else:
            rows: list[Any] = []
            for n in network:
                rows.append(f"{n.iface}:")
                rows.append(
                    [
                        f"Received: {fmt_bytes(n.rx_sec)}/s",
                        f"Transmitted: {fmt_bytes(n.tx_sec)}/s",
                    ]
                )
            tree.append(rows)
        return tree

    def _cpu(self, load: Any, temps: CpuTemperature | None) -> list[Any]:
        if load is None:
            return [f"CPU {PLACEHOLDER}"]
        digits = len(str(max(0, len(load.cpus) - 1)))
        main_temp = ""
        if temps is not None and temps.main is not None:
            main_temp = f" | {color_temp(temps.main, self.temp)}"
        # "CPU" lines up with the indented "Core #N:" labels below it
        label = "CPU".ljust(len("  Core #:") + digits)
        lines: list[Any] = [
            f"{label} {percent_bar(load.current_load, self.pct)} "
            f"{color_percent(load.current_load, self.pct)}{main_temp}"
        ]
        cores: list[str] = []
        core_temps = temps.cores if temps is not None else []
        for i, cpu in enumerate(load.cpus):
            core_label = f"Core #{i}:".ljust(len("Core #:") + digits)
            temp = f" | {color_temp(core_temps[i], self.temp)}" if i < len(core_temps) else ""
            cores.append(
                f"{core_label} {percent_bar(cpu.load, self.pct)} "
                f"{color_percent(cpu.load, self.pct)}{temp}"
            )
        lines.append(cores)
        return lines

    def _top(self, procs: list[ProcessInfo] | None, key: str) -> list[str]:
        if procs is None:
            return [PLACEHOLDER]
        ranked = sorted(procs, key=lambda p: getattr(p, key), reverse=True)[: self.top_n]
        return [f"{color_percent(getattr(p, key), self.pct)} {p.command}" for p in ranked]


# ── Right box ──────────────────────────────────────────────────────────────


class DisksPanel:
    """Usage per mounted filesystem."""

    def __init__(self, provider: MetricsProvider, config: dict[str, Any]) -> None:
        self.provider = provider
        self.pct = _thresholds(config, "percent")

    async def __call__(self) -> list[Any]:
        filesystems = await _guarded(self.provider.fs_size(), "filesystem sizes")
        tree: list[Any] = ["Disks:"]
        if filesystems is None:
            tree.append([PLACEHOLDER])
            return tree
        for fs in filesystems:
            used_pct = fs.used / fs.size * 100 if fs.size else 0.0
            tree.append(f"{fs.mount}: {color_percent(used_pct, self.pct)} used")
            tree.append(
                [
                    fmt_bytes(fs.size),
                    f"{fmt_bytes(fs.used)} used",
                    f"{fmt_bytes(fs.available)} available",
                    "",
                ]
            )
        return tree

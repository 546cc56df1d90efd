"""Host metrics, read through psutil.

Each public coroutine mirrors one question the dashboard asks per tick.
The psutil calls block, so they run in a worker thread; only the call
itself leaves the event loop, never any rendering.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

import psutil

_TEMP_CHIPS = ("coretemp", "k10temp", "cpu_thermal", "acpitz")


# ── Data types ─────────────────────────────────────────────────────────────


@dataclass
class CpuLoad:
    load: float


@dataclass
class CurrentLoad:
    current_load: float
    cpus: list[CpuLoad] = field(default_factory=lambda: list[CpuLoad]())


@dataclass
class CpuTemperature:
    main: float | None = None
    cores: list[float] = field(default_factory=lambda: list[float]())


@dataclass
class Memory:
    active: int
    total: int
    available: int


@dataclass
class ProcessInfo:
    command: str
    cpu: float
    mem: float


@dataclass
class FsSize:
    mount: str
    size: int
    used: int
    available: int


@dataclass
class NetworkStats:
    iface: str
    rx_sec: float
    tx_sec: float


# ── Blocking readers ───────────────────────────────────────────────────────


def _read_load() -> CurrentLoad:
    per_core = psutil.cpu_percent(interval=None, percpu=True)
    total = sum(per_core) / len(per_core) if per_core else 0.0
    return CurrentLoad(current_load=total, cpus=[CpuLoad(load=v) for v in per_core])


def _read_temperature() -> CpuTemperature:
    try:
        temps = psutil.sensors_temperatures()
    except AttributeError:
        return CpuTemperature()
    if not temps:
        return CpuTemperature()
    for chip in _TEMP_CHIPS:
        entries = temps.get(chip)
        if not entries:
            continue
        # coretemp reports a "Package id" entry first, then one per core
        package = [e for e in entries if not e.label.lower().startswith("core")]
        cores = [float(e.current) for e in entries if e.label.lower().startswith("core")]
        main = float((package or entries)[0].current)
        return CpuTemperature(main=main, cores=cores)
    for entries in temps.values():
        if entries:
            return CpuTemperature(main=float(entries[0].current))
    return CpuTemperature()


def _read_memory() -> Memory:
    vm = psutil.virtual_memory()
    active = getattr(vm, "active", vm.used)
    return Memory(active=int(active), total=int(vm.total), available=int(vm.available))


def _read_processes() -> list[ProcessInfo]:
    procs: list[ProcessInfo] = []
    for proc in psutil.process_iter(["name", "cpu_percent", "memory_percent"]):
        try:
            info: dict[str, Any] = proc.info
            procs.append(
                ProcessInfo(
                    command=info.get("name") or "?",
                    cpu=info.get("cpu_percent") or 0.0,
                    mem=info.get("memory_percent") or 0.0,
                )
            )
        except (psutil.NoSuchProcess, psutil.AccessDenied, AttributeError):
            continue
    return procs


def _read_filesystems() -> list[FsSize]:
    result: list[FsSize] = []
    for part in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except (PermissionError, OSError):
            continue
        result.append(
            FsSize(
                mount=part.mountpoint,
                size=int(usage.total),
                used=int(usage.used),
                available=int(usage.free),
            )
        )
    return result


# ── Provider ───────────────────────────────────────────────────────────────


class MetricsProvider:
    """psutil-backed source for every metric the boxes render.

    Network rates are derived from the byte counters seen on the previous
    call, so the first call reports 0 B/s for every interface.
    """

    def __init__(self) -> None:
        self._prev_net: dict[str, tuple[int, int]] = {}
        self._prev_net_time: float = 0.0
        # psutil needs one priming call before cpu_percent() means anything
        psutil.cpu_percent(interval=None, percpu=True)

    async def current_load(self) -> CurrentLoad:
        return await asyncio.to_thread(_read_load)

    async def cpu_temperature(self) -> CpuTemperature:
        return await asyncio.to_thread(_read_temperature)

    async def mem(self) -> Memory:
        return await asyncio.to_thread(_read_memory)

    async def processes(self) -> list[ProcessInfo]:
        return await asyncio.to_thread(_read_processes)

    async def fs_size(self) -> list[FsSize]:
        return await asyncio.to_thread(_read_filesystems)

    async def network_stats(self) -> list[NetworkStats]:
        counters = await asyncio.to_thread(psutil.net_io_counters, pernic=True)
        return self._rates(counters, time.monotonic())

    def _rates(self, counters: dict[str, Any], now: float) -> list[NetworkStats]:
        dt = now - self._prev_net_time
        stats: list[NetworkStats] = []
        for iface, io in counters.items():
            prev = self._prev_net.get(iface)
            if prev is not None and dt > 0:
                rx = max(0.0, (io.bytes_recv - prev[0]) / dt)
                tx = max(0.0, (io.bytes_sent - prev[1]) / dt)
            else:
                rx = tx = 0.0
            stats.append(NetworkStats(iface=iface, rx_sec=rx, tx_sec=tx))
            self._prev_net[iface] = (io.bytes_recv, io.bytes_sent)
        self._prev_net_time = now
        return stats

    def uptime(self) -> float:
        return time.time() - psutil.boot_time()

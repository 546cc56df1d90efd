"""Shared fixtures: an in-memory metrics provider and a test configuration."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any

import pytest

from eyeon.bytes import GB
from eyeon.config import DEFAULT_CONFIG
from eyeon.metrics import (
    CpuLoad,
    CpuTemperature,
    CurrentLoad,
    FsSize,
    Memory,
    NetworkStats,
    ProcessInfo,
)


class FakeProvider:
    """Stands in for MetricsProvider; any metric named in ``failing`` raises."""

    def __init__(self) -> None:
        self.load = CurrentLoad(25.0, [CpuLoad(10.0), CpuLoad(40.0)])
        self.temps = CpuTemperature(main=45.0, cores=[44.0, 46.0])
        self.memory = Memory(active=2 * GB, total=8 * GB, available=6 * GB)
        self.procs = [
            ProcessInfo("python", 12.0, 3.0),
            ProcessInfo("bash", 1.0, 0.5),
            ProcessInfo("firefox", 30.0, 20.0),
        ]
        self.filesystems = [FsSize("/", 100 * GB, 25 * GB, 75 * GB)]
        self.network = [NetworkStats("eth0", 1536.0, 512.0)]
        self.failing: set[str] = set()
        self.fs_gate: asyncio.Event | None = None
        self.calls: Counter[str] = Counter()

    async def _value(self, name: str, value: Any) -> Any:
        self.calls[name] += 1
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")
        return value

    async def current_load(self) -> CurrentLoad:
        return await self._value("current_load", self.load)

    async def cpu_temperature(self) -> CpuTemperature:
        return await self._value("cpu_temperature", self.temps)

    async def mem(self) -> Memory:
        return await self._value("mem", self.memory)

    async def processes(self) -> list[ProcessInfo]:
        return await self._value("processes", self.procs)

    async def fs_size(self) -> list[FsSize]:
        if self.fs_gate is not None:
            await self.fs_gate.wait()
        return await self._value("fs_size", self.filesystems)

    async def network_stats(self) -> list[NetworkStats]:
        return await self._value("network_stats", self.network)

    def uptime(self) -> float:
        return 3661.0


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def config() -> dict[str, Any]:
    return {**DEFAULT_CONFIG, "stagger_ms": 0}

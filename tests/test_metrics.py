"""Tests for the psutil-backed metrics provider."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from eyeon.metrics import MetricsProvider


@pytest.fixture
def provider() -> MetricsProvider:
    with patch("eyeon.metrics.psutil.cpu_percent", return_value=[0.0]):
        return MetricsProvider()


# ── CPU ────────────────────────────────────────────────────────────────────


@patch("eyeon.metrics.psutil.cpu_percent", return_value=[10.0, 30.0])
def test_current_load(mock_cpu: MagicMock, provider: MetricsProvider) -> None:
    load = asyncio.run(provider.current_load())
    assert load.current_load == pytest.approx(20.0)
    assert [c.load for c in load.cpus] == [10.0, 30.0]


@patch("eyeon.metrics.psutil.cpu_percent", return_value=[])
def test_current_load_no_cores(mock_cpu: MagicMock, provider: MetricsProvider) -> None:
    load = asyncio.run(provider.current_load())
    assert load.current_load == 0.0
    assert load.cpus == []


class TestCpuTemperature:
    @patch("eyeon.metrics.psutil.sensors_temperatures")
    def test_coretemp_package_and_cores(
        self, mock_temps: MagicMock, provider: MetricsProvider
    ) -> None:
        mock_temps.return_value = {
            "coretemp": [
                MagicMock(label="Package id 0", current=50.0),
                MagicMock(label="Core 0", current=45.0),
                MagicMock(label="Core 1", current=47.0),
            ],
        }
        temps = asyncio.run(provider.cpu_temperature())
        assert temps.main == 50.0
        assert temps.cores == [45.0, 47.0]

    @patch("eyeon.metrics.psutil.sensors_temperatures")
    def test_fallback_to_first_sensor(
        self, mock_temps: MagicMock, provider: MetricsProvider
    ) -> None:
        mock_temps.return_value = {"some_chip": [MagicMock(label="", current=55.0)]}
        temps = asyncio.run(provider.cpu_temperature())
        assert temps.main == 55.0
        assert temps.cores == []

    @patch("eyeon.metrics.psutil.sensors_temperatures", return_value={})
    def test_no_sensors(self, mock_temps: MagicMock, provider: MetricsProvider) -> None:
        assert asyncio.run(provider.cpu_temperature()).main is None

    @patch("eyeon.metrics.psutil.sensors_temperatures", side_effect=AttributeError)
    def test_not_available(self, mock_temps: MagicMock, provider: MetricsProvider) -> None:
        assert asyncio.run(provider.cpu_temperature()).main is None


# ── Memory, processes, filesystems ─────────────────────────────────────────


@patch("eyeon.metrics.psutil.virtual_memory")
def test_mem(mock_vm: MagicMock, provider: MetricsProvider) -> None:
    mock_vm.return_value = MagicMock(active=2048, total=8192, available=4096, used=3000)
    mem = asyncio.run(provider.mem())
    assert (mem.active, mem.total, mem.available) == (2048, 8192, 4096)


@patch("eyeon.metrics.psutil.process_iter")
def test_processes(mock_iter: MagicMock, provider: MetricsProvider) -> None:
    mock_iter.return_value = [
        MagicMock(info={"name": "python", "cpu_percent": 12.5, "memory_percent": 3.0}),
        MagicMock(info={"name": None, "cpu_percent": None, "memory_percent": None}),
    ]
    procs = asyncio.run(provider.processes())
    assert procs[0].command == "python"
    assert procs[0].cpu == 12.5
    assert procs[1].command == "?"
    assert procs[1].cpu == 0.0


@patch("eyeon.metrics.psutil.disk_usage")
@patch("eyeon.metrics.psutil.disk_partitions")
def test_fs_size_skips_unreadable_mounts(
    mock_parts: MagicMock, mock_usage: MagicMock, provider: MetricsProvider
) -> None:
    mock_parts.return_value = [MagicMock(mountpoint="/"), MagicMock(mountpoint="/secret")]

    def usage(mount: str) -> MagicMock:
        if mount == "/secret":
            raise PermissionError(mount)
        return MagicMock(total=1000, used=250, free=750)

    mock_usage.side_effect = usage
    filesystems = asyncio.run(provider.fs_size())
    assert len(filesystems) == 1
    fs = filesystems[0]
    assert (fs.mount, fs.size, fs.used, fs.available) == ("/", 1000, 250, 750)


# ── Network ────────────────────────────────────────────────────────────────


def test_network_rates_from_counter_deltas(provider: MetricsProvider) -> None:
    first = provider._rates({"eth0": MagicMock(bytes_recv=1000, bytes_sent=500)}, now=10.0)
    assert first[0].iface == "eth0"
    assert (first[0].rx_sec, first[0].tx_sec) == (0.0, 0.0)

    second = provider._rates({"eth0": MagicMock(bytes_recv=3048, bytes_sent=1524)}, now=12.0)
    assert second[0].rx_sec == pytest.approx(1024.0)
    assert second[0].tx_sec == pytest.approx(512.0)


def test_network_counter_reset_clamps_to_zero(provider: MetricsProvider) -> None:
    provider._rates({"lo": MagicMock(bytes_recv=5000, bytes_sent=5000)}, now=1.0)
    stats = provider._rates({"lo": MagicMock(bytes_recv=10, bytes_sent=10)}, now=2.0)
    assert (stats[0].rx_sec, stats[0].tx_sec) == (0.0, 0.0)


@patch("eyeon.metrics.psutil.net_io_counters")
def test_network_stats_reads_per_interface(
    mock_net: MagicMock, provider: MetricsProvider
) -> None:
    mock_net.return_value = {"wlan0": MagicMock(bytes_recv=1, bytes_sent=2)}
    stats = asyncio.run(provider.network_stats())
    mock_net.assert_called_with(pernic=True)
    assert [s.iface for s in stats] == ["wlan0"]


@patch("eyeon.metrics.time.time", return_value=1_000_100.0)
@patch("eyeon.metrics.psutil.boot_time", return_value=1_000_000.0)
def test_uptime(mock_boot: MagicMock, mock_time: MagicMock, provider: MetricsProvider) -> None:
    assert provider.uptime() == pytest.approx(100.0)

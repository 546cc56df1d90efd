"""Tests for eyeon.header."""

from __future__ import annotations

import io

import pytest

from eyeon.canvas import Canvas, TerminalSize
from eyeon.header import STATUS_ROW, Header, format_uptime, host_identity, status_line
from eyeon.text import strip_controls


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "00d 00h 00m 00s"),
        (59.9, "00d 00h 00m 59s"),
        (3661, "00d 01h 01m 01s"),
        (93784, "01d 02h 03m 04s"),
        (100 * 86400, "100d 00h 00m 00s"),
        (-5, "00d 00h 00m 00s"),
    ],
)
def test_format_uptime(seconds: float, expected: str) -> None:
    assert format_uptime(seconds) == expected


class TestStatusLine:
    def test_spans_exact_width(self) -> None:
        line = status_line("Server: box (Linux)", "00d 01h 00m 00s", 60)
        assert len(line) == 60
        assert line.startswith(" Server: box (Linux)")
        assert line.endswith("Uptime: 00d 01h 00m 00s ")

    def test_narrow_terminal_truncates(self) -> None:
        line = status_line("Server: a-very-long-hostname (Linux)", "00d 00h 00m 00s", 20)
        assert len(line) == 20
        assert line.startswith(" Server:")


def test_host_identity_mentions_server() -> None:
    assert host_identity().startswith("Server: ")


def test_draw_centres_title_and_writes_status() -> None:
    stream = io.StringIO()
    canvas = Canvas(stream, TerminalSize(40, 10))
    header = Header(canvas, "Eyeon", lambda: 61.0, identity=lambda: "Server: test (Linux)")
    header.draw()
    out = stream.getvalue()
    # (40 - 5) // 2 = 17 → column 18
    assert "\x1b[1;18H" in out
    assert f"\x1b[{STATUS_ROW + 1};1H" in out
    plain = strip_controls(out)
    assert "Eyeon" in plain
    assert "Server: test (Linux)" in plain
    assert "Uptime: 00d 00h 01m 01s" in plain

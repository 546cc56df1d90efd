"""Byte counts scaled to a human-readable unit (binary, 1024-based)."""

from __future__ import annotations

import re
from dataclasses import dataclass

# ── Units ──────────────────────────────────────────────────────────────────

KB = 1024
MB = 1024**2
GB = 1024**3
TB = 1024**4

DENOMINATORS: dict[str, int] = {"B": 1, "KB": KB, "MB": MB, "GB": GB, "TB": TB}

_PARSE_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(B|KB|MB|GB|TB)\s*$")


def _plain(value: float) -> str:
    """Render a number without a trailing ``.0`` for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass(frozen=True)
class ByteCount:
    """A non-negative number of bytes."""

    value: float = 0

    # ── Constructors ───────────────────────────────────────────────────────

    @classmethod
    def from_bytes(cls, value: float) -> ByteCount:
        return cls(value)

    @classmethod
    def from_kb(cls, value: float) -> ByteCount:
        return cls(value * KB)

    @classmethod
    def from_mb(cls, value: float) -> ByteCount:
        return cls(value * MB)

    @classmethod
    def from_gb(cls, value: float) -> ByteCount:
        return cls(value * GB)

    @classmethod
    def from_tb(cls, value: float) -> ByteCount:
        return cls(value * TB)

    @classmethod
    def parse(cls, text: str) -> ByteCount:
        """Read back a string produced by :meth:`format`.

        Raises:
            ValueError: If *text* is not ``"<number> <unit>"``.
        """
        match = _PARSE_RE.match(text)
        if match is None:
            raise ValueError(f"not a byte count: {text!r}")
        number, unit = match.groups()
        return cls(float(number) * DENOMINATORS[unit])

    # ── Conversions ────────────────────────────────────────────────────────

    @property
    def unit(self) -> str:
        if self.value < KB:
            return "B"
        if self.value < MB:
            return "KB"
        if self.value < GB:
            return "MB"
        if self.value < TB:
            return "GB"
        return "TB"

    def to_bytes(self) -> float:
        return self.value

    def to_kb(self) -> float:
        return self.value / KB

    def to_mb(self) -> float:
        return self.value / MB

    def to_gb(self) -> float:
        return self.value / GB

    def to_tb(self) -> float:
        return self.value / TB

    def to_auto(self) -> float:
        """The value expressed in :attr:`unit`."""
        return self.value / DENOMINATORS[self.unit]

    # ── Formatting ─────────────────────────────────────────────────────────

    def format(self, fraction_digits: int | None = None) -> str:
        """Format as ``"<magnitude> <unit>"``.

        Whole byte counts below 1 KB are never given a fraction.
        """
        unit = self.unit
        magnitude = self.to_auto()
        if fraction_digits is None or (unit == "B" and float(magnitude).is_integer()):
            return f"{_plain(magnitude)} {unit}"
        return f"{magnitude:.{fraction_digits}f} {unit}"

    def __str__(self) -> str:
        return self.format()

    def __int__(self) -> int:
        return int(self.value)

    def __float__(self) -> float:
        return float(self.value)

    def __add__(self, other: ByteCount | float) -> ByteCount:
        if isinstance(other, ByteCount):
            return ByteCount(self.value + other.value)
        if isinstance(other, (int, float)):
            return ByteCount(self.value + other)
        return NotImplemented

    __radd__ = __add__

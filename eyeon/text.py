"""Content trees and visible-width measurement.

A content tree is a nested list of display lines. Flattening turns it into
indented rows; :func:`fit` then pads or cuts each row to a column budget
while leaving colour sequences intact, since those take up string length
but no columns on screen.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Any, Union

INDENT = "  "

# ESC [ params letter, e.g. "\x1b[31m" or "\x1b[1;32m"
CONTROL_SEQUENCE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

ContentNode = Union[str, Sequence[Any]]
ContentTree = Sequence[ContentNode]


# ── Flattening ─────────────────────────────────────────────────────────────


def flatten(tree: ContentTree, max_depth: float = math.inf, _depth: int = 0) -> list[str]:
    """Flatten *tree* depth-first into indented lines.

    Every leaf becomes one line prefixed with two spaces per nesting level.
    Past *max_depth* nested lists are still flattened but no longer indent
    further, so no content is ever dropped.
    """
    lines: list[str] = []
    for node in tree:
        if isinstance(node, (list, tuple)):
            depth = _depth + 1 if _depth < max_depth else _depth
            lines.extend(flatten(node, max_depth, depth))
        else:
            lines.append(INDENT * _depth + str(node))
    return lines


def leaf_count(tree: ContentTree) -> int:
    return sum(
        leaf_count(node) if isinstance(node, (list, tuple)) else 1 for node in tree
    )


# ── Visible width ──────────────────────────────────────────────────────────


def strip_controls(line: str) -> str:
    return CONTROL_SEQUENCE.sub("", line)


def control_length(line: str) -> int:
    """Total characters taken by control sequences in *line*."""
    return sum(len(m.group(0)) for m in CONTROL_SEQUENCE.finditer(line))


def visible_length(line: str) -> int:
    return len(line) - control_length(line)


def fit(line: str, width: int) -> str:
    """Pad or truncate *line* to *width* visible columns.

    Truncation keeps ``width + control_length(line)`` raw characters, pushed
    forward to the end of any control sequence the cut would split. This is
    an approximation: if colour codes sit after the cut the visible result
    is a little wider than *width*; pass the result through :func:`clip`
    where it must not spill past a border.
    """
    width = max(0, width)
    visible = visible_length(line)
    if visible <= width:
        return line + " " * (width - visible)

    budget = width + control_length(line)
    for match in CONTROL_SEQUENCE.finditer(line):
        if match.start() < budget < match.end():
            budget = match.end()
            break
    return line[:budget]


def clip(line: str, width: int) -> str:
    """Drop visible characters past column *width*, keeping every control sequence."""
    width = max(0, width)
    if visible_length(line) <= width:
        return line
    parts: list[str] = []
    shown = 0
    pos = 0
    for match in CONTROL_SEQUENCE.finditer(line):
        text = line[pos : match.start()]
        parts.append(text[: max(0, width - shown)])
        shown += len(text)
        parts.append(match.group(0))
        pos = match.end()
    parts.append(line[pos:][: max(0, width - shown)])
    return "".join(parts)

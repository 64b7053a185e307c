"""Partition a line sequence into draggable blocks."""

from __future__ import annotations

from typing import Sequence

from block_model import Block, BlockType, Line
from line_classifier import classify
from line_signals import scan_lines


# Container types that drag as one unit. Headings, list items and paragraphs
# are never merged, even with a neighbour of the same type.
_MERGEABLE: frozenset[tuple[BlockType, BlockType]] = frozenset(
    {
        (BlockType.CODE, BlockType.CODE),
        (BlockType.TABLE, BlockType.TABLE),
        (BlockType.CALLOUT, BlockType.CALLOUT),
        (BlockType.CALLOUT, BlockType.QUOTE),
        (BlockType.QUOTE, BlockType.QUOTE),
    }
)


def is_mergeable(current: BlockType, following: BlockType) -> bool:
    return (current, following) in _MERGEABLE


def segment(lines: Sequence[Line]) -> list[Block]:
    blocks: list[Block] = []
    start: int | None = None
    current: BlockType | None = None

    def _close(end: int) -> None:
        nonlocal start, current
        if start is not None and current is not None and end >= start:
            blocks.append(Block(start, end, current))
        start = None
        current = None

    for position, line in enumerate(lines):
        line_type = classify(line)
        if line_type is BlockType.EMPTY:
            _close(position - 1)
            blocks.append(Block(position, position, BlockType.EMPTY, is_empty=True))
            continue
        if current is not None and is_mergeable(current, line_type):
            continue
        _close(position - 1)
        start = position
        current = line_type

    _close(len(lines) - 1)
    return blocks


def segment_text(text: str) -> list[Block]:
    if not text:
        return []
    return segment(scan_lines(text.split("\n")))

"""Map a line's structural signals to a block type."""

from __future__ import annotations

from block_model import BlockType, Line


def is_blank(line: Line) -> bool:
    return not line.text.strip() and not line.signals.widget


def classify(line: Line) -> BlockType:
    # First match wins.
    signals = line.signals
    if signals.embed or signals.widget:
        return BlockType.EMBED
    if signals.callout:
        return BlockType.CALLOUT
    if signals.in_code_fence:
        return BlockType.CODE
    if signals.table_row:
        return BlockType.TABLE
    if signals.list_item:
        return BlockType.LIST
    if signals.heading:
        return BlockType.HEADING
    if signals.blockquote:
        return BlockType.QUOTE
    if signals.horizontal_rule:
        return BlockType.HR
    if is_blank(line):
        return BlockType.EMPTY
    return BlockType.PARAGRAPH

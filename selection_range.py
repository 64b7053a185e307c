"""Widen a drag to cover the editor's text selection."""

from __future__ import annotations

from dataclasses import dataclass

from block_model import Block


@dataclass(frozen=True)
class CursorPosition:
    line: int
    column: int


@dataclass(frozen=True)
class LineRange:
    start_line: int
    end_line: int

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def __len__(self) -> int:
        return self.end_line - self.start_line + 1


def selection_line_range(
    anchor: CursorPosition, head: CursorPosition
) -> LineRange | None:
    """Normalize a selection to lines; a collapsed caret is no selection."""
    if anchor == head:
        return None
    return LineRange(min(anchor.line, head.line), max(anchor.line, head.line))


def extend_range(block: Block, selection: LineRange | None) -> LineRange:
    if selection is not None and selection.contains(block.start_line):
        return selection
    return LineRange(block.start_line, block.end_line)

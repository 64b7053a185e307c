from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BlockType(str, Enum):
    EMPTY = "empty"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    TABLE = "table"
    CODE = "code"
    QUOTE = "quote"
    CALLOUT = "callout"
    HR = "hr"
    EMBED = "embed"


class InputModality(str, Enum):
    POINTER = "pointer"
    TOUCH = "touch"


@dataclass(frozen=True)
class LineSignals:
    """Structural flags for one rendered line."""

    in_code_fence: bool = False
    table_row: bool = False
    list_item: bool = False
    heading: bool = False
    blockquote: bool = False
    callout: bool = False
    horizontal_rule: bool = False
    embed: bool = False
    widget: bool = False


@dataclass(frozen=True)
class Line:
    index: int
    text: str
    signals: LineSignals = LineSignals()


@dataclass(frozen=True)
class Block:
    start_line: int
    end_line: int
    type: BlockType
    is_empty: bool = False

    def __post_init__(self) -> None:
        if self.start_line < 0:
            raise ValueError(f"negative start line: {self.start_line}")
        if self.start_line > self.end_line:
            raise ValueError(
                f"block start {self.start_line} is after end {self.end_line}"
            )
        if self.is_empty and self.start_line != self.end_line:
            raise ValueError("empty blocks span exactly one line")

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    @property
    def line_range(self) -> range:
        return range(self.start_line, self.end_line + 1)

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

"""Relocate a contiguous run of lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class MoveResult:
    new_lines: tuple[str, ...]
    caret_line: int


def is_legal_target(start: int, end: int, target: int) -> bool:
    """Dropping inside the span, or right after it, changes nothing."""
    return target < start or target > end + 1


def move_lines(lines: Sequence[str], start: int, end: int, target: int) -> MoveResult:
    """Move lines[start:end + 1] so they sit before the line originally at target.

    target may equal len(lines) to append. An illegal target leaves the
    sequence as it was, with the caret on the first source line.
    """
    _validate(len(lines), start, end, target)
    if not is_legal_target(start, end, target):
        return MoveResult(tuple(lines), start)

    count = end - start + 1
    moving = list(lines[start : end + 1])
    remaining = list(lines[:start]) + list(lines[end + 1 :])
    insert_at = target - count if target > end else target
    remaining[insert_at:insert_at] = moving
    return MoveResult(tuple(remaining), insert_at)


def move_text(text: str, start: int, end: int, target: int) -> tuple[str, int]:
    result = move_lines(text.split("\n"), start, end, target)
    return "\n".join(result.new_lines), result.caret_line


def _validate(length: int, start: int, end: int, target: int) -> None:
    if start < 0 or end < 0 or target < 0:
        raise ValueError("line indices must be non-negative")
    if start > end:
        raise ValueError(f"start {start} is after end {end}")
    if end >= length:
        raise ValueError(f"end {end} is past the last line ({length - 1})")
    if target > length:
        raise ValueError(f"target {target} is past the end ({length})")

"""Derive structural line signals from raw Markdown source."""

from __future__ import annotations

import re
from typing import Sequence

from block_model import Line, LineSignals


_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_QUOTE_RE = re.compile(r"^\s{0,3}>")
_CALLOUT_RE = re.compile(r"^\s{0,3}>\s*\[![^\]]+\]")
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}(\s|$)")
_HR_RE = re.compile(r"^\s{0,3}([-*_])(\s*\1){2,}\s*$")
_LIST_RE = re.compile(r"^\s*([-*+]|\d{1,9}[.)])(\s|$)")
_TABLE_DELIMITER_RE = re.compile(r"^\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)+\|?$")
_EMBED_RE = re.compile(r"^!\[\[[^\]]+\]\]$|^!\[[^\]]*\]\([^)]+\)$")


def scan_lines(texts: Sequence[str]) -> list[Line]:
    """Attach signals to every line; fence and table state carry across lines."""
    lines: list[Line] = []
    fence: str | None = None
    after_table = False
    for index, text in enumerate(texts):
        if fence is not None:
            lines.append(Line(index, text, LineSignals(in_code_fence=True)))
            if _closes_fence(text, fence):
                fence = None
            continue
        match = _FENCE_RE.match(text)
        if match:
            fence = match.group(1)
            after_table = False
            lines.append(Line(index, text, LineSignals(in_code_fence=True)))
            continue
        signals = line_signals(text, after_table=after_table)
        if _TABLE_DELIMITER_RE.match(text.strip()) and lines:
            _mark_header_row(lines)
        after_table = signals.table_row
        lines.append(Line(index, text, signals))
    return lines


def _mark_header_row(lines: list[Line]) -> None:
    # A delimiter row makes the line above it the table header.
    header = lines[-1]
    if header.signals == LineSignals() and "|" in header.text:
        lines[-1] = Line(header.index, header.text, LineSignals(table_row=True))


def line_signals(text: str, after_table: bool = False) -> LineSignals:
    """Signals for a single line outside any code fence."""
    stripped = text.strip()
    if not stripped:
        return LineSignals()
    if _EMBED_RE.match(stripped):
        return LineSignals(embed=True, widget=True)
    if _QUOTE_RE.match(text):
        return LineSignals(blockquote=True, callout=bool(_CALLOUT_RE.match(text)))
    if _HEADING_RE.match(text):
        return LineSignals(heading=True)
    # Rules first: "* * *" and "- - -" are not list items.
    if _HR_RE.match(text):
        return LineSignals(horizontal_rule=True)
    if _LIST_RE.match(text):
        return LineSignals(list_item=True)
    if stripped.startswith("|") or _TABLE_DELIMITER_RE.match(stripped):
        return LineSignals(table_row=True)
    if after_table and "|" in stripped:
        return LineSignals(table_row=True)
    return LineSignals()


def _closes_fence(text: str, fence: str) -> bool:
    stripped = text.strip()
    marker = fence[0]
    run = len(stripped) - len(stripped.lstrip(marker))
    return run >= len(fence) and not stripped[run:].strip()

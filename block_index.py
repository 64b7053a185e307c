"""Block list for the current document snapshot."""

from __future__ import annotations

import bisect
import logging
from typing import Callable, Sequence

from block_model import Block
from block_segmenter import segment
from host_ports import LineElement, LineGeometryProvider


class BlockIndex:
    """Owns the last segmentation of the rendered lines.

    The list is rebuilt wholesale on refresh and never patched. Refresh is
    refused while a drag session is open so the geometry under the pointer
    stays put.
    """

    def __init__(
        self,
        geometry: LineGeometryProvider,
        is_refresh_suspended: Callable[[], bool],
    ) -> None:
        self._geometry = geometry
        self._suspended = is_refresh_suspended
        self._blocks: tuple[Block, ...] | None = None
        self._starts: list[int] = []
        self._elements: tuple[LineElement, ...] = ()

    @property
    def is_refresh_suspended(self) -> bool:
        return self._suspended()

    @property
    def blocks(self) -> tuple[Block, ...]:
        self.ensure_fresh()
        return self._blocks or ()

    @property
    def elements(self) -> tuple[LineElement, ...]:
        return self._elements

    def refresh(self) -> bool:
        if self.is_refresh_suspended:
            logging.debug("Block refresh skipped; drag in progress")
            return False
        elements = tuple(self._geometry.line_elements())
        lines = self._geometry.signals_for(elements)
        blocks = tuple(segment(lines))
        self._elements = elements
        self._blocks = blocks
        self._starts = [block.start_line for block in blocks]
        logging.debug("Blocks refreshed: lines=%s blocks=%s", len(elements), len(blocks))
        return True

    def live_elements(self) -> Sequence[LineElement]:
        """Elements as rendered right now, bypassing the snapshot."""
        return self._geometry.line_elements()

    def invalidate(self) -> None:
        self._blocks = None
        self._starts = []

    def ensure_fresh(self) -> None:
        if self._blocks is None:
            self.refresh()

    def block_containing(self, line: int) -> Block | None:
        blocks = self.blocks
        if not blocks or line < 0:
            return None
        position = bisect.bisect_right(self._starts, line) - 1
        if position < 0:
            return None
        block = blocks[position]
        return block if block.contains(line) else None

    def block_at(self, position: int) -> Block | None:
        blocks = self.blocks
        if 0 <= position < len(blocks):
            return blocks[position]
        return None

    def position_of(self, block: Block) -> int | None:
        blocks = self.blocks
        position = bisect.bisect_left(self._starts, block.start_line)
        if position < len(blocks) and blocks[position] == block:
            return position
        return None

    def elements_for(self, block: Block) -> list[LineElement]:
        return list(self._elements[block.start_line : block.end_line + 1])

    def elements_in(self, start_line: int, end_line: int) -> Sequence[LineElement]:
        return self._elements[max(0, start_line) : end_line + 1]

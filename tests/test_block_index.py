"""Tests for block_index.py.

Tests:
- Refresh builds blocks from the rendered lines
- Lookups by line and by position
- Refresh is refused while suspended
- Invalidation forces a rebuild on next access
"""

from __future__ import annotations

from block_index import BlockIndex
from block_model import Block, BlockType
from conftest import FakeGeometry


TEXT = ["# Title", "", "| a |", "| b |", "para"]


def _index(texts=TEXT, suspended=lambda: False) -> tuple[BlockIndex, FakeGeometry]:
    geometry = FakeGeometry(texts)
    return BlockIndex(geometry, suspended), geometry


class TestRefresh:
    def test_blocks_are_built_lazily(self) -> None:
        index, _geometry = _index()
        assert [block.type for block in index.blocks] == [
            BlockType.HEADING,
            BlockType.EMPTY,
            BlockType.TABLE,
            BlockType.PARAGRAPH,
        ]
        assert len(index.elements) == len(TEXT)

    def test_refresh_picks_up_new_lines(self) -> None:
        index, geometry = _index()
        index.refresh()
        geometry.elements = FakeGeometry(["a", "b"]).elements
        assert index.refresh()
        assert len(index.blocks) == 2

    def test_suspended_refresh_keeps_snapshot(self) -> None:
        suspended = {"value": False}
        index, geometry = _index(suspended=lambda: suspended["value"])
        before = index.blocks
        suspended["value"] = True
        geometry.elements = FakeGeometry(["only"]).elements
        assert not index.refresh()
        assert index.blocks == before
        assert index.is_refresh_suspended

    def test_invalidate_rebuilds_on_access(self) -> None:
        index, geometry = _index()
        index.refresh()
        geometry.elements = FakeGeometry(["x", "", "y"]).elements
        index.invalidate()
        assert [block.start_line for block in index.blocks] == [0, 1, 2]

    def test_live_elements_bypass_snapshot(self) -> None:
        index, geometry = _index()
        index.refresh()
        geometry.elements = FakeGeometry(["x"]).elements
        assert len(index.live_elements()) == 1
        assert len(index.elements) == len(TEXT)


class TestLookups:
    def test_block_containing(self) -> None:
        index, _geometry = _index()
        assert index.block_containing(3) == Block(2, 3, BlockType.TABLE)
        assert index.block_containing(1).is_empty
        assert index.block_containing(-1) is None
        assert index.block_containing(99) is None

    def test_block_at_and_position_of(self) -> None:
        index, _geometry = _index()
        table = index.block_at(2)
        assert table == Block(2, 3, BlockType.TABLE)
        assert index.position_of(table) == 2
        assert index.block_at(10) is None
        assert index.position_of(Block(2, 2, BlockType.TABLE)) is None

    def test_elements_for_block(self) -> None:
        index, _geometry = _index()
        elements = index.elements_for(Block(2, 3, BlockType.TABLE))
        assert [element.line_number() for element in elements] == [2, 3]

    def test_elements_in_clamps_start(self) -> None:
        index, _geometry = _index()
        index.refresh()
        assert len(index.elements_in(-3, 1)) == 2

    def test_empty_document(self) -> None:
        index, _geometry = _index(texts=[])
        assert index.blocks == ()
        assert index.block_containing(0) is None

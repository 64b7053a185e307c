"""Tests for handle_visibility.py.

Tests:
- Hover shows a handle and leaving hides it after a delay
- Tap-to-select toggles and clears
- Everything is hidden when a drag starts
"""

from __future__ import annotations

from block_model import Block, BlockType
from handle_visibility import HandleVisibility


PARAGRAPH = Block(2, 2, BlockType.PARAGRAPH)
TABLE = Block(4, 6, BlockType.TABLE)
EMPTY = Block(3, 3, BlockType.EMPTY, is_empty=True)


def _visibility(surface, scheduler, dragging=None, **kwargs) -> HandleVisibility:
    state = dragging if dragging is not None else {"value": False}
    return HandleVisibility(surface, scheduler, lambda: state["value"], **kwargs)


# =============================================================================
# Hover
# =============================================================================


class TestHover:
    def test_enter_shows_handle(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.pointer_enter(1)
        assert surface.visible == {1: True}
        assert visibility.is_hovering
        assert visibility.visible == frozenset({1})

    def test_leave_hides_after_delay(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler, hide_delay_ms=200)
        visibility.pointer_enter(1)
        visibility.pointer_leave(1)

        assert surface.visible[1]
        assert scheduler.delays == [200]
        scheduler.fire_all()
        assert not surface.visible[1]
        assert not visibility.is_hovering

    def test_reenter_cancels_hide(self, surface, scheduler) -> None:
        """Moving from the line onto its handle keeps it visible."""
        visibility = _visibility(surface, scheduler)
        visibility.pointer_enter(1)
        visibility.pointer_leave(1)
        visibility.pointer_enter(1)

        assert scheduler.timers == {}
        assert surface.visible[1]

    def test_leave_unknown_handle_is_ignored(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.pointer_leave(4)
        assert scheduler.timers == {}

    def test_hover_disabled(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler, show_on_hover=False)
        visibility.pointer_enter(1)
        assert surface.visible == {}
        assert not visibility.is_hovering

    def test_disabling_hover_hides_hovered_handles(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.pointer_enter(1)
        visibility.set_show_on_hover(False)
        assert not surface.visible[1]
        assert visibility.visible == frozenset()

    def test_no_hover_while_dragging(self, surface, scheduler) -> None:
        dragging = {"value": True}
        visibility = _visibility(surface, scheduler, dragging)
        visibility.pointer_enter(1)
        assert surface.visible == {}


# =============================================================================
# Tap to select
# =============================================================================


class TestTap:
    def test_tap_selects_and_shows(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.tap(2, PARAGRAPH)
        assert visibility.selected_position == 2
        assert surface.selected == [PARAGRAPH]
        assert surface.visible[2]

    def test_tap_same_block_deselects(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.tap(2, PARAGRAPH)
        visibility.tap(2, PARAGRAPH)
        assert visibility.selected_position is None
        assert surface.selected == []
        assert not surface.visible[2]

    def test_tap_other_block_moves_selection(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.tap(2, PARAGRAPH)
        visibility.tap(4, TABLE)
        assert visibility.selected_position == 4
        assert surface.selected == [TABLE]
        assert not surface.visible[2]

    def test_tap_empty_or_outside_deselects(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.tap(2, PARAGRAPH)
        visibility.tap(3, EMPTY)
        assert visibility.selected_position is None

        visibility.tap(2, PARAGRAPH)
        visibility.tap(None, None)
        assert visibility.selected_position is None

    def test_selected_handle_survives_hover_hide(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.tap(2, PARAGRAPH)
        visibility.pointer_enter(2)
        visibility.pointer_leave(2)
        scheduler.fire_all()
        assert surface.visible[2]


# =============================================================================
# Drag and re-render
# =============================================================================


class TestLifecycle:
    def test_suspend_hides_everything(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.tap(2, PARAGRAPH)
        visibility.pointer_enter(4)
        visibility.pointer_leave(4)

        visibility.suspend()
        assert surface.hide_all_calls == 1
        assert scheduler.timers == {}
        assert visibility.selected_position is None
        assert visibility.visible == frozenset()
        assert surface.selected == []

    def test_reset_keeps_selection_of_unchanged_block(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        blocks = (Block(0, 0, BlockType.HEADING), EMPTY, PARAGRAPH)
        visibility.tap(2, PARAGRAPH)
        visibility.reset(blocks)
        assert visibility.selected_position == 2

    def test_reset_drops_selection_of_changed_block(self, surface, scheduler) -> None:
        visibility = _visibility(surface, scheduler)
        visibility.tap(2, PARAGRAPH)
        visibility.reset((Block(0, 0, BlockType.HEADING), EMPTY, TABLE))
        assert visibility.selected_position is None

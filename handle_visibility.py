"""Hover and tap affordances for drag handles."""

from __future__ import annotations

from typing import Any, Callable

from block_model import Block
from host_ports import HandleSurface, Scheduler


DEFAULT_HIDE_DELAY_MS = 200


class HandleVisibility:
    """Shows handles on hover (pointer) or tap-to-select (touch).

    Handles are addressed by block position in the current BlockIndex.
    Nothing here reacts while a drag is open.
    """

    def __init__(
        self,
        surface: HandleSurface,
        scheduler: Scheduler,
        is_dragging: Callable[[], bool],
        show_on_hover: bool = True,
        hide_delay_ms: int = DEFAULT_HIDE_DELAY_MS,
    ) -> None:
        self._surface = surface
        self._scheduler = scheduler
        self._is_dragging = is_dragging
        self._show_on_hover = show_on_hover
        self._hide_delay_ms = hide_delay_ms
        self._hide_timers: dict[int, Any] = {}
        self._visible: set[int] = set()
        self._hovering = False
        self._selected: tuple[int, Block] | None = None

    @property
    def is_hovering(self) -> bool:
        return self._hovering

    @property
    def visible(self) -> frozenset[int]:
        return frozenset(self._visible)

    @property
    def selected_position(self) -> int | None:
        return self._selected[0] if self._selected else None

    def set_show_on_hover(self, enabled: bool) -> None:
        self._show_on_hover = enabled
        if not enabled:
            self._hide_hovered()

    def pointer_enter(self, position: int) -> None:
        if not self._show_on_hover or self._is_dragging():
            return
        self._hovering = True
        self._cancel_hide(position)
        self._show(position)

    def pointer_leave(self, position: int) -> None:
        if self._is_dragging() or position not in self._visible:
            return
        self._cancel_hide(position)
        self._hide_timers[position] = self._scheduler.schedule(
            self._hide_delay_ms, lambda: self._on_hide_timer(position)
        )

    def tap(self, position: int | None, block: Block | None) -> None:
        if self._is_dragging():
            return
        if position is None or block is None or block.is_empty:
            self.deselect()
            return
        if self._selected is not None and self._selected[0] == position:
            self.deselect()
            return
        self.deselect()
        self._selected = (position, block)
        self._surface.set_block_selected(block, True)
        self._show(position)

    def deselect(self) -> None:
        if self._selected is None:
            return
        position, block = self._selected
        self._selected = None
        self._surface.set_block_selected(block, False)
        self._hide(position)

    def suspend(self) -> None:
        """A drag started: drop every affordance."""
        self._cancel_all()
        self.deselect()
        self._visible.clear()
        self._hovering = False
        self._surface.hide_all_handles()

    def reset(self, blocks: tuple[Block, ...] = ()) -> None:
        """Handles were re-rendered; keep a selection that still exists."""
        self._cancel_all()
        self._visible.clear()
        self._hovering = False
        selected = self._selected
        self._selected = None
        if selected is None:
            return
        position, block = selected
        if 0 <= position < len(blocks) and blocks[position] == block:
            self.tap(position, block)

    def _on_hide_timer(self, position: int) -> None:
        self._hide_timers.pop(position, None)
        if position != self.selected_position:
            self._hide(position)
        if not self._visible:
            self._hovering = False

    def _hide_hovered(self) -> None:
        self._cancel_all()
        keep = self.selected_position
        for position in list(self._visible):
            if position != keep:
                self._hide(position)
        self._hovering = False

    def _show(self, position: int) -> None:
        self._visible.add(position)
        self._surface.set_handle_visible(position, True)

    def _hide(self, position: int) -> None:
        self._visible.discard(position)
        self._surface.set_handle_visible(position, False)

    def _cancel_hide(self, position: int) -> None:
        timer = self._hide_timers.pop(position, None)
        if timer is not None:
            self._scheduler.cancel(timer)

    def _cancel_all(self) -> None:
        for timer in self._hide_timers.values():
            self._scheduler.cancel(timer)
        self._hide_timers.clear()

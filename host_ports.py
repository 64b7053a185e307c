"""Contracts between the drag core and the editor host.

The core only talks to the editor through these protocols, so it can be
driven by the GTK view or by fakes in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from block_model import Block, Line
from selection_range import CursorPosition


@dataclass(frozen=True)
class Rect:
    top: float
    bottom: float
    left: float
    width: float

    @property
    def mid_y(self) -> float:
        return (self.top + self.bottom) / 2

    def intersects_rows(self, other: "Rect") -> bool:
        return self.bottom >= other.top and self.top <= other.bottom


class LineElement(Protocol):
    """One rendered line of the document."""

    def is_attached(self) -> bool:
        ...

    def rect(self) -> Rect:
        ...

    def line_number(self) -> int:
        """0-based document line.

        Raises StaleElementError or UnresolvablePositionError.
        """
        ...

    def text(self) -> str:
        ...


class LineGeometryProvider(Protocol):
    def line_elements(self) -> Sequence[LineElement]:
        """Rendered lines, ordered top to bottom."""
        ...

    def signals_for(self, elements: Sequence[LineElement]) -> list[Line]:
        ...

    def viewport(self) -> Rect:
        """Visible area, in the same coordinates as line rects."""
        ...


class DocumentAccess(Protocol):
    def read_all_text(self) -> str:
        ...

    def replace_all_text(self, text: str, caret_line: int) -> None:
        """Replace the whole document as a single undoable edit."""
        ...


class SelectionProvider(Protocol):
    def selection(self) -> tuple[CursorPosition, CursorPosition] | None:
        """Anchor and head of the selection, or None when there is none."""
        ...


class EditorContext(Protocol):
    def document(self) -> DocumentAccess | None:
        ...

    def selection_provider(self) -> SelectionProvider | None:
        ...


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class DragFeedback(Protocol):
    """Visual state shown while a block is being dragged."""

    def mark_dragging(self, elements: Sequence[LineElement]) -> None:
        ...

    def clear_dragging(self) -> None:
        ...

    def show_indicator(self, top: float, left: float, width: float) -> None:
        ...

    def hide_indicator(self) -> None:
        ...

    def set_drag_active(self, active: bool) -> None:
        ...

    def set_handle_pressed(self, block: Block | None, pressed: bool) -> None:
        ...


class HandleSurface(Protocol):
    def set_handle_visible(self, position: int, visible: bool) -> None:
        ...

    def hide_all_handles(self) -> None:
        ...

    def set_block_selected(self, block: Block, selected: bool) -> None:
        ...

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Sequence

import pytest

from block_index import BlockIndex
from block_model import Block, Line
from config import DragSettings
from drag_controller import DragController
from errors import StaleElementError, UnresolvablePositionError
from host_ports import LineElement, Rect
from line_signals import scan_lines
from selection_range import CursorPosition


LINE_HEIGHT = 20.0


class FakeLineElement:
    def __init__(self, line: int, text: str, top: float, height: float = LINE_HEIGHT) -> None:
        self.line = line
        self._text = text
        self.top = top
        self.height = height
        self.attached = True
        self.unresolvable = False

    def is_attached(self) -> bool:
        return self.attached

    def rect(self) -> Rect:
        if not self.attached:
            raise StaleElementError("detached", line=self.line)
        return Rect(self.top, self.top + self.height, 40.0, 600.0)

    def line_number(self) -> int:
        if not self.attached:
            raise StaleElementError("detached", line=self.line)
        if self.unresolvable:
            raise UnresolvablePositionError("no position", line=self.line)
        return self.line

    def text(self) -> str:
        return self._text


class FakeGeometry:
    def __init__(self, texts: Sequence[str], viewport: Rect | None = None) -> None:
        self.elements = [
            FakeLineElement(line, text, line * LINE_HEIGHT) for line, text in enumerate(texts)
        ]
        self._viewport = viewport or Rect(0.0, 400.0, 0.0, 800.0)

    def line_elements(self) -> Sequence[LineElement]:
        return list(self.elements)

    def signals_for(self, elements: Sequence[LineElement]) -> list[Line]:
        return scan_lines([element.text() for element in elements])

    def viewport(self) -> Rect:
        return self._viewport


class FakeDocument:
    def __init__(self, text: str) -> None:
        self.text = text
        self.replacements: list[tuple[str, int]] = []
        self.fail_with: Exception | None = None

    def read_all_text(self) -> str:
        return self.text

    def replace_all_text(self, text: str, caret_line: int) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.replacements.append((text, caret_line))
        self.text = text


class FakeSelection:
    def __init__(self) -> None:
        self.current: tuple[CursorPosition, CursorPosition] | None = None

    def select(self, anchor: tuple[int, int], head: tuple[int, int]) -> None:
        self.current = (CursorPosition(*anchor), CursorPosition(*head))

    def selection(self) -> tuple[CursorPosition, CursorPosition] | None:
        return self.current


class FakeEditor:
    def __init__(self, document: FakeDocument | None, selection: FakeSelection | None) -> None:
        self.active_document = document
        self.active_selection = selection

    def document(self) -> FakeDocument | None:
        return self.active_document

    def selection_provider(self) -> FakeSelection | None:
        return self.active_selection


class FakeScheduler:
    def __init__(self) -> None:
        self._next = 0
        self.timers: dict[int, tuple[int, Callable[[], None]]] = {}
        self.cancelled: list[int] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        self._next += 1
        self.timers[self._next] = (delay_ms, callback)
        return self._next

    def cancel(self, handle: Any) -> None:
        self.cancelled.append(handle)
        self.timers.pop(handle, None)

    @property
    def delays(self) -> list[int]:
        return [delay for delay, _ in self.timers.values()]

    def fire_all(self) -> None:
        for handle in list(self.timers):
            _delay, callback = self.timers.pop(handle)
            callback()


@dataclass
class FakeFeedback:
    dragging: list[LineElement] = field(default_factory=list)
    indicator: tuple[float, float, float] | None = None
    drag_active: bool = False
    pressed: set[int] = field(default_factory=set)
    clear_calls: int = 0

    def mark_dragging(self, elements: Sequence[LineElement]) -> None:
        self.dragging = list(elements)

    def clear_dragging(self) -> None:
        self.dragging = []
        self.clear_calls += 1

    def show_indicator(self, top: float, left: float, width: float) -> None:
        self.indicator = (top, left, width)

    def hide_indicator(self) -> None:
        self.indicator = None

    def set_drag_active(self, active: bool) -> None:
        self.drag_active = active

    def set_handle_pressed(self, block: Block | None, pressed: bool) -> None:
        if block is None:
            return
        if pressed:
            self.pressed.add(block.start_line)
        else:
            self.pressed.discard(block.start_line)


@dataclass
class FakeSurface:
    visible: dict[int, bool] = field(default_factory=dict)
    selected: list[Block] = field(default_factory=list)
    hide_all_calls: int = 0

    def set_handle_visible(self, position: int, visible: bool) -> None:
        self.visible[position] = visible

    def hide_all_handles(self) -> None:
        self.hide_all_calls += 1
        for position in self.visible:
            self.visible[position] = False

    def set_block_selected(self, block: Block, selected: bool) -> None:
        if selected:
            self.selected.append(block)
        elif block in self.selected:
            self.selected.remove(block)


class DragHarness:
    """A DragController wired to fakes for one document."""

    def __init__(self, text: str, settings: DragSettings | None = None) -> None:
        self.geometry = FakeGeometry(text.split("\n"))
        self.document = FakeDocument(text)
        self.selection = FakeSelection()
        self.editor = FakeEditor(self.document, self.selection)
        self.feedback = FakeFeedback()
        self.scheduler = FakeScheduler()
        self.refreshes = 0
        self.drag_starts = 0
        self.index = BlockIndex(self.geometry, lambda: self.controller.is_dragging)
        self.controller = DragController(
            self.index,
            self.editor,
            self.feedback,
            self.scheduler,
            on_refresh=self._on_refresh,
            on_drag_start=self._on_drag_start,
            settings=settings,
        )
        self.index.refresh()

    def block_at_line(self, line: int) -> Block:
        block = self.index.block_containing(line)
        assert block is not None
        return block

    def y_above(self, line: int) -> float:
        """A pointer position just above the midpoint of `line`."""
        return line * LINE_HEIGHT + 2.0

    def _on_refresh(self) -> None:
        self.refreshes += 1
        self.index.refresh()

    def _on_drag_start(self) -> None:
        self.drag_starts += 1


@pytest.fixture
def make_harness() -> Callable[..., DragHarness]:
    def _make(text: str, settings: DragSettings | None = None) -> DragHarness:
        return DragHarness(text, settings)

    return _make


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()

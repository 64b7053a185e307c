"""Drag interaction state machine for block handles.

Idle -> Armed -> Dragging -> Idle. Pointer input arms and starts in one step;
touch input arms on touch-start and starts when the long-press timer fires.
The document is written at most once per session, on release, after the
target has been checked.
"""

from __future__ import annotations

import bisect
import logging
import math
import traceback
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Sequence

from block_index import BlockIndex
from block_model import Block, InputModality
from config import DragSettings
from errors import (
    BlockDragError,
    MutationApplyError,
    NoActiveEditorError,
    StaleElementError,
)
from host_ports import (
    DocumentAccess,
    DragFeedback,
    EditorContext,
    LineElement,
    Scheduler,
)
from line_mover import is_legal_target, move_text
from selection_range import LineRange, extend_range, selection_line_range


class DragPhase(Enum):
    IDLE = "idle"
    ARMED = "armed"
    DRAGGING = "dragging"


class DropOutcome(Enum):
    MOVED = "moved"
    ILLEGAL_TARGET = "illegal_target"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class DragSession:
    source_start_line: int
    source_end_line: int
    pointer_origin_y: float
    input_modality: InputModality
    block: Block
    elements: list[LineElement] = field(default_factory=list)
    current_target_line: int | None = None


@dataclass(frozen=True)
class DropTarget:
    line: int
    indicator_y: float | None = None
    left: float = 0.0
    width: float = 0.0


@dataclass
class _PendingTouch:
    block: Block
    origin_x: float
    origin_y: float
    last_y: float
    timer: Any = None


class DragController:
    def __init__(
        self,
        index: BlockIndex,
        editor: EditorContext,
        feedback: DragFeedback,
        scheduler: Scheduler,
        on_refresh: Callable[[], None],
        on_drag_start: Callable[[], None] | None = None,
        settings: DragSettings | None = None,
    ) -> None:
        self._index = index
        self._editor = editor
        self._feedback = feedback
        self._scheduler = scheduler
        self._on_refresh = on_refresh
        self._on_drag_start = on_drag_start
        self._settings = settings or DragSettings()
        self._phase = DragPhase.IDLE
        self._session: DragSession | None = None
        self._pending: _PendingTouch | None = None

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    # Pointer input

    def pointer_down(self, block: Block, client_y: float) -> bool:
        if self._phase is not DragPhase.IDLE:
            return False
        self._phase = DragPhase.ARMED
        return self._start(block, client_y, InputModality.POINTER)

    def pointer_move(self, client_y: float) -> None:
        if self._phase is DragPhase.DRAGGING:
            self._update_target(client_y)

    def pointer_up(self) -> DropOutcome:
        return self._release()

    # Touch input

    def touch_start(self, block: Block, client_x: float, client_y: float) -> None:
        if self._phase is not DragPhase.IDLE:
            return
        self._phase = DragPhase.ARMED
        self._pending = _PendingTouch(block, client_x, client_y, client_y)
        self._feedback.set_handle_pressed(block, True)
        self._pending.timer = self._scheduler.schedule(
            self._settings.long_press_ms, self._on_long_press
        )

    def touch_move(self, client_x: float, client_y: float) -> None:
        if self._phase is DragPhase.DRAGGING:
            self._update_target(client_y)
            return
        pending = self._pending
        if self._phase is not DragPhase.ARMED or pending is None:
            return
        distance = math.hypot(client_x - pending.origin_x, client_y - pending.origin_y)
        if distance > self._settings.touch_slop_px:
            logging.debug("Long press aborted; moved %.1fpx", distance)
            self._teardown()
            return
        pending.last_y = client_y

    def touch_end(self) -> DropOutcome:
        return self._release()

    def touch_cancel(self) -> None:
        self.cancel("touch cancelled")

    # Shared

    def cancel(self, reason: str = "cancelled") -> DropOutcome:
        active = self._phase is not DragPhase.IDLE
        self._teardown()
        if active:
            logging.debug("Drag cancelled: %s", reason)
            self._on_refresh()
        return DropOutcome.CANCELLED

    def compute_target_line(self, client_y: float) -> DropTarget:
        """Line the dragged block would be inserted before at client_y.

        Rendered lines are ordered by vertical position, so the first line
        whose midpoint lies below client_y is found by bisection.
        """
        attached = [
            (position, element.rect())
            for position, element in enumerate(self._index.live_elements())
            if element.is_attached()
        ]
        if not attached:
            return DropTarget(0)
        midpoints = [rect.mid_y for _, rect in attached]
        found = bisect.bisect_right(midpoints, client_y)
        if found < len(attached):
            position, rect = attached[found]
            return DropTarget(position, rect.top, rect.left, rect.width)
        position, rect = attached[-1]
        return DropTarget(position + 1, rect.bottom, rect.left, rect.width)

    def _on_long_press(self) -> None:
        pending = self._pending
        if pending is None or self._phase is not DragPhase.ARMED:
            return
        pending.timer = None
        self._pending = None
        self._feedback.set_handle_pressed(pending.block, False)
        self._start(pending.block, pending.last_y, InputModality.TOUCH)

    def _start(self, block: Block, client_y: float, modality: InputModality) -> bool:
        try:
            self._require_document()
            elements = self._index.elements_for(block)
            if not elements:
                raise StaleElementError("block has no rendered lines", line=block.start_line)
            first, last = elements[0], elements[-1]
            if not first.is_attached() or not last.is_attached():
                raise StaleElementError("block lines detached", line=block.start_line)
            start_line = first.line_number()
            end_line = last.line_number()
            resolved = replace(block, start_line=start_line, end_line=end_line)
        except NoActiveEditorError:
            logging.debug("Drag ignored; no active editor")
            self._teardown()
            return False
        except (BlockDragError, ValueError) as exc:
            logging.debug("Drag start aborted: %s", exc)
            self._teardown()
            self._on_refresh()
            return False

        effective = extend_range(resolved, self._current_selection())
        marked: Sequence[LineElement] = elements
        if (effective.start_line, effective.end_line) != (start_line, end_line):
            marked = self._index.elements_in(effective.start_line, effective.end_line)

        self._session = DragSession(
            source_start_line=effective.start_line,
            source_end_line=effective.end_line,
            pointer_origin_y=client_y,
            input_modality=modality,
            block=resolved,
            elements=list(marked),
        )
        self._phase = DragPhase.DRAGGING
        logging.debug(
            "Drag started: lines %s-%s (%s)",
            effective.start_line,
            effective.end_line,
            modality.value,
        )
        if self._on_drag_start is not None:
            self._on_drag_start()
        self._feedback.mark_dragging([el for el in marked if el.is_attached()])
        self._feedback.set_drag_active(True)
        self._update_target(client_y)
        return self._session is not None

    def _update_target(self, client_y: float) -> None:
        session = self._session
        if session is None:
            return
        try:
            if not all(element.is_attached() for element in session.elements):
                raise StaleElementError(
                    "dragged lines detached", line=session.source_start_line
                )
            target = self.compute_target_line(client_y)
        except BlockDragError as exc:
            self.cancel(str(exc))
            return
        session.current_target_line = target.line
        if target.indicator_y is None:
            self._feedback.hide_indicator()
        else:
            self._feedback.show_indicator(target.indicator_y, target.left, target.width)

    def _release(self) -> DropOutcome:
        if self._phase is DragPhase.DRAGGING:
            return self._commit()
        if self._phase is DragPhase.ARMED:
            logging.debug("Released before drag started")
        self._teardown()
        return DropOutcome.CANCELLED

    def _commit(self) -> DropOutcome:
        session = self._session
        self._teardown()
        if session is None:
            return DropOutcome.CANCELLED
        try:
            return self._apply(session)
        finally:
            self._on_refresh()

    def _apply(self, session: DragSession) -> DropOutcome:
        start, end = session.source_start_line, session.source_end_line
        target = session.current_target_line
        if target is None or not is_legal_target(start, end, target):
            logging.debug("Drop ignored; target %s inside %s-%s", target, start, end)
            return DropOutcome.ILLEGAL_TARGET
        if not all(element.is_attached() for element in session.elements):
            logging.debug("Drop ignored; dragged lines detached")
            return DropOutcome.CANCELLED
        try:
            document = self._require_document()
        except NoActiveEditorError:
            logging.debug("Drop ignored; no active editor")
            return DropOutcome.CANCELLED
        try:
            text = document.read_all_text()
            new_text, caret_line = move_text(text, start, end, target)
            document.replace_all_text(new_text, caret_line)
        except MutationApplyError as error:
            logging.error("%s:\n%s", error, traceback.format_exc())
            return DropOutcome.FAILED
        except Exception:
            error = MutationApplyError(
                f"moving lines {start}-{end} to {target} failed", line=start
            )
            logging.error("%s:\n%s", error, traceback.format_exc())
            return DropOutcome.FAILED
        logging.debug("Moved lines %s-%s before %s; caret %s", start, end, target, caret_line)
        return DropOutcome.MOVED

    def _teardown(self) -> None:
        pending = self._pending
        self._pending = None
        if pending is not None:
            if pending.timer is not None:
                self._scheduler.cancel(pending.timer)
            self._feedback.set_handle_pressed(pending.block, False)
        had_session = self._session is not None
        self._session = None
        self._phase = DragPhase.IDLE
        if had_session:
            self._feedback.clear_dragging()
            self._feedback.hide_indicator()
            self._feedback.set_drag_active(False)

    def _require_document(self) -> DocumentAccess:
        document = self._editor.document() if self._editor is not None else None
        if document is None:
            raise NoActiveEditorError("no active editor")
        return document

    def _current_selection(self) -> LineRange | None:
        provider = self._editor.selection_provider()
        if provider is None:
            return None
        selected = provider.selection()
        if selected is None:
            return None
        anchor, head = selected
        return selection_line_range(anchor, head)

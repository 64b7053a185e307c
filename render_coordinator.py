"""Debounced re-render requests that wait out an open drag."""

from __future__ import annotations

import logging
from typing import Any, Callable

from host_ports import Scheduler


DEFAULT_DEBOUNCE_MS = 100


class RenderCoordinator:
    def __init__(
        self,
        scheduler: Scheduler,
        is_dragging: Callable[[], bool],
        render: Callable[[], None],
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self._scheduler = scheduler
        self._is_dragging = is_dragging
        self._render = render
        self._debounce_ms = debounce_ms
        self._timer: Any = None
        self._owed = False

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def owed(self) -> bool:
        return self._owed

    def invalidate(self) -> None:
        """Layout changed; re-render once things settle."""
        if self._is_dragging():
            self._owed = True
            return
        self._cancel_timer()
        self._timer = self._scheduler.schedule(self._debounce_ms, self._on_timer)

    def force(self) -> None:
        self._cancel_timer()
        if self._is_dragging():
            self._owed = True
            return
        self._run()

    def flush_owed(self) -> None:
        """Perform a render deferred by a drag session, if one is owed."""
        if not self._owed or self._is_dragging():
            return
        self._cancel_timer()
        self._run()

    def cancel(self) -> None:
        self._cancel_timer()
        self._owed = False

    def _on_timer(self) -> None:
        self._timer = None
        if self._is_dragging():
            self._owed = True
            return
        self._run()

    def _run(self) -> None:
        self._owed = False
        logging.debug("Re-render")
        self._render()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
            self._timer = None

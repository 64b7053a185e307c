"""Error hierarchy for block drag operations.

- BlockDragError: base for everything raised by host adapters
- StaleElementError: a line element is no longer attached to the view
- UnresolvablePositionError: an element cannot be mapped to a document line
- NoActiveEditorError: no editor/document is available for the interaction
- MutationApplyError: the atomic document replace failed; raised by the
  document adapter, or built by DragController around any other failure

All of these are recovered inside DragController; none reach the user.
"""

from __future__ import annotations


class BlockDragError(Exception):
    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"


class StaleElementError(BlockDragError):
    pass


class UnresolvablePositionError(BlockDragError):
    pass


class NoActiveEditorError(BlockDragError):
    pass


class MutationApplyError(BlockDragError):
    pass

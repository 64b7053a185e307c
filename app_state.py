"""Application state container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from config import DragSettings


@dataclass
class AppState:
    settings: DragSettings
    ui_mode: str = "dark"
    document_path: Path | None = None
    saved_text: str = ""
    close_warned: bool = False

    def is_dirty(self, text: str) -> bool:
        return text != self.saved_text

    def mark_saved(self, text: str) -> None:
        self.saved_text = text
        self.close_warned = False

    def allow_close(self, text: str) -> bool:
        """Unsaved text blocks the first close request only."""
        if not self.is_dirty(text) or self.close_warned:
            return True
        self.close_warned = True
        return False

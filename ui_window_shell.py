"""GTK window shell layout and status bar."""
from __future__ import annotations

import gi

gi.require_version("Gtk", "4.0")
from gi.repository import GLib, Gtk  # type: ignore

from config import DragSettings
from ui_editor_view import EditorView


STATUS_CLEAR_MS = 2500


class WindowShell:
    """Wraps window layout and the status line."""

    def __init__(
        self, window: Gtk.ApplicationWindow, settings: DragSettings, ui_mode: str
    ) -> None:
        self._window = window
        self._root = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=0)
        self._status_timer_id: int | None = None

        self._editor_view = EditorView(settings, ui_mode)
        self._editor_view.set_status_callback(self.flash_status)
        self._status_label = Gtk.Label(label="")
        self._status_label.set_xalign(0.0)
        self._status_label.set_margin_start(8)
        self._status_label.set_margin_end(8)

        self._root.append(self._editor_view.widget)
        self._root.append(self._status_label)

        window.set_child(self._root)

    @property
    def editor_view(self) -> EditorView:
        return self._editor_view

    def flash_status(self, text: str) -> None:
        if self._status_timer_id is not None:
            GLib.source_remove(self._status_timer_id)
        self._status_label.set_text(text)
        self._status_timer_id = GLib.timeout_add(STATUS_CLEAR_MS, self._clear_status)

    def _clear_status(self) -> bool:
        self._status_timer_id = None
        self._status_label.set_text("")
        return False

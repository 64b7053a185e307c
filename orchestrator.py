"""Application orchestration and GTK setup."""

from __future__ import annotations

import argparse
import logging
import subprocess
import sys
import traceback
from pathlib import Path
from typing import Sequence

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
gi.require_version("Gio", "2.0")
from gi.repository import Gdk, Gio, Gtk  # type: ignore[import-not-found, attr-defined]

import config
import document_io
from _version import __version__
from app_state import AppState
from ui_window_shell import WindowShell


APP_ID = "com.blockdnd.editor"

SAMPLE_DOCUMENT = """# Block drag and drop

Hover a line and grab the handle on the left to move it.
On a touchscreen, press and hold the handle.

- Each list item drags on its own
- Select several lines first to drag them together

> [!note] Callouts
> travel with their body lines

```python
print("fenced code moves as one block")
```

| column | value |
| ------ | ----- |
| tables | stay whole |

---
"""


class BlockApp(Gtk.Application):
    def __init__(self, orchestrator: "Orchestrator") -> None:
        super().__init__(
            application_id=APP_ID,
            flags=Gio.ApplicationFlags.NON_UNIQUE,
        )
        self._orchestrator = orchestrator

    def do_activate(self) -> None:
        logging.info("GTK activate")
        window = Gtk.ApplicationWindow(application=self)
        try:
            self._orchestrator.configure_window(window)
        except Exception:
            logging.error("Configure window failed:\n%s", traceback.format_exc())
            raise


class Orchestrator:
    def __init__(self) -> None:
        self._state = AppState(settings=config.load_settings())
        self._shell: WindowShell | None = None
        self._window: Gtk.ApplicationWindow | None = None
        self._initial_text = ""

    def run(self, argv: Sequence[str] | None = None) -> int:
        logging.info("Orchestrator run")
        args = list(sys.argv[1:] if argv is None else argv)
        options, gtk_args, _parser = parse_args(args)
        if options.version:
            print(_get_version())
            return 0

        self._state.ui_mode = config.get_ui_mode() or "dark"
        if options.file:
            path = Path(options.file).expanduser()
            if not path.exists():
                path = document_io.coerce_markdown_path(path)
            self._state.document_path = path
            try:
                self._initial_text = document_io.load(path)
            except (OSError, UnicodeDecodeError) as exc:
                print(f"Cannot open {path}: {exc}", file=sys.stderr)
                return 1
        elif options.demo:
            self._initial_text = SAMPLE_DOCUMENT
        self._state.mark_saved(self._initial_text)

        app = BlockApp(self)
        logging.info("GTK app run; gtk_args=%s", gtk_args)
        rc = app.run([sys.argv[0], *gtk_args])
        logging.info("GTK app exit: %s", rc)
        return rc

    def configure_window(self, window: Gtk.ApplicationWindow) -> None:
        logging.info("Configure window")
        settings = Gtk.Settings.get_default()
        if settings is not None:
            settings.set_property(
                "gtk-application-prefer-dark-theme", self._state.ui_mode == "dark"
            )
        window.set_default_size(960, 720)
        self._window = window

        shell = WindowShell(window, self._state.settings, self._state.ui_mode)
        shell.editor_view.set_text(self._initial_text)
        self._shell = shell
        self._update_title()

        controller = Gtk.EventControllerKey()
        controller.set_propagation_phase(Gtk.PropagationPhase.CAPTURE)
        controller.connect("key-pressed", self.on_key_pressed)
        window.add_controller(controller)

        window.connect("close-request", self._on_close_request)
        window.present()
        shell.editor_view.grab_focus()
        logging.info("Window presented")

    def on_key_pressed(self, _controller, keyval, _keycode, state) -> bool:
        if not state & Gdk.ModifierType.CONTROL_MASK:
            return False
        if keyval in (Gdk.KEY_s, Gdk.KEY_S):
            self._save_document()
            return True
        if keyval in (Gdk.KEY_q, Gdk.KEY_Q):
            if self._window is not None:
                self._window.close()
            return True
        if keyval in (Gdk.KEY_h, Gdk.KEY_H):
            self._toggle_hover_handles()
            return True
        return False

    def _toggle_hover_handles(self) -> None:
        if self._shell is None:
            return
        enabled = config.toggle_show_handle_on_hover()
        self._shell.editor_view.set_show_handle_on_hover(enabled)
        self._shell.flash_status(f"Hover handles {'on' if enabled else 'off'}")

    def _save_document(self) -> bool:
        if self._shell is None:
            return False
        path = self._state.document_path
        if path is None:
            self._shell.flash_status("No file to save; open one with blockdnd FILE")
            return False
        text = self._shell.editor_view.get_text()
        try:
            document_io.save(path, text)
        except OSError as exc:
            logging.error("Save failed: %s", exc)
            self._shell.flash_status(f"Save failed: {exc}")
            return False
        self._state.mark_saved(text)
        self._shell.flash_status(f"Saved {path.name}")
        logging.info("Saved %s", path)
        return True

    def _update_title(self) -> None:
        if self._window is None:
            return
        path = self._state.document_path
        self._window.set_title(f"{path.name} - Block DnD" if path else "Block DnD")

    def _on_close_request(self, _window: Gtk.ApplicationWindow) -> bool:
        if self._shell is None:
            return False
        if not self._state.allow_close(self._shell.editor_view.get_text()):
            self._shell.flash_status("Unsaved changes; Ctrl+S to save, close again to discard")
            return True
        self._shell.editor_view.close()
        return False


def parse_args(
    argv: Sequence[str],
) -> tuple[argparse.Namespace, list[str], argparse.ArgumentParser]:
    parser = argparse.ArgumentParser(
        description="Markdown editor with Notion-style block drag and drop"
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")
    parser.add_argument(
        "-q",
        action="store_true",
        dest="demo",
        help="Open sample content when no file is given",
    )
    parser.add_argument("file", nargs="?", help="Markdown document to open")
    if hasattr(parser, "parse_known_intermixed_args"):
        args, gtk_args = parser.parse_known_intermixed_args(argv)
    else:
        args, gtk_args = parser.parse_known_args(argv)
    return args, gtk_args, parser


def _get_version() -> str:
    if __version__ and __version__ != "0.0.0":
        return __version__
    try:
        result = subprocess.run(
            ["git", "describe", "--tags", "--always"],
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except FileNotFoundError:
        return __version__
    if result.returncode == 0:
        return result.stdout.strip() or __version__
    return __version__

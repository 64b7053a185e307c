"""GTK editor view with block drag handles."""
from __future__ import annotations

import math
from typing import Any, Callable, Sequence

import gi

gi.require_version("Gdk", "4.0")
gi.require_version("Gtk", "4.0")
from gi.repository import Gdk, GLib, Gtk  # type: ignore

from block_index import BlockIndex
from block_model import Block, InputModality, Line
from config import DragSettings
from design_constants import colors_for, handle_for
from drag_controller import DragController, DropOutcome
from errors import MutationApplyError, StaleElementError, UnresolvablePositionError
from handle_layout import indicator_bar, place_handles
from handle_visibility import HandleVisibility
from host_ports import LineElement, Rect
from line_signals import scan_lines
from render_coordinator import RenderCoordinator
from selection_range import CursorPosition


TEXT_LEFT_MARGIN = 48
DRAGGING_TAG = "block-dnd-dragging"
SELECTED_TAG = "block-dnd-selected"


class GLibScheduler:
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        def _fire() -> bool:
            callback()
            return False

        return GLib.timeout_add(delay_ms, _fire)

    def cancel(self, handle: Any) -> None:
        GLib.source_remove(handle)


class TextViewLineElement:
    """A buffer line, valid until the buffer changes."""

    def __init__(self, view: "EditorView", line: int, generation: int, text: str) -> None:
        self._view = view
        self._line = line
        self._generation = generation
        self._text = text

    def is_attached(self) -> bool:
        return self._view.generation == self._generation and not self._view.closed

    def line_number(self) -> int:
        if not self.is_attached():
            raise StaleElementError("line element is stale", line=self._line)
        self._view.iter_at_line(self._line)
        return self._line

    def rect(self) -> Rect:
        if not self.is_attached():
            raise StaleElementError("line element is stale", line=self._line)
        return self._view.line_rect(self._line)

    def text(self) -> str:
        return self._text


class TextViewDocument:
    def __init__(self, buffer: Gtk.TextBuffer, place_caret: Callable[[int], None]) -> None:
        self._buffer = buffer
        self._place_caret = place_caret

    def read_all_text(self) -> str:
        start, end = self._buffer.get_bounds()
        return self._buffer.get_text(start, end, True)

    def replace_all_text(self, text: str, caret_line: int) -> None:
        # One user action is one undo step.
        self._buffer.begin_user_action()
        try:
            start, end = self._buffer.get_bounds()
            self._buffer.delete(start, end)
            self._buffer.insert(self._buffer.get_start_iter(), text)
        except GLib.Error as exc:
            raise MutationApplyError(f"buffer replace failed: {exc}", line=caret_line) from exc
        finally:
            self._buffer.end_user_action()
        self._place_caret(caret_line)


class TextViewSelection:
    def __init__(self, buffer: Gtk.TextBuffer) -> None:
        self._buffer = buffer

    def selection(self) -> tuple[CursorPosition, CursorPosition] | None:
        anchor = self._buffer.get_iter_at_mark(self._buffer.get_selection_bound())
        head = self._buffer.get_iter_at_mark(self._buffer.get_insert())
        if anchor.equal(head):
            return None
        return _cursor(anchor), _cursor(head)


class EditorView:
    """Gtk.TextView with Notion-style handles for dragging blocks of lines.

    Implements the geometry, document, selection, feedback and handle
    contracts the drag core is written against.
    """

    def __init__(self, settings: DragSettings, ui_mode: str = "dark") -> None:
        self._settings = settings
        self._ui_mode = ui_mode
        self._palette = colors_for(ui_mode)
        self._generation = 0
        self._closed = False
        self._elements: tuple[TextViewLineElement, ...] | None = None
        self._handles: dict[int, Gtk.Widget] = {}
        self._modality = InputModality.POINTER
        self._hovered: int | None = None
        self._indicator: tuple[float, float, float] | None = None
        self._drag_origin: tuple[float, float] | None = None
        self._on_status: Callable[[str], None] | None = None

        scroller = Gtk.ScrolledWindow()
        scroller.set_hexpand(True)
        scroller.set_vexpand(True)
        self._scroller = scroller

        text_view = Gtk.TextView()
        text_view.set_wrap_mode(Gtk.WrapMode.WORD_CHAR)
        text_view.set_left_margin(TEXT_LEFT_MARGIN)
        text_view.set_right_margin(24)
        text_view.set_top_margin(16)
        self._text_view = text_view
        scroller.set_child(text_view)

        buffer = text_view.get_buffer()
        self._buffer = buffer
        buffer.set_enable_undo(True)
        buffer.create_tag(DRAGGING_TAG, paragraph_background=_css_rgba(self._palette.dragging_rgba))
        buffer.create_tag(SELECTED_TAG, paragraph_background=_css_rgba(self._palette.selected_rgba))

        overlay = Gtk.Overlay()
        overlay.set_hexpand(True)
        overlay.set_vexpand(True)
        overlay.set_child(scroller)
        self._overlay = overlay

        indicator_layer = Gtk.DrawingArea()
        indicator_layer.set_hexpand(True)
        indicator_layer.set_vexpand(True)
        indicator_layer.set_can_target(False)
        indicator_layer.set_draw_func(self._draw_indicator)
        indicator_layer.connect("resize", lambda *_args: self._coordinator.invalidate())
        overlay.add_overlay(indicator_layer)
        self._indicator_layer = indicator_layer

        scheduler = GLibScheduler()
        self._document = TextViewDocument(buffer, self._place_caret)
        self._selection = TextViewSelection(buffer)
        self._index = BlockIndex(self, lambda: self._controller.is_dragging)
        self._coordinator = RenderCoordinator(
            scheduler,
            lambda: self._controller.is_dragging,
            self._render_handles,
            debounce_ms=settings.render_debounce_ms,
        )
        self._visibility = HandleVisibility(
            self,
            scheduler,
            lambda: self._controller.is_dragging,
            show_on_hover=settings.show_handle_on_hover,
            hide_delay_ms=settings.hover_hide_ms,
        )
        self._controller = DragController(
            self._index,
            self,
            self,
            scheduler,
            on_refresh=self._coordinator.force,
            on_drag_start=self._visibility.suspend,
            settings=settings,
        )

        buffer.connect("changed", self._on_buffer_changed)
        scroller.get_vadjustment().connect(
            "value-changed", lambda *_args: self._coordinator.invalidate()
        )
        self._bind_view_controllers()
        self._apply_css()

    @property
    def widget(self) -> Gtk.Widget:
        return self._overlay

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def controller(self) -> DragController:
        return self._controller

    def set_status_callback(self, callback: Callable[[str], None]) -> None:
        self._on_status = callback

    def set_text(self, text: str) -> None:
        self._controller.cancel("document replaced")
        self._buffer.set_text(text)
        self._place_caret(0)

    def get_text(self) -> str:
        return self._document.read_all_text()

    def grab_focus(self) -> None:
        self._text_view.grab_focus()

    def set_show_handle_on_hover(self, enabled: bool) -> None:
        self._visibility.set_show_on_hover(enabled)

    def close(self) -> None:
        self._controller.cancel("view closed")
        self._coordinator.cancel()
        self._closed = True

    # EditorContext

    def document(self) -> TextViewDocument | None:
        return None if self._closed else self._document

    def selection_provider(self) -> TextViewSelection | None:
        return None if self._closed else self._selection

    # LineGeometryProvider

    def line_elements(self) -> Sequence[LineElement]:
        if self._elements is None:
            texts = self.get_text().split("\n")
            self._elements = tuple(
                TextViewLineElement(self, line, self._generation, text)
                for line, text in enumerate(texts)
            )
        return self._elements

    def signals_for(self, elements: Sequence[LineElement]) -> list[Line]:
        return scan_lines([element.text() for element in elements])

    def viewport(self) -> Rect:
        width = float(self._text_view.get_width())
        return Rect(0.0, float(self._text_view.get_height()), 0.0, width)

    def iter_at_line(self, line: int) -> Gtk.TextIter:
        found, iter_at = self._buffer.get_iter_at_line(line)
        if not found:
            raise UnresolvablePositionError("line is outside the buffer", line=line)
        return iter_at

    def line_rect(self, line: int) -> Rect:
        iter_at = self.iter_at_line(line)
        y, height = self._text_view.get_line_yrange(iter_at)
        _x, top = self._text_view.buffer_to_window_coords(Gtk.TextWindowType.WIDGET, 0, y)
        left = float(self._text_view.get_left_margin())
        width = self._text_view.get_width() - left - self._text_view.get_right_margin()
        return Rect(float(top), float(top + height), left, float(max(0, width)))

    # DragFeedback

    def mark_dragging(self, elements: Sequence[LineElement]) -> None:
        for element in elements:
            try:
                self._apply_line_tag(DRAGGING_TAG, element.line_number(), element.line_number())
            except (StaleElementError, UnresolvablePositionError):
                continue

    def clear_dragging(self) -> None:
        start, end = self._buffer.get_bounds()
        self._buffer.remove_tag_by_name(DRAGGING_TAG, start, end)

    def show_indicator(self, top: float, left: float, width: float) -> None:
        self._indicator = (top, left, width)
        self._indicator_layer.queue_draw()

    def hide_indicator(self) -> None:
        self._indicator = None
        self._indicator_layer.queue_draw()

    def set_drag_active(self, active: bool) -> None:
        if active:
            self._text_view.add_css_class("block-dnd-dragging-active")
        else:
            self._text_view.remove_css_class("block-dnd-dragging-active")
        self._text_view.set_cursor_visible(not active)

    def set_handle_pressed(self, block: Block | None, pressed: bool) -> None:
        position = self._index.position_of(block) if block is not None else None
        handle = self._handles.get(position) if position is not None else None
        if handle is None:
            return
        if pressed:
            handle.add_css_class("active")
        else:
            handle.remove_css_class("active")

    # HandleSurface

    def set_handle_visible(self, position: int, visible: bool) -> None:
        handle = self._handles.get(position)
        if handle is None:
            return
        if visible:
            handle.add_css_class("visible")
        else:
            handle.remove_css_class("visible")

    def hide_all_handles(self) -> None:
        for handle in self._handles.values():
            handle.remove_css_class("visible")

    def set_block_selected(self, block: Block, selected: bool) -> None:
        if selected:
            self._apply_line_tag(SELECTED_TAG, block.start_line, block.end_line)
            return
        start, end = self._buffer.get_bounds()
        self._buffer.remove_tag_by_name(SELECTED_TAG, start, end)

    # Rendering

    def _render_handles(self) -> None:
        if self._closed:
            return
        for handle in self._handles.values():
            self._overlay.remove_overlay(handle)
        self._handles.clear()
        self._hovered = None
        start, end = self._buffer.get_bounds()
        self._buffer.remove_tag_by_name(SELECTED_TAG, start, end)
        if not self._index.refresh():
            return
        blocks = self._index.blocks
        origin = _translate(self._text_view, self._overlay, 0.0, 0.0) or (0.0, 0.0)
        placements = place_handles(
            blocks,
            self._index.elements_for,
            self.viewport(),
            0.0,
            self._modality,
        )
        tokens = handle_for(self._modality)
        for placement in placements:
            wrapper = self._build_handle(placement.position, tokens)
            wrapper.set_margin_start(int(max(0.0, origin[0] + placement.left)))
            top = origin[1] + placement.top + (self._line_height() - tokens.wrapper) / 2
            wrapper.set_margin_top(int(max(0.0, top)))
            self._overlay.add_overlay(wrapper)
            self._handles[placement.position] = wrapper
        self._visibility.reset(blocks)

    def _build_handle(self, position: int, tokens: type) -> Gtk.Widget:
        wrapper = Gtk.Box()
        wrapper.set_halign(Gtk.Align.START)
        wrapper.set_valign(Gtk.Align.START)
        wrapper.set_size_request(tokens.wrapper, tokens.wrapper)
        wrapper.add_css_class("block-dnd-handle")
        icon = Gtk.Image.new_from_icon_name("list-drag-handle-symbolic")
        icon.set_pixel_size(tokens.icon)
        icon.set_hexpand(True)
        wrapper.append(icon)

        drag = Gtk.GestureDrag()
        drag.connect("drag-begin", self._on_handle_drag_begin, position)
        drag.connect("drag-update", self._on_handle_drag_update)
        drag.connect("drag-end", self._on_handle_drag_end)
        drag.connect("cancel", self._on_handle_cancel)
        wrapper.add_controller(drag)

        hover = Gtk.EventControllerMotion()
        hover.connect("enter", lambda *_args: self._visibility.pointer_enter(position))
        hover.connect("leave", lambda *_args: self._visibility.pointer_leave(position))
        wrapper.add_controller(hover)
        return wrapper

    def _draw_indicator(self, area: Gtk.DrawingArea, ctx, _width: int, _height: int) -> None:
        if self._indicator is None:
            return
        top, left, width = self._indicator
        translated = _translate(self._text_view, area, left, top)
        if translated is None:
            return
        bar = indicator_bar(translated[0], translated[1], width)
        ctx.set_source_rgba(*self._palette.indicator_rgba)
        right, bottom, radius = bar.x + bar.width, bar.y + bar.height, bar.radius
        ctx.new_sub_path()
        ctx.arc(right - radius, bar.y + radius, radius, -math.pi / 2, 0)
        ctx.arc(right - radius, bottom - radius, radius, 0, math.pi / 2)
        ctx.arc(bar.x + radius, bottom - radius, radius, math.pi / 2, math.pi)
        ctx.arc(bar.x + radius, bar.y + radius, radius, math.pi, 3 * math.pi / 2)
        ctx.close_path()
        ctx.fill()

    # Input

    def _bind_view_controllers(self) -> None:
        motion = Gtk.EventControllerMotion()
        motion.connect("motion", self._on_view_motion)
        motion.connect("leave", self._on_view_leave)
        self._text_view.add_controller(motion)

        tap = Gtk.GestureClick()
        tap.set_touch_only(True)
        tap.connect("pressed", self._on_view_tap)
        self._text_view.add_controller(tap)

        keys = Gtk.EventControllerKey()
        keys.connect("key-pressed", self._on_key_pressed)
        self._text_view.add_controller(keys)

    def _on_handle_drag_begin(
        self, gesture: Gtk.GestureDrag, x: float, y: float, position: int
    ) -> None:
        block = self._index.block_at(position)
        handle = self._handles.get(position)
        point = _translate(handle, self._text_view, x, y) if handle is not None else None
        if block is None or point is None:
            gesture.set_state(Gtk.EventSequenceState.DENIED)
            self._coordinator.force()
            return
        gesture.set_state(Gtk.EventSequenceState.CLAIMED)
        self._drag_origin = point
        if _is_touch(gesture):
            self._modality = InputModality.TOUCH
            self._controller.touch_start(block, point[0], point[1])
        else:
            self._modality = InputModality.POINTER
            self._controller.pointer_down(block, point[1])

    def _on_handle_drag_update(self, gesture: Gtk.GestureDrag, dx: float, dy: float) -> None:
        if self._drag_origin is None:
            return
        x, y = self._drag_origin[0] + dx, self._drag_origin[1] + dy
        if _is_touch(gesture):
            self._controller.touch_move(x, y)
        else:
            self._controller.pointer_move(y)

    def _on_handle_drag_end(self, gesture: Gtk.GestureDrag, _dx: float, _dy: float) -> None:
        self._drag_origin = None
        if _is_touch(gesture):
            outcome = self._controller.touch_end()
        else:
            outcome = self._controller.pointer_up()
        self._report(outcome)
        self._coordinator.flush_owed()

    def _on_handle_cancel(self, _gesture: Gtk.Gesture, _sequence) -> None:
        self._drag_origin = None
        self._controller.touch_cancel()
        self._coordinator.flush_owed()

    def _on_view_motion(self, controller: Gtk.EventControllerMotion, _x: float, y: float) -> None:
        if _is_touch(controller):
            return
        self._modality = InputModality.POINTER
        position = self._block_position_at(y)
        if position == self._hovered:
            return
        if self._hovered is not None:
            self._visibility.pointer_leave(self._hovered)
        self._hovered = position
        if position is not None:
            self._visibility.pointer_enter(position)

    def _on_view_leave(self, _controller: Gtk.EventControllerMotion) -> None:
        if self._hovered is not None:
            self._visibility.pointer_leave(self._hovered)
            self._hovered = None

    def _on_view_tap(self, _gesture: Gtk.GestureClick, _n_press: int, _x: float, y: float) -> None:
        if self._modality is not InputModality.TOUCH:
            self._modality = InputModality.TOUCH
            self._coordinator.force()
        position = self._block_position_at(y)
        block = self._index.block_at(position) if position is not None else None
        self._visibility.tap(position, block)

    def _on_key_pressed(self, _controller, keyval: int, _keycode: int, _state) -> bool:
        if keyval == Gdk.KEY_Escape and self._controller.is_dragging:
            self._controller.cancel("escape")
            self._coordinator.flush_owed()
            return True
        return False

    def _on_buffer_changed(self, _buffer: Gtk.TextBuffer) -> None:
        self._generation += 1
        self._elements = None
        self._index.invalidate()
        self._coordinator.invalidate()

    def _block_position_at(self, y: float) -> int | None:
        _bx, by = self._text_view.window_to_buffer_coords(Gtk.TextWindowType.WIDGET, 0, int(y))
        iter_at, _top = self._text_view.get_line_at_y(by)
        block = self._index.block_containing(iter_at.get_line())
        if block is None or block.is_empty:
            return None
        return self._index.position_of(block)

    def _report(self, outcome: DropOutcome) -> None:
        if self._on_status is None:
            return
        if outcome is DropOutcome.MOVED:
            self._on_status("Block moved")
        elif outcome is DropOutcome.FAILED:
            self._on_status("Block move failed")

    # Helpers

    def _place_caret(self, line: int) -> None:
        found, iter_at = self._buffer.get_iter_at_line(line)
        if not found:
            iter_at = self._buffer.get_end_iter()
        self._buffer.place_cursor(iter_at)

    def _apply_line_tag(self, tag: str, start_line: int, end_line: int) -> None:
        start = self.iter_at_line(start_line)
        found, end = self._buffer.get_iter_at_line(end_line)
        if not found:
            end = self._buffer.get_end_iter()
        elif not end.ends_line():
            end.forward_to_line_end()
        self._buffer.apply_tag_by_name(tag, start, end)

    def _line_height(self) -> float:
        found, iter_at = self._buffer.get_iter_at_line(0)
        if not found:
            return 0.0
        _y, height = self._text_view.get_line_yrange(iter_at)
        return float(height)

    def _apply_css(self) -> None:
        tokens = handle_for(self._modality)
        palette = self._palette
        css = f"""
        .block-dnd-handle {{
            border-radius: 6px;
            background: {palette.handle_background};
            border: 1px solid {palette.handle_border};
            color: {palette.handle_icon};
            min-width: {tokens.size}px;
            min-height: {tokens.size}px;
            opacity: 0;
            transition: opacity 150ms ease;
        }}
        .block-dnd-handle.visible {{ opacity: 1; }}
        .block-dnd-handle.active {{ background: {palette.handle_active}; opacity: 1; }}
        """
        provider = Gtk.CssProvider()
        provider.load_from_data(css.encode("utf-8"))
        display = Gdk.Display.get_default()
        if display:
            Gtk.StyleContext.add_provider_for_display(
                display,
                provider,
                Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION,
            )


def _cursor(iter_at: Gtk.TextIter) -> CursorPosition:
    return CursorPosition(iter_at.get_line(), iter_at.get_line_offset())


def _is_touch(controller: Gtk.EventController) -> bool:
    device = controller.get_current_event_device()
    return device is not None and device.get_source() == Gdk.InputSource.TOUCHSCREEN


def _translate(
    source: Gtk.Widget, dest: Gtk.Widget, x: float, y: float
) -> tuple[float, float] | None:
    translated = source.translate_coordinates(dest, x, y)
    if not translated:
        return None
    if len(translated) == 3:
        ok, tx, ty = translated
        return (float(tx), float(ty)) if ok else None
    tx, ty = translated
    return float(tx), float(ty)


def _css_rgba(rgba: tuple[float, float, float, float]) -> str:
    red, green, blue, alpha = rgba
    return f"rgba({int(red * 255)}, {int(green * 255)}, {int(blue * 255)}, {alpha})"

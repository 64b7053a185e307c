"""Design tokens for drag handles, the drop indicator and colors."""

from __future__ import annotations

from block_model import InputModality


class handle:
    """Handle geometry per input modality, in pixels."""

    class pointer:
        size = 20
        wrapper = 28
        icon = 14
        # Distance from the line's left edge to the handle.
        offset = 30
        fixed_left: float | None = None

    class touch:
        size = 28
        wrapper = 32
        icon = 16
        offset = 0
        # Touch handles sit in the gutter regardless of indentation.
        fixed_left: float | None = -4


class indicator:
    thickness = 3
    radius = 2


class colors:
    """Theme-aware drag colors."""

    class dark:
        handle_background = "rgba(38, 38, 38, 0.95)"
        handle_border = "rgba(255, 255, 255, 0.10)"
        handle_icon = "#9a9a9a"
        handle_active = "#7f6df2"
        indicator_rgba = (0.50, 0.43, 0.95, 1.0)
        dragging_rgba = (0.30, 0.30, 0.30, 0.30)
        selected_rgba = (1.0, 1.0, 1.0, 0.06)

    class light:
        handle_background = "rgba(245, 245, 245, 0.95)"
        handle_border = "rgba(0, 0, 0, 0.10)"
        handle_icon = "#6a6a6a"
        handle_active = "#705dcf"
        indicator_rgba = (0.44, 0.36, 0.81, 1.0)
        dragging_rgba = (0.80, 0.80, 0.80, 0.30)
        selected_rgba = (0.0, 0.0, 0.0, 0.05)


def colors_for(mode: str) -> type:
    return colors.dark if mode == "dark" else colors.light


def handle_for(modality: InputModality) -> type:
    return handle.touch if modality is InputModality.TOUCH else handle.pointer

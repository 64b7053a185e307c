"""Where drag handles go for the current blocks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from block_model import Block, InputModality
from design_constants import handle_for, indicator
from host_ports import LineElement, Rect


@dataclass(frozen=True)
class HandlePlacement:
    position: int
    block: Block
    top: float
    left: float


def place_handles(
    blocks: Sequence[Block],
    elements_for: Callable[[Block], Sequence[LineElement]],
    viewport: Rect,
    scroll_offset: float,
    modality: InputModality,
) -> list[HandlePlacement]:
    """Handles for non-empty blocks whose first line is attached and on screen.

    top is in scrolled-content coordinates; left is relative to the viewport.
    """
    tokens = handle_for(modality)
    placements: list[HandlePlacement] = []
    for position, block in enumerate(blocks):
        if block.is_empty:
            continue
        elements = elements_for(block)
        if not elements:
            continue
        first = elements[0]
        if not first.is_attached():
            continue
        rect = first.rect()
        if not rect.intersects_rows(viewport):
            continue
        top = rect.top - viewport.top + scroll_offset
        if tokens.fixed_left is not None:
            left = float(tokens.fixed_left)
        else:
            left = rect.left - viewport.left - tokens.offset
        placements.append(HandlePlacement(position, block, top, left))
    return placements


@dataclass(frozen=True)
class IndicatorBar:
    x: float
    y: float
    width: float
    height: float
    radius: float


def indicator_bar(x: float, y: float, width: float) -> IndicatorBar:
    """Drop indicator centred on y; corner radius clamped to the bar's size."""
    thickness = float(indicator.thickness)
    width = max(0.0, width)
    radius = min(float(indicator.radius), thickness / 2, width / 2)
    return IndicatorBar(x, y - thickness / 2, width, thickness, radius)

"""
Geometry resolution for generated layouts.

Turns a label's positioning rule plus the target canvas into a concrete
rectangle:

1. Size: the source bounds are scaled, aspect preserved, to fit within
   ``maxWidthPercent x canvasWidth`` by ``maxHeightPercent x canvasHeight``.
   Main-subject layers get an extra per-ratio shrink factor first.
2. Position: the position keyword anchors the rectangle on each axis.
3. Safezone: unless the rule opts out, the rectangle is pushed inside the
   inset border.

Background layers skip all of this and cover the whole canvas.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Tuple, Union

from relayout.models.layout import (
    BACKGROUND_LABEL,
    MAIN_SUBJECT_LABEL,
    Bounds,
    Margin,
    PositioningRule,
    Rect,
)


logger = logging.getLogger(__name__)

MAIN_SUBJECT_SCALE: Dict[str, float] = {
    "1:1": 0.85,
    "4:5": 0.9,
    "16:9": 1.0,
    "9:16": 0.8,
}

# Axis anchors: "start" hugs the top/left edge, "end" the bottom/right edge,
# "center" centers the element, and a float puts the element's center at
# that fraction of the canvas.
Anchor = Union[str, float]

POSITION_ANCHORS: Dict[str, Tuple[Anchor, Anchor]] = {
    "center": ("center", "center"),
    "middle-center": ("center", "center"),
    "top-left": ("start", "start"),
    "top-center": ("center", "start"),
    "top": ("center", "start"),
    "top-right": ("end", "start"),
    "bottom-left": ("start", "end"),
    "bottom-center": ("center", "end"),
    "bottom": ("center", "end"),
    "bottom-right": ("end", "end"),
    "left-center": ("start", "center"),
    "left": ("start", "center"),
    "right-center": ("end", "center"),
    "right": ("end", "center"),
    "middle-top-center": ("center", 0.25),
    "middle-bottom-center": ("center", 0.75),
    "middle-left-center": (0.25, "center"),
    "middle-right-center": (0.75, "center"),
}

for _percent in (10, 20, 30, 40):
    POSITION_ANCHORS[f"top-center-{_percent}"] = ("center", _percent / 100)
    POSITION_ANCHORS[f"bottom-center-{_percent}"] = ("center", (100 - _percent) / 100)
    POSITION_ANCHORS[f"left-center-{_percent}"] = (_percent / 100, "center")
    POSITION_ANCHORS[f"right-center-{_percent}"] = ((100 - _percent) / 100, "center")

POSITION_KEYWORDS = tuple(POSITION_ANCHORS)


def get_main_subject_scale(aspect_ratio: str) -> float:
    return MAIN_SUBJECT_SCALE.get(aspect_ratio, 1.0)


def scale_to_fit(bounds: Bounds | None, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Scale source bounds to fit the max box while keeping their aspect ratio.

    Width is tried first; if the resulting height overflows, height becomes
    the limiting side. Both sides are floored.
    """
    if bounds is None:
        return 0, 0

    aspect_ratio = bounds.width / bounds.height

    width = float(max_width)
    height = width / aspect_ratio
    if height > max_height:
        height = float(max_height)
        width = height * aspect_ratio

    return math.floor(width), math.floor(height)


def _resolve_axis(anchor: Anchor, size: float, canvas: float, start_margin: float, end_margin: float) -> float:
    if anchor == "start":
        return start_margin
    if anchor == "end":
        return canvas - size - end_margin
    if anchor == "center":
        return (canvas - size) / 2
    return canvas * anchor - size / 2


def resolve_position(
    position: str,
    width: float,
    height: float,
    canvas_width: float,
    canvas_height: float,
    margin: Margin | None = None,
) -> Tuple[float, float]:
    """
    Return the top-left corner for an element of the given size.

    Unknown keywords leave the element at the default centered position.
    """
    margin = margin or Margin()
    anchors = POSITION_ANCHORS.get(position)
    if anchors is None:
        logger.warning("Unknown position '%s', defaulting to center", position)
        anchors = ("center", "center")

    horizontal, vertical = anchors
    left = _resolve_axis(horizontal, width, canvas_width, margin.left, margin.right)
    top = _resolve_axis(vertical, height, canvas_height, margin.top, margin.bottom)
    return left, top


def clamp_to_safezone(
    left: float,
    top: float,
    width: float,
    height: float,
    canvas_width: float,
    canvas_height: float,
    inset: float,
) -> Tuple[float, float]:
    """
    Push a rectangle inside ``[inset, canvas - inset]`` on both axes.

    Elements larger than the safe interior stay at the inset boundary and
    overflow on the far side.
    """
    left = max(inset, min(left, canvas_width - inset - width))
    top = max(inset, min(top, canvas_height - inset - height))
    return left, top


def resolve_element_rect(
    label: str,
    rule: PositioningRule | None,
    bounds: Bounds | None,
    canvas_width: int,
    canvas_height: int,
    aspect_ratio: str,
    safezone: float = 0,
) -> Rect:
    """Compute the final rectangle for one element on the target canvas."""
    if label == BACKGROUND_LABEL:
        return Rect(x=0, y=0, width=canvas_width, height=canvas_height)

    rule = rule or PositioningRule()
    max_width_percent = rule.max_width_percent
    max_height_percent = rule.max_height_percent
    if label == MAIN_SUBJECT_LABEL:
        factor = get_main_subject_scale(aspect_ratio)
        max_width_percent *= factor
        max_height_percent *= factor

    max_width = math.floor(max_width_percent * canvas_width)
    max_height = math.floor(max_height_percent * canvas_height)
    width, height = scale_to_fit(bounds, max_width, max_height)

    left, top = resolve_position(rule.position, width, height, canvas_width, canvas_height, rule.margin)
    if rule.apply_safezone:
        left, top = clamp_to_safezone(left, top, width, height, canvas_width, canvas_height, safezone)

    return Rect(x=left, y=top, width=width, height=height)

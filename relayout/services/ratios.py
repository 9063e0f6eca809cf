"""
Aspect-ratio normalization.

Target canvases are bucketed into a small set of standard social-media ratios
so layout rules can be authored once per ratio instead of once per pixel size.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from relayout.errors import InvalidRatioError


logger = logging.getLogger(__name__)

# Order matters: ties resolve to the first entry.
STANDARD_RATIOS: List[Tuple[str, float]] = [
    ("9:16", 9 / 16),
    ("4:5", 4 / 5),
    ("1:1", 1.0),
    ("16:9", 16 / 9),
]

# Ratios closer than this share one bucket.
RATIO_EPSILON = 0.1

SQUARE = "1:1"
LANDSCAPE = "16:9"
PORTRAIT_STORY = "9:16"
PORTRAIT_POST = "4:5"


def calculate_aspect_ratio(width: float, height: float) -> str:
    """Return the standard ratio label closest to ``width / height``."""
    if width <= 0 or height <= 0:
        raise InvalidRatioError(f"Dimensions must be positive, got {width}x{height}")

    ratio = width / height
    closest_label, closest_value = STANDARD_RATIOS[0]
    min_diff = abs(ratio - closest_value)

    for label, value in STANDARD_RATIOS[1:]:
        diff = abs(ratio - value)
        if diff < min_diff:
            min_diff = diff
            closest_label = label

    return closest_label


def normalize_ratio(ratio: str) -> float:
    """Parse a ``"W:H"`` label (decimals allowed) into ``W / H``."""
    parts = str(ratio).split(":")
    if len(parts) != 2:
        raise InvalidRatioError(f"Invalid aspect ratio '{ratio}', expected 'W:H'")
    try:
        width, height = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise InvalidRatioError(f"Invalid aspect ratio '{ratio}', expected 'W:H'") from exc
    if width <= 0 or height <= 0:
        raise InvalidRatioError(f"Invalid aspect ratio '{ratio}', sides must be positive")
    return width / height


def are_ratios_equivalent(ratio1: str, ratio2: str) -> bool:
    """True when two "W:H" labels normalize to within ``RATIO_EPSILON`` of each other."""
    return abs(normalize_ratio(ratio1) - normalize_ratio(ratio2)) < RATIO_EPSILON


def get_compatible_ratios(source_ratio: str) -> List[str]:
    """All standard ratios that are not equivalent to the source ratio."""
    normalize_ratio(source_ratio)
    return [
        ratio
        for ratio in (SQUARE, LANDSCAPE, PORTRAIT_STORY, PORTRAIT_POST)
        if not are_ratios_equivalent(ratio, source_ratio)
    ]


def get_target_ratios(source_ratio: str) -> List[str]:
    """
    Suggest target ratios for a source document.

    Portrait sources get square, landscape and 4:5 targets; square-ish
    sources get the two portrait ratios and landscape; landscape sources get
    square and both portrait ratios. Anything equivalent to the source is
    dropped.
    """
    normalized = normalize_ratio(source_ratio)

    if normalized <= 0.7:
        candidates = [SQUARE, LANDSCAPE, PORTRAIT_POST]
    elif normalized < 1.3:
        candidates = [LANDSCAPE, PORTRAIT_POST, PORTRAIT_STORY]
    else:
        candidates = [SQUARE, PORTRAIT_POST, PORTRAIT_STORY]

    targets = [ratio for ratio in candidates if not are_ratios_equivalent(ratio, source_ratio)]
    logger.debug("Target ratios for %s: %s", source_ratio, targets)
    return targets

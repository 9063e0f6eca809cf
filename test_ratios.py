"""
Tests for aspect-ratio normalization and target-ratio suggestions.
"""

import logging

import pytest

from relayout.errors import InvalidRatioError
from relayout.services.ratios import (
    STANDARD_RATIOS,
    are_ratios_equivalent,
    calculate_aspect_ratio,
    get_compatible_ratios,
    get_target_ratios,
    normalize_ratio,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def test_calculate_aspect_ratio_standard_sizes():
    """Common pixel sizes land in their standard bucket."""
    assert calculate_aspect_ratio(1080, 1920) == "9:16"
    assert calculate_aspect_ratio(1200, 1200) == "1:1"
    assert calculate_aspect_ratio(1920, 1080) == "16:9"
    assert calculate_aspect_ratio(1080, 1350) == "4:5"
    logger.info("✓ Standard sizes normalized")


def test_calculate_aspect_ratio_picks_closest():
    """Non-standard sizes go to the nearest ratio by decimal distance."""
    # 1.91:1 link-preview banners are closest to 16:9.
    assert calculate_aspect_ratio(1200, 628) == "16:9"
    # 2:3 portrait (0.667) sits 0.104 from 9:16 and 0.133 from 4:5.
    assert calculate_aspect_ratio(1000, 1500) == "9:16"
    # Very wide and very tall sizes clamp to the extremes.
    assert calculate_aspect_ratio(3000, 100) == "16:9"
    assert calculate_aspect_ratio(100, 3000) == "9:16"
    logger.info("✓ Closest standard ratio selected")


def test_calculate_aspect_ratio_rejects_non_positive():
    with pytest.raises(InvalidRatioError):
        calculate_aspect_ratio(0, 100)
    with pytest.raises(InvalidRatioError):
        calculate_aspect_ratio(100, -5)


def test_ratio_equivalence_is_reflexive():
    for label, _ in STANDARD_RATIOS:
        assert are_ratios_equivalent(label, label)
    assert are_ratios_equivalent("1.91:1", "1.91:1")
    logger.info("✓ Equivalence is reflexive")


def test_ratio_equivalence_uses_coarse_epsilon():
    assert are_ratios_equivalent("16:9", "1.78:1")
    assert are_ratios_equivalent("1:1", "1.05:1")
    assert not are_ratios_equivalent("1:1", "4:5")
    assert not are_ratios_equivalent("9:16", "4:5")
    logger.info("✓ Equivalence epsilon behaves as expected")


def test_normalize_ratio_rejects_malformed_labels():
    assert normalize_ratio("16:9") == pytest.approx(16 / 9)
    for bad in ("16x9", "abc", "1:0", "1:2:3", ""):
        with pytest.raises(InvalidRatioError):
            normalize_ratio(bad)


def test_target_ratios_by_source_orientation():
    assert get_target_ratios("9:16") == ["1:1", "16:9", "4:5"]
    assert get_target_ratios("1:1") == ["16:9", "4:5", "9:16"]
    assert get_target_ratios("16:9") == ["1:1", "4:5", "9:16"]
    # A 4:5 source is square-ish, so 4:5 itself is dropped.
    assert get_target_ratios("4:5") == ["16:9", "9:16"]
    logger.info("✓ Target ratios depend on source orientation")


def test_compatible_ratios_exclude_equivalents():
    assert get_compatible_ratios("1:1") == ["16:9", "9:16", "4:5"]
    assert get_compatible_ratios("1.05:1") == ["16:9", "9:16", "4:5"]
    assert "16:9" not in get_compatible_ratios("1.78:1")

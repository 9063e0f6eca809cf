"""Shared fixtures for the layout engine tests."""

from __future__ import annotations

import pytest

from relayout.models.layout import Bounds, Layer, LayoutOption, LayoutSize, PositioningRule


class FirstChoice:
    """Random source stub that always picks the first candidate."""

    def choice(self, seq):
        return seq[0]


class LastChoice:
    """Random source stub that always picks the last candidate."""

    def choice(self, seq):
        return seq[-1]


def layer(layer_id: str, label: str | None, width: float = 200, height: float = 100, **kwargs) -> Layer:
    return Layer(
        id=layer_id,
        name=kwargs.pop("name", layer_id),
        label=label,
        bounds=kwargs.pop("bounds", Bounds(left=0, top=0, right=width, bottom=height)),
        **kwargs,
    )


@pytest.fixture
def first_choice() -> FirstChoice:
    return FirstChoice()


@pytest.fixture
def last_choice() -> LastChoice:
    return LastChoice()


@pytest.fixture
def square_size() -> LayoutSize:
    return LayoutSize(aspect_ratio="1:1", width=1000, height=1000)


@pytest.fixture
def story_size() -> LayoutSize:
    return LayoutSize(aspect_ratio="9:16", width=1080, height=1920)


@pytest.fixture
def basic_option() -> LayoutOption:
    """Option with rules for the labels used throughout the tests."""
    return LayoutOption(
        name="test-option",
        visibility={"background": True, "logo": True, "cta": True},
        positioning={
            "background": PositioningRule(position="center", max_width_percent=1, max_height_percent=1),
            "logo": PositioningRule(position="top-left", max_width_percent=0.2, max_height_percent=0.1),
            "cta": PositioningRule(position="bottom-center-10", max_width_percent=0.3, max_height_percent=0.1),
            "main-subject": PositioningRule(position="center", max_width_percent=0.5, max_height_percent=0.5),
            "hero": PositioningRule(position="center", max_width_percent=0.5, max_height_percent=0.5),
            "x": PositioningRule(position="top-center", max_width_percent=0.5, max_height_percent=0.2),
            "y": PositioningRule(position="bottom-center", max_width_percent=0.5, max_height_percent=0.2),
        },
    )

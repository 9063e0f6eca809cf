"""
Layout generation: selection and combination over labeled layers.

Every generation works on choice dimensions:

- one dimension per ordinary label group, whose choices are "show exactly
  this eligible layer";
- one dimension per sync-set label, whose choices are "show this main layer
  together with this eligible alternative".

A dimension without eligible choices still offers one choice, "show
nothing", so it never empties the product.

Single-result generation draws one choice per dimension from an injectable
random source. Combinatorial generation enumerates the Cartesian product.
"""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterator, List

from relayout.errors import MissingSelectionError, NoSyncSetsFoundError
from relayout.models.layout import (
    BACKGROUND_LABEL,
    GeneratedLayout,
    Layer,
    LayerLink,
    LayerPersonalization,
    LayoutOption,
    LayoutSize,
    PositionedElement,
    SegmentationSelection,
    SyncSet,
    normalize_keys,
    normalize_layer_id,
    resolve_label,
)
from relayout.services.geometry import resolve_element_rect
from relayout.services.personalization import build_eligibility_check
from relayout.services.sync_sets import find_sync_sets, sync_member_ids


logger = logging.getLogger(__name__)

HIDE_ALL: FrozenSet[str] = frozenset()


@dataclass(slots=True)
class ChoiceDimension:
    """
    One independent decision in a generation.

    ``choices`` holds, per outcome, the canonical ids made visible. It is
    never empty: with nothing eligible it holds the single hide-all outcome.
    """

    label: str
    choices: List[FrozenSet[str]] = field(default_factory=list)


def count_combinations(dimensions: List[ChoiceDimension]) -> int:
    total = 1
    for dimension in dimensions:
        total *= len(dimension.choices)
    return total


def order_elements(
    elements: List[PositionedElement],
    render_order: List[str] | None,
) -> List[PositionedElement]:
    """
    Sort elements into draw order.

    Background elements always come first. With an explicit render order,
    labels follow it and unlisted labels come after, keeping source order.
    """
    backgrounds = [element for element in elements if element.label == BACKGROUND_LABEL]
    others = [element for element in elements if element.label != BACKGROUND_LABEL]

    if render_order:
        rank = {label: index for index, label in enumerate(render_order)}
        others.sort(key=lambda element: rank.get(element.label, len(rank)))

    return backgrounds + others


class LayoutGenerator:
    """
    Generates concrete layouts for one set of layers and audience selection.

    Inputs are normalized to canonical layer ids once, on construction.
    Callers build a new generator when layers, labels, personalization or
    links change.
    """

    def __init__(
        self,
        layers: List[Layer],
        labels: Dict[str, str] | None = None,
        personalization: Dict[str, LayerPersonalization] | None = None,
        selection: SegmentationSelection | None = None,
        links: List[LayerLink] | None = None,
        safezone: float = 0,
        rng: random.Random | None = None,
    ):
        self.layers = list(layers)
        self.labels: Dict[str, str] = normalize_keys(labels)
        self.safezone = safezone
        self.rng = rng or random.Random()
        self._is_eligible: Callable[[str], bool] = build_eligibility_check(
            self.layers, personalization, selection
        )
        self.sync_sets: List[SyncSet] = find_sync_sets(self.layers, self.labels, links or [])

    def label_of(self, layer: Layer) -> str | None:
        return resolve_label(layer, self.labels)

    # ------------------------------------------------------------------
    # Choice dimensions
    # ------------------------------------------------------------------

    def label_dimensions(self, option: LayoutOption | None = None) -> List[ChoiceDimension]:
        """
        One dimension per label group, excluding sync-set members and boundless layers.

        With an option, labels it hides collapse to the single hide-all choice.
        """
        excluded = sync_member_ids(self.sync_sets)
        groups: Dict[str, List[str]] = {}

        for layer in self.layers:
            layer_id = layer.canonical_id
            if layer_id in excluded or layer.bounds is None:
                continue
            label = self.label_of(layer)
            if not label:
                continue
            groups.setdefault(label, []).append(layer_id)

        dimensions: List[ChoiceDimension] = []
        for label, member_ids in groups.items():
            if option is not None and not option.is_label_visible(label):
                dimensions.append(ChoiceDimension(label=label, choices=[HIDE_ALL]))
                continue

            eligible = [layer_id for layer_id in member_ids if self._is_eligible(layer_id)]
            logger.debug(
                "Label '%s': %d layers, %d eligible",
                label,
                len(member_ids),
                len(eligible),
            )
            choices = [frozenset([layer_id]) for layer_id in eligible] or [HIDE_ALL]
            dimensions.append(ChoiceDimension(label=label, choices=choices))
        return dimensions

    def sync_dimensions(self, option: LayoutOption | None = None) -> List[ChoiceDimension]:
        """
        One dimension per sync-set label.

        Sync sets sharing a label are alternatives of each other: at most one
        of them is shown, with one of its eligible alternative groups.
        """
        grouped: Dict[str, List[SyncSet]] = {}
        for sync_set in self.sync_sets:
            grouped.setdefault(sync_set.label, []).append(sync_set)

        dimensions: List[ChoiceDimension] = []
        for label, sync_sets in grouped.items():
            if option is not None and not option.is_label_visible(label):
                dimensions.append(ChoiceDimension(label=label, choices=[HIDE_ALL]))
                continue

            choices: List[FrozenSet[str]] = []
            for sync_set in sync_sets:
                main_id = normalize_layer_id(sync_set.main_layer)
                for alternative in sync_set.synced_layers:
                    alternative_ids = [normalize_layer_id(member) for member in alternative]
                    if all(self._is_eligible(member) for member in alternative_ids):
                        choices.append(frozenset([main_id, *alternative_ids]))

            logger.debug(
                "Sync label '%s': %d sets, %d eligible alternatives",
                label,
                len(sync_sets),
                len(choices),
            )
            dimensions.append(ChoiceDimension(label=label, choices=choices or [HIDE_ALL]))
        return dimensions

    def dimensions(self, option: LayoutOption | None = None) -> List[ChoiceDimension]:
        return self.label_dimensions(option) + self.sync_dimensions(option)

    # ------------------------------------------------------------------
    # Element construction
    # ------------------------------------------------------------------

    def build_layout(
        self,
        name: str,
        size: LayoutSize,
        option: LayoutOption,
        visible_ids: FrozenSet[str],
    ) -> GeneratedLayout:
        """Position every labeled layer and mark the chosen ones visible."""
        elements: List[PositionedElement] = []

        for layer in self.layers:
            label = self.label_of(layer)
            if not label or layer.bounds is None:
                continue

            rule = option.positioning.get(label)
            if rule is None and label != BACKGROUND_LABEL:
                logger.warning("No positioning rule for label '%s' in '%s', skipping %s", label, option.name, layer.name)
                continue

            rect = resolve_element_rect(
                label,
                rule,
                layer.bounds,
                size.width,
                size.height,
                size.aspect_ratio,
                self.safezone,
            )
            logger.debug("%s (%s) -> %s", layer.name, label, rect)
            elements.append(
                PositionedElement(
                    id=layer.id,
                    name=layer.name,
                    label=label,
                    x=rect.x,
                    y=rect.y,
                    width=rect.width,
                    height=rect.height,
                    visible=layer.canonical_id in visible_ids and option.is_label_visible(label),
                    original_bounds=layer.bounds,
                    position=rule.position if rule else None,
                    parent=layer.parent,
                )
            )

        ordered = order_elements(elements, option.render_order)
        return GeneratedLayout(
            name=name,
            width=size.width,
            height=size.height,
            aspect_ratio=size.aspect_ratio,
            elements=tuple(ordered),
        )

    def _pick(self, dimensions: List[ChoiceDimension]) -> FrozenSet[str]:
        visible: set = set()
        for dimension in dimensions:
            visible.update(self.rng.choice(dimension.choices))
        return frozenset(visible)

    # ------------------------------------------------------------------
    # Public generation modes
    # ------------------------------------------------------------------

    def generate_layout(self, size: LayoutSize, option: LayoutOption) -> GeneratedLayout:
        """Generate one layout with a random eligible pick per dimension."""
        _check_target(size, option)
        visible_ids = self._pick(self.dimensions(option))
        layout = self.build_layout(option.name, size, option, visible_ids)
        logger.info(
            "Generated layout '%s' (%dx%d): %d elements, %d visible",
            option.name,
            size.width,
            size.height,
            len(layout.elements),
            len(layout.visible_elements),
        )
        return layout

    def iter_combinations(
        self,
        size: LayoutSize,
        option: LayoutOption,
        sync_only: bool = False,
    ) -> Iterator[GeneratedLayout]:
        """
        Return a lazy iterator with one layout per combination of dimension choices.

        Preconditions are checked here, before the first layout is built. In
        sync-only mode only sync dimensions are enumerated; ordinary label
        groups are drawn once and shared by every yielded layout.
        """
        _check_target(size, option)
        if sync_only:
            if not self.sync_sets:
                raise NoSyncSetsFoundError("No synchronized layer sets found")
            fixed = self._pick(self.label_dimensions(option))
            dimensions = self.sync_dimensions(option)
        else:
            fixed = frozenset()
            dimensions = self.dimensions(option)

        logger.info(
            "Enumerating %d combinations over %d dimensions for '%s'",
            count_combinations(dimensions),
            len(dimensions),
            option.name,
        )
        return self._enumerate(size, option, dimensions, fixed)

    def _enumerate(
        self,
        size: LayoutSize,
        option: LayoutOption,
        dimensions: List[ChoiceDimension],
        fixed: FrozenSet[str],
    ) -> Iterator[GeneratedLayout]:
        for index, choice in enumerate(itertools.product(*(d.choices for d in dimensions)), start=1):
            visible_ids = fixed.union(*choice)
            yield self.build_layout(f"{option.name} #{index}", size, option, visible_ids)

    def generate_all_combinations(
        self,
        size: LayoutSize,
        option: LayoutOption,
        limit: int | None = None,
    ) -> List[GeneratedLayout]:
        """Every combination across all label and sync-set dimensions."""
        return list(itertools.islice(self.iter_combinations(size, option), limit))

    def generate_all_sync_layouts(
        self,
        size: LayoutSize,
        option: LayoutOption,
        limit: int | None = None,
    ) -> List[GeneratedLayout]:
        """Every combination of sync-set choices; raises if there are no sync sets."""
        return list(itertools.islice(self.iter_combinations(size, option, sync_only=True), limit))


def _check_target(size: LayoutSize | None, option: LayoutOption | None) -> None:
    if size is None or not size.aspect_ratio:
        raise MissingSelectionError("An aspect ratio must be selected")
    if option is None or not option.name:
        raise MissingSelectionError("A layout option must be selected")

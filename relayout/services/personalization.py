from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable

from relayout.errors import MissingSelectionError
from relayout.models.layout import (
    Layer,
    LayerPersonalization,
    SegmentationSelection,
    normalize_keys,
    normalize_layer_id,
)


logger = logging.getLogger(__name__)


def is_eligible(
    layer_id: str,
    personalization_rules: Dict[str, LayerPersonalization],
    active_type: str,
    active_value: str,
) -> bool:
    """
    Decide whether a layer may be shown for the active audience segment.

    Layers without an entry, or whose entry is not personalized, are always
    eligible. A personalized layer with no rule for the active segmentation
    type is hidden rather than defaulting to visible.
    """
    canonical_id = normalize_layer_id(layer_id)
    personalization = personalization_rules.get(canonical_id)
    if personalization is None:
        personalization = personalization_rules.get(layer_id)

    if personalization is None or not personalization.is_personalized:
        return True

    relevant = [rule for rule in personalization.rules if rule.type == active_type]
    if not relevant:
        return False

    return any(rule.value == active_value for rule in relevant)


def resolve_intrinsic_visibility(layers: Iterable[Layer]) -> Dict[str, bool]:
    """
    Map canonical layer id to its effective source visibility.

    A layer counts as visible only if it and every ancestor on its
    ``parent`` chain are visible, so a hidden group hides its descendants.
    Parents missing from the layer list end the walk.
    """
    layers_by_id = {layer.canonical_id: layer for layer in layers}
    resolved: Dict[str, bool] = {}

    for layer_id, layer in layers_by_id.items():
        visible = layer.visible
        seen = {layer_id}
        current = layer
        while visible and current.parent is not None:
            parent_id = normalize_layer_id(current.parent)
            parent = layers_by_id.get(parent_id)
            if parent is None or parent_id in seen:
                break
            seen.add(parent_id)
            visible = parent.visible
            current = parent
        resolved[layer_id] = visible

    return resolved


def build_eligibility_check(
    layers: Iterable[Layer],
    personalization_rules: Dict[str, LayerPersonalization] | None,
    selection: SegmentationSelection | None,
) -> Callable[[str], bool]:
    """
    Return a predicate over canonical layer ids.

    With no personalization map the layer's source visibility, including
    its parent chain, decides; otherwise the active selection is matched
    against the layer's rules.
    """
    if personalization_rules is None:
        intrinsic = resolve_intrinsic_visibility(layers)
        return lambda layer_id: intrinsic.get(normalize_layer_id(layer_id), True)

    if selection is None or not selection.type or not selection.value:
        raise MissingSelectionError(
            "A segmentation type and value must be selected when personalization rules are supplied"
        )

    rules = normalize_keys(personalization_rules)
    logger.debug(
        "Personalization active for %s=%s (%d layer rules)",
        selection.type,
        selection.value,
        len(rules),
    )
    return lambda layer_id: is_eligible(layer_id, rules, selection.type, selection.value)

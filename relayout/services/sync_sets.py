"""
Sync-set discovery.

A layer with outgoing "sync-visibility" links becomes the main layer of a
sync set. Its link targets are partitioned by their own label and each
partition is one alternative: showing the main layer means showing exactly
one alternative alongside it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Set

from relayout.models.layout import (
    LINK_SYNC_VISIBILITY,
    UNLABELED,
    Layer,
    LayerLink,
    SyncSet,
    normalize_keys,
    normalize_layer_id,
    resolve_label,
)


logger = logging.getLogger(__name__)


def index_sync_links(links: Iterable[LayerLink]) -> Dict[str, List[str]]:
    """Map canonical source id to canonical target ids, sync-visibility links only."""
    targets_by_source: Dict[str, List[str]] = defaultdict(list)
    for link in links:
        if link.type != LINK_SYNC_VISIBILITY:
            continue
        source_id = normalize_layer_id(link.source_id)
        target_id = normalize_layer_id(link.target_id)
        if target_id not in targets_by_source[source_id]:
            targets_by_source[source_id].append(target_id)
    return dict(targets_by_source)


def find_sync_sets(
    layers: List[Layer],
    label_assignment: Dict[str, str] | None,
    links: Iterable[LayerLink],
) -> List[SyncSet]:
    """
    Reduce linked layers to sync sets, in layer order.

    Layers claimed by a sync set (main layer or target) are not considered
    again, neither as a later main layer nor as a later target.
    """
    labels = normalize_keys(label_assignment)
    targets_by_source = index_sync_links(links)
    layers_by_id = {layer.canonical_id: layer for layer in layers}

    processed: Set[str] = set()
    sync_sets: List[SyncSet] = []

    for layer in layers:
        layer_id = layer.canonical_id
        if layer_id in processed:
            continue

        label = resolve_label(layer, labels)
        if not label:
            continue

        target_ids = targets_by_source.get(layer_id)
        if not target_ids:
            continue

        alternatives: Dict[str, List[str]] = {}
        claimed: List[str] = []
        for target_id in target_ids:
            if target_id == layer_id or target_id in processed:
                continue
            target = layers_by_id.get(target_id)
            if target is None:
                logger.warning(
                    "Layer '%s' links to unknown layer '%s', ignoring link",
                    layer.name,
                    target_id,
                )
                continue
            target_label = resolve_label(target, labels) or UNLABELED
            alternatives.setdefault(target_label, []).append(target.id)
            claimed.append(target_id)

        if not alternatives:
            logger.debug("Layer '%s' has links but no usable targets, left independent", layer.name)
            continue

        sync_set = SyncSet(
            main_layer=layer.id,
            label=label,
            synced_layers=list(alternatives.values()),
        )
        sync_sets.append(sync_set)
        processed.add(layer_id)
        processed.update(claimed)

        logger.debug(
            "Sync set for '%s' (%s): %d alternatives %s",
            layer.name,
            label,
            len(sync_set.synced_layers),
            sync_set.synced_layers,
        )

    logger.info("Found %d sync sets across %d layers", len(sync_sets), len(layers))
    return sync_sets


def sync_member_ids(sync_sets: Iterable[SyncSet]) -> Set[str]:
    """Canonical ids of every layer governed by any of the given sync sets."""
    members: Set[str] = set()
    for sync_set in sync_sets:
        members.update(normalize_layer_id(member) for member in sync_set.member_ids)
    return members

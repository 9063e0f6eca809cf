"""
Tests for sync-visibility set discovery.
"""

import logging

from relayout.models.layout import LINK_CUSTOM, LINK_SYNC_POSITION, Layer, LayerLink
from relayout.services.sync_sets import find_sync_sets, index_sync_links, sync_member_ids

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _layers(*pairs):
    return [Layer(id=layer_id, name=layer_id, label=label) for layer_id, label in pairs]


def test_targets_are_partitioned_by_their_label():
    layers = _layers(("A", "hero"), ("B", "x"), ("C", "y"))
    links = [LayerLink("A", "B"), LayerLink("A", "C")]

    sync_sets = find_sync_sets(layers, {}, links)

    assert len(sync_sets) == 1
    assert sync_sets[0].main_layer == "A"
    assert sync_sets[0].label == "hero"
    assert sync_sets[0].synced_layers == [["B"], ["C"]]
    logger.info("✓ One alternative per target label")


def test_targets_sharing_a_label_form_one_alternative():
    layers = _layers(("A", "hero"), ("B", "x"), ("C", "x"), ("D", "y"))
    links = [LayerLink("A", "B"), LayerLink("A", "D"), LayerLink("A", "C")]

    sync_sets = find_sync_sets(layers, {}, links)

    assert sync_sets[0].synced_layers == [["B", "C"], ["D"]]


def test_label_map_overrides_layer_labels():
    layers = _layers(("A", None), ("B", None), ("C", None))
    labels = {"A": "hero", "B": "x", "C": "y"}

    sync_sets = find_sync_sets(layers, labels, [LayerLink("A", "B"), LayerLink("A", "C")])

    assert sync_sets[0].label == "hero"
    assert sync_sets[0].synced_layers == [["B"], ["C"]]


def test_only_sync_visibility_links_count():
    layers = _layers(("A", "hero"), ("B", "x"))
    links = [LayerLink("A", "B", type=LINK_SYNC_POSITION), LayerLink("A", "B", type=LINK_CUSTOM)]

    assert find_sync_sets(layers, {}, links) == []
    assert index_sync_links(links) == {}


def test_prefixed_ids_resolve_to_same_layer():
    layers = _layers(("layer_1", "hero"), ("2", "x"))
    labels = {"layer_2": "x"}

    sync_sets = find_sync_sets(layers, labels, [LayerLink("1", "layer_2")])

    assert len(sync_sets) == 1
    assert sync_sets[0].main_layer == "layer_1"
    assert sync_sets[0].synced_layers == [["2"]]
    assert sync_member_ids(sync_sets) == {"1", "2"}
    logger.info("✓ Prefixed and bare link ids resolved")


def test_links_without_usable_targets_emit_no_set():
    layers = _layers(("A", "hero"), ("B", "x"))
    assert find_sync_sets(layers, {}, [LayerLink("A", "missing")]) == []


def test_unlabeled_main_layer_is_skipped():
    layers = _layers(("A", None), ("B", "x"))
    assert find_sync_sets(layers, {}, [LayerLink("A", "B")]) == []


def test_claimed_layers_are_not_reused():
    layers = _layers(("A", "hero"), ("B", "x"), ("C", "hero"), ("D", "y"))
    links = [LayerLink("A", "B"), LayerLink("C", "B"), LayerLink("C", "D"), LayerLink("B", "D")]

    sync_sets = find_sync_sets(layers, {}, links)

    assert [s.main_layer for s in sync_sets] == ["A", "C"]
    assert sync_sets[0].synced_layers == [["B"]]
    # B already belongs to A's set, so C only keeps D.
    assert sync_sets[1].synced_layers == [["D"]]

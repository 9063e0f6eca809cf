from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


# Storage layers persist ids as "layer_<n>" while label and rule maps are
# sometimes keyed by the bare "<n>". Everything inside the engine compares
# the bare form.
LAYER_ID_PREFIX = "layer_"

BACKGROUND_LABEL = "background"
MAIN_SUBJECT_LABEL = "main-subject"
UNLABELED = "unlabeled"

LINK_SYNC_VISIBILITY = "sync-visibility"
LINK_SYNC_POSITION = "sync-position"
LINK_CUSTOM = "custom"


def normalize_layer_id(layer_id: str) -> str:
    """Return the canonical (prefix-free) form of a layer id."""
    layer_id = str(layer_id)
    if layer_id.startswith(LAYER_ID_PREFIX) and len(layer_id) > len(LAYER_ID_PREFIX):
        return layer_id[len(LAYER_ID_PREFIX):]
    return layer_id


def normalize_keys(mapping: Dict[str, object] | None) -> Dict[str, object]:
    """Re-key a layer-id keyed mapping by canonical id (first key wins on clashes)."""
    normalized: Dict[str, object] = {}
    for key, value in (mapping or {}).items():
        normalized.setdefault(normalize_layer_id(key), value)
    return normalized


@dataclass(slots=True)
class Bounds:
    """Layer bounds in source-document coordinates."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        # Degenerate layers still carry a usable aspect ratio.
        return max(1, self.right - self.left)

    @property
    def height(self) -> float:
        return max(1, self.bottom - self.top)


@dataclass(slots=True)
class Layer:
    """
    One paintable unit read from the source document.

    The engine never mutates layers; visibility decisions are carried on the
    generated elements instead.
    """

    id: str
    name: str
    label: str | None = None
    # Groups without direct bounds are excluded from layout.
    bounds: Bounds | None = None
    # Source-intrinsic visibility, only consulted when personalization is off.
    visible: bool = True
    type: str = "layer"
    parent: str | None = None

    @property
    def canonical_id(self) -> str:
        return normalize_layer_id(self.id)


def resolve_label(layer: Layer, label_map: Dict[str, str] | None = None) -> str | None:
    """
    Return the semantic label of a layer.

    An externally maintained id→label map (keyed by canonical id) wins over
    the label carried on the layer itself. "unlabeled" counts as no label.
    """
    label = (label_map or {}).get(layer.canonical_id) or layer.label
    if not label or label == UNLABELED:
        return None
    return label


@dataclass(slots=True)
class Margin:
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0


@dataclass(slots=True)
class PositioningRule:
    """Where and how large elements carrying one label are placed."""

    position: str = "center"
    # Fractions (0-1) of the canvas dimensions.
    max_width_percent: float = 1.0
    max_height_percent: float = 1.0
    alignment: str | None = None
    margin: Margin | None = None
    apply_safezone: bool = True


@dataclass(slots=True)
class LayoutOption:
    """
    Named bundle of visibility and positioning rules for one channel and
    aspect-ratio pair.
    """

    name: str
    visibility: Dict[str, bool] = field(default_factory=dict)
    positioning: Dict[str, PositioningRule] = field(default_factory=dict)
    render_order: List[str] | None = None

    def is_label_visible(self, label: str) -> bool:
        # Labels missing from the visibility map are shown.
        return self.visibility.get(label) is not False


@dataclass(slots=True)
class LayoutSize:
    """Target canvas for one aspect ratio inside a channel."""

    aspect_ratio: str
    width: int
    height: int
    options: List[LayoutOption] = field(default_factory=list)


@dataclass(slots=True)
class Channel:
    id: str
    name: str
    layouts: List[LayoutSize] = field(default_factory=list)


@dataclass(slots=True)
class SegmentationRule:
    type: str
    value: str


@dataclass(slots=True)
class LayerPersonalization:
    """Audience restrictions for a single layer."""

    is_personalized: bool = False
    rules: List[SegmentationRule] = field(default_factory=list)


@dataclass(slots=True)
class SegmentationSelection:
    """The active (segmentation type, segmentation value) pair."""

    type: str
    value: str


@dataclass(slots=True)
class LayerLink:
    source_id: str
    target_id: str
    type: str = LINK_SYNC_VISIBILITY
    description: str | None = None


@dataclass(slots=True)
class SyncSet:
    """
    A main layer plus mutually exclusive alternative groups whose visibility
    is decided as one unit.
    """

    main_layer: str
    label: str
    # Each alternative is an ordered list of layer ids shown together.
    synced_layers: List[List[str]] = field(default_factory=list)

    @property
    def member_ids(self) -> List[str]:
        members = [self.main_layer]
        for alternative in self.synced_layers:
            members.extend(alternative)
        return members


@dataclass(frozen=True, slots=True)
class Rect:
    x: float
    y: float
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class PositionedElement:
    """A layer resolved to concrete canvas coordinates."""

    id: str
    name: str
    label: str
    x: float
    y: float
    width: int
    height: int
    visible: bool
    original_bounds: Bounds | None = None
    position: str | None = None
    parent: str | None = None


@dataclass(frozen=True, slots=True)
class GeneratedLayout:
    """
    Fully positioned output of one generation call.

    Elements are in draw order (first drawn first). Instances are never
    modified after generation.
    """

    name: str
    width: int
    height: int
    aspect_ratio: str
    elements: Tuple[PositionedElement, ...] = ()

    @property
    def visible_elements(self) -> List[PositionedElement]:
        return [element for element in self.elements if element.visible]

    @property
    def visible_ids(self) -> List[str]:
        return [element.id for element in self.elements if element.visible]

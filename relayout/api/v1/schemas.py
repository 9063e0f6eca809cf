from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel

from relayout.models.layout import (
    Bounds,
    Channel,
    GeneratedLayout,
    Layer,
    LayerLink,
    LayerPersonalization,
    LayoutOption,
    LayoutSize,
    Margin,
    PositionedElement,
    PositioningRule,
    SegmentationRule,
)


class CamelModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Layout rule catalog
# ---------------------------------------------------------------------------


class MarginSchema(CamelModel):
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    def to_model(self) -> Margin:
        return Margin(top=self.top, right=self.right, bottom=self.bottom, left=self.left)


class PositioningRuleSchema(CamelModel):
    """Placement rule for one label within a layout option."""

    position: str = Field(default="center", description="Position keyword, e.g. 'top-center-20'.")
    max_width_percent: float = Field(..., ge=0, le=1, description="Max width as a fraction of canvas width.")
    max_height_percent: float = Field(..., ge=0, le=1, description="Max height as a fraction of canvas height.")
    alignment: str | None = None
    margin: MarginSchema | None = None
    apply_safezone: bool = Field(default=True, description="Keep the element inside the safezone inset.")

    def to_model(self) -> PositioningRule:
        return PositioningRule(
            position=self.position,
            max_width_percent=self.max_width_percent,
            max_height_percent=self.max_height_percent,
            alignment=self.alignment,
            margin=self.margin.to_model() if self.margin else None,
            apply_safezone=self.apply_safezone,
        )


class LayoutRulesSchema(CamelModel):
    visibility: Dict[str, bool] = Field(default_factory=dict)
    positioning: Dict[str, PositioningRuleSchema] = Field(default_factory=dict)
    render_order: List[str] | None = Field(
        default=None,
        description="Label draw order; background is always drawn first.",
    )


class LayoutOptionSchema(CamelModel):
    name: str
    rules: LayoutRulesSchema = Field(default_factory=LayoutRulesSchema)

    def to_model(self) -> LayoutOption:
        return LayoutOption(
            name=self.name,
            visibility=dict(self.rules.visibility),
            positioning={label: rule.to_model() for label, rule in self.rules.positioning.items()},
            render_order=list(self.rules.render_order) if self.rules.render_order else None,
        )


class LayoutSizeSchema(CamelModel):
    aspect_ratio: str = Field(..., description="Ratio label such as '9:16'.")
    width: PositiveInt
    height: PositiveInt
    options: List[LayoutOptionSchema] = Field(default_factory=list)

    def to_model(self) -> LayoutSize:
        return LayoutSize(
            aspect_ratio=self.aspect_ratio,
            width=self.width,
            height=self.height,
            options=[option.to_model() for option in self.options],
        )


class ChannelSchema(CamelModel):
    id: str
    name: str
    layouts: List[LayoutSizeSchema] = Field(default_factory=list)

    def to_model(self) -> Channel:
        return Channel(id=self.id, name=self.name, layouts=[layout.to_model() for layout in self.layouts])


class LayoutCatalogSchema(CamelModel):
    """Top-level layout rules document: ``{"channels": [...]}``."""

    channels: List[ChannelSchema] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Generation requests
# ---------------------------------------------------------------------------


class BoundsSchema(CamelModel):
    left: float
    top: float
    right: float
    bottom: float

    def to_model(self) -> Bounds:
        return Bounds(left=self.left, top=self.top, right=self.right, bottom=self.bottom)


class LayerSchema(CamelModel):
    """A layer as produced by the document parser."""

    id: str
    name: str = ""
    label: str | None = None
    bounds: BoundsSchema | None = None
    visible: bool = True
    type: Literal["layer", "group"] = "layer"
    parent: str | None = None

    def to_model(self) -> Layer:
        return Layer(
            id=self.id,
            name=self.name or self.id,
            label=self.label,
            bounds=self.bounds.to_model() if self.bounds else None,
            visible=self.visible,
            type=self.type,
            parent=self.parent,
        )


class SegmentationRuleSchema(CamelModel):
    type: str
    value: str


class LayerPersonalizationSchema(CamelModel):
    is_personalized: bool = False
    rules: List[SegmentationRuleSchema] = Field(default_factory=list)

    def to_model(self) -> LayerPersonalization:
        return LayerPersonalization(
            is_personalized=self.is_personalized,
            rules=[SegmentationRule(type=rule.type, value=rule.value) for rule in self.rules],
        )


class LayerLinkSchema(CamelModel):
    source_id: str
    target_id: str
    type: Literal["sync-visibility", "sync-position", "custom"] = "sync-visibility"
    description: str | None = None

    def to_model(self) -> LayerLink:
        return LayerLink(
            source_id=self.source_id,
            target_id=self.target_id,
            type=self.type,
            description=self.description,
        )


class GenerateLayoutRequest(CamelModel):
    """Inputs for one generation call against the layout catalog."""

    channel_id: str = Field(..., description="Channel identifier, e.g. 'facebook'.")
    aspect_ratio: str = Field(..., description="Target ratio label, e.g. '9:16'.")
    option_name: str = Field(..., description="Layout option name within the channel/ratio.")
    layers: List[LayerSchema] = Field(default_factory=list)
    labels: Dict[str, str] = Field(
        default_factory=dict,
        description="Optional layer id → label map; overrides labels carried on layers.",
    )
    personalization: Dict[str, LayerPersonalizationSchema] | None = Field(
        default=None,
        description="Layer id → personalization rules. Omit to disable personalization.",
    )
    segmentation_type: str | None = None
    segmentation_value: str | None = None
    links: List[LayerLinkSchema] = Field(default_factory=list)
    safezone: int | None = Field(default=None, ge=0, description="Safezone inset; defaults to server setting.")
    seed: int | None = Field(default=None, description="Seed for reproducible random selection.")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PositionedElementSchema(CamelModel):
    id: str
    name: str
    label: str
    x: float
    y: float
    width: int
    height: int
    visible: bool
    original_bounds: BoundsSchema | None = None
    position: str | None = None
    parent: str | None = None

    @classmethod
    def from_model(cls, element: PositionedElement) -> "PositionedElementSchema":
        bounds = element.original_bounds
        return cls(
            id=element.id,
            name=element.name,
            label=element.label,
            x=element.x,
            y=element.y,
            width=element.width,
            height=element.height,
            visible=element.visible,
            original_bounds=(
                BoundsSchema(left=bounds.left, top=bounds.top, right=bounds.right, bottom=bounds.bottom)
                if bounds
                else None
            ),
            position=element.position,
            parent=element.parent,
        )


class GeneratedLayoutSchema(CamelModel):
    name: str
    width: int
    height: int
    aspect_ratio: str
    elements: List[PositionedElementSchema] = Field(default_factory=list)

    @classmethod
    def from_model(cls, layout: GeneratedLayout) -> "GeneratedLayoutSchema":
        return cls(
            name=layout.name,
            width=layout.width,
            height=layout.height,
            aspect_ratio=layout.aspect_ratio,
            elements=[PositionedElementSchema.from_model(element) for element in layout.elements],
        )


class CombinationsResponse(CamelModel):
    """Result of combinatorial generation."""

    total: int = Field(..., description="Number of combinations before any cap.")
    count: int = Field(..., description="Number of layouts returned.")
    truncated: bool = Field(..., description="True when the server cap cut the enumeration short.")
    layouts: List[GeneratedLayoutSchema] = Field(default_factory=list)


class AspectRatioResponse(CamelModel):
    width: PositiveInt
    height: PositiveInt
    aspect_ratio: str


class TargetRatiosResponse(CamelModel):
    source_ratio: str
    targets: List[str] = Field(default_factory=list)
    compatible: List[str] = Field(default_factory=list)


class ChannelSummary(CamelModel):
    id: str
    name: str
    aspect_ratios: List[str] = Field(default_factory=list)


class LayoutSummary(CamelModel):
    aspect_ratio: str
    width: int
    height: int
    options: List[str] = Field(default_factory=list)

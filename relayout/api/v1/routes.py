import random

from fastapi import APIRouter, HTTPException, Query, status

from relayout.api.v1.schemas import (
    AspectRatioResponse,
    ChannelSummary,
    CombinationsResponse,
    GeneratedLayoutSchema,
    GenerateLayoutRequest,
    LayoutSummary,
    TargetRatiosResponse,
)
from relayout.config import get_settings
from relayout.errors import (
    InvalidRatioError,
    LayoutOptionNotFoundError,
    MissingSelectionError,
    NoSyncSetsFoundError,
)
from relayout.models.layout import LayoutOption, LayoutSize, SegmentationSelection
from relayout.services.catalog import get_layout_catalog
from relayout.services.generator import LayoutGenerator, count_combinations
from relayout.services.ratios import calculate_aspect_ratio, get_compatible_ratios, get_target_ratios

router = APIRouter(prefix="/api/v1")


@router.get("/health", tags=["health"])
async def health_check() -> dict:
    """API v1 health check endpoint."""
    return {"status": "ok", "api_version": "v1"}


@router.get(
    "/ratios",
    response_model=AspectRatioResponse,
    tags=["ratios"],
    summary="Normalize pixel dimensions to a standard aspect ratio",
)
async def get_aspect_ratio(
    width: int = Query(..., gt=0, description="Width in pixels."),
    height: int = Query(..., gt=0, description="Height in pixels."),
) -> AspectRatioResponse:
    return AspectRatioResponse(width=width, height=height, aspect_ratio=calculate_aspect_ratio(width, height))


@router.get(
    "/ratios/{ratio}/targets",
    response_model=TargetRatiosResponse,
    tags=["ratios"],
    summary="Suggest target ratios for a source ratio",
)
async def get_ratio_targets(ratio: str) -> TargetRatiosResponse:
    """
    Ratio labels use ``W:H``; clients that cannot put a colon in a path may
    use ``WxH`` instead.
    """
    source_ratio = ratio.replace("x", ":")
    try:
        targets = get_target_ratios(source_ratio)
        compatible = get_compatible_ratios(source_ratio)
    except InvalidRatioError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return TargetRatiosResponse(source_ratio=source_ratio, targets=targets, compatible=compatible)


@router.get(
    "/channels",
    response_model=list[ChannelSummary],
    tags=["catalog"],
    summary="List channels in the layout catalog",
)
async def list_channels() -> list[ChannelSummary]:
    catalog = get_layout_catalog()
    return [
        ChannelSummary(
            id=channel.id,
            name=channel.name,
            aspect_ratios=[layout.aspect_ratio for layout in channel.layouts],
        )
        for channel in catalog.channels()
    ]


@router.get(
    "/channels/{channel_id}/layouts",
    response_model=list[LayoutSummary],
    tags=["catalog"],
    summary="List layouts and option names for a channel",
)
async def list_channel_layouts(channel_id: str) -> list[LayoutSummary]:
    channel = get_layout_catalog().get_channel(channel_id)
    if channel is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Channel not found.",
        )
    return [
        LayoutSummary(
            aspect_ratio=layout.aspect_ratio,
            width=layout.width,
            height=layout.height,
            options=[option.name for option in layout.options],
        )
        for layout in channel.layouts
    ]


def _prepare(request: GenerateLayoutRequest) -> tuple[LayoutGenerator, LayoutSize, LayoutOption]:
    """
    Resolve the catalog entry and build a generator for the request.

    Engine precondition failures are translated to HTTP errors here so
    every generation endpoint reports them the same way.
    """
    try:
        size, option = get_layout_catalog().get_option(
            request.channel_id,
            request.aspect_ratio,
            request.option_name,
        )
    except LayoutOptionNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    personalization = None
    if request.personalization is not None:
        personalization = {
            layer_id: rules.to_model() for layer_id, rules in request.personalization.items()
        }

    selection = None
    if request.segmentation_type or request.segmentation_value:
        selection = SegmentationSelection(
            type=request.segmentation_type or "",
            value=request.segmentation_value or "",
        )

    settings = get_settings()
    try:
        generator = LayoutGenerator(
            layers=[layer.to_model() for layer in request.layers],
            labels=request.labels,
            personalization=personalization,
            selection=selection,
            links=[link.to_model() for link in request.links],
            safezone=request.safezone if request.safezone is not None else settings.safezone,
            rng=random.Random(request.seed) if request.seed is not None else None,
        )
    except MissingSelectionError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    return generator, size, option


@router.post(
    "/layouts/generate",
    response_model=GeneratedLayoutSchema,
    tags=["layouts"],
    summary="Generate one layout with random eligible selection",
)
async def generate_layout(request: GenerateLayoutRequest) -> GeneratedLayoutSchema:
    """
    Generate a single layout.

    For every label group one eligible layer is picked at random (pass
    `seed` for a reproducible pick); sync sets are decided as a unit.
    """
    generator, size, option = _prepare(request)
    layout = generator.generate_layout(size, option)
    return GeneratedLayoutSchema.from_model(layout)


@router.post(
    "/layouts/combinations",
    response_model=CombinationsResponse,
    tags=["layouts"],
    summary="Generate every layout combination",
)
async def generate_combinations(request: GenerateLayoutRequest) -> CombinationsResponse:
    """
    Enumerate every combination of eligible choices across label groups and
    sync sets, capped by the server's `RELAYOUT_MAX_COMBINATIONS`.
    """
    generator, size, option = _prepare(request)
    cap = get_settings().max_combinations
    total = count_combinations(generator.dimensions(option))
    layouts = generator.generate_all_combinations(size, option, limit=cap)
    return CombinationsResponse(
        total=total,
        count=len(layouts),
        truncated=total > len(layouts),
        layouts=[GeneratedLayoutSchema.from_model(layout) for layout in layouts],
    )


@router.post(
    "/layouts/sync-combinations",
    response_model=CombinationsResponse,
    tags=["layouts"],
    summary="Generate every synchronized-set combination",
)
async def generate_sync_combinations(request: GenerateLayoutRequest) -> CombinationsResponse:
    """
    Enumerate combinations of sync-set choices only.

    Responds with 409 when the layers carry no sync-visibility links, so the
    client can tell the user nothing is linked.
    """
    generator, size, option = _prepare(request)
    cap = get_settings().max_combinations
    try:
        layouts = generator.generate_all_sync_layouts(size, option, limit=cap)
    except NoSyncSetsFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No synchronized layer sets found. Link layers with sync-visibility first.",
        ) from exc

    total = count_combinations(generator.sync_dimensions(option))
    return CombinationsResponse(
        total=total,
        count=len(layouts),
        truncated=total > len(layouts),
        layouts=[GeneratedLayoutSchema.from_model(layout) for layout in layouts],
    )

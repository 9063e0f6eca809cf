from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Tuple

from relayout.api.v1.schemas import LayoutCatalogSchema
from relayout.config import get_settings
from relayout.errors import LayoutOptionNotFoundError
from relayout.models.layout import Channel, LayoutOption, LayoutSize
from relayout.services.ratios import are_ratios_equivalent


logger = logging.getLogger(__name__)


class LayoutCatalog:
    """
    Read-only, in-memory catalog of layout options.

    Options are addressed by ``(channel id, aspect ratio, option name)``.
    Rule authoring and persistence live outside this service; the catalog
    is only loaded from a rules document.
    """

    def __init__(self, channels: List[Channel] | None = None) -> None:
        self._channels: Dict[str, Channel] = {channel.id: channel for channel in channels or []}

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutCatalog":
        document = LayoutCatalogSchema.model_validate(data)
        return cls([channel.to_model() for channel in document.channels])

    @classmethod
    def from_file(cls, path: Path) -> "LayoutCatalog":
        """
        Load a catalog from a JSON rules document.

        A missing file yields an empty catalog so the service can start
        before any rules are authored.
        """
        if not path.exists():
            logger.warning("Layout rules file not found at %s, starting with empty catalog", path)
            return cls()

        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        catalog = cls.from_dict(data)
        logger.info("Loaded %d channels from %s", len(catalog.channels()), path)
        return catalog

    def channels(self) -> List[Channel]:
        return list(self._channels.values())

    def get_channel(self, channel_id: str) -> Channel | None:
        return self._channels.get(channel_id)

    def get_layout(self, channel_id: str, aspect_ratio: str) -> LayoutSize | None:
        """Find a channel's layout by ratio label, falling back to an equivalent ratio."""
        channel = self.get_channel(channel_id)
        if channel is None:
            return None

        for layout in channel.layouts:
            if layout.aspect_ratio == aspect_ratio:
                return layout
        for layout in channel.layouts:
            if are_ratios_equivalent(layout.aspect_ratio, aspect_ratio):
                return layout
        return None

    def option_names(self, channel_id: str, aspect_ratio: str) -> List[str]:
        layout = self.get_layout(channel_id, aspect_ratio)
        return [option.name for option in layout.options] if layout else []

    def get_option(self, channel_id: str, aspect_ratio: str, option_name: str) -> Tuple[LayoutSize, LayoutOption]:
        layout = self.get_layout(channel_id, aspect_ratio)
        if layout is not None:
            for option in layout.options:
                if option.name == option_name:
                    return layout, option

        raise LayoutOptionNotFoundError(
            f"Layout option '{option_name}' not found for channel '{channel_id}' at {aspect_ratio}"
        )

    def find_option(self, option_name: str) -> Tuple[LayoutSize, LayoutOption]:
        """Find the first option with this name across all channels."""
        for channel in self._channels.values():
            for layout in channel.layouts:
                for option in layout.options:
                    if option.name == option_name:
                        return layout, option

        raise LayoutOptionNotFoundError(f"Layout option '{option_name}' not found")

    def available_layouts(self) -> List[Tuple[str, str]]:
        """All ``(option name, aspect ratio)`` pairs in catalog order."""
        return [
            (option.name, layout.aspect_ratio)
            for channel in self._channels.values()
            for layout in channel.layouts
            for option in layout.options
        ]


_default_catalog: LayoutCatalog | None = None


def get_layout_catalog() -> LayoutCatalog:
    """
    Return the process-wide catalog, loading it on first use.

    Abstracted behind a function so tests can inject their own catalog
    through ``set_layout_catalog``.
    """
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = LayoutCatalog.from_file(get_settings().rules_path)
    return _default_catalog


def set_layout_catalog(catalog: LayoutCatalog | None) -> None:
    global _default_catalog
    _default_catalog = catalog

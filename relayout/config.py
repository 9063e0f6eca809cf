from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "layout_rules.json"


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime configuration, read from the environment (and .env via main)."""

    # Safezone inset in pixels applied to elements that do not opt out.
    safezone: int = 10
    rules_path: Path = DEFAULT_RULES_PATH
    # Upper bound on layouts returned by combinatorial endpoints.
    max_combinations: int = 500
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    return Settings(
        safezone=int(os.getenv("RELAYOUT_SAFEZONE", "10")),
        rules_path=Path(os.getenv("RELAYOUT_RULES_PATH", str(DEFAULT_RULES_PATH))),
        max_combinations=int(os.getenv("RELAYOUT_MAX_COMBINATIONS", "500")),
        log_level=os.getenv("RELAYOUT_LOG_LEVEL", "INFO").upper(),
    )

"""Configuration models and helpers for the usage tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable, Optional

from .errors import ConfigError

STATS_FILENAME = "usage_stats.csv"


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the sampling loop."""

    sample_interval: timedelta = timedelta(seconds=2)
    probe_timeout: timedelta = timedelta(seconds=5)
    stats_filename: str = STATS_FILENAME
    category_overrides: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_options(
        cls,
        sample_seconds: float,
        probe_timeout_seconds: float,
        categories: Optional[Iterable[str]] = None,
    ) -> "TrackerSettings":
        return cls(
            sample_interval=timedelta(seconds=sample_seconds),
            probe_timeout=timedelta(seconds=probe_timeout_seconds),
            category_overrides=parse_category_overrides(categories or ()),
        )


def parse_category_overrides(values: Iterable[str]) -> dict[str, str]:
    """Parse ``ID=Category`` pairs given on the command line."""
    overrides: dict[str, str] = {}
    for value in values:
        entity_id, sep, category = value.partition("=")
        entity_id, category = entity_id.strip(), category.strip()
        if not sep or not entity_id or not category:
            raise ConfigError(f"Expected ID=CATEGORY, got {value!r}")
        overrides[entity_id] = category
    return overrides

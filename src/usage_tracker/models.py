"""Domain models for tracked application usage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True, slots=True)
class ActiveEntity:
    """The application (and optional tab or document) currently in front."""

    entity_id: str
    display_name: str
    resource_locator: Optional[str] = None
    category: Optional[str] = None

    @property
    def effective_category(self) -> str:
        return self.category or UNCATEGORIZED

    def describe(self) -> str:
        label = f"{self.display_name} ({self.entity_id})"
        if self.resource_locator:
            label = f"{label} @ {self.resource_locator}"
        return label


@dataclass(frozen=True, slots=True)
class UsageSession:
    """A closed, contiguous block of time spent on a single entity."""

    start_time: datetime
    end_time: datetime
    duration_seconds: float
    app_name: str
    entity_id: str
    category: str = UNCATEGORIZED
    resource_locator: str = ""

    @classmethod
    def from_entity(
        cls,
        entity: ActiveEntity,
        start_time: datetime,
        end_time: datetime,
        duration_seconds: float,
    ) -> "UsageSession":
        return cls(
            start_time=start_time,
            end_time=end_time,
            duration_seconds=float(duration_seconds),
            app_name=entity.display_name,
            entity_id=entity.entity_id,
            category=entity.effective_category,
            resource_locator=entity.resource_locator or "",
        )

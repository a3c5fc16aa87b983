"""Aggregation of usage sessions and console reporting."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from .models import UsageSession


@dataclass(slots=True)
class CategoryTotal:
    category: str
    seconds: float
    percentage: float


@dataclass(slots=True)
class EntityTotal:
    entity_id: str
    display_name: str
    seconds: float
    percentage: float
    # Display-only metadata from the most recent session of this entity.
    resource_locator: str = ""
    category: str = ""


@dataclass(slots=True)
class UsageSummary:
    total_seconds: float
    categories: list[CategoryTotal]
    entities: list[EntityTotal]


def percentage(part: float, total: float) -> float:
    if total == 0:
        return 0.0
    return part / total * 100.0


def summarize(
    sessions: Sequence[UsageSession], total_duration: Optional[float] = None
) -> UsageSummary:
    """Group sessions by category and by application, largest first.

    Ties keep the order in which the group was first seen.
    """
    total = (
        total_duration
        if total_duration is not None
        else sum(session.duration_seconds for session in sessions)
    )
    category_seconds = aggregate_by_category(sessions)
    categories = [
        CategoryTotal(category=name, seconds=seconds, percentage=percentage(seconds, total))
        for name, seconds in category_seconds
    ]
    entities = aggregate_by_entity(sessions)
    for entry in entities:
        entry.percentage = percentage(entry.seconds, total)
    return UsageSummary(total_seconds=total, categories=categories, entities=entities)


def aggregate_by_category(sessions: Iterable[UsageSession]) -> list[tuple[str, float]]:
    totals: dict[str, float] = {}
    for session in sessions:
        totals[session.category] = totals.get(session.category, 0.0) + session.duration_seconds
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def aggregate_by_entity(sessions: Iterable[UsageSession]) -> list[EntityTotal]:
    totals: dict[tuple[str, str], EntityTotal] = {}
    for session in sessions:
        key = (session.entity_id, session.app_name)
        entry = totals.get(key)
        if entry is None:
            entry = EntityTotal(
                entity_id=session.entity_id,
                display_name=session.app_name,
                seconds=0.0,
                percentage=0.0,
            )
            totals[key] = entry
        entry.seconds += session.duration_seconds
        entry.resource_locator = session.resource_locator
        entry.category = session.category
    return sorted(totals.values(), key=lambda entry: entry.seconds, reverse=True)


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, write: Callable[[str], None] = print) -> None:
        self._write = write

    def print_summary(self, summary: UsageSummary, stats_path: Optional[Path] = None) -> None:
        write = self._write
        write("")
        write("=== Usage Summary ===")
        if not summary.entities:
            write("No usage recorded yet.")
        else:
            write("")
            write("By Category:")
            for entry in summary.categories:
                write(
                    f"  {entry.category:<20} {format_duration(entry.seconds)} "
                    f"({entry.percentage:.1f}%)"
                )

            write("")
            write("By Application:")
            for app in summary.entities:
                write("")
                write(f"App: {app.display_name} ({app.entity_id})")
                if app.resource_locator:
                    write(f"  URL: {app.resource_locator}")
                if app.category:
                    write(f"  Category: {app.category}")
                write(
                    f"  Total Time: {format_duration(app.seconds)} ({app.percentage:.1f}%)"
                )

        write("")
        write(f"Total tracked time: {format_duration(summary.total_seconds)}")
        if stats_path is not None:
            write(f"Stats saved to: {stats_path}")


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"

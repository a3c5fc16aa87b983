"""In-memory usage accumulator and its CSV persistence layer."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import PersistenceError
from .models import UNCATEGORIZED, ActiveEntity, UsageSession

logger = logging.getLogger(__name__)

FIELDNAMES: tuple[str, ...] = (
    "Start Time",
    "End Time",
    "Duration (seconds)",
    "App Name",
    "Bundle ID",
    "Category",
    "URL",
)


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass(slots=True)
class UsageStats:
    """Sessions recorded so far plus their running total in seconds."""

    sessions: list[UsageSession] = field(default_factory=list)
    total_duration: float = 0.0
    last_updated: datetime = field(default_factory=_now)

    @classmethod
    def from_sessions(cls, sessions: Iterable[UsageSession]) -> "UsageStats":
        stats = cls()
        for session in sessions:
            stats.append(session)
        return stats

    def add_session(
        self,
        entity: ActiveEntity,
        start_time: datetime,
        end_time: datetime,
        duration_seconds: float,
    ) -> UsageSession:
        session = UsageSession.from_entity(entity, start_time, end_time, duration_seconds)
        self.append(session)
        return session

    def append(self, session: UsageSession) -> None:
        self.sessions.append(session)
        self.total_duration += session.duration_seconds
        self.last_updated = _now()

    def recompute_total(self) -> float:
        return sum(session.duration_seconds for session in self.sessions)


class SessionRow(BaseModel):
    """One persisted CSV record."""

    start_time: datetime = Field(alias="Start Time")
    end_time: datetime = Field(alias="End Time")
    duration_seconds: float = Field(alias="Duration (seconds)", ge=0)
    app_name: str = Field(alias="App Name")
    entity_id: str = Field(alias="Bundle ID")
    category: str = Field(default=UNCATEGORIZED, alias="Category")
    url: str = Field(default="", alias="URL")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("category")
    @classmethod
    def _default_category(cls, value: str) -> str:
        return value.strip() or UNCATEGORIZED

    def to_session(self) -> UsageSession:
        return UsageSession(
            start_time=self.start_time,
            end_time=self.end_time,
            duration_seconds=self.duration_seconds,
            app_name=self.app_name,
            entity_id=self.entity_id,
            category=self.category,
            resource_locator=self.url,
        )


def session_to_row(session: UsageSession) -> list[str]:
    return [
        session.start_time.isoformat(),
        session.end_time.isoformat(),
        format(Decimal(repr(session.duration_seconds)), "f"),
        session.app_name,
        session.entity_id,
        session.category or UNCATEGORIZED,
        session.resource_locator or "",
    ]


class CsvSessionStore:
    """Reads and writes usage history as a CSV file, one row per session."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> UsageStats:
        """Load previously saved sessions; a missing file yields empty stats."""
        if not self.path.exists():
            return UsageStats()

        try:
            with self.path.open(newline="", encoding="utf-8-sig") as handle:
                reader = csv.DictReader(handle)
                if reader.fieldnames is None:
                    return UsageStats()
                if tuple(reader.fieldnames) != FIELDNAMES:
                    raise PersistenceError(
                        f"Unexpected columns in {self.path}: {', '.join(reader.fieldnames)}"
                    )
                sessions = [self._parse_row(row, reader.line_num) for row in reader]
        except (OSError, csv.Error, UnicodeError) as exc:
            raise PersistenceError(f"Failed to read {self.path}: {exc}") from exc

        stats = UsageStats.from_sessions(sessions)
        logger.debug("Loaded %d sessions from %s", len(sessions), self.path)
        return stats

    def save(self, stats: UsageStats) -> None:
        """Write all sessions in insertion order, replacing the file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", newline="", encoding="utf-8") as handle:
                writer = csv.writer(handle)
                writer.writerow(FIELDNAMES)
                writer.writerows(session_to_row(session) for session in stats.sessions)
        except (OSError, csv.Error, UnicodeError) as exc:
            raise PersistenceError(f"Failed to write {self.path}: {exc}") from exc
        logger.debug("Saved %d sessions to %s", len(stats.sessions), self.path)

    def _parse_row(self, row: dict, line_num: int) -> UsageSession:
        if None in row:
            raise PersistenceError(f"Too many fields on line {line_num} of {self.path}")
        try:
            return SessionRow.model_validate(row).to_session()
        except ValidationError as exc:
            raise PersistenceError(
                f"Malformed record on line {line_num} of {self.path}: {exc}"
            ) from exc

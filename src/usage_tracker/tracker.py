"""State machine that turns sampled snapshots into closed usage sessions."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from .models import ActiveEntity, UsageSession
from .store import UsageStats

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> tuple[datetime, float]:
        """Return ``(wall_time, monotonic_seconds)`` read at the same instant."""
        ...


class SystemClock:
    """Wall time for display, monotonic time for durations."""

    def now(self) -> tuple[datetime, float]:
        return datetime.now().astimezone(), time.monotonic()


@dataclass(slots=True)
class TrackerState:
    current_entity: Optional[ActiveEntity] = None
    session_start_time: Optional[datetime] = None
    session_start_monotonic: float = 0.0
    last_sample_time: Optional[datetime] = None


class SessionTracker:
    """Detects entity switches and records the session that just ended.

    A session is closed when a snapshot differs structurally from the entity
    being tracked. The closed session ends at the wall time the differing
    snapshot was observed, so the whole interval since the previous sample is
    credited to the entity that was active at its start.
    """

    def __init__(self, stats: UsageStats, clock: Optional[Clock] = None) -> None:
        self.stats = stats
        self._clock: Clock = clock or SystemClock()
        self._state = TrackerState()

    @property
    def current_entity(self) -> Optional[ActiveEntity]:
        return self._state.current_entity

    @property
    def is_tracking(self) -> bool:
        return self._state.current_entity is not None

    @property
    def last_sample_time(self) -> Optional[datetime]:
        return self._state.last_sample_time

    def observe(self, snapshot: Optional[ActiveEntity]) -> Optional[UsageSession]:
        wall, monotonic = self._clock.now()
        return self.observe_at(snapshot, wall, monotonic)

    def observe_at(
        self,
        snapshot: Optional[ActiveEntity],
        wall: datetime,
        monotonic: float,
    ) -> Optional[UsageSession]:
        """Apply one tick; return the session closed by it, if any."""
        state = self._state
        state.last_sample_time = wall
        current = state.current_entity
        if current == snapshot:
            return None

        closed: Optional[UsageSession] = None
        if current is not None:
            closed = self._close(current, wall, monotonic)
            logger.info(
                "Switched from: %s (spent: %.2fs)",
                current.describe(),
                closed.duration_seconds,
            )

        state.current_entity = snapshot
        if snapshot is not None:
            state.session_start_time = wall
            state.session_start_monotonic = monotonic
            logger.info("Started tracking: %s", snapshot.describe())
        else:
            state.session_start_time = None
        return closed

    def flush(self) -> Optional[UsageSession]:
        wall, monotonic = self._clock.now()
        return self.flush_at(wall, monotonic)

    def flush_at(self, wall: datetime, monotonic: float) -> Optional[UsageSession]:
        """Close the in-flight session on shutdown; the tracker is idle afterwards."""
        state = self._state
        current = state.current_entity
        if current is None:
            return None
        closed = self._close(current, wall, monotonic)
        state.current_entity = None
        state.session_start_time = None
        logger.debug("Flushed final session for %s", current.describe())
        return closed

    def _close(
        self, entity: ActiveEntity, wall: datetime, monotonic: float
    ) -> UsageSession:
        state = self._state
        start = state.session_start_time or wall
        duration = max(0.0, monotonic - state.session_start_monotonic)
        return self.stats.add_session(entity, start, wall, duration)

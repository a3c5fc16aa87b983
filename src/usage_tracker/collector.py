"""Sampling loop that drives the resolver, tracker and store."""

from __future__ import annotations

import logging
import signal
import threading
from typing import Optional

from .config import TrackerSettings
from .errors import PersistenceError
from .resolver import EntitySnapshotResolver
from .store import CsvSessionStore, UsageStats
from .tracker import Clock, SessionTracker

logger = logging.getLogger(__name__)


class UsageCollector:
    """Samples the foreground entity at a fixed interval until stopped.

    History is loaded once when the run starts and the merged result is
    written back once when it ends.
    """

    def __init__(
        self,
        resolver: EntitySnapshotResolver,
        store: CsvSessionStore,
        settings: Optional[TrackerSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.settings = settings or TrackerSettings()
        self._clock = clock

    def run_forever(self) -> UsageStats:
        """Run until SIGINT/SIGTERM, then flush, save and return the stats."""
        stop_event = threading.Event()

        def _request_stop(signum: int, frame: object) -> None:
            logger.info("Shutting down gracefully...")
            stop_event.set()

        previous = {
            signum: signal.signal(signum, _request_stop)
            for signum in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            return self.run_until_stopped(stop_event)
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)

    def run_until_stopped(self, stop_event: threading.Event) -> UsageStats:
        """Run the loop until the provided event is set."""
        stats = self.load_history()
        tracker = SessionTracker(stats, clock=self._clock)
        try:
            self._run_loop(tracker, stop_event)
        finally:
            tracker.flush()
            self._save(stats)
        return stats

    def load_history(self) -> UsageStats:
        try:
            stats = self.store.load()
        except PersistenceError as exc:
            logger.warning("Could not load existing stats: %s", exc)
            return UsageStats()
        if stats.sessions:
            logger.info(
                "Loaded %d previous sessions from %s", len(stats.sessions), self.store.path
            )
        return stats

    def _run_loop(self, tracker: SessionTracker, stop_event: threading.Event) -> None:
        logger.info("Starting app tracker; writing to %s", self.store.path)
        interval = self.settings.sample_interval.total_seconds()
        while not stop_event.is_set():
            snapshot = self.resolver.sample()
            tracker.observe(snapshot)
            logger.debug("Sampled %s", snapshot.describe() if snapshot else "nothing")
            # Sleep in an interruptible manner.
            stop_event.wait(interval)

    def _save(self, stats: UsageStats) -> None:
        try:
            self.store.save(stats)
        except PersistenceError as exc:
            logger.warning("Failed to save usage stats: %s", exc)

"""Turns raw probe output into :class:`ActiveEntity` snapshots."""

from __future__ import annotations

import logging
from typing import Optional

from .categories import CategoryMap, is_browser
from .errors import ProbeError
from .models import ActiveEntity
from .probes import ActiveEntitySource

logger = logging.getLogger(__name__)

# Probe failures that happen routinely (no window, screen locked, app quitting).
_EXPECTED_PROBE_MESSAGES = (
    "missing value",
    "Can't get window 1",
    "Can't get current tab of window 1",
    "execution of AppleScript failed",
    "timed out",
    "terminated by signal",
)


class EntitySnapshotResolver:
    """Samples the active entity without ever failing the caller."""

    def __init__(
        self,
        source: ActiveEntitySource,
        categories: Optional[CategoryMap] = None,
    ) -> None:
        self._source = source
        self._categories = categories or CategoryMap()
        self._last_warning: Optional[str] = None

    def sample(self) -> Optional[ActiveEntity]:
        try:
            app = self._source.get_active_app()
        except ProbeError as exc:
            self._report("Could not determine active application", exc)
            return None
        if app is None:
            return None

        entity_id, display_name = app
        if not entity_id:
            return None

        locator: Optional[str] = None
        if is_browser(entity_id):
            try:
                locator = self._source.get_resource_locator(entity_id) or None
            except ProbeError as exc:
                self._report(f"Could not read active tab for {entity_id}", exc)

        return ActiveEntity(
            entity_id=entity_id,
            display_name=display_name or entity_id,
            resource_locator=locator,
            category=self._categories.lookup(entity_id),
        )

    def _report(self, context: str, exc: ProbeError) -> None:
        message = f"{context}: {exc}"
        if any(expected in str(exc) for expected in _EXPECTED_PROBE_MESSAGES):
            logger.debug("%s", message)
        elif message == self._last_warning:
            logger.debug("%s (repeated)", message)
        else:
            logger.warning("%s", message)
            self._last_warning = message

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import pytest

from usage_tracker.errors import ProbeError
from usage_tracker.models import ActiveEntity
from usage_tracker.probes import ActiveEntitySource

BASE_TIME = datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone(timedelta(hours=1)))


class FakeClock:
    """Manually advanced wall and monotonic clock."""

    def __init__(self, start: datetime = BASE_TIME, monotonic: float = 1000.0) -> None:
        self.wall = start
        self.monotonic = monotonic

    def now(self) -> tuple[datetime, float]:
        return self.wall, self.monotonic

    def advance(self, seconds: float) -> None:
        self.wall += timedelta(seconds=seconds)
        self.monotonic += seconds


ScriptItem = Union[tuple[str, str], None, ProbeError]


class FakeSource(ActiveEntitySource):
    """Replays a scripted sequence of foreground apps."""

    def __init__(
        self,
        script: list[ScriptItem],
        locators: Optional[dict[str, Union[str, ProbeError, None]]] = None,
    ) -> None:
        self._script = list(script)
        self._locators = locators or {}
        self.app_calls = 0
        self.locator_calls: list[str] = []

    def get_active_app(self) -> Optional[tuple[str, str]]:
        item = self._script[min(self.app_calls, len(self._script) - 1)]
        self.app_calls += 1
        if isinstance(item, ProbeError):
            raise item
        return item

    def get_resource_locator(self, entity_id: str) -> Optional[str]:
        self.locator_calls.append(entity_id)
        value = self._locators.get(entity_id)
        if isinstance(value, ProbeError):
            raise value
        return value


class SteppingStopEvent(threading.Event):
    """Stop event whose wait advances a fake clock and stops after N ticks."""

    def __init__(self, clock: FakeClock, step: float, ticks: int) -> None:
        super().__init__()
        self.clock = clock
        self.step = step
        self.remaining = ticks
        if ticks <= 0:
            self.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        self.clock.advance(self.step)
        self.remaining -= 1
        if self.remaining <= 0:
            self.set()
        return self.is_set()


def make_entity(
    entity_id: str = "com.apple.Terminal",
    display_name: Optional[str] = None,
    resource_locator: Optional[str] = None,
    category: Optional[str] = None,
) -> ActiveEntity:
    return ActiveEntity(
        entity_id=entity_id,
        display_name=display_name or entity_id.rsplit(".", 1)[-1],
        resource_locator=resource_locator,
        category=category,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

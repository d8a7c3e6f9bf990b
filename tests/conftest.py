"""Shared fixtures for the timer core tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from activity_tracker.services.timers import TimerManager

T0 = datetime(2025, 10, 29, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, ms: int) -> datetime:
        self.current += timedelta(milliseconds=ms)
        return self.current


def at(ms: int) -> datetime:
    """The instant ``ms`` milliseconds after T0."""
    return T0 + timedelta(milliseconds=ms)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(clock: FakeClock) -> TimerManager:
    return TimerManager(clock=clock)


@pytest.fixture
def timer_repo() -> MagicMock:
    repo = MagicMock()
    repo.find_by_user = AsyncMock(return_value=[])
    repo.create = AsyncMock()
    repo.update = AsyncMock()
    repo.upsert = AsyncMock()
    repo.delete = AsyncMock(return_value=True)
    repo.update_elapsed = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def tag_repo() -> MagicMock:
    repo = MagicMock()
    repo.add = AsyncMock()
    repo.remove = AsyncMock(return_value=True)
    repo.replace = AsyncMock()
    return repo

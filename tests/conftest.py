"""Shared fixtures: a controllable clock and in-memory persistence."""

from datetime import date, datetime, time, timedelta

import pytest

from kanji_study_tracker.storage.kv_store import InMemoryStore
from kanji_study_tracker.storage.stats_repository import StatsRepository


class FakeClock:
    """Clock frozen at a given local day, advanced manually."""

    def __init__(self, today: date) -> None:
        self.current = datetime.combine(today, time(9, 0))

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, days: int = 0, minutes: int = 0) -> None:
        self.current += timedelta(days=days, minutes=minutes)


TODAY = date(2026, 3, 10)


@pytest.fixture
def clock():
    return FakeClock(TODAY)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def repository(store):
    return StatsRepository(store)

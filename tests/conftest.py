from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from leetsrs.application.card_service import CardService
from leetsrs.application.note_service import NoteService
from leetsrs.application.settings_service import SettingsService
from leetsrs.application.stats.service import StatsService
from leetsrs.domain.cards.models import CardState, Grade, MemoryState
from leetsrs.domain.ports import MemoryModel
from leetsrs.infrastructure.adapters.storage import InMemoryStore

NEW_YORK = ZoneInfo("America/New_York")


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)

    def set(self, now: datetime) -> None:
        self.now = now


class StepMemoryModel(MemoryModel):
    """
    Predictable stand-in for FSRS: each grade maps to a fixed interval.

    Again = 1 minute, Hard = 1 day, Good = 3 days, Easy = 7 days.
    """

    INTERVALS = {
        Grade.Again: timedelta(minutes=1),
        Grade.Hard: timedelta(days=1),
        Grade.Good: timedelta(days=3),
        Grade.Easy: timedelta(days=7),
    }

    def create_empty(self, now: datetime) -> MemoryState:
        return MemoryState(state=CardState.New, due=now.astimezone(timezone.utc))

    def schedule(self, memory: MemoryState, grade: Grade, now: datetime) -> MemoryState:
        if grade == Grade.Again:
            state = CardState.Learning if memory.state == CardState.New else CardState.Relearning
        else:
            state = CardState.Review
        lapses = memory.lapses
        if memory.state == CardState.Review and grade == Grade.Again:
            lapses += 1
        return MemoryState(
            state=state,
            due=(now + self.INTERVALS[grade]).astimezone(timezone.utc),
            last_review=now.astimezone(timezone.utc),
            stability=1.0,
            difficulty=5.0,
            reps=memory.reps + 1,
            lapses=lapses,
        )


@pytest.fixture
def tz():
    return NEW_YORK


@pytest.fixture
def clock(tz):
    """Friday 2024-03-15 10:30 in New York."""
    return FrozenClock(datetime(2024, 3, 15, 10, 30, tzinfo=tz))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def memory_model():
    return StepMemoryModel()


@pytest.fixture
def settings(store):
    return SettingsService(store)


@pytest.fixture
def notes(store):
    return NoteService(store)


@pytest.fixture
def stats(store, settings, clock, tz):
    return StatsService(store, settings, clock=clock, tz=tz)


@pytest.fixture
def cards(store, memory_model, settings, stats, notes, clock, tz):
    return CardService(store, memory_model, settings, stats, notes, clock=clock, tz=tz)

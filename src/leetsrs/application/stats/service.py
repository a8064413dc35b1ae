"""
Stats service: application layer orchestrator.

Owns the per-day review counters and combines them with the card collection
for histograms and forecasts.
"""

import logging
from datetime import tzinfo

from leetsrs.application.calendar import (
    Clock,
    local_date_key,
    shift_days,
    today_key,
    utc_now,
    yesterday_key,
)
from leetsrs.application.card_store import CardStore
from leetsrs.application.settings_service import SettingsService
from leetsrs.domain.cards.models import CardState, Grade
from leetsrs.domain.constants import StorageKeys
from leetsrs.domain.ports import KeyValueStore
from leetsrs.domain.stats.models import DailyStats, UpcomingReviewStats
from leetsrs.infrastructure.serialization import dumps, loads, stats_from_stored, stats_to_stored

from .calculator import StatsCalculator

logger = logging.getLogger(__name__)


class StatsService:
    """
    Application service for daily review statistics.

    Day keys always come from the calendar helpers with the learner's current
    day start hour, the same way the review queue decides due-ness.
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: SettingsService,
        clock: Clock = utc_now,
        tz: tzinfo | None = None,
        calculator: StatsCalculator | None = None,
    ):
        """
        Args:
            store: Key-value store holding stats and cards.
            settings: Source of the day start hour.
            clock: Returns the current aware instant.
            tz: Local timezone; None means the system timezone.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._store = store
        self._cards = CardStore(store)
        self._settings = settings
        self._clock = clock
        self._tz = tz
        self._calc = calculator or StatsCalculator()

    def _load(self) -> dict[str, DailyStats]:
        stored = loads(self._store.get(StorageKeys.STATS), default={})
        return {key: stats_from_stored(raw) for key, raw in stored.items()}

    def _save(self, stats: dict[str, DailyStats]) -> None:
        payload = {key: stats_to_stored(day) for key, day in stats.items()}
        self._store.set(StorageKeys.STATS, dumps(payload))

    def today_key(self) -> str:
        return today_key(self._clock(), self._settings.get_day_start_hour(), self._tz)

    def yesterday_key(self) -> str:
        return yesterday_key(self._clock(), self._settings.get_day_start_hour(), self._tz)

    def update_stats(self, grade: Grade, is_new_card: bool = False) -> None:
        """
        Record one grading event against today's counters.

        Today's record is created on the first review of the day, continuing
        yesterday's streak if there is one.
        """
        stats = self._load()
        key = self.today_key()

        if key not in stats:
            yesterday = stats.get(self.yesterday_key())
            streak = yesterday.streak + 1 if yesterday else 1
            stats[key] = DailyStats(date=key, streak=streak)
            logger.info(f"Started stats for {key} (streak {streak})")

        stats[key].record(grade, is_new_card)
        self._save(stats)

    def get_stats_for_date(self, date_key: str) -> DailyStats | None:
        return self._load().get(date_key)

    def get_today_stats(self) -> DailyStats | None:
        return self.get_stats_for_date(self.today_key())

    def get_all_stats(self) -> list[DailyStats]:
        """All stored days, newest first."""
        return sorted(self._load().values(), key=lambda day: day.date, reverse=True)

    def get_card_state_stats(self) -> dict[CardState, int]:
        return self._calc.card_state_histogram(self._cards.all())

    def get_current_streak(self) -> int:
        stats = self._load()
        return self._calc.current_streak(
            stats.get(self.today_key()), stats.get(self.yesterday_key())
        )

    def get_last_n_days_stats(self, days: int) -> list[DailyStats]:
        """
        One entry per day for the `days` days ending today, oldest first.

        Days without reviews are zero-filled and not persisted.
        """
        stats = self._load()
        now = self._clock()
        day_start_hour = self._settings.get_day_start_hour()

        result: list[DailyStats] = []
        for offset in range(days - 1, -1, -1):
            key = local_date_key(shift_days(now, -offset, self._tz), day_start_hour, self._tz)
            result.append(stats.get(key) or self._calc.empty_day(key))
        return result

    def get_next_n_days_stats(self, days: int) -> list[UpcomingReviewStats]:
        """Due-card counts for the `days` days starting today."""
        now = self._clock()
        window = [shift_days(now, offset, self._tz) for offset in range(days)]
        return self._calc.upcoming_reviews(
            self._cards.all(), window, self._settings.get_day_start_hour(), self._tz
        )

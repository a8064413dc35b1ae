"""
Stats calculator for card-derived statistics.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, tzinfo

from leetsrs.application.calendar import is_due_by_date, local_date_key
from leetsrs.domain.cards.models import Card, CardState
from leetsrs.domain.stats.models import DailyStats, UpcomingReviewStats


class StatsCalculator:
    """
    Computes histograms and forecasts from a card collection.

    Stateless and side-effect free.
    """

    def card_state_histogram(self, cards: Iterable[Card]) -> dict[CardState, int]:
        """
        Count cards per memory state. Every state is present; paused cards count.
        """
        histogram = {state: 0 for state in CardState}
        for card in cards:
            histogram[card.memory.state] += 1
        return histogram

    def upcoming_reviews(
        self,
        cards: Iterable[Card],
        days: Sequence[datetime],
        day_start_hour: int = 0,
        tz: tzinfo | None = None,
    ) -> list[UpcomingReviewStats]:
        """
        Count non-paused cards due on each of `days`.

        Each card lands on the first day it is due by, so an overdue card is
        counted once, on the first day of the window.
        """
        result = [UpcomingReviewStats(date=local_date_key(d, day_start_hour, tz)) for d in days]

        for card in cards:
            if card.paused:
                continue
            for i, day in enumerate(days):
                if is_due_by_date(card.memory.due, day, day_start_hour, tz):
                    result[i].count += 1
                    break

        return result

    def empty_day(self, date_key: str) -> DailyStats:
        """Zero-filled stand-in for a day without reviews (streak 0)."""
        return DailyStats(date=date_key, streak=0)

    def current_streak(self, today: DailyStats | None, yesterday: DailyStats | None) -> int:
        """
        Streak as of now: today's if reviewed today, otherwise yesterday's
        streak is still alive until the day ends.
        """
        if today is not None:
            return today.streak
        if yesterday is not None:
            return yesterday.streak
        return 0

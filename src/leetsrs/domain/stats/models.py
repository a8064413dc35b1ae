"""
Domain models for review statistics.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field

from leetsrs.domain.cards.models import Grade


def empty_grade_breakdown() -> dict[Grade, int]:
    return {grade: 0 for grade in Grade}


@dataclass
class DailyStats:
    """
    Aggregate counters for one calendar day.

    Attributes:
        date: Day key in YYYY-MM-DD form (day-start-hour adjusted).
        total_reviews: All grading events that day.
        grade_breakdown: Count per grade, every grade present.
        new_cards: Grading events on cards that were New at the time.
        reviewed_cards: Grading events on cards that were not New.
        streak: Consecutive days with at least one review, ending at this day.
    """

    date: str
    total_reviews: int = 0
    grade_breakdown: dict[Grade, int] = field(default_factory=empty_grade_breakdown)
    new_cards: int = 0
    reviewed_cards: int = 0
    streak: int = 0

    def record(self, grade: Grade, is_new_card: bool) -> None:
        self.total_reviews += 1
        self.grade_breakdown[grade] += 1
        if is_new_card:
            self.new_cards += 1
        else:
            self.reviewed_cards += 1


@dataclass
class UpcomingReviewStats:
    date: str
    count: int = 0

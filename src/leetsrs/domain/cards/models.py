"""
Domain models for review cards.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum


class CardState(IntEnum):
    """Learning phase of a card. Values match the FSRS state numbering."""

    New = 0
    Learning = 1
    Review = 2
    Relearning = 3


class Grade(IntEnum):
    """Self-assessed outcome of a review (1=Again, 2=Hard, 3=Good, 4=Easy)."""

    Again = 1
    Hard = 2
    Good = 3
    Easy = 4


class Difficulty(str, Enum):
    Easy = "Easy"
    Medium = "Medium"
    Hard = "Hard"


@dataclass
class MemoryState:
    """
    Memory-model state of a card.

    Only `state` and `due` are interpreted by the review engine; the rest is
    produced and consumed by the memory model.

    Attributes:
        state: Learning phase.
        due: Aware UTC instant of the next scheduled review.
        last_review: Aware UTC instant of the latest review, None if never graded.
        stability: Days until recall probability drops to 90%.
        difficulty: FSRS difficulty (1-10).
        elapsed_days: Days between the last two reviews.
        scheduled_days: Interval assigned by the last review (days).
        learning_steps: Position in the (re)learning steps.
        reps: Total number of reviews.
        lapses: Number of times a Review card was forgotten.
    """

    state: CardState
    due: datetime
    last_review: datetime | None = None
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    learning_steps: int = 0
    reps: int = 0
    lapses: int = 0


@dataclass
class Card:
    """A single trackable problem."""

    id: str
    slug: str
    name: str
    external_id: str
    difficulty: Difficulty
    created_at: datetime
    memory: MemoryState
    paused: bool = False

    @property
    def is_new(self) -> bool:
        return self.memory.state == CardState.New


@dataclass
class RateResult:
    """Outcome of grading a card."""

    card: Card
    should_requeue: bool  # Still due today, show it again this session


@dataclass
class Note:
    text: str = field(default="")

"""
FSRS memory model: infrastructure adapter for the `fsrs` library.

Implements MemoryModel by translating MemoryState to and from `fsrs.Card`.
The library has no "New" state: a never-graded card is a Learning card on its
first step with no stability yet, which is what `_to_fsrs_card` builds for it.
"""

import logging
from datetime import datetime, timezone

from fsrs import Card as FsrsCard
from fsrs import Rating, Scheduler, State

from leetsrs.domain.cards.models import CardState, Grade, MemoryState
from leetsrs.domain.constants import FSRS_DESIRED_RETENTION, FSRS_MAXIMUM_INTERVAL
from leetsrs.domain.ports import MemoryModel

logger = logging.getLogger(__name__)

# fsrs insists on a card id; the value plays no part in scheduling
_PLACEHOLDER_CARD_ID = 1


class FsrsMemoryModel(MemoryModel):
    """
    FSRS scheduler with fuzzing disabled, so identical inputs always produce
    identical due dates.
    """

    def __init__(
        self,
        maximum_interval: int = FSRS_MAXIMUM_INTERVAL,
        desired_retention: float = FSRS_DESIRED_RETENTION,
    ):
        self.scheduler = Scheduler(
            desired_retention=desired_retention,
            maximum_interval=maximum_interval,
            enable_fuzzing=False,
        )

    def create_empty(self, now: datetime) -> MemoryState:
        return MemoryState(state=CardState.New, due=now.astimezone(timezone.utc))

    def schedule(self, memory: MemoryState, grade: Grade, now: datetime) -> MemoryState:
        now = now.astimezone(timezone.utc)
        card = self._to_fsrs_card(memory)
        updated, _ = self.scheduler.review_card(card, Rating(int(grade)), review_datetime=now)

        lapses = memory.lapses
        if memory.state == CardState.Review and grade == Grade.Again:
            lapses += 1

        elapsed_days = (now - memory.last_review).days if memory.last_review else 0
        result = MemoryState(
            state=CardState(updated.state.value),
            due=updated.due,
            last_review=now,
            stability=float(updated.stability or 0.0),
            difficulty=float(updated.difficulty or 0.0),
            elapsed_days=max(0, elapsed_days),
            scheduled_days=max(0, (updated.due - now).days),
            learning_steps=updated.step if updated.step is not None else 0,
            reps=memory.reps + 1,
            lapses=lapses,
        )
        logger.debug(
            f"Scheduled {memory.state.name} -> {result.state.name} "
            f"(grade={grade.name}, due={result.due.isoformat()})"
        )
        return result

    def _to_fsrs_card(self, memory: MemoryState) -> FsrsCard:
        if memory.state == CardState.New:
            return FsrsCard(
                card_id=_PLACEHOLDER_CARD_ID,
                state=State.Learning,
                step=0,
                due=memory.due.astimezone(timezone.utc),
            )

        in_steps = memory.state in (CardState.Learning, CardState.Relearning)
        return FsrsCard(
            card_id=_PLACEHOLDER_CARD_ID,
            state=State(int(memory.state)),
            step=memory.learning_steps if in_steps else None,
            stability=memory.stability,
            difficulty=memory.difficulty,
            due=memory.due.astimezone(timezone.utc),
            last_review=(
                memory.last_review.astimezone(timezone.utc) if memory.last_review else None
            ),
        )

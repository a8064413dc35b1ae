"""
Card lifecycle service.

Every operation loads the whole card collection, changes one entry and writes
the collection back. Callers must not run two mutations at the same time.
"""

import logging
from datetime import datetime, tzinfo

from leetsrs.application.calendar import Clock, floor_ms, is_due_by_date, shift_days, utc_now
from leetsrs.application.card_store import CardStore
from leetsrs.application.id_service import generate_card_id
from leetsrs.application.note_service import NoteService
from leetsrs.application.queue_builder import build_review_queue
from leetsrs.application.settings_service import SettingsService
from leetsrs.application.stats.service import StatsService
from leetsrs.domain.cards.models import Card, Difficulty, Grade, RateResult
from leetsrs.domain.errors import NotFoundError
from leetsrs.domain.ports import KeyValueStore, MemoryModel

logger = logging.getLogger(__name__)


class CardService:
    """
    Application service for adding, grading and scheduling cards.

    Depends on the KeyValueStore and MemoryModel ports, never on concrete
    adapters.
    """

    def __init__(
        self,
        store: KeyValueStore,
        memory_model: MemoryModel,
        settings: SettingsService,
        stats: StatsService,
        notes: NoteService,
        clock: Clock = utc_now,
        tz: tzinfo | None = None,
    ):
        self._cards = CardStore(store)
        self._model = memory_model
        self._settings = settings
        self._stats = stats
        self._notes = notes
        self._clock = clock
        self._tz = tz

    def _now(self) -> datetime:
        return floor_ms(self._clock())

    def _create_card(
        self, slug: str, name: str, external_id: str, difficulty: Difficulty, now: datetime
    ) -> Card:
        return Card(
            id=generate_card_id(),
            slug=slug,
            name=name,
            external_id=external_id,
            difficulty=Difficulty(difficulty),
            created_at=now,
            memory=self._model.create_empty(now),
            paused=False,
        )

    def add_card(self, slug: str, name: str, external_id: str, difficulty: Difficulty) -> Card:
        """
        Start tracking a problem.

        Idempotent: if `slug` is already tracked the stored card is returned
        untouched, even when the other arguments differ.
        """
        cards = self._cards.load()
        if slug in cards:
            return cards[slug]

        card = self._create_card(slug, name, external_id, difficulty, self._now())
        cards[slug] = card
        self._cards.save(cards)
        logger.info(f"Added card {slug} ({card.id})")
        return card

    def get_all_cards(self) -> list[Card]:
        return self._cards.all()

    def get_card(self, slug: str) -> Card | None:
        return self._cards.load().get(slug)

    def remove_card(self, slug: str) -> None:
        """Stop tracking `slug` and drop its note. Unknown slugs are ignored."""
        cards = self._cards.load()
        card = cards.pop(slug, None)
        if card is None:
            logger.debug(f"Remove ignored, no card {slug}")
            return

        self._cards.save(cards)
        self._notes.delete_note(card.id)
        logger.info(f"Removed card {slug}")

    def delay_card(self, slug: str, days: int) -> Card:
        """
        Push the card's due date back by `days` calendar days.

        The delay is added to the current due date, not to now, so repeated
        delays compound.
        """
        cards = self._cards.load()
        if slug not in cards:
            raise NotFoundError(slug)

        card = cards[slug]
        card.memory.due = shift_days(card.memory.due, days, self._tz)
        self._cards.save(cards)
        logger.info(f"Delayed {slug} by {days} day(s) to {card.memory.due.isoformat()}")
        return card

    def set_pause_status(self, slug: str, paused: bool) -> Card:
        cards = self._cards.load()
        if slug not in cards:
            raise NotFoundError(slug)

        card = cards[slug]
        card.paused = paused
        self._cards.save(cards)
        logger.info(f"{'Paused' if paused else 'Resumed'} {slug}")
        return card

    def rate_card(
        self,
        slug: str,
        name: str,
        grade: Grade,
        external_id: str,
        difficulty: Difficulty,
    ) -> RateResult:
        """
        Grade a review and reschedule the card.

        Untracked problems are added on the fly. Today's stats are updated
        after the card is saved.

        Returns:
            The updated card, and whether it is still due today and should be
            shown again this session.
        """
        grade = Grade(grade)
        cards = self._cards.load()
        now = self._now()

        if slug in cards:
            card = cards[slug]
        else:
            card = self._create_card(slug, name, external_id, difficulty, now)
        was_new = card.is_new

        card.memory = self._model.schedule(card.memory, grade, now)
        cards[slug] = card
        self._cards.save(cards)
        logger.info(
            f"Rated {slug} {grade.name}: {card.memory.state.name}, "
            f"due {card.memory.due.isoformat()}"
        )

        self._stats.update_stats(grade, was_new)

        should_requeue = is_due_by_date(
            card.memory.due, now, self._settings.get_day_start_hour(), self._tz
        )
        return RateResult(card=card, should_requeue=should_requeue)

    def get_review_queue(self) -> list[Card]:
        """Today's queue: due review cards plus the remaining new-card allowance."""
        today = self._stats.get_today_stats()
        return build_review_queue(
            self._cards.all(),
            now=self._clock(),
            day_start_hour=self._settings.get_day_start_hour(),
            max_new_cards_per_day=self._settings.get_max_new_cards_per_day(),
            new_cards_done_today=today.new_cards if today else 0,
            tz=self._tz,
        )

"""
Queue builder for daily review sessions.

Builds the ordered review queue by:
1. Dropping paused cards and cards not due by today
2. Capping new cards at the remaining daily allowance
3. Ordering everything by exact due instant, then slug
"""

import logging
from collections.abc import Iterable
from datetime import datetime, tzinfo

from leetsrs.application.calendar import is_due_by_date
from leetsrs.domain.cards.models import Card

logger = logging.getLogger(__name__)


def due_then_slug(card: Card) -> tuple[datetime, str]:
    """Sort key: earliest due first, slug breaks ties for a reproducible order."""
    return (card.memory.due, card.slug)


def build_review_queue(
    cards: Iterable[Card],
    now: datetime,
    day_start_hour: int = 0,
    max_new_cards_per_day: int = 3,
    new_cards_done_today: int = 0,
    tz: tzinfo | None = None,
) -> list[Card]:
    """
    Build today's review queue.

    Args:
        cards: Every stored card.
        now: Reference instant deciding which day is "today".
        day_start_hour: Hour at which a new day begins.
        max_new_cards_per_day: Daily allowance of new cards.
        new_cards_done_today: New cards already graded today.
        tz: Local timezone; None means the system timezone.

    Returns:
        All due review cards plus at most the remaining allowance of new cards,
        sorted by (due, slug).
    """
    due_cards = [
        card
        for card in cards
        if not card.paused and is_due_by_date(card.memory.due, now, day_start_hour, tz)
    ]

    review_cards = [card for card in due_cards if not card.is_new]
    new_cards = [card for card in due_cards if card.is_new]

    # Sort before slicing so the same new cards are picked every time
    new_cards.sort(key=due_then_slug)

    remaining = max(0, max_new_cards_per_day - new_cards_done_today)
    limited_new_cards = new_cards[:remaining]

    queue = review_cards + limited_new_cards
    queue.sort(key=due_then_slug)

    logger.debug(
        f"Queue: {len(review_cards)} review + {len(limited_new_cards)}/{len(new_cards)} new "
        f"(allowance {remaining})"
    )
    return queue

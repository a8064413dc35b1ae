"""
JSON wire format for stored collections.

Instants are stored as integer epoch milliseconds, never as structured dates.
Keys are camelCase at the top level and snake_case inside `fsrs`, so exported
documents stay compatible with what the browser extension writes.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any

from leetsrs.domain.cards.models import Card, CardState, Difficulty, Grade, MemoryState, Note
from leetsrs.domain.stats.models import DailyStats, empty_grade_breakdown

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_epoch_ms(instant: datetime) -> int:
    return (instant - EPOCH) // _ONE_MS


def from_epoch_ms(value: int) -> datetime:
    return EPOCH + timedelta(milliseconds=value)


def dumps(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def loads(raw: bytes | None, default: Any = None) -> Any:
    if raw is None:
        return default
    return json.loads(raw.decode("utf-8"))


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


def memory_to_stored(memory: MemoryState) -> dict[str, Any]:
    stored: dict[str, Any] = {
        "due": to_epoch_ms(memory.due),
        "stability": memory.stability,
        "difficulty": memory.difficulty,
        "elapsed_days": memory.elapsed_days,
        "scheduled_days": memory.scheduled_days,
        "learning_steps": memory.learning_steps,
        "reps": memory.reps,
        "lapses": memory.lapses,
        "state": int(memory.state),
    }
    if memory.last_review is not None:
        stored["last_review"] = to_epoch_ms(memory.last_review)
    return stored


def memory_from_stored(stored: dict[str, Any]) -> MemoryState:
    last_review = stored.get("last_review")
    return MemoryState(
        state=CardState(stored["state"]),
        due=from_epoch_ms(stored["due"]),
        last_review=from_epoch_ms(last_review) if last_review is not None else None,
        stability=float(stored.get("stability", 0.0)),
        difficulty=float(stored.get("difficulty", 0.0)),
        elapsed_days=int(stored.get("elapsed_days", 0)),
        scheduled_days=int(stored.get("scheduled_days", 0)),
        learning_steps=int(stored.get("learning_steps", 0)),
        reps=int(stored.get("reps", 0)),
        lapses=int(stored.get("lapses", 0)),
    )


def card_to_stored(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "slug": card.slug,
        "name": card.name,
        "externalId": card.external_id,
        "difficulty": card.difficulty.value,
        "createdAt": to_epoch_ms(card.created_at),
        "paused": card.paused,
        "fsrs": memory_to_stored(card.memory),
    }


def card_from_stored(stored: dict[str, Any]) -> Card:
    return Card(
        id=stored["id"],
        slug=stored["slug"],
        name=stored["name"],
        external_id=stored.get("externalId", ""),
        difficulty=Difficulty(stored["difficulty"]),
        created_at=from_epoch_ms(stored["createdAt"]),
        memory=memory_from_stored(stored["fsrs"]),
        paused=bool(stored.get("paused", False)),
    )


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


def stats_to_stored(stats: DailyStats) -> dict[str, Any]:
    return {
        "date": stats.date,
        "totalReviews": stats.total_reviews,
        "gradeBreakdown": {str(int(g)): n for g, n in stats.grade_breakdown.items()},
        "newCards": stats.new_cards,
        "reviewedCards": stats.reviewed_cards,
        "streak": stats.streak,
    }


def stats_from_stored(stored: dict[str, Any]) -> DailyStats:
    breakdown = empty_grade_breakdown()
    for grade, count in stored.get("gradeBreakdown", {}).items():
        breakdown[Grade(int(grade))] = int(count)
    return DailyStats(
        date=stored["date"],
        total_reviews=int(stored.get("totalReviews", 0)),
        grade_breakdown=breakdown,
        new_cards=int(stored.get("newCards", 0)),
        reviewed_cards=int(stored.get("reviewedCards", 0)),
        streak=int(stored.get("streak", 0)),
    )


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


def note_to_stored(note: Note) -> dict[str, Any]:
    return {"text": note.text}


def note_from_stored(stored: dict[str, Any]) -> Note:
    return Note(text=stored.get("text", ""))

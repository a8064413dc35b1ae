"""Free-text notes attached to cards by card id."""

import logging

from leetsrs.domain.cards.models import Note
from leetsrs.domain.constants import MAX_NOTE_LENGTH, StorageKeys
from leetsrs.domain.errors import ValidationError
from leetsrs.domain.ports import KeyValueStore
from leetsrs.infrastructure.serialization import (
    dumps,
    loads,
    note_from_stored,
    note_to_stored,
)

logger = logging.getLogger(__name__)


class NoteService:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def get_note(self, card_id: str) -> Note | None:
        stored = loads(self._store.get(StorageKeys.note(card_id)))
        return note_from_stored(stored) if stored is not None else None

    def save_note(self, card_id: str, text: str) -> None:
        """
        Store `text` as the note for `card_id`.

        Blank text deletes the note instead of storing an empty one.
        """
        if len(text) > MAX_NOTE_LENGTH:
            raise ValidationError(f"Note must be at most {MAX_NOTE_LENGTH} characters")
        if not text.strip():
            self.delete_note(card_id)
            return
        self._store.set(StorageKeys.note(card_id), dumps(note_to_stored(Note(text=text))))
        logger.info(f"Saved note for {card_id}")

    def delete_note(self, card_id: str) -> None:
        self._store.remove(StorageKeys.note(card_id))
        logger.debug(f"Deleted note for {card_id}")

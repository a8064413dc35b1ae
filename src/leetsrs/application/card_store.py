"""
Card collection persistence.

The whole collection is read and written as one JSON object keyed by slug.
Callers load, mutate one entry, and save the collection back.
"""

from leetsrs.domain.cards.models import Card
from leetsrs.domain.constants import StorageKeys
from leetsrs.domain.ports import KeyValueStore
from leetsrs.infrastructure.serialization import card_from_stored, card_to_stored, dumps, loads


class CardStore:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self) -> dict[str, Card]:
        stored = loads(self._store.get(StorageKeys.CARDS), default={})
        return {slug: card_from_stored(raw) for slug, raw in stored.items()}

    def save(self, cards: dict[str, Card]) -> None:
        payload = {slug: card_to_stored(card) for slug, card in cards.items()}
        self._store.set(StorageKeys.CARDS, dumps(payload))

    def all(self) -> list[Card]:
        return list(self.load().values())

"""
Export, import and reset of everything leetsrs stores.

The export document is flat, versioned JSON. Collections are copied in their
stored form, so instants stay integer epoch milliseconds and an import
followed by an export reproduces the same data.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic import ValidationError as PydanticValidationError

from leetsrs.consts import VERSION
from leetsrs.domain import constants
from leetsrs.domain.constants import StorageKeys
from leetsrs.domain.errors import ImportDataError
from leetsrs.domain.ports import KeyValueStore
from leetsrs.infrastructure.serialization import (
    card_from_stored,
    dumps,
    loads,
    stats_from_stored,
)

logger = logging.getLogger(__name__)

_SETTING_KEYS = {
    "maxNewCardsPerDay": StorageKeys.MAX_NEW_CARDS_PER_DAY,
    "dayStartHour": StorageKeys.DAY_START_HOUR,
    "animationsEnabled": StorageKeys.ANIMATIONS_ENABLED,
    "theme": StorageKeys.THEME,
}


class ExportedSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    maxNewCardsPerDay: (
        Annotated[
            StrictInt,
            Field(ge=constants.MIN_NEW_CARDS_PER_DAY, le=constants.MAX_NEW_CARDS_PER_DAY),
        ]
        | None
    ) = None
    dayStartHour: (
        Annotated[
            StrictInt,
            Field(ge=constants.MIN_DAY_START_HOUR, le=constants.MAX_DAY_START_HOUR),
        ]
        | None
    ) = None
    animationsEnabled: StrictBool | None = None
    theme: Literal["light", "dark"] | None = None


class ExportPayload(BaseModel):
    cards: dict[str, dict[str, Any]]
    stats: dict[str, dict[str, Any]]
    notes: dict[str, dict[str, Any]]
    settings: ExportedSettings = Field(default_factory=ExportedSettings)


class ExportDocument(BaseModel):
    version: str = Field(min_length=1)
    exportDate: str = Field(min_length=1)
    data: ExportPayload


def compare_versions(left: str, right: str) -> int:
    """
    Compare dotted version strings numerically.

    Returns:
        1 if left is newer, -1 if older, 0 if equal. Missing parts count as 0.
    """
    try:
        left_parts = [int(part) for part in left.split(".")]
        right_parts = [int(part) for part in right.split(".")]
    except ValueError as e:
        raise ImportDataError(f"Invalid version string: {left!r}") from e

    width = max(len(left_parts), len(right_parts))
    left_parts += [0] * (width - len(left_parts))
    right_parts += [0] * (width - len(right_parts))
    return (left_parts > right_parts) - (left_parts < right_parts)


class ImportExportService:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def export_data(self) -> str:
        cards = loads(self._store.get(StorageKeys.CARDS), default={})
        stats = loads(self._store.get(StorageKeys.STATS), default={})

        notes: dict[str, Any] = {}
        for stored_card in cards.values():
            note = loads(self._store.get(StorageKeys.note(stored_card["id"])))
            if note is not None:
                notes[stored_card["id"]] = note

        settings: dict[str, Any] = {}
        for name, key in _SETTING_KEYS.items():
            value = loads(self._store.get(key))
            if value is not None:
                settings[name] = value

        document = {
            "version": VERSION,
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "data": {
                "cards": cards,
                "stats": stats,
                "notes": notes,
                "settings": settings,
            },
        }
        logger.info(f"Exported {len(cards)} cards, {len(stats)} days, {len(notes)} notes")
        return json.dumps(document, indent=2)

    def import_data(self, json_data: str) -> None:
        """
        Replace all stored data with the contents of an export document.

        Raises:
            ImportDataError: If the document is not valid JSON, is missing
                required sections, or comes from a newer version.
        """
        try:
            raw = json.loads(json_data)
        except json.JSONDecodeError as e:
            raise ImportDataError("Invalid JSON format") from e

        try:
            document = ExportDocument.model_validate(raw)
        except PydanticValidationError as e:
            raise ImportDataError(f"Invalid export data structure: {e}") from e

        if compare_versions(document.version, VERSION) == 1:
            raise ImportDataError(
                f"Unsupported export version: {document.version}. Expected: {VERSION}"
            )

        data = document.data
        try:
            for slug, stored_card in data.cards.items():
                if card_from_stored(stored_card).slug != slug:
                    raise ImportDataError(f"Card {slug!r} is stored under a different slug")
            for stored_day in data.stats.values():
                stats_from_stored(stored_day)
        except (KeyError, TypeError, ValueError) as e:
            raise ImportDataError(f"Invalid cards or stats data: {e}") from e

        self.reset_all_data()

        self._store.set(StorageKeys.CARDS, dumps(data.cards))
        self._store.set(StorageKeys.STATS, dumps(data.stats))
        for card_id, note in data.notes.items():
            self._store.set(StorageKeys.note(card_id), dumps(note))

        for name, value in data.settings.model_dump(exclude_none=True).items():
            self._store.set(_SETTING_KEYS[name], dumps(value))

        logger.info(
            f"Imported {len(data.cards)} cards, {len(data.stats)} days, {len(data.notes)} notes "
            f"from version {document.version}"
        )

    def reset_all_data(self) -> None:
        cards = loads(self._store.get(StorageKeys.CARDS), default={})

        self._store.remove(StorageKeys.CARDS)
        self._store.remove(StorageKeys.STATS)
        for key in StorageKeys.SETTINGS:
            self._store.remove(key)
        for stored_card in cards.values():
            self._store.remove(StorageKeys.note(stored_card["id"]))

        logger.info(f"Reset all data ({len(cards)} cards removed)")

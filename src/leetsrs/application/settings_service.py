"""Learner settings stored alongside the cards.

Values are read from the store on every call, never cached, so a change is
visible to the very next queue or stats computation.
"""

import logging
from typing import Any

from leetsrs.domain import constants
from leetsrs.domain.constants import StorageKeys
from leetsrs.domain.errors import ValidationError
from leetsrs.domain.ports import KeyValueStore
from leetsrs.infrastructure.serialization import dumps, loads

logger = logging.getLogger(__name__)


def _require_int(value: Any, label: str, low: int, high: int) -> int:
    # bool is an int subclass; True is not a valid hour
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be a whole number")
    if value < low or value > high:
        raise ValidationError(f"{label} must be between {low} and {high}")
    return value


class SettingsService:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def _get(self, key: str, default: Any) -> Any:
        value = loads(self._store.get(key))
        return default if value is None else value

    def _set(self, key: str, value: Any) -> None:
        self._store.set(key, dumps(value))
        logger.info(f"Setting {key.rsplit(':', 1)[-1]} = {value!r}")

    def get_max_new_cards_per_day(self) -> int:
        return self._get(StorageKeys.MAX_NEW_CARDS_PER_DAY, constants.DEFAULT_MAX_NEW_CARDS_PER_DAY)

    def set_max_new_cards_per_day(self, value: int) -> None:
        _require_int(
            value,
            "Max new cards per day",
            constants.MIN_NEW_CARDS_PER_DAY,
            constants.MAX_NEW_CARDS_PER_DAY,
        )
        self._set(StorageKeys.MAX_NEW_CARDS_PER_DAY, value)

    def get_day_start_hour(self) -> int:
        return self._get(StorageKeys.DAY_START_HOUR, constants.DEFAULT_DAY_START_HOUR)

    def set_day_start_hour(self, value: int) -> None:
        _require_int(
            value,
            "Day start hour",
            constants.MIN_DAY_START_HOUR,
            constants.MAX_DAY_START_HOUR,
        )
        self._set(StorageKeys.DAY_START_HOUR, value)

    def get_animations_enabled(self) -> bool:
        return self._get(StorageKeys.ANIMATIONS_ENABLED, constants.DEFAULT_ANIMATIONS_ENABLED)

    def set_animations_enabled(self, value: bool) -> None:
        if not isinstance(value, bool):
            raise ValidationError("Animations enabled must be true or false")
        self._set(StorageKeys.ANIMATIONS_ENABLED, value)

    def get_theme(self) -> str:
        return self._get(StorageKeys.THEME, constants.DEFAULT_THEME)

    def set_theme(self, value: str) -> None:
        if value not in constants.THEMES:
            raise ValidationError('Theme must be either "light" or "dark"')
        self._set(StorageKeys.THEME, value)

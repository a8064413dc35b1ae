"""Centralized constants for leetsrs.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Storage keys ----------


class StorageKeys:
    CARDS = "local:leetsrs:cards"
    STATS = "local:leetsrs:stats"
    NOTES = "local:leetsrs:notes"
    MAX_NEW_CARDS_PER_DAY = "sync:leetsrs:maxNewCardsPerDay"
    DAY_START_HOUR = "sync:leetsrs:dayStartHour"
    ANIMATIONS_ENABLED = "sync:leetsrs:animationsEnabled"
    THEME = "sync:leetsrs:theme"

    SETTINGS = (MAX_NEW_CARDS_PER_DAY, DAY_START_HOUR, ANIMATIONS_ENABLED, THEME)

    @staticmethod
    def note(card_id: str) -> str:
        return f"{StorageKeys.NOTES}:{card_id}"


# ---------- Review settings ----------
DEFAULT_MAX_NEW_CARDS_PER_DAY = 3
MIN_NEW_CARDS_PER_DAY = 0
MAX_NEW_CARDS_PER_DAY = 100

DEFAULT_DAY_START_HOUR = 0
MIN_DAY_START_HOUR = 0
MAX_DAY_START_HOUR = 23

# ---------- Appearance ----------
THEMES = ("light", "dark")
DEFAULT_THEME = "dark"
DEFAULT_ANIMATIONS_ENABLED = True

# ---------- FSRS ----------
FSRS_MAXIMUM_INTERVAL = 1000  # days
FSRS_DESIRED_RETENTION = 0.9

# ---------- Notes ----------
MAX_NOTE_LENGTH = 5000

# ---------- Stats windows ----------
DEFAULT_HISTORY_DAYS = 30
DEFAULT_FORECAST_DAYS = 14

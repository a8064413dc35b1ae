"""Stable card identifiers."""

from ulid import ULID


def generate_card_id() -> str:
    """Generate a stable card ID using ULID. IDs are never reused."""
    return f"card_{ULID()}"

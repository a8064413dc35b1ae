"""
Ports (interfaces) for storage and scheduling.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .cards.models import Grade, MemoryState


class KeyValueStore(ABC):
    """
    Port for persisting whole collections under a small set of logical keys.

    Implementations:
        - InMemoryStore: Process-local dict, used by tests and dry runs.
        - FileStore: One file per key under a data directory.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """
        Read the value stored under `key`.

        Returns:
            The raw bytes, or None when nothing is stored.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Replace the value stored under `key`."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete `key`. Removing a missing key is a no-op."""
        pass


class MemoryModel(ABC):
    """
    Port for the spaced-repetition formula.

    Implementations must be deterministic for identical inputs and must never
    decrease `reps` or `lapses`.
    """

    @abstractmethod
    def create_empty(self, now: datetime) -> MemoryState:
        """Initial state of a never-graded card: state New, due `now`."""
        pass

    @abstractmethod
    def schedule(self, memory: MemoryState, grade: Grade, now: datetime) -> MemoryState:
        """
        Apply a review graded `grade` at `now`.

        Args:
            memory: Current state (not mutated).
            grade: Learner's self-assessment.
            now: Aware instant of the review.

        Returns:
            The new state, including the next `due` instant.
        """
        pass

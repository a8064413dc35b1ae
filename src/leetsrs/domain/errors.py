"""Exceptions raised by the review engine."""


class LeetSrsError(Exception):
    """Base class for every error leetsrs raises on purpose."""


class NotFoundError(LeetSrsError, KeyError):
    """No card is stored under the given slug."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f'Card with slug "{slug}" not found')

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class ValidationError(LeetSrsError, ValueError):
    """A setting or note value is out of range or of the wrong type."""


class ImportDataError(LeetSrsError, ValueError):
    """An export document could not be parsed or is not supported."""

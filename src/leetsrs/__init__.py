"""leetsrs: spaced-repetition review queue for coding-practice problems."""

from leetsrs.consts import VERSION

__version__ = VERSION

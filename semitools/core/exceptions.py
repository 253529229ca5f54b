"""
Exception hierarchy for the calculator suite.

Engines degrade to zero/False/NO_DATA for unresolved lookups; these
exceptions cover bad user input, explicit id lookups and blob decoding.
"""


class SemiToolsError(Exception):
    """Base class for all calculator errors."""


class ValidationError(SemiToolsError, ValueError):
    """Malformed or out-of-range user input. Never mutates a collection."""


class NotFoundError(SemiToolsError, LookupError):
    """An explicit lookup by id found nothing."""


class PersistenceDecodeError(SemiToolsError):
    """A stored blob could not be decoded into its entity list."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Could not decode collection '{key}': {reason}")
        self.key = key
        self.reason = reason

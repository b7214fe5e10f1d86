"""Error taxonomy shared by the store, the adapters and the view layer."""

from __future__ import annotations


class MonthReviewError(Exception):
    """Base class for every error surfaced to the view layer."""


class ValidationError(MonthReviewError):
    """Input rejected before any backend call (blank name, zero rating, too many images)."""


class PersistenceError(MonthReviewError):
    """A backend call failed. The in-memory snapshot was left at its last-known-good state."""


class NotFoundError(MonthReviewError):
    """A mutation targeted an id that is not in the collection."""


class AuthError(MonthReviewError):
    """The identity service could not be reached or rejected the request."""

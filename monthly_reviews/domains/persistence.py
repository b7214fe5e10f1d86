"""Port definition for durable storage of months, reviews and images.

Responsibilities:
  - Define the capability set every storage adapter provides.
Must not:
  - Implement logic; interface only.

Adapters raise `PersistenceError` for storage faults and `NotFoundError` when an
update or delete targets a missing id.
"""

from __future__ import annotations

from typing import Any, Protocol

MONTHS = "months"
REVIEWS = "reviews"
COLLECTIONS = (MONTHS, REVIEWS)


class ReviewBackend(Protocol):
    def scan(self, collection: str, descending: bool = True) -> list[dict[str, Any]]:
        """Every record in the collection, ordered by created_at."""
        ...

    def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """Store a new record and return it as stored."""
        ...

    def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into an existing record and return the result."""
        ...

    def delete(self, collection: str, record_id: str) -> None:
        ...

    def upload_image(self, filename: str, content: bytes, content_type: str) -> str:
        """Store image bytes and return a reference usable as an <img> source."""
        ...

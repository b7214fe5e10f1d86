"""
Month/review state store: the in-memory snapshot the UI renders from.

Every mutation is backend-confirmed: inputs are validated, the persistence port
is called, and only the record it returns is written into the snapshot. When
the port raises, the snapshot keeps its previous value and the error propagates
to the caller. The store never branches on which adapter it was given.
"""

from __future__ import annotations

import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from monthly_reviews.domains.errors import MonthReviewError, NotFoundError, ValidationError
from monthly_reviews.domains.models import (
    DEFAULT_NICKNAME,
    SPECIFIC_FIELDS,
    Month,
    Review,
    ReviewDraft,
    parse_timestamp,
    slugify_month_name,
    utc_now_iso,
    validate_images,
    validate_status,
)
from monthly_reviews.domains.persistence import MONTHS, REVIEWS, ReviewBackend
from monthly_reviews.utils.logger import get_logger

logger = get_logger()


def select_active_month_id(months: list[Month]) -> str | None:
    """First month marked active, else the first month, else None (nothing to show)."""
    for m in months:
        if m.status == "active":
            return m.id
    return months[0].id if months else None


def _new_review_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def _safe_filename(filename: str) -> str:
    return re.sub(r"[^a-zA-Z0-9.]", "", filename or "") or "image"


@dataclass
class MonthSummary:
    review_count: int = 0
    average_rating: float | None = None
    average_specifics: dict[str, float | None] = field(default_factory=dict)


class MonthStore:
    """
    Owns the months and reviews collections for one UI session.

    Months are kept oldest first (new months are appended); reviews are kept
    newest first (new reviews are prepended). The active month pointer is
    session state and is never persisted.
    """

    def __init__(self, backend: ReviewBackend, autoload: bool = True) -> None:
        self._backend = backend
        self._months: list[Month] = []
        self._reviews: list[Review] = []
        self._active_month_id: str | None = None
        if autoload:
            self.load()

    # --- snapshot ---

    @property
    def months(self) -> list[Month]:
        return list(self._months)

    @property
    def reviews(self) -> list[Review]:
        return list(self._reviews)

    @property
    def active_month_id(self) -> str | None:
        return self._active_month_id

    @property
    def active_month(self) -> Month | None:
        if self._active_month_id is None:
            return None
        return next((m for m in self._months if m.id == self._active_month_id), None)

    def get_month(self, month_id: str) -> Month:
        return self._months[self._month_index(month_id)]

    def get_review(self, review_id: str) -> Review:
        return self._reviews[self._review_index(review_id)]

    def _month_index(self, month_id: str) -> int:
        for i, m in enumerate(self._months):
            if m.id == month_id:
                return i
        raise NotFoundError(f"Month not found: {month_id}")

    def _review_index(self, review_id: str) -> int:
        for i, r in enumerate(self._reviews):
            if r.id == review_id:
                return i
        raise NotFoundError(f"Review not found: {review_id}")

    def load(self) -> None:
        """Read both collections from the backend and derive the active month."""
        months = [Month.from_record(r) for r in self._backend.scan(MONTHS, descending=False)]
        reviews = [Review.from_record(r) for r in self._backend.scan(REVIEWS, descending=True)]
        self._months = months
        self._reviews = reviews
        self._active_month_id = select_active_month_id(months)
        logger.info(
            "Loaded %d months and %d reviews (active month: %s)",
            len(months), len(reviews), self._active_month_id,
        )

    def reload(self) -> None:
        """Re-read from the backend, keeping the current selection when it still exists."""
        previous = self._active_month_id
        self.load()
        if previous is not None and any(m.id == previous for m in self._months):
            self._active_month_id = previous

    def set_active_month_id(self, month_id: str) -> None:
        self._month_index(month_id)
        self._active_month_id = month_id

    # --- months ---

    def add_month(self, name: str) -> Month:
        """
        Create an upcoming month whose id is the slug of its name.

        Raises:
            ValidationError: blank name, or a month with the same id exists.
            PersistenceError: the backend rejected the insert.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Month name is required.")
        month_id = slugify_month_name(name)
        if any(m.id == month_id for m in self._months):
            raise ValidationError(f"A month with id {month_id!r} already exists.")
        month = Month(id=month_id, name=name, status="upcoming", created_at=utc_now_iso())
        try:
            stored = Month.from_record(self._backend.insert(MONTHS, month.to_record()))
        except MonthReviewError as e:
            logger.warning("add_month(%r) failed: %s", name, e)
            raise
        self._months.append(stored)
        if self._active_month_id is None:
            self._active_month_id = stored.id
        logger.info("Added month %s", stored.id)
        return stored

    def update_month_status(self, month_id: str, status: str) -> Month:
        """Set one month's status. Other months are left as they are, even if also active."""
        validate_status(status)
        idx = self._month_index(month_id)
        try:
            rec = self._backend.update(MONTHS, month_id, {"status": status})
        except MonthReviewError as e:
            logger.warning("update_month_status(%s, %s) failed: %s", month_id, status, e)
            raise
        self._months[idx] = Month.from_record(rec)
        logger.info("Month %s is now %s", month_id, status)
        return self._months[idx]

    def update_month_details(
        self,
        month_id: str,
        description: str | None = None,
        images: list[str] | None = None,
    ) -> Month:
        """Partial update: fields passed as None keep their current value."""
        idx = self._month_index(month_id)
        fields: dict[str, Any] = {}
        if description is not None:
            fields["description"] = description
        if images is not None:
            fields["images"] = validate_images(images)
        if not fields:
            return self._months[idx]
        try:
            rec = self._backend.update(MONTHS, month_id, fields)
        except MonthReviewError as e:
            logger.warning("update_month_details(%s) failed: %s", month_id, e)
            raise
        self._months[idx] = Month.from_record(rec)
        logger.info("Updated details of month %s (%s)", month_id, ", ".join(sorted(fields)))
        return self._months[idx]

    # --- reviews ---

    def add_review(self, draft: ReviewDraft) -> Review:
        """
        Submit a review for the active month.

        The review gets a fresh id and timestamp, is not featured, and is placed
        at the front of the collection.

        Raises:
            ValidationError: invalid draft, or no month is selected.
            PersistenceError: the backend rejected the insert.
        """
        try:
            draft.validate()
        except ValidationError as e:
            logger.warning("Review rejected: %s", e)
            raise
        if self._active_month_id is None:
            raise ValidationError("There is no month open for reviews.")

        review = Review(
            id=_new_review_id(),
            month_id=self._active_month_id,
            rating=draft.rating,
            specifics=draft.specifics,
            nickname=(draft.nickname or "").strip() or DEFAULT_NICKNAME,
            love=(draft.love or "").strip(),
            improve=(draft.improve or "").strip(),
            images=list(draft.images),
            is_featured=False,
            timestamp=utc_now_iso(),
        )
        try:
            stored = Review.from_record(self._backend.insert(REVIEWS, review.to_record()))
        except MonthReviewError as e:
            logger.warning("add_review for %s failed: %s", review.month_id, e)
            raise
        self._reviews.insert(0, stored)
        logger.info("Added review %s for %s (rating %d)", stored.id, stored.month_id, stored.rating)
        return stored

    def toggle_featured_review(self, review_id: str) -> Review:
        idx = self._review_index(review_id)
        flag = not self._reviews[idx].is_featured
        try:
            rec = self._backend.update(REVIEWS, review_id, {"is_featured": flag})
        except MonthReviewError as e:
            logger.warning("toggle_featured_review(%s) failed: %s", review_id, e)
            raise
        self._reviews[idx] = Review.from_record(rec)
        logger.info("Review %s featured=%s", review_id, self._reviews[idx].is_featured)
        return self._reviews[idx]

    def delete_review(self, review_id: str) -> None:
        idx = self._review_index(review_id)
        try:
            self._backend.delete(REVIEWS, review_id)
        except MonthReviewError as e:
            logger.warning("delete_review(%s) failed: %s", review_id, e)
            raise
        del self._reviews[idx]
        logger.info("Deleted review %s", review_id)

    def get_reviews_for_month(self, month_id: str) -> list[Review]:
        """Reviews of one month in collection order (newest first unless reloaded otherwise)."""
        return [r for r in self._reviews if r.month_id == month_id]

    def all_reviews_newest_first(self) -> list[Review]:
        return sorted(self._reviews, key=lambda r: parse_timestamp(r.timestamp), reverse=True)

    def month_summary(self, month_id: str) -> MonthSummary:
        """Review count and averages. Specifics left at 0 count as not rated."""
        reviews = self.get_reviews_for_month(month_id)
        if not reviews:
            return MonthSummary(average_specifics={name: None for name in SPECIFIC_FIELDS})
        averages: dict[str, float | None] = {}
        for name in SPECIFIC_FIELDS:
            rated = [getattr(r.specifics, name) for r in reviews if getattr(r.specifics, name) > 0]
            averages[name] = round(sum(rated) / len(rated), 2) if rated else None
        return MonthSummary(
            review_count=len(reviews),
            average_rating=round(sum(r.rating for r in reviews) / len(reviews), 2),
            average_specifics=averages,
        )

    def upload_image(self, filename: str, content: bytes, content_type: str) -> str:
        """Store an image through the backend and return its reference."""
        name = f"review-{int(time.time() * 1000)}-{_safe_filename(filename)}"
        try:
            return self._backend.upload_image(name, content, content_type)
        except MonthReviewError as e:
            logger.warning("upload_image(%s) failed: %s", filename, e)
            raise

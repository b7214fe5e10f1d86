"""
Month and review data models.

Records exchanged with the persistence port are plain dicts with snake_case keys;
`to_record` / `from_record` are the only place that format is known.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from monthly_reviews.domains.errors import ValidationError

MONTH_STATUSES = ("upcoming", "active", "closed")
SPECIFIC_FIELDS = ("taste", "portion", "presentation")
MAX_REVIEW_IMAGES = 3
MIN_RATING, MAX_RATING = 1, 5
DEFAULT_NICKNAME = "Guest"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def slugify_month_name(name: str) -> str:
    """'March 2026' -> 'march-2026'. Runs of whitespace collapse to one hyphen."""
    return re.sub(r"\s+", "-", (name or "").strip().lower())


def parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO-8601 timestamp; unparseable or missing values sort oldest."""
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_status(status: str) -> str:
    if status not in MONTH_STATUSES:
        raise ValidationError(
            f"Invalid month status: {status!r}. Must be one of {', '.join(MONTH_STATUSES)}."
        )
    return status


def validate_images(images: Any, limit: int | None = None) -> list[str]:
    if images is None:
        return []
    if isinstance(images, str) or not isinstance(images, (list, tuple)):
        raise ValidationError("Images must be a list of image references.")
    refs = list(images)
    if any(not isinstance(r, str) or not r for r in refs):
        raise ValidationError("Every image reference must be a non-empty string.")
    if limit is not None and len(refs) > limit:
        raise ValidationError(f"Maximum {limit} images allowed.")
    return refs


@dataclass
class Month:
    id: str
    name: str
    status: str = "upcoming"
    description: str = ""
    images: list[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now_iso)

    @property
    def featured_image(self) -> str | None:
        """First image, shown as the month's hero picture."""
        return self.images[0] if self.images else None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "description": self.description,
            "images": list(self.images),
            "created_at": self.created_at,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "Month":
        return cls(
            id=str(rec["id"]),
            name=rec.get("name") or str(rec["id"]),
            status=rec.get("status") or "upcoming",
            description=rec.get("description") or "",
            images=list(rec.get("images") or []),
            created_at=rec.get("created_at") or "",
        )


@dataclass
class Specifics:
    """Sub-ratings collected alongside the overall score. 0 means not rated."""

    taste: int = 0
    portion: int = 0
    presentation: int = 0

    def validate(self) -> None:
        for name in SPECIFIC_FIELDS:
            value = getattr(self, name)
            if not _is_int(value) or not 0 <= value <= MAX_RATING:
                raise ValidationError(f"{name.title()} rating must be a whole number from 0 to {MAX_RATING}.")

    def to_record(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in SPECIFIC_FIELDS}

    @classmethod
    def from_record(cls, rec: dict[str, Any] | None) -> "Specifics":
        rec = rec or {}
        return cls(**{name: int(rec.get(name) or 0) for name in SPECIFIC_FIELDS})


@dataclass
class ReviewDraft:
    """What a visitor submits. The store adds id, month, timestamp and the featured flag."""

    rating: int
    specifics: Specifics = field(default_factory=Specifics)
    nickname: str = ""
    love: str = ""
    improve: str = ""
    images: list[str] = field(default_factory=list)

    def validate(self) -> None:
        """
        Raises:
            ValidationError: zero/unset or out-of-range rating, bad sub-ratings,
                or more than MAX_REVIEW_IMAGES images.
        """
        if not self.rating:
            raise ValidationError("Please provide an overall rating.")
        if not _is_int(self.rating) or not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValidationError(f"Overall rating must be a whole number from {MIN_RATING} to {MAX_RATING}.")
        if isinstance(self.specifics, dict):
            self.specifics = Specifics(**{k: self.specifics.get(k, 0) for k in SPECIFIC_FIELDS})
        self.specifics.validate()
        self.images = validate_images(self.images, limit=MAX_REVIEW_IMAGES)


@dataclass
class Review:
    id: str
    month_id: str
    rating: int
    specifics: Specifics = field(default_factory=Specifics)
    nickname: str = DEFAULT_NICKNAME
    love: str = ""
    improve: str = ""
    images: list[str] = field(default_factory=list)
    is_featured: bool = False
    timestamp: str = field(default_factory=utc_now_iso)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "month_id": self.month_id,
            "nickname": self.nickname,
            "rating": self.rating,
            "specifics": self.specifics.to_record(),
            "love": self.love,
            "improve": self.improve,
            "images": list(self.images),
            "is_featured": self.is_featured,
            "created_at": self.timestamp,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "Review":
        return cls(
            id=str(rec["id"]),
            month_id=str(rec.get("month_id") or ""),
            rating=int(rec.get("rating") or 0),
            specifics=Specifics.from_record(rec.get("specifics")),
            nickname=(rec.get("nickname") or "").strip() or DEFAULT_NICKNAME,
            love=rec.get("love") or "",
            improve=rec.get("improve") or "",
            images=list(rec.get("images") or []),
            is_featured=bool(rec.get("is_featured", False)),
            timestamp=rec.get("created_at") or "",
        )


def sort_for_display(reviews: list[Review]) -> list[Review]:
    """Featured reviews first, then newest first within each group."""
    newest = sorted(reviews, key=lambda r: parse_timestamp(r.timestamp), reverse=True)
    return sorted(newest, key=lambda r: not r.is_featured)

"""
Supabase repository: months and reviews as PostgREST tables, images in Storage.

Table columns match the record format of the domain models (snake_case,
`specifics` and `images` as JSON columns, `created_at` timestamptz).
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from monthly_reviews.domains.errors import NotFoundError, PersistenceError
from monthly_reviews.domains.persistence import COLLECTIONS
from monthly_reviews.infrastructure.data.sources.supabase_client import SupabaseClient
from monthly_reviews.utils.config import image_bucket
from monthly_reviews.utils.logger import get_logger

logger = get_logger()

_RETURN_ROWS = {"Prefer": "return=representation"}


class SupabaseBackend:
    """Remote `ReviewBackend`. Every call is a single round-trip; no retries."""

    def __init__(self, client: SupabaseClient | None = None, bucket: str | None = None) -> None:
        self._client = client or SupabaseClient()
        self._bucket = bucket or image_bucket()

    @property
    def client(self) -> SupabaseClient:
        return self._client

    def _table(self, collection: str) -> str:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection!r}")
        return f"rest/v1/{collection}"

    def _rows(self, method: str, collection: str, **kwargs: Any) -> list[dict[str, Any]]:
        try:
            r = self._client.request(method, self._table(collection), **kwargs)
            if not r.content:
                return []
            rows = r.json()
        except requests.RequestException as e:
            logger.exception("Supabase %s %s failed: %s", method, collection, e)
            raise PersistenceError(f"Backend request failed ({method} {collection})") from e
        except ValueError as e:
            logger.exception("Supabase %s %s returned invalid JSON: %s", method, collection, e)
            raise PersistenceError(f"Backend returned an invalid response ({method} {collection})") from e
        if not isinstance(rows, list):
            raise PersistenceError(f"Backend returned an unexpected payload ({method} {collection})")
        return rows

    def scan(self, collection: str, descending: bool = True) -> list[dict[str, Any]]:
        order = "created_at.desc" if descending else "created_at.asc"
        return self._rows("GET", collection, params={"select": "*", "order": order})

    def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        rows = self._rows("POST", collection, json=record, headers=_RETURN_ROWS)
        if not rows:
            raise PersistenceError(f"Backend did not return the inserted {collection} record")
        return rows[0]

    def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        rows = self._rows(
            "PATCH",
            collection,
            params={"id": f"eq.{record_id}"},
            json=fields,
            headers=_RETURN_ROWS,
        )
        if not rows:
            raise NotFoundError(f"No {collection} record with id {record_id!r}")
        return rows[0]

    def delete(self, collection: str, record_id: str) -> None:
        rows = self._rows(
            "DELETE",
            collection,
            params={"id": f"eq.{record_id}"},
            headers=_RETURN_ROWS,
        )
        if not rows:
            raise NotFoundError(f"No {collection} record with id {record_id!r}")

    def public_url(self, filename: str) -> str:
        return f"{self._client.base_url}/storage/v1/object/public/{self._bucket}/{quote(filename)}"

    def upload_image(self, filename: str, content: bytes, content_type: str) -> str:
        path = f"storage/v1/object/{self._bucket}/{quote(filename)}"
        try:
            self._client.request(
                "POST",
                path,
                data=content,
                headers={"Content-Type": content_type or "application/octet-stream", "x-upsert": "false"},
            )
        except requests.RequestException as e:
            logger.exception("Image upload failed for %s: %s", filename, e)
            raise PersistenceError(f"Could not upload image {filename}") from e
        logger.info("Uploaded image %s to bucket %s", filename, self._bucket)
        return self.public_url(filename)

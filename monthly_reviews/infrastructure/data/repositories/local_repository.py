"""
Local repository: months and reviews persisted as JSON files on disk.

One file per collection under the data directory (months.json, reviews.json).
Writes go to a temp file and are swapped in with os.replace, so a crash never
leaves a half-written collection behind. Every read-modify-write runs under one
process-wide lock, so UI sessions sharing a data directory never drop each
other's confirmed writes.
"""

from __future__ import annotations

import base64
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from monthly_reviews.domains.errors import NotFoundError, PersistenceError
from monthly_reviews.domains.models import parse_timestamp
from monthly_reviews.domains.persistence import COLLECTIONS, MONTHS
from monthly_reviews.utils.config import local_data_dir
from monthly_reviews.utils.logger import get_logger

logger = get_logger()

# Streamlit serves each browser session on its own thread in one process.
_COLLECTION_LOCK = threading.RLock()

# Written on first start when no months file exists yet.
DEFAULT_MONTHS: list[dict[str, Any]] = [
    {
        "id": "jan-2026",
        "name": "January 2026",
        "status": "closed",
        "description": "",
        "images": [],
        "created_at": "2026-01-01T00:00:00+00:00",
    },
    {
        "id": "feb-2026",
        "name": "February 2026",
        "status": "active",
        "description": "",
        "images": [],
        "created_at": "2026-02-01T00:00:00+00:00",
    },
]


class LocalJsonBackend:
    """
    File-backed `ReviewBackend`.

    Images are not written to disk separately; they are returned as inline
    `data:` references and stored inside the owning record.
    """

    def __init__(self, data_dir: Path | None = None, seed_months: bool = True) -> None:
        self._dir = Path(data_dir) if data_dir is not None else local_data_dir()
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create data directory {self._dir}: {e}") from e
        with _COLLECTION_LOCK:
            if seed_months and not self._path(MONTHS).is_file():
                self._write(MONTHS, [dict(m) for m in DEFAULT_MONTHS])
                logger.info("Seeded %d default months in %s", len(DEFAULT_MONTHS), self._dir)

    def _path(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection!r}")
        return self._dir / f"{collection}.json"

    def _read(self, collection: str) -> list[dict[str, Any]]:
        path = self._path(collection)
        if not path.is_file():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.exception("Failed to read %s: %s", path, e)
            raise PersistenceError(f"Could not read {collection} from {path}") from e
        if not isinstance(data, list):
            raise PersistenceError(f"{path} does not contain a list of records")
        return data

    def _write(self, collection: str, records: list[dict[str, Any]]) -> None:
        path = self._path(collection)
        try:
            fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=f".{collection}-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            logger.exception("Failed to write %s: %s", path, e)
            raise PersistenceError(f"Could not save {collection} to {path}") from e

    def scan(self, collection: str, descending: bool = True) -> list[dict[str, Any]]:
        with _COLLECTION_LOCK:
            records = self._read(collection)
        return sorted(records, key=lambda r: parse_timestamp(r.get("created_at")), reverse=descending)

    def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        stored = dict(record)
        with _COLLECTION_LOCK:
            records = self._read(collection)
            records.append(stored)
            self._write(collection, records)
        logger.debug("Inserted %s/%s", collection, stored.get("id"))
        return dict(stored)

    def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        with _COLLECTION_LOCK:
            records = self._read(collection)
            for i, rec in enumerate(records):
                if rec.get("id") == record_id:
                    merged = {**rec, **fields}
                    records[i] = merged
                    self._write(collection, records)
                    return dict(merged)
        raise NotFoundError(f"No {collection} record with id {record_id!r}")

    def delete(self, collection: str, record_id: str) -> None:
        with _COLLECTION_LOCK:
            records = self._read(collection)
            kept = [r for r in records if r.get("id") != record_id]
            if len(kept) == len(records):
                raise NotFoundError(f"No {collection} record with id {record_id!r}")
            self._write(collection, kept)

    def upload_image(self, filename: str, content: bytes, content_type: str) -> str:
        encoded = base64.b64encode(content).decode("ascii")
        return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"

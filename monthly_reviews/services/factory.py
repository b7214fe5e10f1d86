"""Construct a fully wired session (store + auth gate) from config.

Responsibilities:
  - Pick the storage adapter and matching auth gate for STORAGE_BACKEND.
Must not:
  - Implement store or auth logic; composition only.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from monthly_reviews.domains.persistence import ReviewBackend
from monthly_reviews.infrastructure.data.repositories.local_repository import LocalJsonBackend
from monthly_reviews.infrastructure.data.repositories.supabase_repository import SupabaseBackend
from monthly_reviews.services.auth import LocalAuthGate, SupabaseAuthGate
from monthly_reviews.services.month_store import MonthStore
from monthly_reviews.utils.config import storage_backend
from monthly_reviews.utils.logger import get_logger

logger = get_logger()

AuthGate = LocalAuthGate | SupabaseAuthGate


@dataclass
class AppSession:
    store: MonthStore
    auth: AuthGate


def build_backend(backend: str | None = None, data_dir: Path | None = None) -> ReviewBackend:
    """
    Storage adapter for one UI session.

    Args:
        backend: "local" or "supabase"; defaults to STORAGE_BACKEND.
        data_dir: Override for the local data directory (local backend only).
    """
    kind = backend or storage_backend()
    if kind == "supabase":
        return SupabaseBackend()
    if kind == "local":
        return LocalJsonBackend(data_dir)
    raise ValueError(f"Unsupported storage backend: {kind!r}")


def build_auth_gate(repo: ReviewBackend, data_dir: Path | None = None) -> AuthGate:
    """Auth gate matching the adapter; a Supabase gate shares the adapter's HTTP client."""
    if isinstance(repo, SupabaseBackend):
        return SupabaseAuthGate(repo.client)
    return LocalAuthGate(data_dir)


def build_session(backend: str | None = None, data_dir: Path | None = None) -> AppSession:
    """Composition root for one UI session."""
    repo = build_backend(backend, data_dir)
    auth = build_auth_gate(repo, data_dir)
    logger.info("Building session with %s", type(repo).__name__)
    return AppSession(store=MonthStore(repo), auth=auth)

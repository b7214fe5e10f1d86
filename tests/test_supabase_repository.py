"""
Tests for SupabaseBackend and SupabaseClient: request shapes, token handling, error translation.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from monthly_reviews.domains.errors import NotFoundError, PersistenceError
from monthly_reviews.infrastructure.data.repositories.supabase_repository import SupabaseBackend
from monthly_reviews.infrastructure.data.sources.supabase_client import SupabaseClient

URL = "https://proj.supabase.co"


def _response(payload=None, status: int = 200, content: bytes | None = None) -> MagicMock:
    r = MagicMock()
    r.status_code = status
    r.json.return_value = payload
    r.content = content if content is not None else (b"[]" if payload is None else b"x")
    r.raise_for_status = MagicMock()
    return r


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(session: MagicMock) -> SupabaseClient:
    return SupabaseClient(url=URL + "/", anon_key="anon", timeout=5, session=session)


@pytest.fixture
def backend(client: SupabaseClient) -> SupabaseBackend:
    return SupabaseBackend(client, bucket="images")


def test_scan_orders_by_created_at(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.return_value = _response([{"id": "feb-2026"}])
    rows = backend.scan("months", descending=False)
    assert rows == [{"id": "feb-2026"}]
    method, url = session.request.call_args[0]
    kwargs = session.request.call_args[1]
    assert method == "GET"
    assert url == f"{URL}/rest/v1/months"
    assert kwargs["params"] == {"select": "*", "order": "created_at.asc"}
    assert kwargs["headers"]["apikey"] == "anon"
    assert kwargs["headers"]["Authorization"] == "Bearer anon"
    assert kwargs["timeout"] == 5


def test_insert_returns_stored_row(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.return_value = _response([{"id": "r1", "rating": 4}])
    out = backend.insert("reviews", {"id": "r1", "rating": 4})
    assert out == {"id": "r1", "rating": 4}
    kwargs = session.request.call_args[1]
    assert kwargs["json"] == {"id": "r1", "rating": 4}
    assert kwargs["headers"]["Prefer"] == "return=representation"


def test_update_filters_by_id(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.return_value = _response([{"id": "r1", "is_featured": True}])
    out = backend.update("reviews", "r1", {"is_featured": True})
    assert out["is_featured"] is True
    assert session.request.call_args[0][0] == "PATCH"
    assert session.request.call_args[1]["params"] == {"id": "eq.r1"}


def test_update_and_delete_not_found(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.return_value = _response([])
    with pytest.raises(NotFoundError):
        backend.update("months", "nope", {"status": "closed"})
    with pytest.raises(NotFoundError):
        backend.delete("reviews", "nope")


def test_delete_sends_filter(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.return_value = _response([{"id": "r1"}])
    backend.delete("reviews", "r1")
    assert session.request.call_args[0][0] == "DELETE"
    assert session.request.call_args[1]["params"] == {"id": "eq.r1"}


def test_network_failure_becomes_persistence_error(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.side_effect = requests.ConnectionError("offline")
    with pytest.raises(PersistenceError):
        backend.scan("reviews")


def test_http_error_becomes_persistence_error(backend: SupabaseBackend, session: MagicMock) -> None:
    r = _response([])
    r.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    session.request.return_value = r
    with pytest.raises(PersistenceError):
        backend.insert("months", {"id": "x"})


def test_invalid_json_becomes_persistence_error(backend: SupabaseBackend, session: MagicMock) -> None:
    r = _response([])
    r.content = b"<html>"
    r.json.side_effect = ValueError("no json")
    session.request.return_value = r
    with pytest.raises(PersistenceError):
        backend.scan("months")


def test_access_token_used_when_logged_in(backend: SupabaseBackend, client: SupabaseClient, session: MagicMock) -> None:
    client.access_token = "user-jwt"
    session.request.return_value = _response([])
    backend.scan("reviews")
    assert session.request.call_args[1]["headers"]["Authorization"] == "Bearer user-jwt"


def test_upload_image_returns_public_url(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.return_value = _response(content=b"{}")
    url = backend.upload_image("review-1-a.png", b"\x89PNG", "image/png")
    assert url == f"{URL}/storage/v1/object/public/images/review-1-a.png"
    method, req_url = session.request.call_args[0]
    assert method == "POST"
    assert req_url == f"{URL}/storage/v1/object/images/review-1-a.png"
    assert session.request.call_args[1]["data"] == b"\x89PNG"
    assert session.request.call_args[1]["headers"]["Content-Type"] == "image/png"


def test_upload_failure(backend: SupabaseBackend, session: MagicMock) -> None:
    session.request.side_effect = requests.Timeout("slow")
    with pytest.raises(PersistenceError):
        backend.upload_image("a.png", b"", "image/png")

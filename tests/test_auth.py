"""
Tests for the admin auth gates.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from monthly_reviews.domains.errors import AuthError, ValidationError
from monthly_reviews.infrastructure.data.sources.supabase_client import SupabaseClient
from monthly_reviews.services.auth import CREDENTIALS_FILE, LocalAuthGate, SupabaseAuthGate


@pytest.fixture
def gate(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> LocalAuthGate:
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "password123")
    return LocalAuthGate(tmp_path)


def test_local_login_and_logout(gate: LocalAuthGate) -> None:
    assert gate.current_user() is None
    assert gate.login("admin", "wrong") is False
    assert gate.is_admin is False
    assert gate.login("admin", "password123") is True
    assert gate.is_admin is True
    assert gate.current_user().username == "admin"
    assert gate.current_user().role == "admin"
    gate.logout()
    assert gate.current_user() is None


def test_local_credentials_seeded_to_file(gate: LocalAuthGate, tmp_path: Path) -> None:
    data = json.loads((tmp_path / CREDENTIALS_FILE).read_text(encoding="utf-8"))
    assert data == {"username": "admin", "password": "password123"}


def test_update_credentials_keeps_session(gate: LocalAuthGate, tmp_path: Path) -> None:
    gate.login("admin", "password123")
    gate.update_credentials("chef", "s3cret")
    assert gate.current_user().username == "chef"
    fresh = LocalAuthGate(tmp_path)
    assert fresh.login("admin", "password123") is False
    assert fresh.login("chef", "s3cret") is True


def test_update_credentials_rejects_blank(gate: LocalAuthGate) -> None:
    with pytest.raises(ValidationError):
        gate.update_credentials("  ", "x")
    with pytest.raises(ValidationError):
        gate.update_credentials("chef", "")


def _client(session: MagicMock) -> SupabaseClient:
    return SupabaseClient(url="https://proj.supabase.co", anon_key="anon", timeout=5, session=session)


def test_supabase_login_stores_token() -> None:
    session = MagicMock()
    r = MagicMock()
    r.json.return_value = {"access_token": "jwt", "user": {"email": "chef@example.com"}}
    session.request.return_value = r
    client = _client(session)
    gate = SupabaseAuthGate(client)
    assert gate.login("chef@example.com", "pw") is True
    assert client.access_token == "jwt"
    assert gate.current_user().username == "chef@example.com"
    kwargs = session.request.call_args[1]
    assert kwargs["params"] == {"grant_type": "password"}
    assert kwargs["json"] == {"email": "chef@example.com", "password": "pw"}


def test_supabase_login_rejected() -> None:
    session = MagicMock()
    r = MagicMock()
    r.raise_for_status.side_effect = requests.HTTPError("400", response=MagicMock(status_code=400))
    session.request.return_value = r
    gate = SupabaseAuthGate(_client(session))
    assert gate.login("chef@example.com", "bad") is False
    assert gate.is_admin is False


def test_supabase_login_service_down() -> None:
    session = MagicMock()
    session.request.side_effect = requests.ConnectionError("offline")
    with pytest.raises(AuthError):
        SupabaseAuthGate(_client(session)).login("a@b.c", "pw")


def test_supabase_logout_clears_even_on_failure() -> None:
    session = MagicMock()
    client = _client(session)
    client.access_token = "jwt"
    gate = SupabaseAuthGate(client)
    gate._user = MagicMock()
    session.request.side_effect = requests.ConnectionError("offline")
    gate.logout()
    assert client.access_token is None
    assert gate.current_user() is None


def test_supabase_update_credentials_requires_login() -> None:
    gate = SupabaseAuthGate(_client(MagicMock()))
    with pytest.raises(AuthError):
        gate.update_credentials("a@b.c", "pw")


def test_local_session_is_not_shared_between_gates(gate: LocalAuthGate, tmp_path: Path) -> None:
    """Each UI session owns its login; another session over the same data dir starts logged out."""
    gate.login("admin", "password123")
    other = LocalAuthGate(tmp_path)
    assert other.is_admin is False
    assert gate.is_admin is True

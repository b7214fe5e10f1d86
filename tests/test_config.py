"""
Tests for config accessors.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from monthly_reviews.utils import config


def test_storage_backend_default_and_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    assert config.storage_backend() == "local"
    monkeypatch.setenv("STORAGE_BACKEND", "Supabase")
    assert config.storage_backend() == "supabase"
    monkeypatch.setenv("STORAGE_BACKEND", "mongo")
    with pytest.raises(ValueError, match="STORAGE_BACKEND"):
        config.storage_backend()


def test_required_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "")
    with pytest.raises(ValueError, match="SUPABASE_URL"):
        config.supabase_url()
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co/")
    assert config.supabase_url() == "https://proj.supabase.co"


def test_optional_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "abc")
    assert config.request_timeout() == 30
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "7")
    assert config.request_timeout() == 7
    monkeypatch.setenv("LOCAL_DATA_DIR", str(tmp_path))
    assert config.local_data_dir() == tmp_path
    monkeypatch.delenv("LOCAL_DATA_DIR")
    assert config.local_data_dir() == config.project_root() / "data"

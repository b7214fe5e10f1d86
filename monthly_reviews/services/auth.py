"""
Admin authentication.

Two gates with the same surface: `LocalAuthGate` compares against a credential
pair kept in a JSON file, `SupabaseAuthGate` delegates to Supabase Auth. The
store and the UI only ask `is_admin`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from monthly_reviews.domains.errors import AuthError, PersistenceError, ValidationError
from monthly_reviews.infrastructure.data.sources.supabase_client import SupabaseClient
from monthly_reviews.utils.config import admin_password, admin_username, local_data_dir
from monthly_reviews.utils.logger import get_logger

logger = get_logger()

CREDENTIALS_FILE = "admin_credentials.json"


@dataclass
class AdminUser:
    username: str
    role: str = "admin"


def _require_credentials(username: str, password: str) -> tuple[str, str]:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required.")
    return username, password


class LocalAuthGate:
    """Static credential pair; the logged-in user lives as long as this object."""

    def __init__(self, data_dir: Path | None = None) -> None:
        self._path = (Path(data_dir) if data_dir is not None else local_data_dir()) / CREDENTIALS_FILE
        self._user: AdminUser | None = None
        self._credentials = self._load_credentials()

    def _load_credentials(self) -> dict[str, str]:
        if self._path.is_file():
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict) and data.get("username") and data.get("password"):
                    return {"username": data["username"], "password": data["password"]}
                logger.warning("Ignoring malformed credentials file %s", self._path)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Could not read credentials file %s: %s", self._path, e)
        creds = {"username": admin_username(), "password": admin_password()}
        self._save_credentials(creds)
        return creds

    def _save_credentials(self, creds: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(creds, f, indent=2)
        except OSError as e:
            logger.exception("Failed to save admin credentials: %s", e)
            raise PersistenceError("Could not save admin credentials") from e

    @property
    def username(self) -> str:
        return self._credentials["username"]

    def login(self, username: str, password: str) -> bool:
        if username == self._credentials["username"] and password == self._credentials["password"]:
            self._user = AdminUser(username=username)
            logger.info("Admin %s logged in", username)
            return True
        logger.warning("Failed admin login for %r", username)
        return False

    def logout(self) -> None:
        self._user = None

    def current_user(self) -> AdminUser | None:
        return self._user

    @property
    def is_admin(self) -> bool:
        return self._user is not None

    def update_credentials(self, username: str, password: str) -> None:
        """Replace the credential pair. A logged-in session stays logged in under the new name."""
        username, password = _require_credentials(username, password)
        creds = {"username": username, "password": password}
        self._save_credentials(creds)
        self._credentials = creds
        if self._user is not None:
            self._user = AdminUser(username=username, role=self._user.role)
        logger.info("Admin credentials updated")


class SupabaseAuthGate:
    """Email/password auth against Supabase. The access token is stored on the shared client."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client
        self._user: AdminUser | None = None

    def login(self, username: str, password: str) -> bool:
        """
        Returns False for rejected credentials.

        Raises:
            AuthError: the auth service could not be reached or failed.
        """
        try:
            r = self._client.request(
                "POST",
                "auth/v1/token",
                params={"grant_type": "password"},
                json={"email": username, "password": password},
            )
            payload: dict[str, Any] = r.json()
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            if status in (400, 401, 403):
                logger.warning("Failed admin login for %r", username)
                return False
            logger.exception("Supabase login failed: %s", e)
            raise AuthError("Login service returned an error") from e
        except (requests.RequestException, ValueError) as e:
            logger.exception("Supabase login failed: %s", e)
            raise AuthError("Login service is unavailable") from e

        token = payload.get("access_token")
        if not token:
            raise AuthError("Login service did not return a session")
        self._client.access_token = token
        email = (payload.get("user") or {}).get("email") or username
        self._user = AdminUser(username=email)
        logger.info("Admin %s logged in", email)
        return True

    def logout(self) -> None:
        """Revoke the session if possible; the local session is always cleared."""
        if self._client.access_token:
            try:
                self._client.request("POST", "auth/v1/logout")
            except requests.RequestException as e:
                logger.warning("Supabase logout failed, clearing local session anyway: %s", e)
        self._client.access_token = None
        self._user = None

    def current_user(self) -> AdminUser | None:
        return self._user

    @property
    def is_admin(self) -> bool:
        return self._user is not None

    def update_credentials(self, username: str, password: str) -> None:
        username, password = _require_credentials(username, password)
        if self._user is None:
            raise AuthError("Log in before changing credentials")
        try:
            self._client.request("PUT", "auth/v1/user", json={"email": username, "password": password})
        except requests.RequestException as e:
            logger.exception("Supabase credential update failed: %s", e)
            raise AuthError("Could not update credentials") from e
        self._user = AdminUser(username=username, role=self._user.role)
        logger.info("Admin credentials updated")

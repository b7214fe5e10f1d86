"""
Thin HTTP client for a hosted Supabase project (PostgREST, Storage and Auth).

Shared by the storage adapter and the auth gate so that a logged-in admin's
access token is attached to every subsequent data call.
"""

from __future__ import annotations

from typing import Any

import requests

from monthly_reviews.utils.config import request_timeout, supabase_anon_key, supabase_url
from monthly_reviews.utils.logger import get_logger

logger = get_logger()


class SupabaseClient:
    """
    One requests.Session per UI session. Callers translate
    requests.RequestException into domain errors.
    """

    def __init__(
        self,
        url: str | None = None,
        anon_key: str | None = None,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._url = (url or supabase_url()).rstrip("/")
        self._anon_key = anon_key or supabase_anon_key()
        self._timeout = timeout if timeout is not None else request_timeout()
        self._session = session or requests.Session()
        self.access_token: str | None = None

    @property
    def base_url(self) -> str:
        return self._url

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self.access_token or self._anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """
        Send a request relative to the project URL and raise for non-2xx.

        Raises:
            requests.RequestException: network failure, timeout or HTTP error status.
        """
        url = f"{self._url}/{path.lstrip('/')}"
        logger.debug("Supabase %s %s", method, path)
        r = self._session.request(
            method,
            url,
            params=params,
            json=json,
            data=data,
            headers=self._headers(headers),
            timeout=self._timeout,
        )
        r.raise_for_status()
        return r

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from .errors import FlightsApiError

logger = logging.getLogger(__name__)


class FlightsApiClient:
    """
    Client for the flights backend (``/api/flights``, ``/api/airports``, ``/api/user``).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ──────────────────────────────────────────────────────────

    def _headers(self, token: Optional[str] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _check(self, resp: requests.Response, fallback: str) -> Any:
        if not 200 <= resp.status_code < 300:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = None
            if isinstance(body, dict):
                message = body.get("message")
            raise FlightsApiError(message or fallback, status_code=resp.status_code)
        if resp.status_code == 204:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise FlightsApiError(
                f"{fallback}: invalid JSON", status_code=resp.status_code
            ) from exc

    def _send(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method.upper(), url)
        try:
            resp = getattr(requests, method)(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise FlightsApiError(f"{fallback}: {exc}") from exc
        return self._check(resp, fallback)

    # ──────────────────────────────────────────────────────────

    def search_flights(
        self, origin: str, destination: str, date: str, token: Optional[str] = None
    ) -> Any:
        """Return the raw upstream payload (list or ``{"data": [...]}``)."""
        body = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDateTimeRange": {"date": date},
        }
        return self._send(
            "post",
            "/api/flights",
            "Failed to fetch flights",
            json=body,
            headers=self._headers(token),
        )

    def search_airports(self, query: str) -> Any:
        return self._send(
            "get",
            f"/api/airports/search?q={quote(query, safe='')}",
            "Failed to search airports",
        )

    def save_flight(self, flight: dict, token: str) -> Any:
        return self._send(
            "post",
            "/api/user/saved-flights",
            "Failed to save flight.",
            json=flight,
            headers=self._headers(token),
        )

    def get_saved_flights(self, token: str) -> Any:
        return self._send(
            "get",
            "/api/user/saved-flights",
            "Failed to get saved flights.",
            headers=self._headers(token),
        )

    def delete_saved_flight(self, flight_id: str, token: str) -> Any:
        return self._send(
            "delete",
            f"/api/user/saved-flights/{quote(flight_id, safe='')}",
            "Failed to delete flight.",
            headers=self._headers(token),
        )

    def get_recent_searches(self, token: str) -> Any:
        return self._send(
            "get",
            "/api/user/recent-searches",
            "Failed to get recent searches.",
            headers=self._headers(token),
        )

    def login(self, email: str, password: str) -> str:
        data = self._send(
            "post",
            "/api/auth/login",
            "Login failed",
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise FlightsApiError("Login failed: no token in response")
        return token


__all__ = ["FlightsApiClient"]

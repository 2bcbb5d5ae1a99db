from __future__ import annotations

import logging
from typing import Optional

from .api_client import FlightsApiClient
from .errors import AuthRequired
from .store import KeyValueStore

TOKEN_KEY = "token"

logger = logging.getLogger(__name__)


class CredentialStore:
    """Opaque bearer token kept under the ``token`` key of the store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get_token(self) -> Optional[str]:
        return self.store.get(TOKEN_KEY) or None

    def set_token(self, token: str) -> None:
        self.store.set(TOKEN_KEY, token)

    def clear(self) -> None:
        self.store.delete(TOKEN_KEY)

    def require_token(self) -> str:
        token = self.get_token()
        if not token:
            raise AuthRequired("You must be logged in to do this.")
        return token


def login(
    client: FlightsApiClient, credentials: CredentialStore, email: str, password: str
) -> str:
    """Exchange *email*/*password* for a token and remember it."""
    token = client.login(email, password)
    credentials.set_token(token)
    logger.info("Logged in as %s", email)
    return token


def logout(credentials: CredentialStore) -> None:
    credentials.clear()
    logger.info("Logged out")


__all__ = ["CredentialStore", "TOKEN_KEY", "login", "logout"]

"""Optimistic favorites on top of the remote saved-flights store.

A toggle is two-phase: :meth:`FavoritesClient.apply_local` flips the local
flag and returns a :class:`FavoritePatch`, then
:meth:`FavoritesClient.confirm_remote` performs the save or delete. The remote
record is always keyed by :func:`itinerary_hash`, never by the search offer id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .api_client import FlightsApiClient
from .auth import CredentialStore
from .errors import FavoriteError, FlightsApiError
from .hasher import itinerary_hash
from .models import Itinerary, SavedFlight

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FavoritePatch:
    itinerary: Itinerary
    identity: str
    favorited: bool
    previous: Dict[str, Optional[bool]] = field(default_factory=dict)
    flags: Dict[str, bool] = field(default_factory=dict, repr=False)

    def revert(self) -> None:
        """Undo the local flip."""
        for key, value in self.previous.items():
            if value is None:
                self.flags.pop(key, None)
            else:
                self.flags[key] = value


class FavoritesClient:
    def __init__(self, client: FlightsApiClient, credentials: CredentialStore) -> None:
        self.client = client
        self.credentials = credentials
        self.favorited: Dict[str, bool] = {}

    def is_favorited(self, itinerary: Itinerary) -> bool:
        if self.favorited.get(itinerary.id):
            return True
        return self.favorited.get(itinerary_hash(itinerary.segments), False)

    def apply_local(self, itinerary: Itinerary) -> FavoritePatch:
        """Flip the local flag for *itinerary*; raises ``AuthRequired`` first."""
        self.credentials.require_token()
        identity = itinerary_hash(itinerary.segments)
        target = not self.is_favorited(itinerary)
        keys = {itinerary.id, identity}
        patch = FavoritePatch(
            itinerary=itinerary,
            identity=identity,
            favorited=target,
            previous={key: self.favorited.get(key) for key in keys},
            flags=self.favorited,
        )
        for key in keys:
            self.favorited[key] = target
        return patch

    def confirm_remote(self, patch: FavoritePatch) -> Any:
        """Send the save or delete described by *patch*.

        Raises ``FavoriteError`` if the backend rejects it; the local flag is
        left as is.
        """
        token = self.credentials.require_token()
        try:
            if patch.favorited:
                payload = patch.itinerary.with_id(patch.identity).to_dict()
                logger.info("Saving flight %s", patch.identity)
                return self.client.save_flight(payload, token)
            logger.info("Deleting saved flight %s", patch.identity)
            return self.client.delete_saved_flight(patch.identity, token)
        except FlightsApiError as exc:
            logger.warning("Favorite update for %s failed: %s", patch.identity, exc)
            raise FavoriteError(exc.message, patch.identity) from exc

    def toggle_favorite(self, itinerary: Itinerary) -> FavoritePatch:
        """Flip, confirm remotely, and revert the flip if the remote call fails."""
        patch = self.apply_local(itinerary)
        try:
            self.confirm_remote(patch)
        except FavoriteError:
            patch.revert()
            raise
        return patch

    def load_saved(self) -> List[SavedFlight]:
        """Fetch saved flights and rebuild the local mirror from them."""
        token = self.credentials.get_token()
        if not token:
            return []
        try:
            data = self.client.get_saved_flights(token)
        except FlightsApiError as exc:
            raise FavoriteError(exc.message, "") from exc

        saved: List[SavedFlight] = []
        for item in data if isinstance(data, list) else []:
            try:
                saved.append(SavedFlight.from_dict(item))
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("Skipping malformed saved flight: %s", exc)
        self.favorited = {flight.id: True for flight in saved}
        return saved


__all__ = ["FavoritesClient", "FavoritePatch"]

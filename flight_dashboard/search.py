from __future__ import annotations

import logging
from typing import List, Optional

from .api_client import FlightsApiClient
from .auth import CredentialStore
from .cache import ResultCache
from .errors import FlightsApiError, SearchError
from .models import Itinerary, RecentSearch, SearchResult
from .normalizer import normalize_offers

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    """Cache-first flight search.

    ``itineraries`` and ``error`` mirror the outcome of the latest call to
    :meth:`search`. Overlapping searches are neither coalesced nor cancelled;
    the last one to finish wins, both here and in the cache.
    """

    def __init__(
        self,
        client: FlightsApiClient,
        cache: ResultCache,
        credentials: Optional[CredentialStore] = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.credentials = credentials
        self.itineraries: List[Itinerary] = []
        self.error: Optional[SearchError] = None

    def search(self, origin: str, destination: str, date: str) -> SearchResult:
        """Return fresh cached results or fetch, normalize and cache them.

        Never raises: failures come back as ``SearchResult.error`` with an
        empty itinerary list.
        """
        self.error = None

        entry = self.cache.get(origin, destination, date)
        if entry is not None:
            self.itineraries = entry.itineraries
            return SearchResult(itineraries=entry.itineraries, from_cache=True)

        logger.info("Fetching flights from API: %s ➔ %s on %s", origin, destination, date)
        try:
            token = self.credentials.get_token() if self.credentials else None
            payload = self.client.search_flights(origin, destination, date, token=token)
            itineraries = normalize_offers(payload)
        except FlightsApiError as exc:
            return self._fail(SearchError(exc.message))
        except Exception as exc:
            logger.exception("Unexpected failure while processing search results")
            return self._fail(SearchError(str(exc) or "Unknown error"))

        self.cache.put(origin, destination, date, itineraries)
        self.itineraries = itineraries
        logger.info("Got %d itineraries for %s ➔ %s", len(itineraries), origin, destination)
        return SearchResult(itineraries=itineraries)

    def _fail(self, error: SearchError) -> SearchResult:
        logger.warning("Search failed: %s", error.message)
        self.itineraries = []
        self.error = error
        return SearchResult(itineraries=[], error=error)


def recent_searches(
    client: FlightsApiClient, credentials: CredentialStore
) -> List[RecentSearch]:
    """Return the account's recent searches, or ``[]`` when logged out."""
    token = credentials.get_token()
    if not token:
        return []
    data = client.get_recent_searches(token)
    return [
        RecentSearch(
            id=str(item.get("id", "")),
            origin=item.get("origin", ""),
            destination=item.get("destination", ""),
            date=item.get("date", ""),
            created_at=item.get("createdAt"),
        )
        for item in (data if isinstance(data, list) else [])
        if isinstance(item, dict)
    ]


__all__ = ["SearchOrchestrator", "recent_searches"]

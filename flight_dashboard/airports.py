from __future__ import annotations

import logging
from typing import List

from .api_client import FlightsApiClient
from .errors import FlightsApiError
from .models import Airport

AIRPORT_LIMIT = 10

logger = logging.getLogger(__name__)


def search_airports(
    client: FlightsApiClient, query: str, limit: int = AIRPORT_LIMIT
) -> List[Airport]:
    """Return up to *limit* airports matching *query*.

    An empty query returns ``[]`` without calling the backend; lookup failures
    are logged and also yield ``[]``.
    """
    if not query:
        return []
    try:
        data = client.search_airports(query)
    except FlightsApiError as exc:
        logger.warning("Airport lookup for %r failed: %s", query, exc)
        return []

    if not isinstance(data, list):
        return []

    airports: List[Airport] = []
    for item in data[:limit]:
        if not isinstance(item, dict):
            continue
        code = item.get("code") or item.get("iata")
        if not code:
            continue
        airports.append(
            Airport(
                code=code,
                name=item.get("name") or "",
                iata=item.get("iata"),
                city=item.get("city"),
            )
        )
    return airports


__all__ = ["search_airports", "AIRPORT_LIMIT"]

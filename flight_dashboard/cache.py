"""Local result cache keyed by ``{origin}-{destination}-{date}``.

Entries are stored as ``{"flights": [...], "timestamp": <epoch ms>}`` JSON so
that data written by earlier clients keeps loading. Reads are best-effort:
anything unreadable is a miss.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Callable, List, Optional

from .models import CacheEntry, Itinerary
from .store import KeyValueStore

CACHE_TTL_MS = 259_200_000  # 72 h

logger = logging.getLogger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


def cache_key(origin: str, destination: str, date: str) -> str:
    return f"{origin}-{destination}-{date}"


class ResultCache:
    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = CACHE_TTL_MS,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.store = store
        self.ttl_ms = ttl_ms
        self.clock = clock

    def get(self, origin: str, destination: str, date: str) -> Optional[CacheEntry]:
        """Return a fresh entry or ``None`` (missing, stale or unreadable)."""
        key = cache_key(origin, destination, date)
        try:
            raw = self.store.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            logger.debug("Cache miss %s", key)
            return None

        try:
            parsed = json.loads(raw)
            fetched_at = int(parsed["timestamp"])
            itineraries = [Itinerary.from_dict(f) for f in parsed.get("flights") or []]
        except (
            ValueError, TypeError, KeyError, AttributeError, OverflowError, RecursionError
        ) as exc:
            logger.warning("Ignoring corrupt cache entry %s: %s", key, exc)
            return None

        age = self.clock() - fetched_at
        if age >= self.ttl_ms:
            logger.info("Cache entry %s is stale (%d ms old)", key, age)
            return None

        logger.info("Cache hit %s", key)
        return CacheEntry(key=key, itineraries=itineraries, fetched_at_millis=fetched_at)

    def put(
        self,
        origin: str,
        destination: str,
        date: str,
        itineraries: List[Itinerary],
    ) -> CacheEntry:
        key = cache_key(origin, destination, date)
        entry = CacheEntry(
            key=key, itineraries=list(itineraries), fetched_at_millis=self.clock()
        )
        payload = json.dumps(
            {
                "flights": [itin.to_dict() for itin in entry.itineraries],
                "timestamp": entry.fetched_at_millis,
            }
        )
        try:
            self.store.set(key, payload)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
        return entry


__all__ = ["ResultCache", "cache_key", "CACHE_TTL_MS", "now_millis"]

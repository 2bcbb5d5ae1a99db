from __future__ import annotations

import hashlib
import json
from typing import Iterable, List

from .models import Segment


def canonical_segments(segments: Iterable[Segment]) -> List[dict]:
    """Raw-shaped segment dicts without display-only fields."""
    return [
        {
            "carrierCode": seg.carrier_code,
            "number": seg.flight_number,
            "departure": {"iataCode": seg.departure_airport, "at": seg.departure_at},
            "arrival": {"iataCode": seg.arrival_airport, "at": seg.arrival_at},
            "duration": seg.duration_iso,
        }
        for seg in segments
    ]


def itinerary_hash(segments: Iterable[Segment]) -> str:
    """Content-addressed SHA-256 identity of an ordered segment list."""
    raw = json.dumps(
        canonical_segments(segments),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


__all__ = ["itinerary_hash", "canonical_segments"]

from __future__ import annotations

from typing import Iterable

import pandas as pd

from .models import Itinerary

COLUMNS = [
    "id",
    "airline",
    "price",
    "origin",
    "destination",
    "departureTime",
    "arrivalTime",
    "duration",
    "stops",
]


def itineraries_frame(itineraries: Iterable[Itinerary]) -> pd.DataFrame:
    """One row per itinerary, in result order."""
    rows = [
        {
            "id": itin.id,
            "airline": itin.airline_display_name,
            "price": itin.price,
            "origin": itin.origin_airport,
            "destination": itin.destination_airport,
            "departureTime": itin.departure_at,
            "arrivalTime": itin.arrival_at,
            "duration": itin.total_duration_iso,
            "stops": itin.stopovers,
        }
        for itin in itineraries
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def export_csv(itineraries: Iterable[Itinerary], path: str) -> str:
    """Write *itineraries* to *path* as CSV and return the path."""
    itineraries_frame(itineraries).to_csv(path, index=False)
    return path


__all__ = ["itineraries_frame", "export_csv"]

"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Tuple


@dataclass(slots=True, frozen=True)
class Segment:
    carrier_code: str
    flight_number: str
    departure_airport: str
    departure_at: str
    arrival_airport: str
    arrival_at: str
    duration_iso: str
    carrier_name: Optional[str] = None

    def to_dict(self) -> dict:
        """Return the segment in the upstream (Amadeus-like) shape."""
        data = {
            "carrierCode": self.carrier_code,
            "number": self.flight_number,
            "departure": {"iataCode": self.departure_airport, "at": self.departure_at},
            "arrival": {"iataCode": self.arrival_airport, "at": self.arrival_at},
            "duration": self.duration_iso,
        }
        if self.carrier_name is not None:
            data["carrierName"] = self.carrier_name
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Segment":
        departure = data.get("departure") or {}
        arrival = data.get("arrival") or {}
        return cls(
            carrier_code=str(data.get("carrierCode") or ""),
            flight_number=str(data.get("number") or ""),
            departure_airport=str(departure.get("iataCode") or ""),
            departure_at=str(departure.get("at") or ""),
            arrival_airport=str(arrival.get("iataCode") or ""),
            arrival_at=str(arrival.get("at") or ""),
            duration_iso=str(data.get("duration") or ""),
            carrier_name=data.get("carrierName"),
        )


@dataclass(slots=True, frozen=True)
class Itinerary:
    id: str
    airline_display_name: str
    price: float
    total_duration_iso: str
    departure_at: str
    arrival_at: str
    origin_airport: str
    destination_airport: str
    segments: Tuple[Segment, ...]

    @property
    def stopovers(self) -> int:
        return len(self.segments) - 1

    def with_id(self, new_id: str) -> "Itinerary":
        return replace(self, id=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "price": self.price,
            "airline": self.airline_display_name,
            "duration": self.total_duration_iso,
            "departureTime": self.departure_at,
            "arrivalTime": self.arrival_at,
            "origin": self.origin_airport,
            "destination": self.destination_airport,
            "segments": [seg.to_dict() for seg in self.segments],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Itinerary":
        """Rebuild an itinerary stored by :meth:`to_dict`.

        Raises ``ValueError`` when the record has no segments.
        """
        raw_segments = data.get("segments") or []
        segments = tuple(Segment.from_dict(seg) for seg in raw_segments)
        if not segments:
            raise ValueError("itinerary without segments")
        return cls(
            id=str(data.get("id") or ""),
            airline_display_name=str(data.get("airline") or "NA"),
            price=float(data.get("price") or 0.0),
            total_duration_iso=str(data.get("duration") or ""),
            departure_at=str(data.get("departureTime") or segments[0].departure_at),
            arrival_at=str(data.get("arrivalTime") or segments[-1].arrival_at),
            origin_airport=str(data.get("origin") or segments[0].departure_airport),
            destination_airport=str(
                data.get("destination") or segments[-1].arrival_airport
            ),
            segments=segments,
        )


@dataclass(slots=True)
class CacheEntry:
    key: str
    itineraries: List[Itinerary]
    fetched_at_millis: int


@dataclass(slots=True)
class SavedFlight:
    itinerary: Itinerary
    saved_at_millis: Optional[int] = None

    @property
    def id(self) -> str:
        return self.itinerary.id

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SavedFlight":
        return cls(
            itinerary=Itinerary.from_dict(data),
            saved_at_millis=_to_millis(data.get("savedAt")),
        )


@dataclass(slots=True)
class Airport:
    code: str
    name: str
    iata: Optional[str] = None
    city: Optional[str] = None

    @property
    def label(self) -> str:
        code = self.iata or self.code
        return f"{code} - {self.city}" if self.city else code


@dataclass(slots=True)
class RecentSearch:
    id: str
    origin: str
    destination: str
    date: str
    created_at: Optional[str] = None


@dataclass(slots=True)
class SearchResult:
    itineraries: List[Itinerary] = field(default_factory=list)
    error: Optional[Exception] = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


def _to_millis(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)

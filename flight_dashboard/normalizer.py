"""Reduce heterogeneous flight-offer payloads to :class:`Itinerary` records."""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any, List, Mapping, Optional

from .errors import NormalizationSkip
from .models import Itinerary, Segment

logger = logging.getLogger(__name__)

NO_AIRLINE = "NA"


def parse_price(price: Any) -> float:
    """Return ``grandTotal`` (or ``total``) as a non-negative float.

    Anything missing, non-numeric, NaN, infinite or negative becomes ``0.0``.
    """
    if not isinstance(price, Mapping):
        return 0.0
    raw = price.get("grandTotal")
    if raw is None or raw == "":
        raw = price.get("total")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0.0
    return value


def extract_offers(payload: Any) -> List[Any]:
    """Accept a bare list of offers or an object with a ``data`` list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


def extract_carriers(payload: Any) -> Mapping[str, str]:
    """Return ``dictionaries.carriers`` of *payload*, or ``{}`` if absent.

    Raises ``NormalizationSkip`` when either level is present but is not an
    object.
    """
    if not isinstance(payload, Mapping):
        return {}
    dictionaries = payload.get("dictionaries")
    if dictionaries is None:
        return {}
    if not isinstance(dictionaries, Mapping):
        raise NormalizationSkip(f"dictionaries is not an object: {dictionaries!r}")
    carriers = dictionaries.get("carriers")
    if carriers is None:
        return {}
    if not isinstance(carriers, Mapping):
        raise NormalizationSkip(f"carriers is not an object: {carriers!r}")
    return carriers


def _carrier_name(code: Optional[str], carriers: Mapping[str, str]) -> Optional[str]:
    if not code:
        return None
    name = carriers.get(code)
    return name if isinstance(name, str) and name else code


def _to_segment(raw: Any, carriers: Mapping[str, str]) -> Segment:
    if not isinstance(raw, Mapping):
        raise NormalizationSkip(f"segment is not an object: {raw!r}")
    departure = raw.get("departure") or {}
    arrival = raw.get("arrival") or {}
    code = raw.get("carrierCode") or ""
    return Segment(
        carrier_code=code,
        flight_number=str(raw.get("number") or ""),
        departure_airport=departure.get("iataCode") or "",
        departure_at=departure.get("at") or "",
        arrival_airport=arrival.get("iataCode") or "",
        arrival_at=arrival.get("at") or "",
        duration_iso=raw.get("duration") or "",
        carrier_name=_carrier_name(code, carriers),
    )


def _build_itinerary(offer: Any, carriers: Mapping[str, str]) -> Itinerary:
    if not isinstance(offer, Mapping):
        raise NormalizationSkip("offer is not an object")

    itineraries = offer.get("itineraries") or []
    if not isinstance(itineraries, list) or not itineraries:
        raise NormalizationSkip("offer has no itineraries")
    first = itineraries[0] or {}

    raw_segments = first.get("segments") or []
    if not raw_segments:
        raise NormalizationSkip("itinerary has no segments")
    segments = tuple(_to_segment(seg, carriers) for seg in raw_segments)

    codes = offer.get("validatingAirlineCodes") or []
    airline = _carrier_name(codes[0] if codes else None, carriers) or NO_AIRLINE

    offer_id = offer.get("id")
    return Itinerary(
        id=str(offer_id) if offer_id is not None else str(uuid.uuid4()),
        airline_display_name=airline,
        price=parse_price(offer.get("price")),
        total_duration_iso=first.get("duration") or "",
        departure_at=segments[0].departure_at,
        arrival_at=segments[-1].arrival_at,
        origin_airport=segments[0].departure_airport,
        destination_airport=segments[-1].arrival_airport,
        segments=segments,
    )


def normalize(
    raw_offer: Any, carriers: Optional[Mapping[str, str]] = None
) -> Optional[Itinerary]:
    """Return the canonical itinerary for *raw_offer* or ``None`` if malformed.

    *carriers* (response-level names) take precedence over the offer's own
    ``dictionaries.carriers``.
    """
    try:
        merged = {**extract_carriers(raw_offer), **(carriers or {})}
        return _build_itinerary(raw_offer, merged)
    except (NormalizationSkip, AttributeError, TypeError, KeyError) as exc:
        offer_id = raw_offer.get("id") if isinstance(raw_offer, Mapping) else None
        logger.warning("Skipping offer %s: %s", offer_id, exc)
        return None


def normalize_offers(payload: Any) -> List[Itinerary]:
    """Normalize a whole search response, dropping unparseable offers."""
    try:
        carriers = extract_carriers(payload)
    except NormalizationSkip as exc:
        logger.warning("Ignoring response carrier dictionary: %s", exc)
        carriers = {}
    normalized = (
        normalize(offer, carriers)
        for offer in extract_offers(payload)
    )
    return [itin for itin in normalized if itin is not None]


__all__ = [
    "normalize",
    "normalize_offers",
    "extract_offers",
    "extract_carriers",
    "parse_price",
]

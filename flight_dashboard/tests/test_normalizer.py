import math

import pytest

from flight_dashboard.normalizer import (
    extract_offers,
    normalize,
    normalize_offers,
    parse_price,
)

from payloads import make_offer, make_payload, make_segment


def test_normalize_uses_first_and_last_segment():
    offer = make_offer()
    itin = normalize(offer, {"AA": "American Airlines"})

    assert itin is not None
    assert itin.id == "1"
    assert itin.departure_at == "2025-08-21T08:00:00"
    assert itin.origin_airport == "JFK"
    assert itin.arrival_at == "2025-08-21T14:00:00"
    assert itin.destination_airport == "LAX"
    assert itin.total_duration_iso == "PT9H"
    assert itin.stopovers == 1
    assert [s.flight_number for s in itin.segments] == ["100", "200"]
    assert itin.segments[0].carrier_name == "American Airlines"
    assert itin.segments[1].duration_iso == "PT4H30M"


def test_airline_falls_back_to_code_then_placeholder():
    assert normalize(make_offer(), {}).airline_display_name == "AA"
    assert normalize(make_offer(airlines=()), {}).airline_display_name == "NA"


def test_offer_level_dictionary_is_used():
    offer = make_offer()
    offer["dictionaries"] = {"carriers": {"AA": "American Airlines"}}
    assert normalize(offer).airline_display_name == "American Airlines"


@pytest.mark.parametrize(
    "price, expected",
    [
        ({"grandTotal": "345.50"}, 345.5),
        ({"total": "12"}, 12.0),
        ({"grandTotal": "", "total": "99.9"}, 99.9),
        ({"grandTotal": "abc"}, 0.0),
        ({"grandTotal": "NaN"}, 0.0),
        ({"grandTotal": "-5"}, 0.0),
        ({"grandTotal": "inf"}, 0.0),
        ({}, 0.0),
        (None, 0.0),
        ("12", 0.0),
    ],
)
def test_parse_price_is_total(price, expected):
    value = parse_price(price)
    assert not math.isnan(value)
    assert value >= 0
    assert value == pytest.approx(expected)


def test_malformed_offers_are_dropped_without_affecting_siblings(caplog):
    no_itineraries = make_offer(offer_id="2")
    no_itineraries["itineraries"] = []
    no_segments = make_offer(offer_id="3", segments=[])
    payload = {
        "data": [
            make_offer(offer_id="1"),
            no_itineraries,
            "garbage",
            no_segments,
            make_offer(offer_id="4"),
        ]
    }

    result = normalize_offers(payload)

    assert [itin.id for itin in result] == ["1", "4"]
    assert any("Skipping offer" in r.getMessage() for r in caplog.records)


def test_normalize_returns_none_for_bad_segment():
    offer = make_offer(segments=["not-a-segment"])
    assert normalize(offer) is None


def test_missing_offer_id_gets_generated():
    offer = make_offer()
    del offer["id"]
    first = normalize(offer)
    assert first is not None
    assert first.id


def test_extract_offers_accepts_both_shapes():
    offer = make_offer()
    assert extract_offers([offer]) == [offer]
    assert extract_offers({"data": [offer]}) == [offer]
    assert extract_offers({"data": "nope"}) == []
    assert extract_offers(None) == []


def test_response_dictionary_applies_to_every_offer():
    payload = make_payload()
    payload["data"].append(
        make_offer(
            offer_id="2",
            segments=[
                make_segment(
                    "AA", "7", "JFK", "2025-08-21T06:00:00",
                    "LAX", "2025-08-21T09:00:00", "PT6H",
                )
            ],
        )
    )
    result = normalize_offers(payload)
    assert [i.airline_display_name for i in result] == ["American Airlines"] * 2
    assert result[1].stopovers == 0


@pytest.mark.parametrize("dictionaries", ["oops", ["AA"], {"carriers": "AA"}])
def test_bad_offer_dictionary_drops_only_that_offer(dictionaries):
    payload = {
        "data": [
            make_offer(offer_id="1"),
            {**make_offer(offer_id="2"), "dictionaries": dictionaries},
            make_offer(offer_id="3"),
        ]
    }

    assert [itin.id for itin in normalize_offers(payload)] == ["1", "3"]


@pytest.mark.parametrize("dictionaries", ["oops", [1, 2], {"carriers": 42}])
def test_bad_response_dictionary_falls_back_to_codes(dictionaries):
    payload = {
        "data": [make_offer(offer_id="1"), make_offer(offer_id="2")],
        "dictionaries": dictionaries,
    }

    result = normalize_offers(payload)

    assert [itin.id for itin in result] == ["1", "2"]
    assert result[0].airline_display_name == "AA"


def test_unmapped_segment_carrier_falls_back_to_code():
    segments = [
        make_segment(
            "AA", "100", "JFK", "2025-08-21T08:00:00",
            "LHR", "2025-08-21T20:00:00", "PT7H",
        ),
        make_segment(
            "BA", "300", "LHR", "2025-08-22T07:00:00",
            "CDG", "2025-08-22T09:15:00", "PT1H15M",
        ),
    ]
    payload = {
        "data": [make_offer(segments=segments, airlines=("BA",))],
        "dictionaries": {"carriers": {"AA": "American Airlines"}},
    }

    itin = normalize_offers(payload)[0]

    assert [s.carrier_name for s in itin.segments] == ["American Airlines", "BA"]
    assert itin.airline_display_name == "BA"
    assert itin.destination_airport == "CDG"

import json

from flight_dashboard.cache import CACHE_TTL_MS, ResultCache, cache_key
from flight_dashboard.normalizer import normalize_offers
from flight_dashboard.store import MemoryStore, SQLiteStore

from payloads import make_payload


class Clock:
    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now


def test_cache_key_format():
    assert cache_key("JFK", "LAX", "2025-08-21") == "JFK-LAX-2025-08-21"


def test_put_then_get_round_trip():
    clock = Clock()
    cache = ResultCache(MemoryStore(), clock=clock)
    itineraries = normalize_offers(make_payload())

    cache.put("JFK", "LAX", "2025-08-21", itineraries)
    clock.now += CACHE_TTL_MS - 1
    entry = cache.get("JFK", "LAX", "2025-08-21")

    assert entry is not None
    assert entry.key == "JFK-LAX-2025-08-21"
    assert entry.itineraries == itineraries


def test_entry_expires_after_ttl_but_is_not_deleted():
    clock = Clock()
    store = MemoryStore()
    cache = ResultCache(store, clock=clock)
    cache.put("JFK", "LAX", "2025-08-21", normalize_offers(make_payload()))

    clock.now += CACHE_TTL_MS
    assert cache.get("JFK", "LAX", "2025-08-21") is None
    assert "JFK-LAX-2025-08-21" in store.data


def test_stored_format_is_flights_and_timestamp():
    clock = Clock()
    store = MemoryStore()
    ResultCache(store, clock=clock).put(
        "JFK", "LAX", "2025-08-21", normalize_offers(make_payload())
    )
    stored = json.loads(store.data["JFK-LAX-2025-08-21"])
    assert stored["timestamp"] == clock.now
    flight = stored["flights"][0]
    assert flight["airline"] == "American Airlines"
    assert flight["price"] == 345.5
    assert flight["segments"][0]["departure"] == {
        "iataCode": "JFK",
        "at": "2025-08-21T08:00:00",
    }


def test_corrupt_entries_are_misses():
    store = MemoryStore(
        {
            "JFK-LAX-2025-08-21": "{not json",
            "JFK-LAX-2025-08-22": json.dumps({"flights": []}),
            "JFK-LAX-2025-08-23": json.dumps([1, 2]),
            "JFK-LAX-2025-08-24": json.dumps(
                {"flights": [{"id": "x", "segments": []}], "timestamp": 1}
            ),
            "JFK-LAX-2025-08-25": '{"flights": [], "timestamp": Infinity}',
            "JFK-LAX-2025-08-26": '{"flights": [], "timestamp": NaN}',
            "JFK-LAX-2025-08-27": json.dumps({"flights": 5, "timestamp": 1}),
        }
    )
    cache = ResultCache(store, clock=Clock(2))
    for day in ("21", "22", "23", "24", "25", "26", "27"):
        assert cache.get("JFK", "LAX", f"2025-08-{day}") is None


def test_reads_entries_written_by_older_clients():
    flight = {
        "id": "7",
        "price": 120,
        "airline": "DL",
        "duration": "PT5H",
        "departureTime": "2025-08-21T08:00:00",
        "arrivalTime": "2025-08-21T13:00:00",
        "origin": "JFK",
        "destination": "LAX",
        "segments": [
            {
                "carrierCode": "DL",
                "number": "1",
                "departure": {"iataCode": "JFK", "at": "2025-08-21T08:00:00"},
                "arrival": {"iataCode": "LAX", "at": "2025-08-21T13:00:00"},
                "duration": "PT5H",
            }
        ],
    }
    store = MemoryStore(
        {"JFK-LAX-2025-08-21": json.dumps({"flights": [flight], "timestamp": 1000})}
    )
    entry = ResultCache(store, clock=Clock(2000)).get("JFK", "LAX", "2025-08-21")
    assert entry is not None
    assert entry.fetched_at_millis == 1000
    assert entry.itineraries[0].airline_display_name == "DL"
    assert entry.itineraries[0].price == 120.0


def test_sqlite_store_survives_reopen(tmp_path):
    db_file = str(tmp_path / "store.db")
    clock = Clock()
    ResultCache(SQLiteStore(db_file), clock=clock).put(
        "JFK", "LAX", "2025-08-21", normalize_offers(make_payload())
    )

    entry = ResultCache(SQLiteStore(db_file), clock=clock).get(
        "JFK", "LAX", "2025-08-21"
    )
    assert entry is not None
    assert len(entry.itineraries) == 1


def test_last_write_wins(tmp_path):
    store = SQLiteStore(str(tmp_path / "store.db"))
    clock = Clock()
    cache = ResultCache(store, clock=clock)
    cache.put("JFK", "LAX", "2025-08-21", normalize_offers(make_payload()))
    clock.now += 10
    cache.put("JFK", "LAX", "2025-08-21", [])

    entry = cache.get("JFK", "LAX", "2025-08-21")
    assert entry.itineraries == []
    assert entry.fetched_at_millis == clock.now


def test_store_errors_are_misses(tmp_path):
    store = SQLiteStore(str(tmp_path / "store.db"))
    cache = ResultCache(store, clock=Clock())
    cache.put("JFK", "LAX", "2025-08-21", normalize_offers(make_payload()))

    (tmp_path / "store.db").unlink()
    (tmp_path / "store.db").mkdir()
    assert cache.get("JFK", "LAX", "2025-08-21") is None


class BrokenStore:
    def get(self, key):
        raise OSError("disk gone")

    def set(self, key, value):
        raise OSError("disk gone")

    def delete(self, key):
        raise OSError("disk gone")


def test_any_store_failure_is_a_miss():
    cache = ResultCache(BrokenStore(), clock=Clock())
    entry = cache.put("JFK", "LAX", "2025-08-21", normalize_offers(make_payload()))

    assert len(entry.itineraries) == 1
    assert cache.get("JFK", "LAX", "2025-08-21") is None

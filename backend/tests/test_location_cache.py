from concurrent.futures import ThreadPoolExecutor

from models.schemas.geocode_result import GeocodeResult
from services.location_cache import COMMON_LOCATIONS, LocationCache, cache_key, normalize_key


def _result(place: str, confidence: float = 0.9) -> GeocodeResult:
    return GeocodeResult(
        formatted_address=f"{place}, Jamaica", place_name=place, confidence=confidence, country="Jamaica"
    )


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestKeys:
    def test_normalize_key(self):
        assert normalize_key("  Half   Way TREE ") == "half way tree"

    def test_cache_key_with_and_without_hint(self):
        assert cache_key("Liguanea") == "liguanea:any"
        assert cache_key("Liguanea", "Jamaica") == "liguanea:jamaica"


class TestLocationCache:
    def test_get_set(self, location_cache):
        location_cache.set("liguanea:any", _result("Liguanea"))
        assert location_cache.get("liguanea:any").place_name == "Liguanea"
        assert location_cache.get("LIGUANEA:any").place_name == "Liguanea"

    def test_miss_counted(self, location_cache):
        assert location_cache.get("nowhere:any") is None
        assert location_cache.stats() == {"size": 0, "hits": 0, "misses": 1}

    def test_hits_counted(self, location_cache):
        location_cache.set("portmore:any", _result("Portmore"))
        location_cache.get("portmore:any")
        location_cache.get("portmore:any")
        assert location_cache.stats()["hits"] == 2

    def test_entries_expire(self):
        clock = FakeClock()
        cache = LocationCache(max_entries=10, ttl_seconds=60, clock=clock)
        cache.set("portmore:any", _result("Portmore"))
        clock.now = 59
        assert cache.get("portmore:any") is not None
        clock.now = 60
        assert cache.get("portmore:any") is None
        assert len(cache) == 0

    def test_evicts_least_hit_entry(self):
        cache = LocationCache(max_entries=2, ttl_seconds=60)
        cache.set("a:any", _result("A"))
        cache.set("b:any", _result("B"))
        cache.get("a:any")
        cache.set("c:any", _result("C"))
        assert len(cache) == 2
        assert cache.get("b:any") is None
        assert cache.get("a:any") is not None
        assert cache.get("c:any") is not None

    def test_overwrite_does_not_evict(self):
        cache = LocationCache(max_entries=2, ttl_seconds=60)
        cache.set("a:any", _result("A"))
        cache.set("b:any", _result("B"))
        cache.set("a:any", _result("A2"))
        assert len(cache) == 2
        assert cache.get("a:any").place_name == "A2"

    def test_clear(self, location_cache):
        location_cache.set("a:any", _result("A"))
        location_cache.get("missing:any")
        location_cache.clear()
        assert location_cache.stats() == {"size": 0, "hits": 0, "misses": 0}


class TestPreload:
    def test_preload_common(self):
        cache = LocationCache()
        cache.preload_common()
        assert len(cache) == 2 * len(COMMON_LOCATIONS)

        result = cache.get(cache_key("montego bay"))
        assert result.place_name == "Montego Bay"
        assert result.confidence == 1.0
        assert cache.get(cache_key("Port of Spain", "Trinidad and Tobago")).country == "Trinidad and Tobago"


class TestConcurrency:
    def test_parallel_set_and_get(self):
        cache = LocationCache(max_entries=1000, ttl_seconds=60)

        def worker(i: int) -> int:
            key = cache_key(f"place {i}")
            cache.set(key, _result(f"Place {i}"))
            return sum(1 for _ in range(20) if cache.get(key) is not None)

        with ThreadPoolExecutor(max_workers=16) as pool:
            found = list(pool.map(worker, range(50)))

        assert found == [20] * 50
        assert cache.stats() == {"size": 50, "hits": 50 * 20, "misses": 0}

    def test_parallel_inserts_respect_capacity(self):
        cache = LocationCache(max_entries=10, ttl_seconds=60)

        def worker(i: int) -> int:
            cache.set(cache_key(f"place {i}"), _result(f"Place {i}"))
            return len(cache)

        with ThreadPoolExecutor(max_workers=16) as pool:
            sizes = list(pool.map(worker, range(200)))

        assert max(sizes) <= 10
        assert len(cache) == 10

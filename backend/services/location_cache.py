"""Bounded TTL cache for geocoding results."""

import logging
import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from models.schemas.geocode_result import GeocodeResult

logger = logging.getLogger(__name__)

# (query, place_name, country) seeded at startup so common places skip the network
COMMON_LOCATIONS = [
    ("liguanea", "Liguanea", "Jamaica"),
    ("half way tree", "Half Way Tree", "Jamaica"),
    ("montego bay", "Montego Bay", "Jamaica"),
    ("spanish town", "Spanish Town", "Jamaica"),
    ("portmore", "Portmore", "Jamaica"),
    ("kingston", "Kingston", "Jamaica"),
    ("ocho rios", "Ocho Rios", "Jamaica"),
    ("port of spain", "Port of Spain", "Trinidad and Tobago"),
    ("bridgetown", "Bridgetown", "Barbados"),
    ("georgetown", "Georgetown", "Guyana"),
]


def normalize_key(key: str) -> str:
    return re.sub(r"\s+", " ", key.strip().lower())


def cache_key(candidate: str, country_hint: str | None = None) -> str:
    return normalize_key(f"{candidate}:{country_hint or 'any'}")


@dataclass
class _Entry:
    result: GeocodeResult
    stored_at: float
    hits: int = 0


class LocationCache:
    """Geocode results keyed by ``candidate:hint``.

    When full, the entry with the fewest hits is evicted. Entries older than
    ``ttl_seconds`` are dropped on read. All access is serialized by a lock.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> GeocodeResult | None:
        key = normalize_key(key)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._clock() - entry.stored_at >= self.ttl_seconds:
                del self._entries[key]
                self._misses += 1
                return None
            entry.hits += 1
            return entry.result

    def set(self, key: str, result: GeocodeResult) -> None:
        key = normalize_key(key)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                evict = min(self._entries, key=lambda k: self._entries[k].hits)
                del self._entries[evict]
                logger.debug("Evicted location cache entry %s", evict)
            self._entries[key] = _Entry(result=result, stored_at=self._clock())

    def preload_common(self) -> None:
        """Seed well-known Caribbean places under both the hinted and open keys."""
        for query, place_name, country in COMMON_LOCATIONS:
            result = GeocodeResult(
                formatted_address=f"{place_name}, {country}",
                place_name=place_name,
                confidence=1.0,
                country=country,
            )
            self.set(cache_key(query), result)
            self.set(cache_key(query, country), result)
        logger.info("Preloaded %d common locations", len(COMMON_LOCATIONS))

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "size": len(self._entries),
                "hits": sum(e.hits for e in self._entries.values()),
                "misses": self._misses,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

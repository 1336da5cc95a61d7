"""Stage 4: Location Corrector.

Speech recognizers garble local place names ("Ligonny" for Liguanea). The
corrector asks a geocoder for each Caribbean country in turn (hint first),
fuzzy-matches the returned places against the spoken candidate and keeps the
first answer that is confident enough. Results are cached; a geocoder
failure yields None.
"""

import asyncio
import logging
import re
from typing import Any, Protocol

from rapidfuzz.distance import Levenshtein

from models.schemas.geocode_result import GeocodeResult
from services import lexicon
from services.location_cache import LocationCache, cache_key
from services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

ACCEPT_CONFIDENCE = 0.5
CARIBBEAN_BOOST = 1.2
MATCH_DISTANCE_RATIO = 0.4

_PLACE_KEYS = ("suburb", "neighbourhood", "village", "town", "city", "municipality")

# Capitalised place phrase after a locative word: "inna Half Way Tree", "near Ocho Rios"
_CANDIDATE_RE = re.compile(
    r"\b(?i:in|at|near|around|inna|by|from|to)\s+"
    r"([A-Z][\w'-]*(?:\s+(?:of\s+|de\s+|la\s+)?[A-Z][\w'-]*)*)"
)

# "from Monday", "by Christmas" are dates, not places
_CALENDAR_WORDS = frozenset({
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
    "today", "tomorrow", "tonight", "morning", "afternoon", "evening", "night",
    "week", "weekend", "month", "christmas", "easter", "emancipation", "independence", "carnival",
})


class Geocoder(Protocol):
    def search(self, query: str, country: str | None = None) -> list[dict]: ...


def place_name(result: dict) -> str:
    address = result.get("address") or {}
    for key in _PLACE_KEYS:
        if address.get(key):
            return address[key]
    return result.get("name") or "Unknown"


def is_caribbean_country(country: str) -> bool:
    return any(c["name"] in country for c in lexicon.caribbean_countries()) if country else False


def best_match(query: str, results: list[dict]) -> dict:
    """Closest result by edit distance; place names count double vs full addresses."""
    query = query.lower()
    best, best_score = results[0], float("inf")
    for result in results:
        place_distance = Levenshtein.distance(query, place_name(result).lower())
        address_distance = Levenshtein.distance(query, (result.get("display_name") or "").lower())
        score = min(place_distance, address_distance * 0.5)
        if score < best_score:
            best, best_score = result, score
    if best_score <= len(query) * MATCH_DISTANCE_RATIO:
        return best
    return results[0]


def match_confidence(query: str, result: dict) -> float:
    name = place_name(result)
    distance = Levenshtein.distance(query.lower(), name.lower())
    similarity = 1 - distance / max(len(query), len(name), 1)
    country = (result.get("address") or {}).get("country", "")
    if is_caribbean_country(country):
        similarity *= CARIBBEAN_BOOST
    return max(0.0, min(similarity, 1.0))


def to_geocode_result(query: str, result: dict) -> GeocodeResult:
    address = result.get("address") or {}
    return GeocodeResult(
        formatted_address=result.get("display_name", ""),
        place_name=place_name(result),
        confidence=match_confidence(query, result),
        country=address.get("country", ""),
        locality=address.get("city") or address.get("town") or address.get("village"),
        region=address.get("state") or address.get("county"),
    )


def clean_candidate(candidate: str) -> str:
    cleaned = re.sub(r"[^\w\s-]", "", candidate.strip())
    return re.sub(r"\s+", " ", cleaned).strip()


def find_candidate(text: str) -> str | None:
    """Pull a capitalised place phrase following in/at/near/inna/..."""
    for match in _CANDIDATE_RE.finditer(text or ""):
        candidate = match.group(1).strip()
        if candidate in ("I", "Mi") or lexicon.country_info(candidate) is not None:
            continue
        if all(word.lower() in _CALENDAR_WORDS for word in candidate.split()):
            continue
        return candidate
    return None


class LocationCorrector(BaseStage):
    stage_name = "s4_location_corrector"
    tables = ("countries",)

    def __init__(self, geocoder: Geocoder | None = None, cache: LocationCache | None = None) -> None:
        self.geocoder = geocoder
        self.cache = cache

    def _country_order(self, country_hint: str | None) -> list[str]:
        names = [c["name"] for c in lexicon.caribbean_countries()]
        if not country_hint:
            return names
        info = lexicon.country_info(country_hint)
        hinted = info["name"] if info else country_hint
        return [hinted] + [n for n in names if n != hinted]

    def _search(self, query: str, country: str | None = None) -> GeocodeResult | None:
        try:
            results = self.geocoder.search(query, country)
        except Exception as e:
            logger.error("Geocoder error for %r (%s): %s", query, country or "any", e)
            return None
        if not results:
            return None
        try:
            return to_geocode_result(query, best_match(query, results))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("Unparseable geocoder result for %r: %s", query, e)
            return None

    def correct(self, candidate: str, country_hint: str | None = None) -> GeocodeResult | None:
        """Resolve a spoken place name. Blocking; see ``acorrect``."""
        cleaned = clean_candidate(candidate or "")
        if not cleaned:
            return None

        key = cache_key(cleaned, country_hint)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Location found in cache: %s", cleaned)
                return cached

        if self.geocoder is None:
            return None

        result = None
        for country in self._country_order(country_hint):
            result = self._search(cleaned, country)
            if result and result.confidence > ACCEPT_CONFIDENCE:
                break
        else:
            result = self._search(cleaned)

        if result is not None:
            logger.info(
                "Location %r -> %r (%s, %.0f%%)",
                cleaned, result.place_name, result.country or "?", result.confidence * 100,
            )
            if self.cache is not None:
                self.cache.set(key, result)
        return result

    async def acorrect(self, candidate: str, country_hint: str | None = None) -> GeocodeResult | None:
        return await asyncio.to_thread(self.correct, candidate, country_hint)

    def find_candidate(self, text: str) -> str | None:
        return find_candidate(text)

    def predict(self, **kwargs: Any) -> GeocodeResult | None:
        return self.correct(kwargs.get("candidate", ""), kwargs.get("country_hint"))

    async def apredict(self, **kwargs: Any) -> GeocodeResult | None:
        return await self.acorrect(kwargs.get("candidate", ""), kwargs.get("country_hint"))

"""OpenStreetMap Nominatim geocoding client.

A geocoder is anything with ``search(query, country=None) -> list[dict]``
returning Nominatim-shaped results (``display_name``, ``name``,
``address{...}``). Calls are blocking; the pipeline runs them in a worker
thread.
"""

import logging

import requests

from config import Settings
from services import lexicon

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    def __init__(
        self,
        url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "VoiceGigConnect/1.0",
        timeout: float = 3.0,
        limit: int = 5,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.limit = limit
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_settings(cls, settings: Settings) -> "NominatimGeocoder | None":
        if not settings.geocoding_enabled:
            logger.info("Geocoding disabled by configuration")
            return None
        return cls(
            url=settings.geocoder_url,
            user_agent=settings.geocoder_user_agent,
            timeout=settings.geocoder_timeout_seconds,
        )

    def search(self, query: str, country: str | None = None) -> list[dict]:
        params = {
            "q": f"{query}, {country}" if country else query,
            "format": "json",
            "addressdetails": 1,
            "limit": self.limit,
            "accept-language": "en",
        }
        info = lexicon.country_info(country)
        if info is not None:
            params["countrycodes"] = info["code"]

        try:
            response = self._session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            results = response.json()
        except requests.RequestException as e:
            logger.error("Nominatim request failed for %r: %s", query, e)
            return []
        except ValueError as e:
            logger.error("Nominatim returned invalid JSON for %r: %s", query, e)
            return []

        if not isinstance(results, list):
            logger.warning("Unexpected Nominatim payload for %r", query)
            return []
        return results

"""Shared test configuration and fixtures."""

import pytest

from config import Settings
from services.location_cache import LocationCache


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        gemini_api_key="",
        llm_enabled=False,
        geocoding_enabled=False,
        location_cache_preload=False,
        _env_file=None,
    )


@pytest.fixture
def location_cache() -> LocationCache:
    return LocationCache(max_entries=10, ttl_seconds=60)

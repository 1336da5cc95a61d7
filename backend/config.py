import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    gemini_api_key: str = ""
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8080",
    ]
    debug: bool = False

    # LLM refinement (dialect classification + field extraction)
    llm_enabled: bool = True
    llm_model: str = "gemini-2.5-flash"
    llm_timeout_seconds: float = 8.0
    llm_temperature: float = 0.1

    # Geocoding (OpenStreetMap Nominatim by default)
    geocoding_enabled: bool = True
    geocoder_url: str = "https://nominatim.openstreetmap.org/search"
    geocoder_user_agent: str = "VoiceGigConnect/1.0"
    geocoder_timeout_seconds: float = 3.0
    location_cache_max_entries: int = 1000
    location_cache_ttl_seconds: int = 24 * 60 * 60
    location_cache_preload: bool = True
    location_match_threshold: float = 0.6  # min geocode confidence to rewrite a location

    # Extraction defaults
    default_currency: str = "JMD"
    max_transcription_chars: int = 5000
    lexicon_dir: str = ""  # empty -> bundled tables in services/lexicon

    # Per-caller throttling (WhatsApp / phone number)
    rate_limit_max_requests: int = 5
    rate_limit_window_minutes: int = 15

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ("settings_",)}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})

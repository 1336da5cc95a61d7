import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_pipeline
from api.router import limiter
from main import app
from services.location_cache import LocationCache
from services.moderation import RateLimiter
from services.pipeline.orchestrator import GigExtractionPipeline
from tests.fakes import FakeGeocoder, nominatim_result

client = TestClient(app)


@pytest.fixture(autouse=True)
def pipeline(test_settings):
    pipeline = GigExtractionPipeline(
        test_settings,
        geocoder=FakeGeocoder([nominatim_result("Liguanea", "Jamaica")]),
        location_cache=LocationCache(max_entries=10, ttl_seconds=60),
        rate_limiter=RateLimiter(max_requests=1, window_minutes=15),
    )
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    limiter.enabled = False
    yield pipeline
    app.dependency_overrides.clear()
    limiter.enabled = True


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["llm_configured"] is False
    assert data["geocoder_configured"] is True
    assert data["location_cache"] == {"size": 0, "hits": 0, "misses": 0}


def test_analyze():
    response = client.post(
        "/analyze",
        json={
            "transcription": "I need a promo to fix my sink, the job is in Kingston and I'll pay five thousand dollars",
            "location_hint": "Jamaica",
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["extraction"]["job_type"] == "job_posting"
    assert "plumbing" in data["extraction"]["skills"]
    assert data["extraction"]["budget"] == {"amount": 5000, "currency": "JMD", "type": "fixed"}
    assert data["moderation"]["safe"] is True
    assert 0 <= data["confidence"]["overall"] <= 0.98
    assert data["dialect_description"]
    assert data["rate_limit_remaining"] is None


def test_analyze_with_audio_metadata():
    response = client.post(
        "/analyze",
        json={
            "transcription": "Mi can cook and clean, mi deh a Portmore",
            "audio": {"duration": 8, "sample_rate": 16000, "signal_to_noise": 25},
        },
    )
    assert response.status_code == 200
    assert response.json()["confidence"]["technical"] > 0


def test_analyze_rejects_empty():
    response = client.post("/analyze", json={"transcription": "   "})
    assert response.status_code == 400


def test_analyze_rejects_too_long():
    response = client.post("/analyze", json={"transcription": "wuk " * 2000})
    assert response.status_code == 400


def test_analyze_rejects_missing_field():
    response = client.post("/analyze", json={})
    assert response.status_code == 422


def test_caller_rate_limit():
    body = {"transcription": "Need a driver fi tomorrow inna Kingston", "caller_id": "+18765550100"}
    first = client.post("/analyze", json=body)
    assert first.status_code == 200
    assert first.json()["rate_limit_remaining"] == 0

    second = client.post("/analyze", json=body)
    assert second.status_code == 429


def test_correct_location():
    response = client.post("/locations/correct", json={"candidate": "Ligonny", "country_hint": "Jamaica"})
    assert response.status_code == 200
    data = response.json()
    assert data["place_name"] == "Liguanea"
    assert data["country"] == "Jamaica"
    assert data["confidence"] > 0.5


def test_correct_location_not_found(pipeline):
    pipeline.geocoder.results = []
    response = client.post("/locations/correct", json={"candidate": "Atlantis"})
    assert response.status_code == 404

import requests

from config import Settings
from services.geocoding import NominatimGeocoder


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, bad_json: bool = False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.bad_json:
            raise ValueError("no JSON")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error: Exception | None = None):
        self.headers = {}
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        if self.error is not None:
            raise self.error
        return self.response


class TestNominatimGeocoder:
    def test_user_agent_set(self):
        session = FakeSession(FakeResponse([]))
        NominatimGeocoder(user_agent="VoiceGigConnect/1.0", session=session)
        assert session.headers["User-Agent"] == "VoiceGigConnect/1.0"

    def test_country_restricted_query(self):
        session = FakeSession(FakeResponse([{"display_name": "Liguanea, Jamaica"}]))
        geocoder = NominatimGeocoder(url="http://geo.test/search", timeout=2.0, session=session)
        results = geocoder.search("Ligonny", "Jamaica")
        assert results == [{"display_name": "Liguanea, Jamaica"}]

        url, params, timeout = session.requests[0]
        assert url == "http://geo.test/search"
        assert params["q"] == "Ligonny, Jamaica"
        assert params["countrycodes"] == "jm"
        assert params["addressdetails"] == 1
        assert timeout == 2.0

    def test_unrestricted_query(self):
        session = FakeSession(FakeResponse([]))
        NominatimGeocoder(session=session).search("Ligonny")
        params = session.requests[0][1]
        assert params["q"] == "Ligonny"
        assert "countrycodes" not in params

    def test_network_error(self):
        session = FakeSession(error=requests.ConnectionError("offline"))
        assert NominatimGeocoder(session=session).search("Kingston") == []

    def test_http_error(self):
        session = FakeSession(FakeResponse(status_code=503))
        assert NominatimGeocoder(session=session).search("Kingston") == []

    def test_invalid_json(self):
        session = FakeSession(FakeResponse(bad_json=True))
        assert NominatimGeocoder(session=session).search("Kingston") == []

    def test_unexpected_payload(self):
        session = FakeSession(FakeResponse({"error": "Unable to geocode"}))
        assert NominatimGeocoder(session=session).search("Kingston") == []

    def test_from_settings(self):
        assert NominatimGeocoder.from_settings(Settings(geocoding_enabled=False, _env_file=None)) is None
        geocoder = NominatimGeocoder.from_settings(
            Settings(geocoding_enabled=True, geocoder_timeout_seconds=1.5, _env_file=None)
        )
        assert geocoder.timeout == 1.5

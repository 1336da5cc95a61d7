"""Test doubles for the LLM provider and the geocoder."""


class FakeLLM:
    """LLM provider returning canned payloads in order (the last one repeats)."""

    def __init__(self, *payloads):
        self.payloads = list(payloads)
        self.prompts: list[str] = []

    async def __call__(self, prompt: str) -> dict | None:
        self.prompts.append(prompt)
        if len(self.payloads) > 1:
            return self.payloads.pop(0)
        return self.payloads[0] if self.payloads else None


class FailingLLM:
    def __init__(self):
        self.calls = 0

    async def __call__(self, prompt: str) -> dict | None:
        self.calls += 1
        raise ConnectionError("provider unreachable")


class FakeGeocoder:
    """Counts calls and returns the same Nominatim-shaped results for every query."""

    def __init__(self, results: list[dict] | None = None, fail: bool = False):
        self.results = results or []
        self.fail = fail
        self.calls: list[tuple[str, str | None]] = []

    def search(self, query: str, country: str | None = None) -> list[dict]:
        self.calls.append((query, country))
        if self.fail:
            raise TimeoutError("geocoder timed out")
        return self.results


def nominatim_result(place: str, country: str, display_name: str | None = None, **address) -> dict:
    return {
        "display_name": display_name or f"{place}, {country}",
        "name": place,
        "address": {"suburb": place, "country": country, **address},
    }

import asyncio
from types import SimpleNamespace

import pytest

from config import Settings
from services.gemini_client import GeminiProvider, strip_code_fences


def _fake_client(text: str | None = None, delay: float = 0.0, error: Exception | None = None):
    calls = []

    async def generate_content(**kwargs):
        calls.append(kwargs)
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        return SimpleNamespace(text=text)

    client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
    return client, calls


class TestStripCodeFences:
    def test_plain_json_untouched(self):
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'


class TestFromSettings:
    def test_disabled(self):
        settings = Settings(gemini_api_key="key", llm_enabled=False, _env_file=None)
        assert GeminiProvider.from_settings(settings) is None

    def test_missing_key(self):
        settings = Settings(gemini_api_key="", llm_enabled=True, _env_file=None)
        assert GeminiProvider.from_settings(settings) is None


class TestGenerateJson:
    @pytest.mark.asyncio
    async def test_returns_object(self):
        client, calls = _fake_client('```json\n{"accent": "jamaican"}\n```')
        provider = GeminiProvider(api_key="", model="test-model", client=client)
        assert await provider("prompt") == {"accent": "jamaican"}
        assert calls[0]["model"] == "test-model"
        assert calls[0]["contents"] == "prompt"
        assert calls[0]["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client, _ = _fake_client("not json at all")
        assert await GeminiProvider(api_key="", client=client).generate_json("p") is None

    @pytest.mark.asyncio
    async def test_non_object_json(self):
        client, _ = _fake_client("[1, 2, 3]")
        assert await GeminiProvider(api_key="", client=client).generate_json("p") is None

    @pytest.mark.asyncio
    async def test_empty_text(self):
        client, _ = _fake_client(None)
        assert await GeminiProvider(api_key="", client=client).generate_json("p") is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        client, _ = _fake_client('{"a": 1}', delay=1.0)
        provider = GeminiProvider(api_key="", timeout_seconds=0.01, client=client)
        assert await provider.generate_json("p") is None

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client, _ = _fake_client(error=ConnectionError("boom"))
        assert await GeminiProvider(api_key="", client=client).generate_json("p") is None

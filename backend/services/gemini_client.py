"""Google Gemini API wrapper with error handling.

The pipeline treats an LLM provider as ``async (prompt) -> dict | None``.
``GeminiProvider`` is the production implementation; ``None`` means the
LLM path is unavailable for this call and the caller should fall back.
"""

import asyncio
import json
import logging

from google import genai
from google.genai import types

from config import Settings

logger = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove a leading/trailing markdown code fence if the model added one."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


class GeminiProvider:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        timeout_seconds: float = 8.0,
        temperature: float = 0.1,
        client: genai.Client | None = None,
    ) -> None:
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self._client = client or genai.Client(api_key=api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiProvider | None":
        if not settings.llm_enabled:
            logger.info("LLM refinement disabled by configuration")
            return None
        if not settings.gemini_api_key:
            logger.warning("No GEMINI_API_KEY set - Gemini features disabled")
            return None
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.llm_model,
            timeout_seconds=settings.llm_timeout_seconds,
            temperature=settings.llm_temperature,
        )

    async def __call__(self, prompt: str) -> dict | None:
        return await self.generate_json(prompt)

    async def generate_json(self, prompt: str) -> dict | None:
        """Send a prompt to Gemini and parse the JSON response."""
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        temperature=self.temperature,
                        max_output_tokens=1024,
                        response_mime_type="application/json",
                    ),
                ),
                timeout=self.timeout_seconds,
            )
            text = strip_code_fences(response.text or "")
            data = json.loads(text)
        except asyncio.TimeoutError:
            logger.warning("Gemini call timed out after %.1fs", self.timeout_seconds)
            return None
        except json.JSONDecodeError as e:
            logger.error("Failed to parse Gemini response as JSON: %s", e)
            return None
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            return None

        if not isinstance(data, dict):
            logger.error("Gemini returned JSON %s, expected an object", type(data).__name__)
            return None
        return data

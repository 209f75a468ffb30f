# File: llm_client.py
"""Text generation client for the Nomor integration.

Thin async wrapper around the Gemini `generateContent` REST endpoint using
Home Assistant's shared aiohttp session. One request per call, no retries:
every failure surfaces as TextGenerationError and retrying is left to the user.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import aiohttp
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class TextGenerationError(HomeAssistantError):
    """Raised when the text generation backend fails or returns no text."""


class GeminiTextClient:
    """Generate text with a Gemini model.

    Attributes:
        model: Model name used in the request URL
    """

    def __init__(
        self,
        hass: HomeAssistant,
        api_key: str,
        model: str = const.DEFAULT_MODEL,
    ) -> None:
        """Initialize the client."""
        self.hass = hass
        self._api_key = api_key
        self.model = model or const.DEFAULT_MODEL

    @staticmethod
    def build_payload(
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = const.LLM_DEFAULT_MAX_TOKENS,
    ) -> dict[str, Any]:
        """Build the request body; a system prompt is prepended to the prompt."""
        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt
        return {
            "contents": [{"parts": [{"text": full_prompt}]}],
            "generationConfig": {
                "maxOutputTokens": max_tokens,
                "temperature": const.LLM_TEMPERATURE,
            },
        }

    @staticmethod
    def extract_text(payload: Any) -> str:
        """Return the first candidate's text.

        Raises:
            TextGenerationError: The response carries no text
        """
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as err:
            raise TextGenerationError("Text generation returned no content") from err
        if not isinstance(text, str) or not text.strip():
            raise TextGenerationError("Text generation returned empty content")
        return text

    async def async_generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = const.LLM_DEFAULT_MAX_TOKENS,
    ) -> str:
        """Send one generation request and return the generated text.

        Raises:
            TextGenerationError: Missing API key, transport error, timeout,
                non-200 status, or a response without text
        """
        if not self._api_key:
            raise TextGenerationError("No API key configured for text generation")

        session = async_get_clientsession(self.hass)
        url = const.LLM_API_URL.format(model=self.model)
        const.LOGGER.debug(
            "GeminiTextClient: Requesting %s tokens from model %s",
            max_tokens,
            self.model,
        )
        try:
            async with asyncio.timeout(const.LLM_REQUEST_TIMEOUT):
                async with session.post(
                    url,
                    params={"key": self._api_key},
                    json=self.build_payload(prompt, system_prompt, max_tokens),
                ) as response:
                    if response.status != 200:
                        body = await response.text()
                        raise TextGenerationError(
                            f"HTTP {response.status} from text generation: {body[:200]}"
                        )
                    payload = await response.json(content_type=None)
        except TimeoutError as err:
            raise TextGenerationError("Text generation request timed out") from err
        except aiohttp.ClientError as err:
            raise TextGenerationError(f"Text generation request failed: {err}") from err
        except ValueError as err:
            raise TextGenerationError(f"Invalid JSON from text generation: {err}") from err

        return self.extract_text(payload)

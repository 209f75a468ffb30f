"""Tests for GeminiTextClient against a mocked HTTP endpoint."""

from __future__ import annotations

import aiohttp
from homeassistant.core import HomeAssistant
import pytest
from pytest_homeassistant_custom_component.test_util.aiohttp import AiohttpClientMocker

from custom_components.nomor import const
from custom_components.nomor.llm_client import GeminiTextClient, TextGenerationError

MODEL = "gemini-test"
URL = const.LLM_API_URL.format(model=MODEL)


def _response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def client(hass: HomeAssistant) -> GeminiTextClient:
    """Client with a test key."""
    return GeminiTextClient(hass, "secret-key", MODEL)


# =============================================================================
# Success
# =============================================================================


async def test_generate_text(
    client: GeminiTextClient, aioclient_mock: AiohttpClientMocker
) -> None:
    """The first candidate's text is returned."""
    aioclient_mock.post(URL, json=_response("Hello"))

    assert await client.async_generate_text("Say hello", max_tokens=300) == "Hello"

    assert aioclient_mock.call_count == 1
    _method, url, payload, _headers = aioclient_mock.mock_calls[0]
    assert url.query["key"] == "secret-key"
    assert payload["contents"][0]["parts"][0]["text"] == "Say hello"
    assert payload["generationConfig"] == {
        "maxOutputTokens": 300,
        "temperature": const.LLM_TEMPERATURE,
    }


async def test_system_prompt_is_prepended(
    client: GeminiTextClient, aioclient_mock: AiohttpClientMocker
) -> None:
    """The system prompt and the prompt are sent as one text part."""
    aioclient_mock.post(URL, json=_response("ok"))

    await client.async_generate_text("Question", system_prompt="Be brief")

    payload = aioclient_mock.mock_calls[0][2]
    assert payload["contents"][0]["parts"][0]["text"] == "Be brief\n\nQuestion"
    assert (
        payload["generationConfig"]["maxOutputTokens"] == const.LLM_DEFAULT_MAX_TOKENS
    )


def test_empty_model_uses_default(hass: HomeAssistant) -> None:
    """A blank model falls back to the default."""
    assert GeminiTextClient(hass, "key", "").model == const.DEFAULT_MODEL


# =============================================================================
# Failures
# =============================================================================


async def test_missing_api_key(
    hass: HomeAssistant, aioclient_mock: AiohttpClientMocker
) -> None:
    """No request is sent without a key."""
    with pytest.raises(TextGenerationError):
        await GeminiTextClient(hass, "", MODEL).async_generate_text("hi")
    assert aioclient_mock.call_count == 0


async def test_http_error_status(
    client: GeminiTextClient, aioclient_mock: AiohttpClientMocker
) -> None:
    """Non-200 responses fail with the status in the message."""
    aioclient_mock.post(URL, status=429, text="quota exceeded")

    with pytest.raises(TextGenerationError, match="HTTP 429"):
        await client.async_generate_text("hi")


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        _response("   "),
    ],
)
async def test_response_without_text(
    client: GeminiTextClient, aioclient_mock: AiohttpClientMocker, body: dict
) -> None:
    """Responses without usable text fail."""
    aioclient_mock.post(URL, json=body)

    with pytest.raises(TextGenerationError):
        await client.async_generate_text("hi")


async def test_invalid_json(
    client: GeminiTextClient, aioclient_mock: AiohttpClientMocker
) -> None:
    """A non-JSON body fails."""
    aioclient_mock.post(URL, text="<html>oops</html>")

    with pytest.raises(TextGenerationError):
        await client.async_generate_text("hi")


@pytest.mark.parametrize("exc", [aiohttp.ClientError("reset"), TimeoutError()])
async def test_transport_errors(
    client: GeminiTextClient,
    aioclient_mock: AiohttpClientMocker,
    exc: Exception,
) -> None:
    """Connection failures and timeouts fail without retrying."""
    aioclient_mock.post(URL, exc=exc)

    with pytest.raises(TextGenerationError):
        await client.async_generate_text("hi")
    assert aioclient_mock.call_count == 1


def test_extract_text_rejects_non_mapping() -> None:
    """Unexpected payload types are reported as missing content."""
    with pytest.raises(TextGenerationError):
        GeminiTextClient.extract_text(["not", "a", "mapping"])

"""Tests for MotivationManager - the daily track quote."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.nomor import const
from custom_components.nomor.llm_client import TextGenerationError
from tests.helpers import (
    FAKE_QUOTE,
    build_storage_data,
    get_coordinator,
    track_bucket,
)

FROZEN_NOW = "2026-03-10 18:00:00+00:00"
TODAY = "2026-03-10"


@pytest.mark.freeze_time(FROZEN_NOW)
class TestDailyQuote:
    """Fetching the quote once per day."""

    @pytest.mark.asyncio
    async def test_fetched_on_setup(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        mock_generate_text: AsyncMock,
    ) -> None:
        """A missing quote is fetched in the background with surrounding quotes stripped."""
        manager = get_coordinator(hass).motivation_manager

        assert manager.quote == FAKE_QUOTE
        assert manager.last_date == TODAY
        assert not manager.needs_refresh
        assert track_bucket(hass, "swe")[const.DATA_MOTIVATION_QUOTE] == FAKE_QUOTE
        assert (
            mock_generate_text.await_args.kwargs["max_tokens"]
            == const.LLM_MOTIVATION_MAX_TOKENS
        )

    @pytest.mark.asyncio
    async def test_refresh_only_when_forced(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        mock_generate_text: AsyncMock,
    ) -> None:
        """Today's quote is kept unless a refresh is forced."""
        manager = get_coordinator(hass).motivation_manager
        calls = mock_generate_text.await_count

        assert not await manager.async_refresh()
        assert mock_generate_text.await_count == calls

        mock_generate_text.side_effect = None
        mock_generate_text.return_value = "  Build, measure, learn.  "
        assert await manager.async_refresh(force=True)
        assert manager.quote == "Build, measure, learn."

    @pytest.mark.asyncio
    async def test_failure_uses_fallback(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        mock_generate_text: AsyncMock,
    ) -> None:
        """A failed request stores the fixed fallback for the track."""
        mock_generate_text.side_effect = TextGenerationError("HTTP 503")
        manager = get_coordinator(hass).motivation_manager

        assert await manager.async_refresh(force=True)

        assert manager.quote == const.MOTIVATION_FALLBACK.format(
            name="Software Engineer"
        )
        assert manager.quote.startswith("Every expert Software Engineer")

    @pytest.mark.asyncio
    async def test_quote_follows_track(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Each track keeps its own quote."""
        coordinator = get_coordinator(hass)
        await coordinator.motivation_manager.async_refresh(force=True)

        coordinator.store.write_scoped(const.DATA_MOTIVATION_QUOTE, "de", "Pipelines!")
        coordinator.store.write_scoped(const.DATA_LAST_MOTIVATION_DATE, "de", TODAY)
        await coordinator.async_select_track("de")

        assert coordinator.motivation_manager.quote == "Pipelines!"


@pytest.mark.freeze_time(FROZEN_NOW)
class TestStoredQuote:
    """A quote already stored today."""

    @pytest.fixture
    def mock_storage_data(self) -> dict[str, Any]:
        """Today's quote exists."""
        return build_storage_data(
            selected_track="swe",
            tracks={
                "swe": {
                    const.DATA_MOTIVATION_QUOTE: "Stored quote.",
                    const.DATA_LAST_MOTIVATION_DATE: TODAY,
                }
            },
        )

    @pytest.mark.asyncio
    async def test_no_request_on_setup(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        mock_generate_text: AsyncMock,
    ) -> None:
        """No request is made when today's quote is present."""
        assert get_coordinator(hass).motivation_manager.quote == "Stored quote."
        mock_generate_text.assert_not_awaited()


class TestWithoutTrack:
    """No career track selected."""

    @pytest.fixture
    def mock_storage_data(self) -> dict[str, Any]:
        """Fresh install."""
        return build_storage_data()

    @pytest.mark.asyncio
    async def test_refresh_without_track(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Background refresh skips; a forced refresh is an error."""
        manager = get_coordinator(hass).motivation_manager

        assert not await manager.async_refresh()
        with pytest.raises(HomeAssistantError) as exc_info:
            await manager.async_refresh(force=True)
        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_NO_TRACK_SELECTED

"""Tests for Nomor services.

Each service is called through Home Assistant with `blocking=True`, so
rejections surface as raised exceptions and responses are returned.
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry
import voluptuous as vol

from custom_components.nomor import const
from custom_components.nomor.services import async_setup_services
from tests.helpers import build_questions, build_storage_data, get_coordinator

FROZEN_NOW = "2026-03-10 18:00:00+00:00"
TODAY = "2026-03-10"


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Software Engineer track, three coins, today's quiz generated."""
    return build_storage_data(
        selected_track="swe",
        global_data={const.DATA_COINS: 3.0},
        tracks={
            "swe": {
                const.DATA_MCQ_QUESTIONS: build_questions(),
                const.DATA_LAST_MCQ_DATE: TODAY,
            }
        },
    )


async def _call(
    hass: HomeAssistant,
    service: str,
    data: dict[str, Any] | None = None,
    return_response: bool = False,
) -> Any:
    return await hass.services.async_call(
        const.DOMAIN,
        service,
        data or {},
        blocking=True,
        return_response=return_response,
    )


@pytest.mark.freeze_time(FROZEN_NOW)
class TestServices:
    """Services with a loaded integration."""

    # =========================================================================
    # Registration
    # =========================================================================

    @pytest.mark.asyncio
    async def test_all_services_registered(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Every service is available after setup."""
        for service in (
            const.SERVICE_SELECT_TRACK,
            const.SERVICE_COMPLETE_DSA,
            const.SERVICE_GENERATE_QUESTIONS,
            const.SERVICE_SELECT_ANSWER,
            const.SERVICE_START_SESSION,
            const.SERVICE_STOP_SESSION,
            const.SERVICE_ADD_APP,
            const.SERVICE_REMOVE_APP,
            const.SERVICE_EARN_LEETCODE,
            const.SERVICE_EARN_SELF_STUDY,
            const.SERVICE_REFRESH_MOTIVATION,
            const.SERVICE_CATEGORIZE_APPS,
        ):
            assert hass.services.has_service(const.DOMAIN, service)

    @pytest.mark.asyncio
    async def test_services_removed_on_unload(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Unloading the last entry removes the services."""
        assert await hass.config_entries.async_unload(init_integration.entry_id)
        await hass.async_block_till_done()

        assert not hass.services.has_service(const.DOMAIN, const.SERVICE_COMPLETE_DSA)

    # =========================================================================
    # Tracks and challenges
    # =========================================================================

    @pytest.mark.asyncio
    async def test_select_track(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """The track service switches the active track."""
        await _call(hass, const.SERVICE_SELECT_TRACK, {const.FIELD_TRACK_ID: "mle"})
        assert get_coordinator(hass).store.selected_track == "mle"

        with pytest.raises(HomeAssistantError) as exc_info:
            await _call(
                hass, const.SERVICE_SELECT_TRACK, {const.FIELD_TRACK_ID: "chef"}
            )
        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_INVALID_TRACK

    @pytest.mark.asyncio
    async def test_complete_dsa(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """DSA completion pays once per day."""
        await _call(hass, const.SERVICE_COMPLETE_DSA)
        assert get_coordinator(hass).economy_manager.balance == 5.0

        with pytest.raises(HomeAssistantError):
            await _call(hass, const.SERVICE_COMPLETE_DSA)

    @pytest.mark.asyncio
    async def test_select_answer_returns_record(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """The answer record is returned as the service response."""
        response = await _call(
            hass,
            const.SERVICE_SELECT_ANSWER,
            {const.FIELD_QUESTION_INDEX: 3, const.FIELD_OPTION_INDEX: "3"},
            return_response=True,
        )

        assert response == {"selected": 3, "correct": True}
        assert get_coordinator(hass).economy_manager.balance == 3.2

    @pytest.mark.asyncio
    async def test_select_answer_schema(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Option indexes outside 0-3 fail validation."""
        with pytest.raises(vol.Invalid):
            await _call(
                hass,
                const.SERVICE_SELECT_ANSWER,
                {const.FIELD_QUESTION_INDEX: 0, const.FIELD_OPTION_INDEX: 4},
            )

    @pytest.mark.asyncio
    async def test_generate_questions_already_generated(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Today's set exists, so generation is refused."""
        with pytest.raises(HomeAssistantError) as exc_info:
            await _call(hass, const.SERVICE_GENERATE_QUESTIONS)
        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_QUESTIONS_EXIST

    # =========================================================================
    # Apps and sessions
    # =========================================================================

    @pytest.mark.asyncio
    async def test_app_and_session_lifecycle(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Add an app, spend coins on it, stop, then remove it."""
        app = await _call(
            hass,
            const.SERVICE_ADD_APP,
            {const.FIELD_CATEGORY: const.CATEGORY_SOCIAL, const.FIELD_NAME: "Discord"},
            return_response=True,
        )
        assert app[const.DATA_APP_NAME] == "Discord"
        assert app[const.DATA_APP_PATH] == ""

        session = await _call(
            hass,
            const.SERVICE_START_SESSION,
            {
                const.FIELD_CATEGORY: const.CATEGORY_SOCIAL,
                const.FIELD_COINS: 2,
                const.FIELD_APP_ID: app[const.DATA_APP_ID],
            },
            return_response=True,
        )
        assert session[const.DATA_SESSION_MINUTES] == 10
        assert get_coordinator(hass).economy_manager.balance == 1.0

        await _call(hass, const.SERVICE_STOP_SESSION)
        assert get_coordinator(hass).session_manager.session is None

        await _call(
            hass,
            const.SERVICE_REMOVE_APP,
            {
                const.FIELD_CATEGORY: const.CATEGORY_SOCIAL,
                const.FIELD_APP_ID: app[const.DATA_APP_ID],
            },
        )
        assert get_coordinator(hass).session_manager.apps[const.CATEGORY_SOCIAL] == []

    @pytest.mark.asyncio
    async def test_start_session_insufficient(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Spending more than the balance is refused."""
        app = get_coordinator(hass).session_manager.add_app(
            const.CATEGORY_GAME, "Steam"
        )

        with pytest.raises(HomeAssistantError) as exc_info:
            await _call(
                hass,
                const.SERVICE_START_SESSION,
                {
                    const.FIELD_CATEGORY: const.CATEGORY_GAME,
                    const.FIELD_COINS: 4,
                    const.FIELD_APP_ID: app[const.DATA_APP_ID],
                },
            )
        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_INSUFFICIENT_COINS

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Categories are validated by the schema."""
        with pytest.raises(vol.Invalid):
            await _call(
                hass,
                const.SERVICE_ADD_APP,
                {const.FIELD_CATEGORY: "productivity", const.FIELD_NAME: "Notion"},
            )

    # =========================================================================
    # Manual earning
    # =========================================================================

    @pytest.mark.asyncio
    async def test_earn_leetcode(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """LeetCode rewards follow difficulty."""
        await _call(
            hass, const.SERVICE_EARN_LEETCODE, {const.FIELD_DIFFICULTY: "medium"}
        )
        await _call(
            hass,
            const.SERVICE_EARN_LEETCODE,
            {const.FIELD_DIFFICULTY: "easy", const.FIELD_HELP_USED: True},
        )
        assert get_coordinator(hass).economy_manager.balance == 5.5

    @pytest.mark.asyncio
    async def test_earn_self_study(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Study hours default to self study."""
        await _call(hass, const.SERVICE_EARN_SELF_STUDY, {const.FIELD_HOURS: 2})

        economy = get_coordinator(hass).economy_manager
        assert economy.balance == 5.0
        assert economy.get_history(1)[0][const.DATA_HISTORY_REASON] == "Self study - 2h"

        with pytest.raises(vol.Invalid):
            await _call(hass, const.SERVICE_EARN_SELF_STUDY, {const.FIELD_HOURS: 0})

    # =========================================================================
    # Generated content
    # =========================================================================

    @pytest.mark.asyncio
    async def test_refresh_motivation(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """A forced refresh always fetches."""
        mock_text = get_coordinator(hass).text_client.async_generate_text
        calls = mock_text.await_count

        await _call(hass, const.SERVICE_REFRESH_MOTIVATION)

        assert mock_text.await_count == calls + 1

    @pytest.mark.asyncio
    async def test_categorize_apps(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Forced categorization regroups the lists."""
        manager = get_coordinator(hass).session_manager
        manager.add_app(const.CATEGORY_SOCIAL, "Steam")
        manager.add_app(const.CATEGORY_SOCIAL, "Spotify")

        await _call(hass, const.SERVICE_CATEGORIZE_APPS, {const.FIELD_FORCE: True})

        assert [a[const.DATA_APP_NAME] for a in manager.apps[const.CATEGORY_GAME]] == [
            "Steam"
        ]
        assert [a[const.DATA_APP_NAME] for a in manager.apps[const.CATEGORY_MUSIC]] == [
            "Spotify"
        ]


async def test_service_without_entry(hass: HomeAssistant) -> None:
    """Services registered without a loaded entry report it."""
    async_setup_services(hass)

    with pytest.raises(HomeAssistantError) as exc_info:
        await _call(hass, const.SERVICE_COMPLETE_DSA)
    assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_NO_CONFIG_ENTRY

"""Tests for NomorDataCoordinator and the entities it feeds.

Covers the snapshot, entity states, track switching, the midnight rollover
and automatic quiz generation.
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock, patch

from freezegun.api import FrozenDateTimeFactory
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
import pytest
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_fire_time_changed,
)

from custom_components.nomor import const
from custom_components.nomor.utils import dt_utils
from tests.helpers import (
    ENTRY_ID,
    FAKE_QUOTE,
    build_questions,
    build_storage_data,
    fake_generate_text,
    get_coordinator,
    get_entity_id,
    questions_json,
)

FROZEN_NOW = "2026-03-10 18:00:00+00:00"
TODAY = "2026-03-10"
YESTERDAY = "2026-03-09"


@pytest.fixture
def mock_notify() -> Generator[AsyncMock]:
    """Capture user notifications."""
    with patch(
        "custom_components.nomor.coordinator.async_send_notification",
        new=AsyncMock(),
    ) as mock:
        yield mock


def _state(hass: HomeAssistant, platform: str, key: str) -> Any:
    state = hass.states.get(get_entity_id(hass, platform, key))
    assert state is not None
    return state


# =============================================================================
# Snapshot and entities
# =============================================================================


@pytest.mark.freeze_time(FROZEN_NOW)
class TestEntities:
    """Entity states rendered from the snapshot."""

    @pytest.fixture
    def mock_storage_data(self) -> dict[str, Any]:
        """Seven coins, a two day DSA streak and a half answered quiz."""
        return build_storage_data(
            selected_track="swe",
            global_data={const.DATA_COINS: 7.0},
            tracks={
                "swe": {
                    const.DATA_DSA_STREAK: 2,
                    const.DATA_LAST_DSA_DATE: YESTERDAY,
                    const.DATA_MCQ_QUESTIONS: build_questions(),
                    const.DATA_MCQ_ANSWERS: {
                        "0": {"selected": 0, "correct": True},
                        "1": {"selected": 0, "correct": False},
                    },
                    const.DATA_MCQ_COMPLETED_COUNT: 2,
                    const.DATA_LAST_MCQ_DATE: TODAY,
                }
            },
        )

    @pytest.mark.asyncio
    async def test_snapshot(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """The snapshot carries every value the entities read."""
        data = get_coordinator(hass).data

        assert data[const.DATA_SELECTED_TRACK] == "swe"
        assert data[const.DATA_COINS] == 7.0
        assert data[const.DATA_DSA_STREAK] == 2
        assert data[const.DATA_MCQ_COMPLETED_COUNT] == 2
        assert data[const.SNAPSHOT_MCQ_SCORE] == 50
        assert data[const.SNAPSHOT_GENERATING] is False
        assert data[const.DATA_MOTIVATION_QUOTE] == FAKE_QUOTE
        assert data[const.DATA_ACTIVE_SESSION] is None
        assert data[const.SNAPSHOT_REMAINING_MINUTES] == 0
        assert data[const.SNAPSHOT_TOTAL_EARNED] == 0.0
        assert data[const.SNAPSHOT_TOTAL_SPENT] == 0.0

    @pytest.mark.asyncio
    async def test_sensor_states(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Sensors show the stored progress."""
        assert float(_state(hass, "sensor", "coins").state) == 7.0
        assert _state(hass, "sensor", "dsa_streak").state == "2"
        assert _state(hass, "sensor", "mcq_score").state == "50"
        assert _state(hass, "sensor", "active_session").state == "0"
        assert _state(hass, "sensor", "motivation").state == FAKE_QUOTE

        progress = _state(hass, "sensor", "mcq_progress")
        assert progress.state == "2"
        assert progress.attributes[const.ATTR_TOTAL] == 15
        assert all(
            const.DATA_QUESTION_CORRECT not in question
            for question in progress.attributes[const.ATTR_QUESTIONS]
        )

    @pytest.mark.asyncio
    async def test_coins_totals_cover_full_history(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Lifetime totals count entries beyond the recent history attribute."""
        coordinator = get_coordinator(hass)
        economy = coordinator.economy_manager
        for _ in range(const.HISTORY_ATTRIBUTE_LIMIT + 2):
            economy.add_coins(0.2, "MCQ 1 - Correct")
        economy.spend_coins(1, "GAME - Steam (15m)")
        coordinator.async_publish()
        await hass.async_block_till_done()

        state = _state(hass, "sensor", "coins")
        assert float(state.state) == 8.4
        assert len(state.attributes[const.ATTR_HISTORY]) == const.HISTORY_ATTRIBUTE_LIMIT
        assert state.attributes[const.ATTR_TOTAL_EARNED] == 2.4
        assert state.attributes[const.ATTR_TOTAL_SPENT] == 1.0

    @pytest.mark.asyncio
    async def test_time_until_reset(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """The reset countdown matches the next local midnight."""
        hours, minutes = dt_utils.time_until_next_reset()
        state = _state(hass, "sensor", "time_until_reset")

        assert state.state == str(hours * 60 + minutes)
        assert state.attributes[const.ATTR_HOURS] == hours

    @pytest.mark.asyncio
    async def test_select_switches_track(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Selecting a track swaps every per-track value."""
        entity_id = get_entity_id(hass, "select", "career_track")
        assert hass.states.get(entity_id).state == "Software Engineer"

        await hass.services.async_call(
            "select",
            "select_option",
            {"entity_id": entity_id, "option": "Data Engineer"},
            blocking=True,
        )
        await hass.async_block_till_done(wait_background_tasks=True)

        assert hass.states.get(entity_id).state == "Data Engineer"
        assert get_coordinator(hass).store.selected_track == "de"
        assert _state(hass, "sensor", "dsa_streak").state == "0"
        assert _state(hass, "sensor", "mcq_progress").state == "0"
        # Coins are shared across tracks
        assert float(_state(hass, "sensor", "coins").state) == 7.0
        history = get_coordinator(hass).economy_manager.get_history(1)
        assert history[0][const.DATA_HISTORY_REASON] == "Selected track: Data Engineer"

    @pytest.mark.asyncio
    async def test_complete_dsa_button(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Pressing the button completes the challenge and extends the streak."""
        await hass.services.async_call(
            "button",
            "press",
            {"entity_id": get_entity_id(hass, "button", "complete_dsa")},
            blocking=True,
        )

        assert _state(hass, "sensor", "dsa_streak").state == "3"
        assert float(_state(hass, "sensor", "coins").state) == 9.0


# =============================================================================
# Daily rollover
# =============================================================================


@pytest.mark.freeze_time(FROZEN_NOW)
class TestMidnightRollover:
    """Rollover at local midnight."""

    @pytest.fixture
    def mock_storage_data(self) -> dict[str, Any]:
        """DSA done today, quiz partly answered."""
        return build_storage_data(
            selected_track="swe",
            tracks={
                "swe": {
                    const.DATA_DSA_STREAK: 4,
                    const.DATA_DSA_COMPLETED_TODAY: True,
                    const.DATA_LAST_DSA_DATE: TODAY,
                    const.DATA_MCQ_QUESTIONS: build_questions(),
                    const.DATA_MCQ_ANSWERS: {"0": {"selected": 0, "correct": True}},
                    const.DATA_MCQ_COMPLETED_COUNT: 1,
                    const.DATA_LAST_MCQ_DATE: TODAY,
                }
            },
        )

    @pytest.mark.asyncio
    async def test_next_day_keeps_streak(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        freezer: FrozenDateTimeFactory,
    ) -> None:
        """After midnight the flag clears, the streak stays and the quiz resets."""
        freezer.move_to(dt_utils.next_local_midnight())
        async_fire_time_changed(hass)
        await hass.async_block_till_done(wait_background_tasks=True)

        state = get_coordinator(hass).challenge_manager.state
        assert state[const.DATA_DSA_COMPLETED_TODAY] is False
        assert state[const.DATA_DSA_STREAK] == 4
        assert state[const.DATA_MCQ_QUESTIONS] == []
        assert state[const.DATA_MCQ_COMPLETED_COUNT] == 0
        assert _state(hass, "sensor", "mcq_progress").state == "0"

    @pytest.mark.asyncio
    async def test_missed_day_breaks_streak(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        freezer: FrozenDateTimeFactory,
    ) -> None:
        """A full day without completion resets the streak."""
        freezer.move_to(dt_utils.next_local_midnight())
        async_fire_time_changed(hass)
        await hass.async_block_till_done(wait_background_tasks=True)

        freezer.move_to(dt_utils.next_local_midnight())
        async_fire_time_changed(hass)
        await hass.async_block_till_done(wait_background_tasks=True)

        assert get_coordinator(hass).challenge_manager.state[const.DATA_DSA_STREAK] == 0
        assert _state(hass, "sensor", "dsa_streak").state == "0"


# =============================================================================
# Automatic generation
# =============================================================================


async def _short_quiz(
    prompt: str,
    system_prompt: str | None = None,
    max_tokens: int = const.LLM_DEFAULT_MAX_TOKENS,
) -> str:
    if "motivational coach" in prompt or "categorization assistant" in prompt:
        return await fake_generate_text(prompt, system_prompt, max_tokens)
    return questions_json(10)


@pytest.mark.freeze_time(FROZEN_NOW)
class TestAutoGeneration:
    """Quiz generation started by the coordinator."""

    @pytest.fixture
    def mock_config_entry(self) -> MockConfigEntry:
        """Entry with automatic generation enabled."""
        return MockConfigEntry(
            domain=const.DOMAIN,
            title=const.NOMOR_TITLE,
            data={
                const.CONF_API_KEY: "test-key",
                const.CONF_MODEL: const.DEFAULT_MODEL,
                const.CONF_ENABLE_LAUNCHER: False,
                const.CONF_NOTIFY_SERVICE: "",
            },
            options={const.CONF_AUTO_GENERATE_QUIZ: True},
            entry_id=ENTRY_ID,
            unique_id="test_unique_id",
        )

    @pytest.mark.asyncio
    async def test_generated_on_setup(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """A missing quiz is generated in the background."""
        state = get_coordinator(hass).challenge_manager.state

        assert len(state[const.DATA_MCQ_QUESTIONS]) == const.MCQ_QUESTION_COUNT
        assert state[const.DATA_LAST_MCQ_DATE] == TODAY
        assert _state(hass, "sensor", "mcq_progress").attributes[const.ATTR_TOTAL] == 15


@pytest.mark.freeze_time(FROZEN_NOW)
class TestGenerationFailureOnSetup:
    """Automatic generation failing from the first refresh."""

    @pytest.fixture
    def mock_config_entry(self) -> MockConfigEntry:
        """Entry with automatic generation enabled."""
        return MockConfigEntry(
            domain=const.DOMAIN,
            title=const.NOMOR_TITLE,
            data={
                const.CONF_API_KEY: "test-key",
                const.CONF_MODEL: const.DEFAULT_MODEL,
                const.CONF_ENABLE_LAUNCHER: False,
                const.CONF_NOTIFY_SERVICE: "",
            },
            options={const.CONF_AUTO_GENERATE_QUIZ: True},
            entry_id=ENTRY_ID,
            unique_id="test_unique_id",
        )

    @pytest.fixture
    def mock_generate_text(self) -> Generator[AsyncMock]:
        """Quiz answers come back short."""
        with patch(
            "custom_components.nomor.llm_client.GeminiTextClient.async_generate_text",
            new=AsyncMock(side_effect=_short_quiz),
        ) as mock:
            yield mock

    @pytest.mark.asyncio
    async def test_notified_and_entry_loaded(
        self,
        hass: HomeAssistant,
        mock_notify: AsyncMock,
        init_integration: MockConfigEntry,
        mock_generate_text: AsyncMock,
        freezer: FrozenDateTimeFactory,
    ) -> None:
        """Setup succeeds, the failure notifies once and is not retried."""
        assert init_integration.state is ConfigEntryState.LOADED
        mock_notify.assert_awaited_once()
        assert mock_notify.await_args.args[2].startswith(
            "Could not generate today's quiz"
        )
        assert (
            mock_notify.await_args.kwargs["notification_id"]
            == const.NOTIFY_ID_GENERATION_FAILED
        )
        calls = mock_generate_text.await_count

        freezer.tick(timedelta(minutes=const.DEFAULT_UPDATE_INTERVAL, seconds=1))
        async_fire_time_changed(hass)
        await hass.async_block_till_done(wait_background_tasks=True)

        assert mock_generate_text.await_count == calls
        assert get_coordinator(hass).challenge_manager.questions == []
        mock_notify.assert_awaited_once()


# =============================================================================
# Unload and removal
# =============================================================================


@pytest.mark.freeze_time(FROZEN_NOW)
class TestLifecycle:
    """Entry unload and removal."""

    @pytest.mark.asyncio
    async def test_unload(
        self, hass: HomeAssistant, init_integration: MockConfigEntry
    ) -> None:
        """Unloading drops the coordinator."""
        assert await hass.config_entries.async_unload(init_integration.entry_id)
        await hass.async_block_till_done()

        assert init_integration.state is ConfigEntryState.NOT_LOADED
        assert ENTRY_ID not in hass.data[const.DOMAIN]

    @pytest.mark.asyncio
    async def test_unload_saves_progress(
        self,
        hass: HomeAssistant,
        hass_storage: dict[str, Any],
        init_integration: MockConfigEntry,
    ) -> None:
        """Pending writes are flushed on unload."""
        get_coordinator(hass).challenge_manager.complete_dsa()

        assert await hass.config_entries.async_unload(init_integration.entry_id)
        await hass.async_block_till_done()

        stored = hass_storage[const.STORAGE_KEY]["data"]
        assert stored[const.DATA_TRACKS]["swe"][const.DATA_DSA_STREAK] == 1
        assert stored[const.DATA_GLOBAL][const.DATA_COINS] == 2.0

    @pytest.mark.asyncio
    async def test_remove_deletes_storage(
        self,
        hass: HomeAssistant,
        hass_storage: dict[str, Any],
        init_integration: MockConfigEntry,
    ) -> None:
        """Removing the entry deletes the storage file."""
        assert await hass.config_entries.async_remove(init_integration.entry_id)
        await hass.async_block_till_done()

        assert const.STORAGE_KEY not in hass_storage
        assert hass.config_entries.async_get_entry(ENTRY_ID) is None

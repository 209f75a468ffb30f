"""Shared fixtures for Nomor tests."""

from collections.abc import AsyncGenerator, Generator
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.nomor.const import (
    CONF_API_KEY,
    CONF_AUTO_GENERATE_QUIZ,
    CONF_ENABLE_LAUNCHER,
    CONF_MODEL,
    CONF_NOTIFY_SERVICE,
    DEFAULT_MODEL,
    DOMAIN,
)
from custom_components.nomor.utils import dt_utils
from tests.helpers import ENTRY_ID, build_storage_data, fake_generate_text

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Generator[None]:
    """Restore the module-level time zone after each test."""
    original = dt_utils.get_default_timezone()
    yield
    dt_utils.set_default_timezone(original)


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="Nomor",
        data={
            CONF_API_KEY: "test-key",
            CONF_MODEL: DEFAULT_MODEL,
            CONF_ENABLE_LAUNCHER: False,
            CONF_NOTIFY_SERVICE: "",
        },
        options={CONF_AUTO_GENERATE_QUIZ: False},
        entry_id=ENTRY_ID,
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return mock storage data: Software Engineer track, empty wallet."""
    return build_storage_data(selected_track="swe")


@pytest.fixture
def mock_generate_text() -> Generator[AsyncMock]:
    """Patch text generation with canned quiz, quote and categorization answers."""
    with patch(
        "custom_components.nomor.llm_client.GeminiTextClient.async_generate_text",
        new=AsyncMock(side_effect=fake_generate_text),
    ) as mock:
        yield mock


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
    mock_generate_text: AsyncMock,  # pylint: disable=redefined-outer-name,unused-argument
) -> AsyncGenerator[MockConfigEntry]:
    """Set up the Nomor integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done(wait_background_tasks=True)

    yield mock_config_entry

    if mock_config_entry.state is ConfigEntryState.LOADED:
        await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()

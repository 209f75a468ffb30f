# File: button.py
"""Buttons for the Nomor integration.

Each button triggers the same manager operation as its service; rejections
surface as HomeAssistantError in the UI.
"""

from __future__ import annotations

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import NomorDataCoordinator
from .entity import NomorCoordinatorEntity


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Nomor buttons from a config entry."""
    coordinator: NomorDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities(
        [
            CompleteDsaButton(coordinator, entry),
            GenerateQuestionsButton(coordinator, entry),
            StopSessionButton(coordinator, entry),
        ]
    )


class CompleteDsaButton(NomorCoordinatorEntity, ButtonEntity):
    """Mark today's DSA challenge as done."""

    _attr_translation_key = const.TRANS_KEY_BUTTON_COMPLETE_DSA
    _attr_icon = "mdi:check-decagram"

    async def async_press(self) -> None:
        """Complete the DSA challenge for the active track."""
        self.coordinator.challenge_manager.complete_dsa()


class GenerateQuestionsButton(NomorCoordinatorEntity, ButtonEntity):
    """Request today's quiz for the active track."""

    _attr_translation_key = const.TRANS_KEY_BUTTON_GENERATE_QUESTIONS
    _attr_icon = "mdi:robot"

    async def async_press(self) -> None:
        """Generate the question set."""
        await self.coordinator.challenge_manager.async_generate_questions()


class StopSessionButton(NomorCoordinatorEntity, ButtonEntity):
    """End the active session early."""

    _attr_translation_key = const.TRANS_KEY_BUTTON_STOP_SESSION
    _attr_icon = "mdi:stop-circle"

    async def async_press(self) -> None:
        """Stop the session and its launched app."""
        await self.coordinator.session_manager.async_stop_session()

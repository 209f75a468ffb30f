# File: select.py
"""Select entity for the Nomor integration.

Picks the active career track. Selecting an option switches every per-track
sensor to that track's state.
"""

from __future__ import annotations

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import NomorDataCoordinator
from .entity import NomorCoordinatorEntity

TRACK_IDS_BY_NAME = {
    track[const.TRACK_NAME]: track_id for track_id, track in const.CAREER_TRACKS.items()
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Nomor select entity from a config entry."""
    coordinator: NomorDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities([CareerTrackSelect(coordinator, entry)])


class CareerTrackSelect(NomorCoordinatorEntity, SelectEntity):
    """Select entity listing the career tracks by name."""

    _attr_translation_key = const.TRANS_KEY_SELECT_TRACK
    _attr_icon = "mdi:briefcase-variant"
    _attr_options = list(TRACK_IDS_BY_NAME)

    @property
    def current_option(self) -> str | None:
        """Return the name of the selected track."""
        track_id = (self.coordinator.data or {}).get(const.DATA_SELECTED_TRACK)
        if track_id is None:
            return None
        return const.CAREER_TRACKS[track_id][const.TRACK_NAME]

    async def async_select_option(self, option: str) -> None:
        """Switch to the track named option."""
        await self.coordinator.async_select_track(TRACK_IDS_BY_NAME[option])

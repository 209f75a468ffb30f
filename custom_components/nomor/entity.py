"""Base entity classes for the Nomor integration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import NomorDataCoordinator
from .helpers.entity_helpers import build_unique_id, create_device_info

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


class NomorCoordinatorEntity(CoordinatorEntity[NomorDataCoordinator]):
    """Base entity with typed coordinator access and shared device.

    Subclasses set _attr_translation_key; it doubles as the unique id key.
    """

    _attr_has_entity_name = True

    def __init__(
        self, coordinator: NomorDataCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = build_unique_id(
            entry.entry_id, str(self._attr_translation_key)
        )
        self._attr_device_info = create_device_info(entry)

    @property
    def coordinator(self) -> NomorDataCoordinator:
        """Return typed coordinator."""
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: NomorDataCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)

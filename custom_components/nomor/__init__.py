# File: __init__.py
"""Initialization file for the Nomor integration.

Handles setting up the integration, including loading the track-scoped
store, creating the coordinator and its managers, registering services and
forwarding to the sensor, select and button platforms.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util

from . import const
from .coordinator import NomorDataCoordinator
from .services import async_setup_services, async_unload_services
from .store import NomorStore
from .utils import dt_utils


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("Starting setup for Nomor entry: %s", entry.entry_id)

    # Local calendar dates follow the Home Assistant time zone
    dt_utils.set_default_timezone(dt_util.get_time_zone(hass.config.time_zone))

    store = NomorStore(hass, const.STORAGE_KEY)
    await store.async_initialize()

    coordinator = NomorDataCoordinator(hass, entry, store)
    await coordinator.async_setup_managers()
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORE: store,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    const.LOGGER.info("Nomor setup complete for entry: %s", entry.entry_id)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so new options reach the client and launcher."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("Unloading Nomor entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        entry_data = hass.data[const.DOMAIN].pop(entry.entry_id)
        coordinator: NomorDataCoordinator = entry_data[const.COORDINATOR]
        await coordinator.async_shutdown_coordinator()

        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Delete the storage file when the config entry is removed."""
    const.LOGGER.info("Removing Nomor entry: %s", entry.entry_id)
    store = NomorStore(hass, const.STORAGE_KEY)
    await store.async_delete_storage()

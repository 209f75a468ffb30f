"""Entity and signal helpers for the Nomor integration.

Small utilities that depend on Home Assistant naming conventions but hold no
state: dispatcher signal names, entity unique ids and device info.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Each config entry gets its own signal namespace so managers can emit and
    listen without cross-talk between instances.

    Format: 'nomor_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_COINS_CHANGED)
        'nomor_abc123_coins_changed'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


def build_unique_id(entry_id: str, key: str) -> str:
    """Return the unique id for an integration entity."""
    return f"{entry_id}_{key}"


def create_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create the device all Nomor entities belong to.

    Args:
        config_entry: Config entry for this integration instance

    Returns:
        DeviceInfo dict for the service device
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=config_entry.title,
        manufacturer=const.NOMOR_TITLE,
        model="Self-Motivation Tracker",
        entry_type=DeviceEntryType.SERVICE,
    )

# File: store.py
"""Handles persistent, track-scoped data storage for the Nomor integration.

Uses Home Assistant's Storage helper to keep all progress across restarts. Data
is organized in two scopes:

- global: coin balance, history, active session, managed apps
- tracks: one bucket per career track holding that track's challenge state

Reads are keyed by a structured (namespace, track_id) pair. With no track
selected, per-track reads fall back to the global slot of the same namespace.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


def _matches_type(value: Any, expected: type | tuple[type, ...]) -> bool:
    """Check a stored value against the type of its default."""
    if expected in (int, float):
        # bool is an int subclass; a stored bool is never a valid number
        if isinstance(value, bool):
            return False
        if expected is float:
            return isinstance(value, (int, float))
    return isinstance(value, expected)


class NomorStore:
    """Track-scoped persistence over Home Assistant's Store API.

    Callers always receive copies, so mutating a returned value never changes
    the in-memory cache until it is written back. Writes are fire-and-forget:
    they update the cache and schedule a delayed save.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = NomorStore.get_default_structure()

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
            },
            const.DATA_SELECTED_TRACK: None,
            const.DATA_GLOBAL: {},
            const.DATA_TRACKS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        Missing or structurally invalid data is replaced with the default
        structure; individual malformed values are handled on read.
        """
        const.LOGGER.debug("NomorStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("NomorStore: No existing storage found, initializing")
            self._data = NomorStore.get_default_structure()
            return

        if not isinstance(existing_data, dict):
            const.LOGGER.warning(
                "NomorStore: Stored data is not a mapping (%s), resetting",
                type(existing_data).__name__,
            )
            self._data = NomorStore.get_default_structure()
            return

        data = NomorStore.get_default_structure()
        data.update(existing_data)
        for bucket in (const.DATA_META, const.DATA_GLOBAL, const.DATA_TRACKS):
            if not isinstance(data.get(bucket), dict):
                const.LOGGER.warning(
                    "NomorStore: Bucket '%s' is malformed, resetting it", bucket
                )
                data[bucket] = {}
        if data[const.DATA_SELECTED_TRACK] not in const.CAREER_TRACKS:
            data[const.DATA_SELECTED_TRACK] = None

        self._data = data
        const.LOGGER.debug(
            "NomorStore: Loaded storage with %s track bucket(s), selected track %s",
            len(self._data[const.DATA_TRACKS]),
            self._data[const.DATA_SELECTED_TRACK],
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    # -------------------------------------------------------------------------
    # Track selection
    # -------------------------------------------------------------------------

    @property
    def selected_track(self) -> str | None:
        """Return the currently selected track id, or None."""
        return self._data.get(const.DATA_SELECTED_TRACK)

    def set_selected_track(self, track_id: str | None) -> None:
        """Persist the selected track id."""
        self._data[const.DATA_SELECTED_TRACK] = track_id
        self.async_schedule_save()

    # -------------------------------------------------------------------------
    # Reads / writes
    # -------------------------------------------------------------------------

    def _bucket(self, track_id: str | None, create: bool = False) -> dict[str, Any]:
        if track_id is None:
            return self._data[const.DATA_GLOBAL]
        tracks = self._data[const.DATA_TRACKS]
        if create:
            return tracks.setdefault(track_id, {})
        bucket = tracks.get(track_id)
        return bucket if isinstance(bucket, dict) else {}

    @staticmethod
    def _coerce(
        namespace: str,
        value: Any,
        default: Any,
        expected: type | tuple[type, ...] | None,
    ) -> Any:
        if expected is None:
            if default is None:
                return copy.deepcopy(value)
            expected = type(default)
        if value is None and default is None:
            return None
        if not _matches_type(value, expected):
            const.LOGGER.warning(
                "NomorStore: Malformed value for '%s' (%s), using default",
                namespace,
                type(value).__name__,
            )
            return copy.deepcopy(default)
        return copy.deepcopy(value)

    def read(
        self,
        namespace: str,
        default: Any = None,
        expected: type | tuple[type, ...] | None = None,
    ) -> Any:
        """Read a per-track value for the selected track.

        Falls back to the global slot when no track is selected. Missing or
        malformed values return a copy of default and never raise.

        Args:
            namespace: Base key, e.g. const.DATA_DSA_STREAK
            default: Value returned when absent or malformed
            expected: Type(s) accepted; defaults to type(default) when default
                is not None
        """
        return self.read_scoped(
            namespace, self.selected_track, default, expected=expected
        )

    def read_scoped(
        self,
        namespace: str,
        track_id: str | None,
        default: Any = None,
        expected: type | tuple[type, ...] | None = None,
    ) -> Any:
        """Read a value for an explicit track (None = global slot)."""
        bucket = self._bucket(track_id)
        if namespace not in bucket:
            return copy.deepcopy(default)
        return self._coerce(namespace, bucket[namespace], default, expected)

    def write(self, namespace: str, value: Any) -> None:
        """Write a per-track value for the selected track (global if none)."""
        self.write_scoped(namespace, self.selected_track, value)

    def write_scoped(self, namespace: str, track_id: str | None, value: Any) -> None:
        """Write a value for an explicit track (None = global slot)."""
        self._bucket(track_id, create=True)[namespace] = copy.deepcopy(value)
        self.async_schedule_save()

    def read_global(
        self,
        namespace: str,
        default: Any = None,
        expected: type | tuple[type, ...] | None = None,
    ) -> Any:
        """Read an unscoped value shared by all tracks."""
        return self.read_scoped(namespace, None, default, expected=expected)

    def write_global(self, namespace: str, value: Any) -> None:
        """Write an unscoped value shared by all tracks."""
        self.write_scoped(namespace, None, value)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def async_schedule_save(self) -> None:
        """Schedule a delayed save; repeated calls coalesce into one write."""
        self._store.async_delay_save(lambda: self._data, const.STORAGE_SAVE_DELAY)

    async def async_save(self) -> None:
        """Save the current data structure to storage immediately.

        Errors are logged but do not stop execution.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("NomorStore: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "NomorStore: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "NomorStore: Failed to save storage due to non-serializable data: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Clear in-memory data and delete the storage file from disk."""
        self._data = NomorStore.get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info("NomorStore: Storage file removed: %s", self._store.path)
        except OSError as err:
            const.LOGGER.error(
                "NomorStore: Failed to remove storage file %s: %s",
                self._store.path,
                err,
            )

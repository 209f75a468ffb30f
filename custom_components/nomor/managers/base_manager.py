"""Shared plumbing for Nomor managers.

Managers never call each other directly. A challenge manager that pays a
reward emits `reward_earned`; the economy manager listening on the same
config entry credits it. Signals are scoped per entry, so two loaded entries
could never see each other's events.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import NomorDataCoordinator
    from ..store import NomorStore


class BaseManager(ABC):
    """Base for the economy, challenge, motivation and session managers.

    `@callback` listeners run inside `emit()`, so a reward is on the balance
    before the emitting operation returns.
    """

    def __init__(self, hass: HomeAssistant, coordinator: NomorDataCoordinator) -> None:
        """Bind the manager to its coordinator's config entry."""
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    @property
    def store(self) -> NomorStore:
        """The coordinator's track-scoped store."""
        return self.coordinator.store

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send `payload` as one dict on this entry's `suffix` signal.

        Example:
            self.emit(const.SIGNAL_SUFFIX_REWARD_EARNED, amount=2, reason="...")
        """
        const.LOGGER.debug(
            "%s: Signal '%s' (%s)",
            type(self).__name__,
            suffix,
            ", ".join(payload),
        )
        async_dispatcher_send(
            self.hass, get_event_signal(self.entry_id, suffix), payload
        )

    def listen(self, suffix: str, target: Callable[[dict[str, Any]], Any]) -> None:
        """Connect `target` to this entry's `suffix` signal until unload."""
        self.coordinator.config_entry.async_on_unload(
            async_dispatcher_connect(
                self.hass, get_event_signal(self.entry_id, suffix), target
            )
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Load state and subscribe to signals; called once by the coordinator."""

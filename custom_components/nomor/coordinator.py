# File: coordinator.py
"""Coordinator for the Nomor integration.

Owns the track-scoped store and the managers, wires services and entities to
them, and resolves the cross-cutting events: track switches, the daily
rollover at local midnight and session expiry. Every state change a manager
signals is republished to entities as a fresh snapshot.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from datetime import datetime, timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .helpers.entity_helpers import get_event_signal
from .launcher import ProcessLauncher
from .llm_client import GeminiTextClient
from .managers import (
    ChallengeManager,
    EconomyManager,
    MotivationManager,
    SessionManager,
)
from .notification_helper import async_send_notification
from .store import NomorStore
from .type_defs import CoordinatorSnapshot
from .utils import dt_utils

# Signals after which entities need a new snapshot
STATE_SIGNALS = (
    const.SIGNAL_SUFFIX_COINS_CHANGED,
    const.SIGNAL_SUFFIX_DSA_COMPLETED,
    const.SIGNAL_SUFFIX_MCQ_ANSWERED,
    const.SIGNAL_SUFFIX_MCQ_COMPLETED,
    const.SIGNAL_SUFFIX_QUESTIONS_GENERATED,
    const.SIGNAL_SUFFIX_MOTIVATION_UPDATED,
    const.SIGNAL_SUFFIX_APPS_CHANGED,
    const.SIGNAL_SUFFIX_SESSION_STARTED,
    const.SIGNAL_SUFFIX_SESSION_ENDED,
)


class NomorDataCoordinator(DataUpdateCoordinator[CoordinatorSnapshot]):
    """Coordinator for the Nomor integration.

    The periodic refresh is a safety net: it reconciles the daily rollover,
    expires overdue sessions and starts any missing automatic generation.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: NomorStore,
    ) -> None:
        """Initialize the NomorDataCoordinator."""
        super().__init__(
            hass,
            const.LOGGER,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=const.DEFAULT_UPDATE_INTERVAL),
        )
        self.config_entry = config_entry
        self.store = store

        self.text_client = GeminiTextClient(
            hass,
            self.get_option(const.CONF_API_KEY, ""),
            self.get_option(const.CONF_MODEL, const.DEFAULT_MODEL),
        )
        self.launcher: ProcessLauncher | None = (
            ProcessLauncher(hass)
            if self.get_option(const.CONF_ENABLE_LAUNCHER, const.DEFAULT_ENABLE_LAUNCHER)
            else None
        )

        self.economy_manager = EconomyManager(hass, self)
        self.challenge_manager = ChallengeManager(hass, self)
        self.motivation_manager = MotivationManager(hass, self)
        self.session_manager = SessionManager(hass, self)

        self._track_tasks: set[asyncio.Task] = set()
        # (track_id, date) of the last failed automatic generation
        self._auto_generation_failed: tuple[str, str] | None = None

    # -------------------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------------------

    def get_option(self, key: str, default: Any = None) -> Any:
        """Read a setting from options, falling back to the initial config data."""
        if key in self.config_entry.options:
            return self.config_entry.options[key]
        return self.config_entry.data.get(key, default)

    @property
    def auto_generate_enabled(self) -> bool:
        """Whether quiz generation and app categorization start automatically."""
        return bool(
            self.get_option(
                const.CONF_AUTO_GENERATE_QUIZ, const.DEFAULT_AUTO_GENERATE_QUIZ
            )
        )

    # -------------------------------------------------------------------------------------
    # Setup / teardown
    # -------------------------------------------------------------------------------------

    async def async_setup_managers(self) -> None:
        """Subscribe to manager signals, set up managers, register the midnight timer."""
        for suffix in STATE_SIGNALS:
            self._listen(suffix, self._async_handle_state_changed)
        self._listen(const.SIGNAL_SUFFIX_SESSION_ENDED, self._async_handle_session_ended)

        # Economy first: the others emit rewards and info entries during setup
        await self.economy_manager.async_setup()
        await self.challenge_manager.async_setup()
        await self.motivation_manager.async_setup()
        await self.session_manager.async_setup()

        self.config_entry.async_on_unload(
            async_track_time_change(
                self.hass,
                self._async_handle_midnight,
                **const.DEFAULT_DAILY_RESET_TIME,
            )
        )
        self.challenge_manager.reconcile_rollover()

        if self.auto_generate_enabled and self.session_manager.needs_categorization:
            self._create_task(
                self.session_manager.async_categorize_apps(), "categorize_apps"
            )

    async def async_shutdown_coordinator(self) -> None:
        """Cancel track work and flush pending writes."""
        self._cancel_track_tasks()
        await self.store.async_save()

    def _listen(self, suffix: str, target: Any) -> None:
        self.config_entry.async_on_unload(
            async_dispatcher_connect(
                self.hass, get_event_signal(self.config_entry.entry_id, suffix), target
            )
        )

    # -------------------------------------------------------------------------------------
    # Snapshot / periodic refresh
    # -------------------------------------------------------------------------------------

    def build_snapshot(self) -> CoordinatorSnapshot:
        """Collect the state entities render."""
        challenge = self.challenge_manager
        session = self.session_manager
        total_earned, total_spent = self.economy_manager.get_totals()
        return {
            const.DATA_SELECTED_TRACK: self.store.selected_track,
            const.DATA_COINS: self.economy_manager.balance,
            const.DATA_HISTORY: self.economy_manager.get_history(
                const.HISTORY_ATTRIBUTE_LIMIT
            ),
            const.SNAPSHOT_TOTAL_EARNED: total_earned,
            const.SNAPSHOT_TOTAL_SPENT: total_spent,
            **challenge.state,
            const.SNAPSHOT_MCQ_SCORE: challenge.mcq_score,
            const.SNAPSHOT_GENERATING: challenge.is_generating(),
            const.DATA_MOTIVATION_QUOTE: self.motivation_manager.quote,
            const.DATA_LAST_MOTIVATION_DATE: self.motivation_manager.last_date,
            const.DATA_ACTIVE_SESSION: session.session,
            const.SNAPSHOT_REMAINING_MINUTES: session.remaining_minutes(),
            const.DATA_APPS: session.apps,
        }

    @callback
    def async_publish(self) -> None:
        """Push a fresh snapshot to entities."""
        self.async_set_updated_data(self.build_snapshot())

    async def _async_update_data(self) -> CoordinatorSnapshot:
        """Periodic update."""
        try:
            self.challenge_manager.reconcile_rollover()
            self.session_manager.check_expiry()
            self._schedule_background_work()
            return self.build_snapshot()
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error updating Nomor data: {err}") from err

    @callback
    def _async_handle_state_changed(self, _payload: dict[str, Any]) -> None:
        self.async_publish()

    @callback
    def _async_handle_session_ended(self, payload: dict[str, Any]) -> None:
        if payload["reason"] != const.REASON_TIME_EXPIRED:
            return
        self.config_entry.async_create_background_task(
            self.hass,
            self.async_notify(
                const.MSG_SESSION_EXPIRED.format(
                    category=payload["category"], app=payload["app_name"]
                ),
                notification_id=const.NOTIFY_ID_SESSION_EXPIRED,
            ),
            f"{const.DOMAIN}_notify_session_expired",
        )

    async def _async_handle_midnight(self, _now: datetime) -> None:
        """Daily rollover at local midnight."""
        const.LOGGER.info("Coordinator: Daily rollover")
        self.challenge_manager.reconcile_rollover()
        self._schedule_background_work()
        self.async_publish()

    # -------------------------------------------------------------------------------------
    # Tracks
    # -------------------------------------------------------------------------------------

    async def async_select_track(self, track_id: str) -> None:
        """Switch the active career track.

        Raises:
            HomeAssistantError: Unknown track id
        """
        track = const.CAREER_TRACKS.get(track_id)
        if track is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_TRACK,
                translation_placeholders={"track_id": track_id},
            )

        self._cancel_track_tasks()
        self.store.set_selected_track(track_id)
        self.economy_manager.add_info(
            const.REASON_TRACK_SELECTED.format(name=track[const.TRACK_NAME])
        )
        self.challenge_manager.load_track_state()
        self.motivation_manager.load_track_state()
        self.challenge_manager.reconcile_rollover()
        const.LOGGER.info("Coordinator: Selected track %s", track_id)

        self._schedule_background_work()
        self.async_publish()

    # -------------------------------------------------------------------------------------
    # Background work
    # -------------------------------------------------------------------------------------

    def _create_task(self, target: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        return self.config_entry.async_create_background_task(
            self.hass, target, f"{const.DOMAIN}_{name}"
        )

    def _create_track_task(self, target: Coroutine[Any, Any, Any], name: str) -> None:
        task = self._create_task(target, name)
        self._track_tasks.add(task)
        task.add_done_callback(self._track_tasks.discard)

    def _cancel_track_tasks(self) -> None:
        for task in self._track_tasks:
            task.cancel()
        self._track_tasks.clear()

    @callback
    def _schedule_background_work(self) -> None:
        """Start today's missing quiz and quote for the active track."""
        track_id = self.challenge_manager.track_id
        if track_id is None:
            return
        if (
            self.auto_generate_enabled
            and self.challenge_manager.needs_generation
            and self._auto_generation_failed != (track_id, dt_utils.dt_today_iso())
        ):
            self._create_track_task(self._async_auto_generate(), "generate_questions")
        if self.motivation_manager.needs_refresh:
            self._create_track_task(
                self.motivation_manager.async_refresh(), "refresh_motivation"
            )

    async def _async_auto_generate(self) -> None:
        track_id = self.challenge_manager.track_id
        try:
            await self.challenge_manager.async_generate_questions(automatic=True)
        except HomeAssistantError as err:
            if track_id is not None:
                # No retry on every tick; the next day (or a manual call) retries
                self._auto_generation_failed = (track_id, dt_utils.dt_today_iso())
            const.LOGGER.warning("Coordinator: Automatic quiz generation failed: %s", err)
            await self.async_notify(
                const.MSG_GENERATION_FAILED.format(error=err),
                notification_id=const.NOTIFY_ID_GENERATION_FAILED,
            )

    async def async_notify(
        self, message: str, notification_id: str | None = None
    ) -> None:
        """Send a user notification through the configured channel."""
        await async_send_notification(
            self.hass,
            self.get_option(const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE),
            message,
            notification_id=notification_id,
        )

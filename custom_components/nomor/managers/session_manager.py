"""Session Manager - Timed app access and the managed app lists.

This manager handles:
- Managed apps per category (add, remove, AI auto-categorization)
- Converting coins into one timed session for a managed app
- Session expiry through a single scheduled wakeup at ends_at
- Starting / stopping the launched application when the launcher is enabled

ARCHITECTURE:
- EconomyManager debits the coins (spend_coins) before any session state changes
- Session end entries travel to EconomyManager as ACTIVITY_LOGGED signals
- Launcher failures never roll back the debit or the session
"""

from __future__ import annotations

from datetime import datetime, timedelta
import math
from typing import TYPE_CHECKING, Any

from homeassistant.core import CALLBACK_TYPE, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_point_in_utc_time

from .. import const
from ..engines.app_engine import AppEngine
from ..engines.challenge_engine import ResponseParseError
from ..engines.economy_engine import EconomyEngine
from ..launcher import LaunchError
from ..llm_client import TextGenerationError
from ..utils import dt_utils
from ..utils.math_utils import round_coins
from .base_manager import BaseManager

if TYPE_CHECKING:
    import subprocess

    from homeassistant.core import HomeAssistant

    from ..coordinator import NomorDataCoordinator
    from ..type_defs import ManagedApp, SessionData


class SessionManager(BaseManager):
    """Manager for the single active session and the managed app lists.

    Responsibilities:
    - Persist managed apps and the active session in the global slots
    - Start, replace, stop and expire sessions
    - Drive the process launcher (best effort)

    NOT responsible for:
    - Balance arithmetic (EconomyManager)
    - Periodic expiry polling (Coordinator tick calls check_expiry)
    """

    def __init__(self, hass: HomeAssistant, coordinator: NomorDataCoordinator) -> None:
        """Initialize the SessionManager."""
        super().__init__(hass, coordinator)
        self._apps: dict[str, list[ManagedApp]] = AppEngine.empty_lists()
        self._categorized = False
        self._categorizing = False
        self._session: SessionData | None = None
        self._unsub_expiry: CALLBACK_TYPE | None = None

    async def async_setup(self) -> None:
        """Load apps and the persisted session, expiring it if already due."""
        self._apps = self._load_apps()
        self._categorized = self.store.read_global(
            const.DATA_APPS_AUTO_CATEGORIZED, False
        )
        self._session = self._load_session()
        self.coordinator.config_entry.async_on_unload(self._cancel_expiry)

        if self._session is None:
            return
        if not self.check_expiry():
            ends_at = dt_utils.dt_parse_datetime(self._session[const.DATA_SESSION_ENDS_AT])
            self._schedule_expiry(ends_at)  # type: ignore[arg-type]
            const.LOGGER.info(
                "SessionManager: Restored session for %s until %s",
                self._session[const.DATA_SESSION_APP][const.DATA_APP_NAME],
                self._session[const.DATA_SESSION_ENDS_AT],
            )

    def _load_apps(self) -> dict[str, list[ManagedApp]]:
        raw = self.store.read_global(const.DATA_APPS, {}, expected=dict)
        apps = AppEngine.empty_lists()
        for category in const.APP_CATEGORIES:
            entries = raw.get(category)
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if (
                    isinstance(entry, dict)
                    and isinstance(entry.get(const.DATA_APP_ID), str)
                    and isinstance(entry.get(const.DATA_APP_NAME), str)
                ):
                    path = entry.get(const.DATA_APP_PATH)
                    apps[category].append(
                        {
                            const.DATA_APP_ID: entry[const.DATA_APP_ID],
                            const.DATA_APP_NAME: entry[const.DATA_APP_NAME],
                            const.DATA_APP_PATH: path if isinstance(path, str) else "",
                        }
                    )
        return apps

    def _load_session(self) -> SessionData | None:
        raw = self.store.read_global(const.DATA_ACTIVE_SESSION, None, expected=dict)
        if raw is None:
            return None
        app = raw.get(const.DATA_SESSION_APP)
        if (
            raw.get(const.DATA_SESSION_CATEGORY) in const.APP_CATEGORIES
            and isinstance(app, dict)
            and isinstance(app.get(const.DATA_APP_NAME), str)
            and dt_utils.dt_parse_datetime(raw.get(const.DATA_SESSION_ENDS_AT))
            is not None
        ):
            return raw  # type: ignore[return-value]
        const.LOGGER.warning("SessionManager: Discarding malformed stored session")
        self.store.write_global(const.DATA_ACTIVE_SESSION, None)
        return None

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def apps(self) -> dict[str, list[ManagedApp]]:
        """Managed apps by category."""
        return {category: list(apps) for category, apps in self._apps.items()}

    @property
    def apps_categorized(self) -> bool:
        """True once the app lists have been auto-categorized (or attempted)."""
        return self._categorized

    @property
    def needs_categorization(self) -> bool:
        """True when apps exist that were never auto-categorized."""
        return not self._categorized and bool(AppEngine.all_apps(self._apps))

    @property
    def session(self) -> SessionData | None:
        """The active session, if any."""
        return dict(self._session) if self._session else None  # type: ignore[return-value]

    def remaining_minutes(self, now: datetime | None = None) -> int:
        """Whole minutes left in the active session, rounded up (0 if none)."""
        if self._session is None:
            return 0
        ends_at = dt_utils.dt_parse_datetime(self._session[const.DATA_SESSION_ENDS_AT])
        if ends_at is None:
            return 0
        seconds = (ends_at - (now or dt_utils.dt_now_utc())).total_seconds()
        return max(0, math.ceil(seconds / 60))

    def get_app(self, category: str, app_id: str) -> ManagedApp | None:
        """Return the managed app with app_id in category, or None."""
        for app in self._apps.get(category, []):
            if app[const.DATA_APP_ID] == app_id:
                return app
        return None

    # =========================================================================
    # Managed apps
    # =========================================================================

    def _persist_apps(self) -> None:
        self.store.write_global(const.DATA_APPS, self._apps)
        self.emit(const.SIGNAL_SUFFIX_APPS_CHANGED, apps=self.apps)

    def _mark_categorized(self) -> None:
        self._categorized = True
        self.store.write_global(const.DATA_APPS_AUTO_CATEGORIZED, True)

    def add_app(self, category: str, name: str, path: str = "") -> ManagedApp:
        """Add a managed app to a category.

        Raises:
            ValueError: Unknown category or empty name
        """
        if category not in const.APP_CATEGORIES:
            raise ValueError(f"Unknown app category: {category}")
        if not name.strip():
            raise ValueError("App name must not be empty")

        app = AppEngine.create_app(name, path)
        self._apps[category].append(app)
        self._persist_apps()
        const.LOGGER.info(
            "SessionManager: Added %s app %s", category, app[const.DATA_APP_NAME]
        )
        return app

    def remove_app(self, category: str, app_id: str) -> None:
        """Remove a managed app.

        Raises:
            HomeAssistantError: No app with app_id in category
        """
        app = self.get_app(category, app_id)
        if app is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
                translation_placeholders={"item": app_id},
            )
        self._apps[category].remove(app)
        self._persist_apps()
        const.LOGGER.info(
            "SessionManager: Removed %s app %s", category, app[const.DATA_APP_NAME]
        )

    async def async_categorize_apps(self, force: bool = False) -> bool:
        """Regroup managed apps into game / music / social using the text backend.

        A failed attempt is logged and still marks the lists as categorized.

        Returns:
            True if the lists were regrouped
        """
        names = [app[const.DATA_APP_NAME] for app in AppEngine.all_apps(self._apps)]
        if not names:
            self._mark_categorized()
            return False
        if self._categorized and not force:
            return False
        if self._categorizing:
            const.LOGGER.debug("SessionManager: Categorization already in flight")
            return False

        self._categorizing = True
        try:
            text = await self.coordinator.text_client.async_generate_text(
                AppEngine.build_categorize_prompt(names)
            )
            groups = AppEngine.parse_categorization(text)
        except (TextGenerationError, ResponseParseError) as err:
            const.LOGGER.warning("SessionManager: App categorization failed: %s", err)
            self._mark_categorized()
            return False
        finally:
            self._categorizing = False

        # Lists may have changed while awaiting; regroup what exists now
        current = AppEngine.all_apps(self._apps)
        self._apps = AppEngine.regroup(current, groups)
        self._mark_categorized()
        self.emit(
            const.SIGNAL_SUFFIX_ACTIVITY_LOGGED,
            reason=const.REASON_APPS_CATEGORIZED.format(count=len(current)),
        )
        self._persist_apps()
        const.LOGGER.info("SessionManager: Auto-categorized %s apps", len(current))
        return True

    # =========================================================================
    # Sessions
    # =========================================================================

    async def async_start_session(
        self, category: str, coins: float, app_id: str
    ) -> SessionData:
        """Spend coins for timed access to a managed app.

        Replaces any active session. All checks and state changes happen
        before the first await.

        Returns:
            The new session

        Raises:
            HomeAssistantError: Unknown app, non-positive duration or
                insufficient coins (no state change in each case)
        """
        app = self.get_app(category, app_id)
        if app is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
                translation_placeholders={"item": app_id},
            )

        coins = round_coins(coins)
        minutes = EconomyEngine.session_minutes(category, coins)
        if minutes <= 0:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_DURATION,
            )

        reason = const.REASON_SESSION_SPEND.format(
            category=category.upper(),
            app=app[const.DATA_APP_NAME],
            minutes=EconomyEngine.format_number(minutes),
        )
        economy = self.coordinator.economy_manager
        if not economy.spend_coins(coins, reason):
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INSUFFICIENT_COINS,
                translation_placeholders={
                    "balance": EconomyEngine.format_number(economy.balance),
                    "coins": EconomyEngine.format_number(coins),
                },
            )

        replaced = self._end_session(const.REASON_REPLACED) is not None

        started_at = dt_utils.dt_now_utc()
        ends_at = started_at + timedelta(minutes=minutes)
        session: SessionData = {
            const.DATA_SESSION_CATEGORY: category,
            const.DATA_SESSION_APP: dict(app),
            const.DATA_SESSION_STARTED_AT: started_at.isoformat(),
            const.DATA_SESSION_ENDS_AT: ends_at.isoformat(),
            const.DATA_SESSION_MINUTES: minutes,
        }  # type: ignore[typeddict-item]
        self._session = session
        self.store.write_global(const.DATA_ACTIVE_SESSION, session)
        self._schedule_expiry(ends_at)
        self.emit(const.SIGNAL_SUFFIX_SESSION_STARTED, session=dict(session))
        const.LOGGER.info(
            "SessionManager: Started %s session for %s, %s minutes until %s",
            category,
            app[const.DATA_APP_NAME],
            minutes,
            session[const.DATA_SESSION_ENDS_AT],
        )

        launcher = self.coordinator.launcher
        if launcher is None:
            return session
        if replaced:
            await self._async_stop_launcher()
        if app[const.DATA_APP_PATH]:
            try:
                await launcher.async_start(app[const.DATA_APP_PATH])
            except LaunchError as err:
                const.LOGGER.warning(
                    "SessionManager: Could not launch %s: %s",
                    app[const.DATA_APP_NAME],
                    err,
                )
                await self.coordinator.async_notify(
                    const.MSG_LAUNCH_FAILED.format(
                        app=app[const.DATA_APP_NAME], error=err
                    ),
                    notification_id=const.NOTIFY_ID_LAUNCH_FAILED,
                )
        return session

    async def async_stop_session(
        self, reason: str = const.REASON_STOPPED_MANUALLY
    ) -> bool:
        """End the active session.

        Returns:
            True if a session was active
        """
        if self._end_session(reason) is None:
            return False
        await self._async_stop_launcher()
        return True

    @callback
    def check_expiry(self, now: datetime | None = None) -> bool:
        """End the session with "Time expired" if ends_at has passed.

        Returns:
            True if the session expired
        """
        if self._session is None:
            return False
        ends_at = dt_utils.dt_parse_datetime(self._session[const.DATA_SESSION_ENDS_AT])
        if ends_at is not None and ends_at > (now or dt_utils.dt_now_utc()):
            return False

        self._end_session(const.REASON_TIME_EXPIRED)
        launcher = self.coordinator.launcher
        # Detach now so a session started before the task runs keeps its app.
        process = launcher.detach() if launcher is not None else None
        if process is not None:
            self.coordinator.config_entry.async_create_background_task(
                self.hass,
                self._async_stop_launcher(process),
                f"{const.DOMAIN}_stop_expired_app",
            )
        return True

    def _end_session(self, reason: str) -> SessionData | None:
        """Clear the session and log the end entry; returns the ended session."""
        session = self._session
        if session is None:
            return None
        self._cancel_expiry()
        self._session = None
        self.store.write_global(const.DATA_ACTIVE_SESSION, None)

        category = session[const.DATA_SESSION_CATEGORY]
        app_name = session[const.DATA_SESSION_APP][const.DATA_APP_NAME]
        self.emit(
            const.SIGNAL_SUFFIX_ACTIVITY_LOGGED,
            reason=const.REASON_SESSION_ENDED.format(
                category=category.upper(), app=app_name, reason=reason
            ),
        )
        self.emit(
            const.SIGNAL_SUFFIX_SESSION_ENDED,
            category=category,
            app_name=app_name,
            reason=reason,
        )
        const.LOGGER.info(
            "SessionManager: Session for %s ended (%s)", app_name, reason
        )
        return session

    async def _async_stop_launcher(
        self, process: subprocess.Popen | None = None
    ) -> None:
        launcher = self.coordinator.launcher
        if launcher is None:
            return
        try:
            if process is None:
                await launcher.async_stop()
            else:
                await launcher.async_terminate(process)
        except LaunchError as err:
            const.LOGGER.warning("SessionManager: Could not stop launched app: %s", err)

    # =========================================================================
    # Expiry timer
    # =========================================================================

    def _schedule_expiry(self, ends_at: datetime) -> None:
        self._cancel_expiry()
        self._unsub_expiry = async_track_point_in_utc_time(
            self.hass, self._async_handle_expiry, ends_at
        )

    @callback
    def _cancel_expiry(self) -> None:
        if self._unsub_expiry is not None:
            self._unsub_expiry()
            self._unsub_expiry = None

    @callback
    def _async_handle_expiry(self, now: datetime) -> None:
        self._unsub_expiry = None
        self.check_expiry(now)

    def diagnostics(self) -> dict[str, Any]:
        """Session state for config entry diagnostics."""
        return {
            "session": self.session,
            "remaining_minutes": self.remaining_minutes(),
            "apps_categorized": self._categorized,
            "app_counts": {c: len(a) for c, a in self._apps.items()},
        }

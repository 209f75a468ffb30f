"""Motivation Manager - One track-specific motivational quote per day."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.exceptions import HomeAssistantError

from .. import const
from ..engines.challenge_engine import ChallengeEngine
from ..llm_client import TextGenerationError
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import NomorDataCoordinator


class MotivationManager(BaseManager):
    """Fetch and keep the daily quote of the selected track.

    A failed request stores the fixed fallback quote, so the day's quote is
    never requested twice unless refreshed explicitly.
    """

    def __init__(self, hass: HomeAssistant, coordinator: NomorDataCoordinator) -> None:
        """Initialize the MotivationManager."""
        super().__init__(hass, coordinator)
        self._track_id: str | None = None
        self._quote: str | None = None
        self._last_date: str | None = None
        self._fetching: set[str] = set()

    async def async_setup(self) -> None:
        """Load the selected track's quote."""
        self.load_track_state()

    def load_track_state(self) -> None:
        """Reload quote and date for the store's selected track."""
        track_id = self.store.selected_track
        quote = self.store.read_scoped(
            const.DATA_MOTIVATION_QUOTE, track_id, None, expected=str
        )
        last_date = self.store.read_scoped(
            const.DATA_LAST_MOTIVATION_DATE, track_id, None, expected=str
        )
        self._track_id, self._quote, self._last_date = track_id, quote, last_date

    @property
    def quote(self) -> str | None:
        """Current quote (may be from an earlier day)."""
        return self._quote

    @property
    def last_date(self) -> str | None:
        """Local date the quote was stored."""
        return self._last_date

    @property
    def needs_refresh(self) -> bool:
        """True when a track is active and today's quote is missing."""
        return (
            self._track_id is not None
            and self._track_id not in self._fetching
            and not dt_utils.is_today(self._last_date)
        )

    async def async_refresh(self, force: bool = False) -> bool:
        """Fetch a new quote for the selected track.

        Args:
            force: Fetch even if today's quote exists

        Returns:
            True if a quote was stored, False if skipped or discarded

        Raises:
            HomeAssistantError: force requested with no track selected
        """
        track_id = self._track_id
        if track_id is None:
            if force:
                raise HomeAssistantError(
                    translation_domain=const.DOMAIN,
                    translation_key=const.TRANS_KEY_ERROR_NO_TRACK_SELECTED,
                )
            return False
        if track_id in self._fetching:
            return False
        if not force and dt_utils.is_today(self._last_date):
            return False

        track = const.CAREER_TRACKS[track_id]
        self._fetching.add(track_id)
        try:
            text = await self.coordinator.text_client.async_generate_text(
                ChallengeEngine.build_motivation_prompt(track),
                max_tokens=const.LLM_MOTIVATION_MAX_TOKENS,
            )
            quote = text.strip().strip('"').strip()
        except TextGenerationError as err:
            const.LOGGER.warning(
                "MotivationManager: Quote request failed for %s, using fallback: %s",
                track_id,
                err,
            )
            quote = const.MOTIVATION_FALLBACK.format(name=track[const.TRACK_NAME])
        finally:
            self._fetching.discard(track_id)

        if self._track_id != track_id:
            const.LOGGER.debug(
                "MotivationManager: Discarding quote for %s, active track is %s",
                track_id,
                self._track_id,
            )
            return False

        today = dt_utils.dt_today_iso()
        self._quote, self._last_date = quote, today
        self.store.write_scoped(const.DATA_MOTIVATION_QUOTE, track_id, quote)
        self.store.write_scoped(const.DATA_LAST_MOTIVATION_DATE, track_id, today)
        self.emit(const.SIGNAL_SUFFIX_MOTIVATION_UPDATED, track_id=track_id)
        const.LOGGER.info("MotivationManager: Stored quote for track %s", track_id)
        return True

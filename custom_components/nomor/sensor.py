# File: sensor.py
"""Sensors for the Nomor integration.

Sensors Defined in This File (8):

01. CoinsSensor
02. DsaStreakSensor
03. McqStreakSensor
04. McqProgressSensor
05. McqScoreSensor
06. ActiveSessionSensor
07. TimeUntilResetSensor
08. MotivationSensor
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import NomorDataCoordinator
from .entity import NomorCoordinatorEntity
from .utils import dt_utils


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Nomor sensors from a config entry."""
    coordinator: NomorDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities(
        [
            CoinsSensor(coordinator, entry),
            DsaStreakSensor(coordinator, entry),
            McqStreakSensor(coordinator, entry),
            McqProgressSensor(coordinator, entry),
            McqScoreSensor(coordinator, entry),
            ActiveSessionSensor(coordinator, entry),
            TimeUntilResetSensor(coordinator, entry),
            MotivationSensor(coordinator, entry),
        ]
    )


class NomorSensor(NomorCoordinatorEntity, SensorEntity):
    """Base sensor reading from the coordinator snapshot."""

    def _get(self, key: str, default: Any = None) -> Any:
        data = self.coordinator.data or {}
        return data.get(key, default)


class CoinsSensor(NomorSensor):
    """Coin balance with recent history and lifetime totals."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_COINS
    _attr_icon = "mdi:cash-multiple"
    _attr_native_unit_of_measurement = const.UNIT_COINS
    _attr_state_class = SensorStateClass.MEASUREMENT

    @property
    def native_value(self) -> float:
        """Return the balance."""
        return self._get(const.DATA_COINS, 0.0)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return recent history, newest first, and lifetime totals."""
        return {
            const.ATTR_HISTORY: self._get(const.DATA_HISTORY, []),
            const.ATTR_TOTAL_EARNED: self._get(const.SNAPSHOT_TOTAL_EARNED, 0.0),
            const.ATTR_TOTAL_SPENT: self._get(const.SNAPSHOT_TOTAL_SPENT, 0.0),
        }


class DsaStreakSensor(NomorSensor):
    """Consecutive days with a completed DSA challenge on the active track."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_DSA_STREAK
    _attr_icon = "mdi:code-braces"
    _attr_native_unit_of_measurement = UnitOfTime.DAYS

    @property
    def native_value(self) -> int:
        """Return the DSA streak."""
        return self._get(const.DATA_DSA_STREAK, 0)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return completion state of today's DSA challenge."""
        return {
            const.ATTR_TRACK: self._get(const.DATA_SELECTED_TRACK),
            const.ATTR_COMPLETED_TODAY: self._get(const.DATA_DSA_COMPLETED_TODAY, False),
            const.ATTR_LAST_DATE: self._get(const.DATA_LAST_DSA_DATE),
        }


class McqStreakSensor(NomorSensor):
    """Consecutive days with a fully answered quiz on the active track."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_MCQ_STREAK
    _attr_icon = "mdi:fire"
    _attr_native_unit_of_measurement = UnitOfTime.DAYS

    @property
    def native_value(self) -> int:
        """Return the MCQ streak."""
        return self._get(const.DATA_MCQ_STREAK, 0)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the date of the last completed quiz."""
        return {
            const.ATTR_TRACK: self._get(const.DATA_SELECTED_TRACK),
            const.ATTR_LAST_DATE: self._get(const.DATA_LAST_MCQ_COMPLETED_DATE),
        }


class McqProgressSensor(NomorSensor):
    """Answered question count of today's quiz.

    Attributes carry the questions without their correct index, so a
    dashboard can render the quiz without revealing the answers.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_MCQ_PROGRESS
    _attr_icon = "mdi:format-list-checks"

    @property
    def native_value(self) -> int:
        """Return the number of answered questions."""
        return self._get(const.DATA_MCQ_COMPLETED_COUNT, 0)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return questions, answers and generation state."""
        questions = self._get(const.DATA_MCQ_QUESTIONS, [])
        answers = self._get(const.DATA_MCQ_ANSWERS, {})
        return {
            const.ATTR_TOTAL: len(questions),
            const.ATTR_QUESTIONS: [
                {
                    key: value
                    for key, value in question.items()
                    if key != const.DATA_QUESTION_CORRECT
                }
                for question in questions
            ],
            const.ATTR_ANSWERS: {
                str(index): dict(record) for index, record in answers.items()
            },
            const.ATTR_LAST_DATE: self._get(const.DATA_LAST_MCQ_DATE),
            const.ATTR_GENERATING: self._get(const.SNAPSHOT_GENERATING, False),
        }


class McqScoreSensor(NomorSensor):
    """Percentage of correct answers among the answered questions."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_MCQ_SCORE
    _attr_icon = "mdi:percent-circle"
    _attr_native_unit_of_measurement = PERCENTAGE

    @property
    def native_value(self) -> int:
        """Return the score."""
        return self._get(const.SNAPSHOT_MCQ_SCORE, 0)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return correct and answered counts."""
        answers = self._get(const.DATA_MCQ_ANSWERS, {})
        return {
            const.ATTR_CORRECT: sum(
                1 for record in answers.values() if record[const.DATA_ANSWER_CORRECT]
            ),
            const.ATTR_TOTAL: len(answers),
        }


class ActiveSessionSensor(NomorSensor):
    """Remaining minutes of the active session (0 when idle)."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_SESSION
    _attr_icon = "mdi:timer-sand"
    _attr_native_unit_of_measurement = UnitOfTime.MINUTES

    @property
    def native_value(self) -> int:
        """Return remaining whole minutes."""
        return self._get(const.SNAPSHOT_REMAINING_MINUTES, 0)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the session details."""
        session = self._get(const.DATA_ACTIVE_SESSION)
        if not session:
            return {
                const.ATTR_CATEGORY: None,
                const.ATTR_APP_NAME: None,
                const.ATTR_ENDS_AT: None,
            }
        return {
            const.ATTR_CATEGORY: session[const.DATA_SESSION_CATEGORY],
            const.ATTR_APP_NAME: session[const.DATA_SESSION_APP][const.DATA_APP_NAME],
            const.ATTR_ENDS_AT: session[const.DATA_SESSION_ENDS_AT],
        }


class TimeUntilResetSensor(NomorSensor):
    """Time left until the daily reset at local midnight."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_TIME_UNTIL_RESET
    _attr_icon = "mdi:clock-outline"
    _attr_native_unit_of_measurement = UnitOfTime.MINUTES

    @property
    def native_value(self) -> int:
        """Return whole minutes until the reset."""
        hours, minutes = dt_utils.time_until_next_reset()
        return hours * 60 + minutes

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the split hours / minutes."""
        hours, minutes = dt_utils.time_until_next_reset()
        return {const.ATTR_HOURS: hours, const.ATTR_MINUTES: minutes}


class MotivationSensor(NomorSensor):
    """Today's motivational quote for the active track."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_MOTIVATION
    _attr_icon = "mdi:format-quote-open"

    @property
    def native_value(self) -> str | None:
        """Return the quote, truncated to the state length limit."""
        quote = self._get(const.DATA_MOTIVATION_QUOTE)
        if quote is None:
            return None
        if len(quote) > const.STATE_MAX_LENGTH:
            return quote[: const.STATE_MAX_LENGTH - 3] + "..."
        return quote

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the full quote and its date."""
        return {
            const.ATTR_QUOTE: self._get(const.DATA_MOTIVATION_QUOTE),
            const.ATTR_LAST_DATE: self._get(const.DATA_LAST_MOTIVATION_DATE),
        }

# File: services.py
"""Defines custom services for the Nomor integration.

These services expose every user action (track selection, challenges,
sessions, managed apps and manual earning) to scripts and automations.
"""

from __future__ import annotations

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import NomorDataCoordinator

# --- Service Schemas ---
SELECT_TRACK_SCHEMA = vol.Schema({vol.Required(const.FIELD_TRACK_ID): cv.string})

COMPLETE_DSA_SCHEMA = vol.Schema({})

GENERATE_QUESTIONS_SCHEMA = vol.Schema({})

SELECT_ANSWER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_QUESTION_INDEX): vol.Coerce(int),
        vol.Required(const.FIELD_OPTION_INDEX): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=const.MCQ_OPTION_COUNT - 1)
        ),
    }
)

START_SESSION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CATEGORY): vol.In(const.APP_CATEGORIES),
        vol.Required(const.FIELD_COINS): vol.Coerce(float),
        vol.Required(const.FIELD_APP_ID): cv.string,
    }
)

STOP_SESSION_SCHEMA = vol.Schema({})

ADD_APP_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CATEGORY): vol.In(const.APP_CATEGORIES),
        vol.Required(const.FIELD_NAME): vol.All(cv.string, vol.Length(min=1)),
        vol.Optional(const.FIELD_PATH, default=""): cv.string,
    }
)

REMOVE_APP_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CATEGORY): vol.In(const.APP_CATEGORIES),
        vol.Required(const.FIELD_APP_ID): cv.string,
    }
)

EARN_LEETCODE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_DIFFICULTY): vol.In(list(const.LEETCODE_REWARDS)),
        vol.Optional(const.FIELD_HELP_USED, default=False): cv.boolean,
    }
)

EARN_SELF_STUDY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HOURS): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(
            const.FIELD_ACTIVITY, default=const.ACTIVITY_SELF_STUDY
        ): vol.In(const.STUDY_ACTIVITIES),
    }
)

REFRESH_MOTIVATION_SCHEMA = vol.Schema({})

CATEGORIZE_APPS_SCHEMA = vol.Schema(
    {vol.Optional(const.FIELD_FORCE, default=False): cv.boolean}
)

SERVICES = [
    const.SERVICE_SELECT_TRACK,
    const.SERVICE_COMPLETE_DSA,
    const.SERVICE_GENERATE_QUESTIONS,
    const.SERVICE_SELECT_ANSWER,
    const.SERVICE_START_SESSION,
    const.SERVICE_STOP_SESSION,
    const.SERVICE_ADD_APP,
    const.SERVICE_REMOVE_APP,
    const.SERVICE_EARN_LEETCODE,
    const.SERVICE_EARN_SELF_STUDY,
    const.SERVICE_REFRESH_MOTIVATION,
    const.SERVICE_CATEGORIZE_APPS,
]


def _get_coordinator(hass: HomeAssistant) -> NomorDataCoordinator:
    """Return the coordinator of the loaded Nomor entry.

    Raises:
        HomeAssistantError: No loaded entry
    """
    for entry_data in hass.data.get(const.DOMAIN, {}).values():
        return entry_data[const.COORDINATOR]
    raise HomeAssistantError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_NO_CONFIG_ENTRY,
    )


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Nomor services."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_SELECT_TRACK):
        return

    async def handle_select_track(call: ServiceCall) -> None:
        """Handle switching the career track."""
        coordinator = _get_coordinator(hass)
        await coordinator.async_select_track(call.data[const.FIELD_TRACK_ID])

    async def handle_complete_dsa(_call: ServiceCall) -> None:
        """Handle completing today's DSA challenge."""
        _get_coordinator(hass).challenge_manager.complete_dsa()

    async def handle_generate_questions(_call: ServiceCall) -> None:
        """Handle generating today's quiz."""
        coordinator = _get_coordinator(hass)
        await coordinator.challenge_manager.async_generate_questions()

    async def handle_select_answer(call: ServiceCall) -> ServiceResponse:
        """Handle answering one quiz question."""
        coordinator = _get_coordinator(hass)
        record = coordinator.challenge_manager.select_answer(
            call.data[const.FIELD_QUESTION_INDEX],
            call.data[const.FIELD_OPTION_INDEX],
        )
        return dict(record)

    async def handle_start_session(call: ServiceCall) -> ServiceResponse:
        """Handle spending coins on a timed session."""
        coordinator = _get_coordinator(hass)
        session = await coordinator.session_manager.async_start_session(
            call.data[const.FIELD_CATEGORY],
            call.data[const.FIELD_COINS],
            call.data[const.FIELD_APP_ID],
        )
        return dict(session)

    async def handle_stop_session(_call: ServiceCall) -> None:
        """Handle stopping the active session."""
        coordinator = _get_coordinator(hass)
        await coordinator.session_manager.async_stop_session()

    async def handle_add_app(call: ServiceCall) -> ServiceResponse:
        """Handle adding a managed app."""
        coordinator = _get_coordinator(hass)
        app = coordinator.session_manager.add_app(
            call.data[const.FIELD_CATEGORY],
            call.data[const.FIELD_NAME],
            call.data[const.FIELD_PATH],
        )
        return dict(app)

    async def handle_remove_app(call: ServiceCall) -> None:
        """Handle removing a managed app."""
        _get_coordinator(hass).session_manager.remove_app(
            call.data[const.FIELD_CATEGORY], call.data[const.FIELD_APP_ID]
        )

    async def handle_earn_leetcode(call: ServiceCall) -> None:
        """Handle reporting a solved LeetCode problem."""
        _get_coordinator(hass).economy_manager.earn_leetcode(
            call.data[const.FIELD_DIFFICULTY], call.data[const.FIELD_HELP_USED]
        )

    async def handle_earn_self_study(call: ServiceCall) -> None:
        """Handle reporting hackathon or self-study hours."""
        _get_coordinator(hass).economy_manager.earn_study(
            call.data[const.FIELD_HOURS], call.data[const.FIELD_ACTIVITY]
        )

    async def handle_refresh_motivation(_call: ServiceCall) -> None:
        """Handle fetching a new motivational quote."""
        coordinator = _get_coordinator(hass)
        await coordinator.motivation_manager.async_refresh(force=True)

    async def handle_categorize_apps(call: ServiceCall) -> None:
        """Handle AI auto-categorization of managed apps."""
        coordinator = _get_coordinator(hass)
        await coordinator.session_manager.async_categorize_apps(
            force=call.data[const.FIELD_FORCE]
        )

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SELECT_TRACK,
        handle_select_track,
        schema=SELECT_TRACK_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_COMPLETE_DSA,
        handle_complete_dsa,
        schema=COMPLETE_DSA_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GENERATE_QUESTIONS,
        handle_generate_questions,
        schema=GENERATE_QUESTIONS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SELECT_ANSWER,
        handle_select_answer,
        schema=SELECT_ANSWER_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_START_SESSION,
        handle_start_session,
        schema=START_SESSION_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_STOP_SESSION,
        handle_stop_session,
        schema=STOP_SESSION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_APP,
        handle_add_app,
        schema=ADD_APP_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REMOVE_APP,
        handle_remove_app,
        schema=REMOVE_APP_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EARN_LEETCODE,
        handle_earn_leetcode,
        schema=EARN_LEETCODE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EARN_SELF_STUDY,
        handle_earn_self_study,
        schema=EARN_SELF_STUDY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REFRESH_MOTIVATION,
        handle_refresh_motivation,
        schema=REFRESH_MOTIVATION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CATEGORIZE_APPS,
        handle_categorize_apps,
        schema=CATEGORIZE_APPS_SCHEMA,
    )

    const.LOGGER.debug("Nomor services have been registered")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Nomor services when the last entry unloads."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.debug("Nomor services have been unregistered")

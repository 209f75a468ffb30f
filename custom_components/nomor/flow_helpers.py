# File: flow_helpers.py
"""Schema builders shared by the config and options flows."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.helpers import selector

from . import const


def build_settings_schema(
    defaults: dict[str, Any], include_auto_generate: bool = False
) -> vol.Schema:
    """Build the settings form.

    Args:
        defaults: Current values used as form defaults
        include_auto_generate: Add the automatic quiz generation toggle
            (options flow only)
    """
    fields: dict[Any, Any] = {
        vol.Required(
            const.CONF_API_KEY, default=defaults.get(const.CONF_API_KEY, "")
        ): selector.TextSelector(
            selector.TextSelectorConfig(type=selector.TextSelectorType.PASSWORD)
        ),
        vol.Required(
            const.CONF_MODEL, default=defaults.get(const.CONF_MODEL, const.DEFAULT_MODEL)
        ): str,
        vol.Required(
            const.CONF_ENABLE_LAUNCHER,
            default=defaults.get(
                const.CONF_ENABLE_LAUNCHER, const.DEFAULT_ENABLE_LAUNCHER
            ),
        ): bool,
        vol.Optional(
            const.CONF_NOTIFY_SERVICE,
            default=defaults.get(
                const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
            ),
        ): str,
    }
    if include_auto_generate:
        fields[
            vol.Required(
                const.CONF_AUTO_GENERATE_QUIZ,
                default=defaults.get(
                    const.CONF_AUTO_GENERATE_QUIZ, const.DEFAULT_AUTO_GENERATE_QUIZ
                ),
            )
        ] = bool
    return vol.Schema(fields)


def validate_settings(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate submitted settings; returns a field → error key mapping."""
    errors: dict[str, str] = {}
    if not str(user_input.get(const.CONF_API_KEY, "")).strip():
        errors[const.CONF_API_KEY] = const.TRANS_KEY_ERROR_INVALID_API_KEY
    notify_service = str(user_input.get(const.CONF_NOTIFY_SERVICE, "")).strip()
    if notify_service.count(".") > 1 or " " in notify_service:
        errors[const.CONF_NOTIFY_SERVICE] = const.TRANS_KEY_ERROR_INVALID_NOTIFY_SERVICE
    return errors


def normalize_settings(user_input: dict[str, Any]) -> dict[str, Any]:
    """Strip whitespace from text settings."""
    settings = dict(user_input)
    for key in (const.CONF_API_KEY, const.CONF_MODEL, const.CONF_NOTIFY_SERVICE):
        if isinstance(settings.get(key), str):
            settings[key] = settings[key].strip()
    if not settings.get(const.CONF_MODEL):
        settings[const.CONF_MODEL] = const.DEFAULT_MODEL
    return settings

# File: config_flow.py
"""Config flow for the Nomor integration.

A single instance collects the text generation credentials, the launcher
switch and the optional notify service. Progress data lives in storage, not
in the config entry.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import NomorOptionsFlowHandler


class NomorConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config flow for Nomor."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Collect the integration settings."""
        if self._async_current_entries():
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_settings(user_input)
            if not errors:
                return self.async_create_entry(
                    title=const.NOMOR_TITLE, data=fh.normalize_settings(user_input)
                )

        return self.async_show_form(
            step_id="user",
            data_schema=fh.build_settings_schema(user_input or {}),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> NomorOptionsFlowHandler:
        """Return the options flow handler."""
        return NomorOptionsFlowHandler()

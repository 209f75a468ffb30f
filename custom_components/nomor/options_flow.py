# File: options_flow.py
"""Options flow for the Nomor integration.

Edits the same settings as the config flow plus automatic quiz generation.
Saving reloads the entry through the update listener.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class NomorOptionsFlowHandler(config_entries.OptionsFlow):
    """Options flow for Nomor settings."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Show and save the settings form."""
        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_settings(user_input)
            if not errors:
                const.LOGGER.debug("Options flow: Saving updated settings")
                return self.async_create_entry(data=fh.normalize_settings(user_input))

        current = {**self.config_entry.data, **self.config_entry.options}
        return self.async_show_form(
            step_id="init",
            data_schema=fh.build_settings_schema(
                user_input or current, include_auto_generate=True
            ),
            errors=errors,
        )

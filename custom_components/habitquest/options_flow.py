# File: options_flow.py
"""Options Flow for the HabitQuest integration.

Edits the general options; the integration reloads through its update
listener once they are saved.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class HabitQuestOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for update interval and max health."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Manage general options."""
        if user_input is not None:
            options = fh.normalize_general_options(user_input)
            const.LOGGER.debug(
                "DEBUG: General Options Updated: Update Interval=%s, Max Health=%s",
                options[const.CONF_UPDATE_INTERVAL],
                options[const.CONF_MAX_HEALTH],
            )
            return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id="init",
            data_schema=fh.build_general_options_schema(
                dict(self.config_entry.options)
            ),
        )

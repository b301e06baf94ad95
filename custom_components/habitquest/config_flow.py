# File: config_flow.py
"""Config flow for the HabitQuest integration.

A single instance is allowed. The user step collects the general options
(update interval and max health), which are stored as entry options so the
options flow can change them later.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import HabitQuestOptionsFlowHandler


class HabitQuestConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for HabitQuest."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Create the single HabitQuest entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            options = fh.normalize_general_options(user_input)
            const.LOGGER.debug("DEBUG: Creating HabitQuest entry with %s", options)
            return self.async_create_entry(
                title=const.HABITQUEST_TITLE, data={}, options=options
            )

        return self.async_show_form(
            step_id="user", data_schema=fh.build_general_options_schema()
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return HabitQuestOptionsFlowHandler()

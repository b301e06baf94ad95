# File: flow_helpers.py
"""Schema builders shared by the config flow and the options flow."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.helpers import selector

from . import const


def build_general_options_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build schema for general options: update interval and max health."""
    default = default or {}
    default_interval = default.get(
        const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
    )
    default_max_health = default.get(const.CONF_MAX_HEALTH, const.DEFAULT_MAX_HEALTH)

    return vol.Schema(
        {
            vol.Required(
                const.CONF_UPDATE_INTERVAL, default=default_interval
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                )
            ),
            vol.Required(
                const.CONF_MAX_HEALTH, default=default_max_health
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    max=10000,
                    step=1,
                )
            ),
        }
    )


def normalize_general_options(user_input: dict[str, Any]) -> dict[str, int]:
    """Coerce selector floats to the integers stored in entry options."""
    return {
        const.CONF_UPDATE_INTERVAL: int(
            user_input.get(const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL)
        ),
        const.CONF_MAX_HEALTH: int(
            user_input.get(const.CONF_MAX_HEALTH, const.DEFAULT_MAX_HEALTH)
        ),
    }

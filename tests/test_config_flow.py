"""Tests for HabitQuest config and options flows."""

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.habitquest.const import (
    CONF_MAX_HEALTH,
    CONF_UPDATE_INTERVAL,
    DEFAULT_MAX_HEALTH,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
    HABITQUEST_TITLE,
)


async def test_form_user_flow_success(hass: HomeAssistant) -> None:
    """Test the user step creates an entry with integer options."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "user"

    with patch(
        "custom_components.habitquest.async_setup_entry",
        return_value=True,
    ) as mock_setup_entry:
        result = await hass.config_entries.flow.async_configure(
            result.get("flow_id"),
            user_input={CONF_UPDATE_INTERVAL: 10.0, CONF_MAX_HEALTH: 150.0},
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == HABITQUEST_TITLE
    assert result.get("data") == {}
    entry = hass.config_entries.async_entries(DOMAIN)[0]
    assert entry.options == {CONF_UPDATE_INTERVAL: 10, CONF_MAX_HEALTH: 150}
    assert len(mock_setup_entry.mock_calls) == 1


async def test_form_user_flow_default_values(hass: HomeAssistant) -> None:
    """Test the form is pre-filled with the default options."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    schema = result["data_schema"]
    defaults = {str(key): key.default() for key in schema.schema}
    assert defaults == {
        CONF_UPDATE_INTERVAL: DEFAULT_UPDATE_INTERVAL,
        CONF_MAX_HEALTH: DEFAULT_MAX_HEALTH,
    }


async def test_single_instance_only(hass: HomeAssistant) -> None:
    """Test a second entry is refused."""
    MockConfigEntry(domain=DOMAIN, data={}, options={}).add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.ABORT
    assert result.get("reason") == "single_instance_allowed"


async def test_options_flow_updates_options(hass: HomeAssistant) -> None:
    """Test the options flow stores new integer options."""
    entry = MockConfigEntry(
        domain=DOMAIN,
        data={},
        options={CONF_UPDATE_INTERVAL: 5, CONF_MAX_HEALTH: 100},
    )
    entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(entry.entry_id)
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "init"

    result = await hass.config_entries.options.async_configure(
        result.get("flow_id"),
        user_input={CONF_UPDATE_INTERVAL: 15, CONF_MAX_HEALTH: 80},
    )

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert entry.options == {CONF_UPDATE_INTERVAL: 15, CONF_MAX_HEALTH: 80}

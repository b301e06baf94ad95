# File: services.py
"""Defines custom services for the HabitQuest integration.

These services allow direct actions through scripts, automations and
dashboards: completing tasks, running the catch-up reconciler, managing
the task catalog, settings, the debug day and snapshot import/export.
"""

from __future__ import annotations

from typing import Any

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
from .coordinator import HabitQuestDataCoordinator
from .data_builders import EntityValidationError
from .errors import Rejected

# --- Service Schemas ---

_TASK_REFERENCE = {
    vol.Optional(const.FIELD_TASK_ID): cv.string,
    vol.Optional(const.FIELD_TASK_NAME): cv.string,
}

_DIFFICULTY = vol.All(vol.Coerce(int), vol.In(const.DIFFICULTIES))

COMPLETE_TASK_SCHEMA = vol.All(
    vol.Schema(_TASK_REFERENCE),
    cv.has_at_least_one_key(const.FIELD_TASK_ID, const.FIELD_TASK_NAME),
)

RECONCILE_SCHEMA = vol.Schema({})

ADD_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Required(const.FIELD_DIFFICULTY): _DIFFICULTY,
        vol.Optional(
            const.FIELD_CATEGORY, default=const.TASK_CATEGORY_OPTIONAL
        ): vol.In(const.TASK_CATEGORIES),
        vol.Optional(const.FIELD_REPEATABLE, default=False): cv.boolean,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
    }
)

UPDATE_TASK_SCHEMA = vol.All(
    vol.Schema(
        {
            **_TASK_REFERENCE,
            vol.Optional(const.FIELD_NAME): cv.string,
            vol.Optional(const.FIELD_DIFFICULTY): _DIFFICULTY,
            vol.Optional(const.FIELD_CATEGORY): vol.In(const.TASK_CATEGORIES),
            vol.Optional(const.FIELD_REPEATABLE): cv.boolean,
            vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        }
    ),
    cv.has_at_least_one_key(const.FIELD_TASK_ID, const.FIELD_TASK_NAME),
)

DELETE_TASK_SCHEMA = COMPLETE_TASK_SCHEMA

SET_SELECTED_DAY_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_DAY): vol.Any(None, cv.date),
    }
)

UPDATE_SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SETTINGS): vol.Schema(dict, extra=vol.ALLOW_EXTRA),
    }
)

RESET_ALL_DATA_SCHEMA = vol.Schema({})

EXPORT_DATA_SCHEMA = vol.Schema({})

IMPORT_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SNAPSHOT): vol.Any(cv.string, dict),
    }
)

# Service fields whose names differ from the stored task keys
_TASK_FIELD_TO_DATA = {
    const.FIELD_NAME: const.DATA_TASK_NAME,
    const.FIELD_DESCRIPTION: const.DATA_TASK_DESCRIPTION,
    const.FIELD_DIFFICULTY: const.DATA_TASK_DIFFICULTY,
    const.FIELD_CATEGORY: const.DATA_TASK_CATEGORY,
    const.FIELD_REPEATABLE: const.DATA_TASK_REPEATABLE,
}


# --- Lookup helpers ---


def get_first_habitquest_entry(hass: HomeAssistant) -> str | None:
    """Retrieve the first HabitQuest config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def _get_coordinator(hass: HomeAssistant, action: str) -> HabitQuestDataCoordinator:
    entry_id = get_first_habitquest_entry(hass)
    if not entry_id:
        const.LOGGER.warning("WARNING: %s: %s", action, const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def _resolve_task_id(
    coordinator: HabitQuestDataCoordinator, data: dict[str, Any], action: str
) -> str:
    """Map task_id / task_name service fields to a task id."""
    if task_id := data.get(const.FIELD_TASK_ID):
        return task_id

    task_name = data[const.FIELD_TASK_NAME]
    task = coordinator.manager.find_task_by_name(task_name)
    if task is None:
        const.LOGGER.warning(
            "WARNING: %s: %s", action, const.ERROR_TASK_NOT_FOUND_FMT.format(task_name)
        )
        raise HomeAssistantError(const.ERROR_TASK_NOT_FOUND_FMT.format(task_name))
    return task[const.DATA_TASK_ID]


def _raise_if_rejected(result: Any, action: str) -> None:
    if isinstance(result, Rejected):
        const.LOGGER.warning("WARNING: %s: %s", action, result.message)
        raise HomeAssistantError(result.message)


def async_setup_services(hass: HomeAssistant) -> None:
    """Register HabitQuest services."""

    async def handle_complete_task(call: ServiceCall) -> ServiceResponse:
        """Handle completing a task on the selected day."""
        coordinator = _get_coordinator(hass, "Complete Task")
        task_id = _resolve_task_id(coordinator, call.data, "Complete Task")

        # Missed days must be penalized before today's completion moves the cursor
        coordinator.run(coordinator.manager.reconcile)
        result = coordinator.run(coordinator.manager.complete_task, task_id)
        _raise_if_rejected(result, "Complete Task")

        const.LOGGER.info(
            "INFO: Task %s completed: +%s points", task_id, result["points"]
        )
        return dict(result)

    async def handle_reconcile(_call: ServiceCall) -> ServiceResponse:
        """Handle a manual catch-up pass."""
        coordinator = _get_coordinator(hass, "Reconcile")
        result = coordinator.run(coordinator.manager.reconcile)
        return dict(result)

    async def handle_add_task(call: ServiceCall) -> ServiceResponse:
        """Handle adding a task to the catalog."""
        coordinator = _get_coordinator(hass, "Add Task")
        try:
            task = coordinator.run(
                coordinator.manager.add_task,
                call.data[const.FIELD_NAME],
                call.data[const.FIELD_DIFFICULTY],
                category=call.data[const.FIELD_CATEGORY],
                repeatable=call.data[const.FIELD_REPEATABLE],
                description=call.data.get(const.FIELD_DESCRIPTION),
            )
        except EntityValidationError as err:
            const.LOGGER.warning("WARNING: Add Task: %s", err)
            raise HomeAssistantError(str(err)) from err
        return {const.FIELD_TASK_ID: task[const.DATA_TASK_ID]}

    async def handle_update_task(call: ServiceCall) -> None:
        """Handle updating task fields."""
        coordinator = _get_coordinator(hass, "Update Task")
        task_id = _resolve_task_id(coordinator, call.data, "Update Task")
        changes = {
            data_key: call.data[field]
            for field, data_key in _TASK_FIELD_TO_DATA.items()
            if field in call.data
        }
        try:
            result = coordinator.run(
                coordinator.manager.update_task, task_id, **changes
            )
        except EntityValidationError as err:
            const.LOGGER.warning("WARNING: Update Task: %s", err)
            raise HomeAssistantError(str(err)) from err
        _raise_if_rejected(result, "Update Task")

    async def handle_delete_task(call: ServiceCall) -> None:
        """Handle deleting a task and its completions."""
        coordinator = _get_coordinator(hass, "Delete Task")
        task_id = _resolve_task_id(coordinator, call.data, "Delete Task")
        result = coordinator.run(coordinator.manager.delete_task, task_id)
        _raise_if_rejected(result, "Delete Task")

    async def handle_set_selected_day(call: ServiceCall) -> None:
        """Handle overriding the current day (omit `day` to clear)."""
        coordinator = _get_coordinator(hass, "Set Selected Day")
        day = call.data.get(const.FIELD_DAY)
        coordinator.run(
            coordinator.manager.set_selected_day,
            day.isoformat() if day is not None else None,
        )

    async def handle_update_settings(call: ServiceCall) -> None:
        """Handle merging user settings."""
        coordinator = _get_coordinator(hass, "Update Settings")
        coordinator.run(
            coordinator.manager.update_settings, **call.data[const.FIELD_SETTINGS]
        )

    async def handle_reset_all_data(_call: ServiceCall) -> None:
        """Handle clearing catalog, log and progression."""
        coordinator = _get_coordinator(hass, "Reset All Data")
        coordinator.run(coordinator.manager.reset_all_data)
        const.LOGGER.info("INFO: All HabitQuest data has been reset")

    async def handle_export_data(_call: ServiceCall) -> ServiceResponse:
        """Handle exporting the full snapshot as a service response."""
        coordinator = _get_coordinator(hass, "Export Data")
        return coordinator.manager.export_document()

    async def handle_import_data(call: ServiceCall) -> None:
        """Handle replacing all state with an imported snapshot."""
        coordinator = _get_coordinator(hass, "Import Data")
        result = coordinator.run(
            coordinator.manager.import_snapshot, call.data[const.FIELD_SNAPSHOT]
        )
        _raise_if_rejected(result, "Import Data")

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_COMPLETE_TASK,
        handle_complete_task,
        schema=COMPLETE_TASK_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RECONCILE,
        handle_reconcile,
        schema=RECONCILE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_TASK,
        handle_add_task,
        schema=ADD_TASK_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_TASK,
        handle_update_task,
        schema=UPDATE_TASK_SCHEMA,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_TASK,
        handle_delete_task,
        schema=DELETE_TASK_SCHEMA,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_SELECTED_DAY,
        handle_set_selected_day,
        schema=SET_SELECTED_DAY_SCHEMA,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_SETTINGS,
        handle_update_settings,
        schema=UPDATE_SETTINGS_SCHEMA,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RESET_ALL_DATA,
        handle_reset_all_data,
        schema=RESET_ALL_DATA_SCHEMA,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EXPORT_DATA,
        handle_export_data,
        schema=EXPORT_DATA_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_IMPORT_DATA,
        handle_import_data,
        schema=IMPORT_DATA_SCHEMA,
    )

    const.LOGGER.debug("DEBUG: HabitQuest services have been registered")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister HabitQuest services when unloading the integration."""
    services = [
        const.SERVICE_COMPLETE_TASK,
        const.SERVICE_RECONCILE,
        const.SERVICE_ADD_TASK,
        const.SERVICE_UPDATE_TASK,
        const.SERVICE_DELETE_TASK,
        const.SERVICE_SET_SELECTED_DAY,
        const.SERVICE_UPDATE_SETTINGS,
        const.SERVICE_RESET_ALL_DATA,
        const.SERVICE_EXPORT_DATA,
        const.SERVICE_IMPORT_DATA,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: HabitQuest services have been unregistered")

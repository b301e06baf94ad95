"""Shared fixtures for HabitQuest tests."""

from collections.abc import Callable, Generator
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from custom_components.habitquest.storage import InMemoryStorage
from custom_components.habitquest.utils import dt_utils
from tests.factories import TODAY

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Generator[None]:
    """Keep day bucketing in UTC unless a test opts into another zone.

    Integration setup pushes Home Assistant's zone into dt_utils; restore it
    so pure tests stay independent of test order.
    """
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def fixed_today() -> Callable[[], str]:
    """Return a clock that always reports TODAY."""
    return lambda: TODAY


@pytest.fixture
def storage() -> InMemoryStorage:
    """Return an empty in-memory storage backend."""
    return InMemoryStorage()

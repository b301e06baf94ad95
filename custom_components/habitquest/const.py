# File: const.py
"""Constants for the HabitQuest integration.

This file centralizes configuration keys, defaults, reward tables, the level
table, storage keys, service names and user-facing messages for consistency
across the integration.
"""

import logging
import math

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    time_zone = dt_util.get_time_zone(hass.config.time_zone)
    if time_zone is not None:
        dt_utils.set_default_timezone(time_zone)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
HABITQUEST_TITLE = "HabitQuest"

DOMAIN = "habitquest"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "habitquest_data"
STORAGE_VERSION = 1
STORAGE_SAVE_DELAY_SECONDS = 1

# Update Interval (minutes)
DEFAULT_UPDATE_INTERVAL = 5

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_UPDATE_INTERVAL = "update_interval"
CONF_MAX_HEALTH = "max_health"

# ------------------------------------------------------------------------------------------------
# Snapshot Document Keys
# ------------------------------------------------------------------------------------------------
DATA_TASKS = "tasks"
DATA_COMPLETIONS = "completions"
DATA_USER_DATA = "userData"
DATA_EXPORT_DATE = "exportDate"

# Task
DATA_TASK_ID = "id"
DATA_TASK_NAME = "name"
DATA_TASK_DESCRIPTION = "description"
DATA_TASK_DIFFICULTY = "difficulty"
DATA_TASK_CATEGORY = "category"
DATA_TASK_REPEATABLE = "repeatable"
DATA_TASK_CREATED_AT = "createdAt"
DATA_TASK_UPDATED_AT = "updatedAt"

# Completion
DATA_COMPLETION_ID = "id"
DATA_COMPLETION_TASK_ID = "taskId"
DATA_COMPLETION_COMPLETED_AT = "completedAt"
DATA_COMPLETION_POINTS = "points"

# User / progression
DATA_USER_TOTAL_POINTS = "totalPoints"
DATA_USER_LEVEL = "level"
DATA_USER_STREAK = "streak"
DATA_USER_HEALTH = "health"
DATA_USER_MAX_HEALTH = "maxHealth"
DATA_USER_LAST_PROCESSED_DATE = "lastProcessedDate"
DATA_USER_SETTINGS = "settings"

# Settings (opaque to the engine, round-tripped on export/import)
DATA_SETTINGS_ANIMATIONS_ENABLED = "animationsEnabled"
DATA_SETTINGS_SOUND_ENABLED = "soundEnabled"
DATA_SETTINGS_THEME = "theme"
DATA_SETTINGS_NOTIFICATIONS = "notifications"

DEFAULT_THEME = "light"
DEFAULT_SETTINGS = {
    DATA_SETTINGS_ANIMATIONS_ENABLED: True,
    DATA_SETTINGS_SOUND_ENABLED: True,
    DATA_SETTINGS_THEME: DEFAULT_THEME,
    DATA_SETTINGS_NOTIFICATIONS: True,
}

# Legacy keys written by earlier exports
LEGACY_TASK_TYPE = "type"
LEGACY_TASK_IS_REPEATABLE = "isRepeatable"
LEGACY_TASK_TYPE_REQUIRED = "required"
LEGACY_USER_LAST_ACTIVE_DATE = "lastActiveDate"

# Task categories
TASK_CATEGORY_MANDATORY = "mandatory"
TASK_CATEGORY_OPTIONAL = "optional"
TASK_CATEGORIES = [TASK_CATEGORY_MANDATORY, TASK_CATEGORY_OPTIONAL]

# ------------------------------------------------------------------------------------------------
# Reward / Penalty Tables
# ------------------------------------------------------------------------------------------------
DIFFICULTIES = [1, 2, 3, 4, 5]

POINTS_AWARD_BY_DIFFICULTY = {1: 10, 2: 20, 3: 30, 4: 50, 5: 80}
HEALTH_RECOVERY_BY_DIFFICULTY = {1: 2, 2: 3, 3: 4, 4: 5, 5: 6}
HEALTH_PENALTY_BY_DIFFICULTY = {1: 5, 2: 10, 3: 15, 4: 25, 5: 40}
POINT_PENALTY_MULTIPLIER = 0.5

# Health
DEFAULT_MAX_HEALTH = 100
HEALTH_WARNING_THRESHOLD_PERCENT = 30

HEALTH_STATUS_HEALTHY = "healthy"
HEALTH_STATUS_CAUTION = "caution"
HEALTH_STATUS_WARNING = "warning"
HEALTH_STATUS_DANGER = "danger"

# Upper bounds (percent) for each health band, checked in order
HEALTH_STATUS_BANDS = [
    (20, HEALTH_STATUS_DANGER),
    (40, HEALTH_STATUS_WARNING),
    (60, HEALTH_STATUS_CAUTION),
]

# ------------------------------------------------------------------------------------------------
# Level Table
# ------------------------------------------------------------------------------------------------
LEVEL_TIER = "tier"
LEVEL_MIN_POINTS = "min_points"
LEVEL_MAX_POINTS = "max_points"
LEVEL_LABEL = "label"

LEVELS = [
    # Qi Refining
    {LEVEL_TIER: 1, LEVEL_MIN_POINTS: 0, LEVEL_MAX_POINTS: 199, LEVEL_LABEL: "Qi Refining I"},
    {LEVEL_TIER: 2, LEVEL_MIN_POINTS: 200, LEVEL_MAX_POINTS: 499, LEVEL_LABEL: "Qi Refining II"},
    {LEVEL_TIER: 3, LEVEL_MIN_POINTS: 500, LEVEL_MAX_POINTS: 999, LEVEL_LABEL: "Qi Refining III"},
    # Foundation Building
    {LEVEL_TIER: 4, LEVEL_MIN_POINTS: 1000, LEVEL_MAX_POINTS: 1999, LEVEL_LABEL: "Foundation I"},
    {LEVEL_TIER: 5, LEVEL_MIN_POINTS: 2000, LEVEL_MAX_POINTS: 3499, LEVEL_LABEL: "Foundation II"},
    {LEVEL_TIER: 6, LEVEL_MIN_POINTS: 3500, LEVEL_MAX_POINTS: 5499, LEVEL_LABEL: "Foundation III"},
    # Golden Core
    {LEVEL_TIER: 7, LEVEL_MIN_POINTS: 5500, LEVEL_MAX_POINTS: 7999, LEVEL_LABEL: "Golden Core I"},
    {LEVEL_TIER: 8, LEVEL_MIN_POINTS: 8000, LEVEL_MAX_POINTS: 11499, LEVEL_LABEL: "Golden Core II"},
    {LEVEL_TIER: 9, LEVEL_MIN_POINTS: 11500, LEVEL_MAX_POINTS: 15999, LEVEL_LABEL: "Golden Core III"},
    # Nascent Soul
    {LEVEL_TIER: 10, LEVEL_MIN_POINTS: 16000, LEVEL_MAX_POINTS: 22999, LEVEL_LABEL: "Nascent Soul I"},
    {LEVEL_TIER: 11, LEVEL_MIN_POINTS: 23000, LEVEL_MAX_POINTS: 31999, LEVEL_LABEL: "Nascent Soul II"},
    {LEVEL_TIER: 12, LEVEL_MIN_POINTS: 32000, LEVEL_MAX_POINTS: 43999, LEVEL_LABEL: "Nascent Soul III"},
    # Spirit Severing
    {LEVEL_TIER: 13, LEVEL_MIN_POINTS: 44000, LEVEL_MAX_POINTS: 59999, LEVEL_LABEL: "Spirit Severing I"},
    {LEVEL_TIER: 14, LEVEL_MIN_POINTS: 60000, LEVEL_MAX_POINTS: 79999, LEVEL_LABEL: "Spirit Severing II"},
    {LEVEL_TIER: 15, LEVEL_MIN_POINTS: 80000, LEVEL_MAX_POINTS: 104999, LEVEL_LABEL: "Spirit Severing III"},
    # Unity
    {LEVEL_TIER: 16, LEVEL_MIN_POINTS: 105000, LEVEL_MAX_POINTS: 139999, LEVEL_LABEL: "Unity I"},
    {LEVEL_TIER: 17, LEVEL_MIN_POINTS: 140000, LEVEL_MAX_POINTS: 184999, LEVEL_LABEL: "Unity II"},
    {LEVEL_TIER: 18, LEVEL_MIN_POINTS: 185000, LEVEL_MAX_POINTS: 239999, LEVEL_LABEL: "Unity III"},
    # Great Ascension
    {LEVEL_TIER: 19, LEVEL_MIN_POINTS: 240000, LEVEL_MAX_POINTS: 319999, LEVEL_LABEL: "Great Ascension I"},
    {LEVEL_TIER: 20, LEVEL_MIN_POINTS: 320000, LEVEL_MAX_POINTS: 419999, LEVEL_LABEL: "Great Ascension II"},
    {LEVEL_TIER: 21, LEVEL_MIN_POINTS: 420000, LEVEL_MAX_POINTS: 549999, LEVEL_LABEL: "Great Ascension III"},
    # Tribulation
    {LEVEL_TIER: 22, LEVEL_MIN_POINTS: 550000, LEVEL_MAX_POINTS: 719999, LEVEL_LABEL: "Tribulation I"},
    {LEVEL_TIER: 23, LEVEL_MIN_POINTS: 720000, LEVEL_MAX_POINTS: 939999, LEVEL_LABEL: "Tribulation II"},
    {LEVEL_TIER: 24, LEVEL_MIN_POINTS: 940000, LEVEL_MAX_POINTS: 1219999, LEVEL_LABEL: "Tribulation III"},
    # Immortal Ascension
    {LEVEL_TIER: 25, LEVEL_MIN_POINTS: 1220000, LEVEL_MAX_POINTS: 1579999, LEVEL_LABEL: "Immortal I"},
    {LEVEL_TIER: 26, LEVEL_MIN_POINTS: 1580000, LEVEL_MAX_POINTS: 2039999, LEVEL_LABEL: "Immortal II"},
    {LEVEL_TIER: 27, LEVEL_MIN_POINTS: 2040000, LEVEL_MAX_POINTS: math.inf, LEVEL_LABEL: "Immortal III"},
]

# ------------------------------------------------------------------------------------------------
# Streak / Catch-up Limits
# ------------------------------------------------------------------------------------------------
STREAK_SCAN_HORIZON_DAYS = 365
MAX_CATCH_UP_DAYS = 3660

# Statistics
DEFAULT_HISTORY_DAYS = 7

# ------------------------------------------------------------------------------------------------
# Rejection Reasons
# ------------------------------------------------------------------------------------------------
REJECT_NOT_FOUND = "not_found"
REJECT_ALREADY_COMPLETED = "already_completed"
REJECT_MALFORMED_SNAPSHOT = "malformed_snapshot"
REJECT_STORAGE_UNAVAILABLE = "storage_unavailable"

ERROR_TASK_NOT_FOUND_FMT = "Task '{}' not found"
ERROR_TASK_ALREADY_COMPLETED_FMT = "Task '{}' has already been completed on {}"
ERROR_MALFORMED_SNAPSHOT_FMT = "Snapshot could not be imported: {}"
ERROR_STORAGE_UNAVAILABLE_FMT = "Storage unavailable: {}"
MSG_NO_ENTRY_FOUND = "No HabitQuest entry found"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_COMPLETE_TASK = "complete_task"
SERVICE_RECONCILE = "reconcile"
SERVICE_ADD_TASK = "add_task"
SERVICE_UPDATE_TASK = "update_task"
SERVICE_DELETE_TASK = "delete_task"
SERVICE_SET_SELECTED_DAY = "set_selected_day"
SERVICE_UPDATE_SETTINGS = "update_settings"
SERVICE_RESET_ALL_DATA = "reset_all_data"
SERVICE_EXPORT_DATA = "export_data"
SERVICE_IMPORT_DATA = "import_data"

FIELD_TASK_ID = "task_id"
FIELD_TASK_NAME = "task_name"
FIELD_NAME = "name"
FIELD_DESCRIPTION = "description"
FIELD_DIFFICULTY = "difficulty"
FIELD_CATEGORY = "category"
FIELD_REPEATABLE = "repeatable"
FIELD_DAY = "day"
FIELD_SETTINGS = "settings"
FIELD_SNAPSHOT = "snapshot"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_POINTS = "_points"
SENSOR_UID_SUFFIX_LEVEL = "_level"
SENSOR_UID_SUFFIX_HEALTH = "_health"
SENSOR_UID_SUFFIX_STREAK = "_streak"

TRANS_KEY_SENSOR_POINTS = "points_sensor"
TRANS_KEY_SENSOR_LEVEL = "level_sensor"
TRANS_KEY_SENSOR_HEALTH = "health_sensor"
TRANS_KEY_SENSOR_STREAK = "streak_sensor"

ATTR_LEVEL = "level"
ATTR_LEVEL_LABEL = "level_label"
ATTR_POINTS_TO_NEXT_LEVEL = "points_to_next_level"
ATTR_LEVEL_PROGRESS = "level_progress"
ATTR_MAX_HEALTH = "max_health"
ATTR_HEALTH_STATUS = "health_status"
ATTR_HEALTH_CRITICAL = "health_critical"
ATTR_LAST_PROCESSED_DATE = "last_processed_date"
ATTR_SELECTED_DAY = "selected_day"
ATTR_BEST_STREAK = "best_streak"
ATTR_FORMATTED_POINTS = "formatted_points"
ATTR_DAILY_POINTS = "daily_points"
ATTR_HEALTH = "health"
ATTR_STORAGE_AVAILABLE = "storage_available"
ATTR_TOTAL_COMPLETIONS = "total_completions"
ATTR_COMPLETION_RATE = "completion_rate"
ATTR_AVERAGE_POINTS_PER_DAY = "average_points_per_day"

TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"

# ------------------------------------------------------------------------------------------------
# Events
# ------------------------------------------------------------------------------------------------
EVENT_LEVEL_UP = "habitquest_level_up"

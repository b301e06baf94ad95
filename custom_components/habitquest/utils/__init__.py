# File: utils/__init__.py
"""Pure Python utilities for HabitQuest.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Local-day bucketing, day key arithmetic and comparison
    - math_utils: Clamping, percentages and point formatting

Usage:
    from . import dt_utils
    from .math_utils import clamp
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]

# File: utils/math_utils.py
"""Math and calculation utilities for HabitQuest.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Functions:
    - clamp: Bound a value to a closed range
    - calculate_percentage: Progress percentage calculations
    - format_points: Compact display of large point totals
"""

from __future__ import annotations

# Default float precision for percentage rounding
DATA_FLOAT_PRECISION = 2


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
        clamp(50, 0, 100) → 50
    """
    return max(min_val, min(value, max_val))


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Args:
        current: Current progress value
        target: Target/total value
        precision: Number of decimal places for rounding

    Returns:
        Percentage with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0  # Division by zero protection
    """
    if target <= 0:
        return 0.0
    return round((current / target) * 100, precision)


def format_points(points: int) -> str:
    """Format a point total for compact display.

    Examples:
        format_points(950) → "950"
        format_points(1500) → "1.5K"
        format_points(2_040_000) → "2.0M"
    """
    if points >= 1_000_000:
        return f"{points / 1_000_000:.1f}M"
    if points >= 1_000:
        return f"{points / 1_000:.1f}K"
    return str(points)

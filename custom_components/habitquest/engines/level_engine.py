"""Level Engine - Pure resolution of cumulative points to level tiers.

Levels are an ordered, non-overlapping, ascending table of
{tier, min_points, max_points, label}; the last tier's max_points is
math.inf. The level is never stored as a source of truth: it is always
resolved from the point total.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..type_defs import LevelInfo, LevelProgress


class LevelEngine:
    """Pure logic engine for level resolution and progress.

    All methods are static and accept an optional level table so hosts and
    tests can supply their own tiers.
    """

    @staticmethod
    def level_for(
        points: float, levels: Sequence[LevelInfo] = const.LEVELS
    ) -> LevelInfo:
        """Resolve the level tier for a point total.

        Scans from the top of the table downward and returns the first tier
        whose min_points <= points. Falls back to the first tier for totals
        below every minimum.
        """
        for level in reversed(levels):
            if points >= level[const.LEVEL_MIN_POINTS]:
                return level
        return levels[0]

    @staticmethod
    def next_level(
        points: float, levels: Sequence[LevelInfo] = const.LEVELS
    ) -> LevelInfo | None:
        """Return the tier after the current one, or None at the terminal tier."""
        current_tier = LevelEngine.level_for(points, levels)[const.LEVEL_TIER]
        for level in levels:
            if level[const.LEVEL_TIER] == current_tier + 1:
                return level
        return None

    @staticmethod
    def progress_to_next_level(
        points: float, levels: Sequence[LevelInfo] = const.LEVELS
    ) -> LevelProgress:
        """Return points remaining and percent progress within the current tier.

        Returns:
            LevelProgress where:
            - points_remaining is 0 at the terminal tier
            - percent_within_tier is 100 at the terminal tier, 0 below the
              tier minimum, otherwise (points - min) / (max - min + 1) * 100
        """
        current = LevelEngine.level_for(points, levels)
        upcoming = LevelEngine.next_level(points, levels)
        remaining = (
            max(0, int(upcoming[const.LEVEL_MIN_POINTS] - points)) if upcoming else 0
        )

        max_points = current[const.LEVEL_MAX_POINTS]
        min_points = current[const.LEVEL_MIN_POINTS]
        if math.isinf(max_points):
            percent = 100.0
        elif points < min_points:
            percent = 0.0
        else:
            tier_range = max_points - min_points + 1
            percent = min(100.0, max(0.0, (points - min_points) / tier_range * 100))

        return {"points_remaining": remaining, "percent_within_tier": percent}

    @staticmethod
    def is_level_up(
        old_points: float,
        new_points: float,
        levels: Sequence[LevelInfo] = const.LEVELS,
    ) -> bool:
        """Return True when new_points resolves to a higher tier than old_points."""
        old_tier = LevelEngine.level_for(old_points, levels)[const.LEVEL_TIER]
        new_tier = LevelEngine.level_for(new_points, levels)[const.LEVEL_TIER]
        return new_tier > old_tier

    @staticmethod
    def validate_table(levels: Sequence[LevelInfo]) -> list[str]:
        """Check a level table is ascending, contiguous and open-ended.

        Returns:
            List of problems found (empty when the table is valid)
        """
        problems: list[str] = []
        if not levels:
            return ["Level table is empty"]

        if levels[0][const.LEVEL_MIN_POINTS] != 0:
            problems.append("First tier must start at 0 points")

        for previous, current in zip(levels, levels[1:]):
            if current[const.LEVEL_TIER] != previous[const.LEVEL_TIER] + 1:
                problems.append(
                    f"Tier {current[const.LEVEL_TIER]} does not follow "
                    f"tier {previous[const.LEVEL_TIER]}"
                )
            if current[const.LEVEL_MIN_POINTS] != previous[const.LEVEL_MAX_POINTS] + 1:
                problems.append(
                    f"Gap or overlap between tier {previous[const.LEVEL_TIER]} "
                    f"and tier {current[const.LEVEL_TIER]}"
                )

        if not math.isinf(levels[-1][const.LEVEL_MAX_POINTS]):
            problems.append("Last tier must have an unbounded maximum")

        return problems

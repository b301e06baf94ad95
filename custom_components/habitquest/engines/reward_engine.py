"""Reward Engine - Pure lookup tables for completion rewards and miss penalties.

This engine provides stateless, pure Python functions for:
- Points awarded and health recovered when a task is completed
- Points and health lost when a mandatory task is missed
- Health percentage / status bands for display

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods keyed only by difficulty tier (1-5).
State management belongs in ProgressionManager.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .. import const
from ..utils.math_utils import calculate_percentage, clamp

if TYPE_CHECKING:
    from ..type_defs import RewardDelta


class RewardEngine:
    """Pure logic engine for reward and penalty tables.

    All methods are static - no instance state. The tables are total over
    difficulty tiers 1-5; any other tier raises ValueError.
    """

    @staticmethod
    def _check_difficulty(difficulty: int) -> int:
        """Return the tier unchanged, or raise ValueError if outside 1-5."""
        if isinstance(difficulty, bool) or difficulty not in const.DIFFICULTIES:
            raise ValueError(f"Invalid difficulty tier: {difficulty!r}")
        return difficulty

    @staticmethod
    def points_for_difficulty(difficulty: int) -> int:
        """Return the points awarded for completing a task of this tier."""
        tier = RewardEngine._check_difficulty(difficulty)
        return const.POINTS_AWARD_BY_DIFFICULTY[tier]

    @staticmethod
    def point_penalty_for_difficulty(difficulty: int) -> int:
        """Return the points deducted for missing a mandatory task of this tier.

        floor(award * 0.5): 5, 10, 15, 25, 40 for tiers 1-5.
        """
        award = RewardEngine.points_for_difficulty(difficulty)
        return math.floor(award * const.POINT_PENALTY_MULTIPLIER)

    @staticmethod
    def reward_for_completion(difficulty: int) -> RewardDelta:
        """Return points awarded and health recovered for a completion.

        Args:
            difficulty: Task difficulty tier (1-5)

        Returns:
            RewardDelta with positive points and health_delta
        """
        tier = RewardEngine._check_difficulty(difficulty)
        return {
            "points": const.POINTS_AWARD_BY_DIFFICULTY[tier],
            "health_delta": const.HEALTH_RECOVERY_BY_DIFFICULTY[tier],
        }

    @staticmethod
    def penalty_for_miss(difficulty: int) -> RewardDelta:
        """Return points and health lost for an unmet mandatory task.

        Values are returned as positive magnitudes; the caller subtracts them.

        Args:
            difficulty: Task difficulty tier (1-5)
        """
        tier = RewardEngine._check_difficulty(difficulty)
        return {
            "points": RewardEngine.point_penalty_for_difficulty(tier),
            "health_delta": const.HEALTH_PENALTY_BY_DIFFICULTY[tier],
        }

    # =========================================================================
    # HEALTH DISPLAY HELPERS
    # =========================================================================

    @staticmethod
    def clamp_health(health: int, max_health: int = const.DEFAULT_MAX_HEALTH) -> int:
        """Bound health to [0, max_health]."""
        return int(clamp(health, 0, max_health))

    @staticmethod
    def health_percentage(
        health: int, max_health: int = const.DEFAULT_MAX_HEALTH
    ) -> float:
        """Return health as a percentage of max_health, clamped to [0, 100]."""
        return clamp(calculate_percentage(health, max_health), 0.0, 100.0)

    @staticmethod
    def is_health_critical(
        health: int, max_health: int = const.DEFAULT_MAX_HEALTH
    ) -> bool:
        """Return True when health is at or below the warning threshold."""
        return (
            RewardEngine.health_percentage(health, max_health)
            <= const.HEALTH_WARNING_THRESHOLD_PERCENT
        )

    @staticmethod
    def health_status(health: int, max_health: int = const.DEFAULT_MAX_HEALTH) -> str:
        """Map health to a display band (danger / warning / caution / healthy)."""
        percentage = RewardEngine.health_percentage(health, max_health)
        for upper_bound, status in const.HEALTH_STATUS_BANDS:
            if percentage <= upper_bound:
                return status
        return const.HEALTH_STATUS_HEALTHY

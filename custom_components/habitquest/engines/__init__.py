"""Engine modules for HabitQuest integration.

Contains pure computation engines (no Home Assistant dependencies):
- reward_engine: Completion rewards and miss penalties by difficulty tier
- level_engine: Points to level tier resolution and progress
- streak_engine: Consecutive qualifying-day calculations
- penalty_engine: Unmet mandatory task assessment for one day
- statistics_engine: Aggregations over the completion log
"""

# Use relative imports within package to avoid mypy module resolution issues
from .level_engine import LevelEngine
from .penalty_engine import PenaltyEngine
from .reward_engine import RewardEngine
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine

__all__ = [
    "LevelEngine",
    "PenaltyEngine",
    "RewardEngine",
    "StatisticsEngine",
    "StreakEngine",
]

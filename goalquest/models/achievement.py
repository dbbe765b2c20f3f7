"""
Achievement domain model.

Definitions are static catalog entries. Progress is derived on every
evaluation and never stored by this package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Literal, Optional, Union

from goalquest.core.errors import ValidationError

AchievementTier = Literal["bronze", "silver", "gold", "platinum"]
ConditionKind = Literal["count", "streak", "xp", "level", "completion", "module_goals_completed"]

TIERS = ("bronze", "silver", "gold", "platinum")


@dataclass(frozen=True)
class AggregateStats:
    """Aggregates a user's achievements are checked against."""

    total_goals: int = 0
    completed_goals: int = 0
    total_progress_entries: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_xp: int = 0
    current_level: int = 1
    module_goals_completed: Dict[str, int] = field(default_factory=dict)

    @property
    def completion_rate(self) -> float:
        """Completed goals as a percentage of all goals (0..100)."""
        if self.total_goals <= 0:
            return 0.0
        return self.completed_goals / self.total_goals * 100

    def field_value(self, name: str) -> float:
        value = getattr(self, name, None)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return value


@dataclass(frozen=True)
class AchievementCondition:
    """Declarative rule selecting which aggregate an achievement tracks."""

    kind: ConditionKind
    field: Optional[str] = None  # stats field for kind="count"
    module: Optional[str] = None  # module id for kind="module_goals_completed"

    def extract(self, stats: AggregateStats) -> float:
        if self.kind == "count":
            return stats.field_value(self.field or "")
        if self.kind == "streak":
            return stats.current_streak
        if self.kind == "xp":
            return stats.total_xp
        if self.kind == "level":
            return stats.current_level
        if self.kind == "completion":
            return stats.completion_rate
        if self.kind == "module_goals_completed":
            return stats.module_goals_completed.get(self.module or "", 0)
        return 0


Extractor = Union[AchievementCondition, Callable[[AggregateStats], float]]


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    tier: AchievementTier
    condition: Extractor
    threshold: float
    xp_reward: int = 0
    description: str = ""
    icon: str = "award"
    module_id: Optional[str] = None  # None means the achievement is global

    def __post_init__(self):
        if self.tier not in TIERS:
            raise ValidationError(f"unknown achievement tier: {self.tier}")
        if self.xp_reward < 0:
            raise ValidationError(f"xp_reward must be non-negative, got {self.xp_reward}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "tier": self.tier,
            "threshold": self.threshold,
            "xpReward": self.xp_reward,
            "moduleId": self.module_id,
        }


@dataclass(frozen=True)
class AchievementProgress:
    achievement_id: str
    current: float
    required: float
    percentage: int  # 0..100
    is_completed: bool

    def to_dict(self) -> dict:
        return {
            "achievementId": self.achievement_id,
            "current": self.current,
            "required": self.required,
            "percentage": self.percentage,
            "isCompleted": self.is_completed,
        }


@dataclass(frozen=True)
class AchievementSummary:
    total_achievements: int
    completed_achievements: int
    completion_rate: float  # 0..1
    xp_from_achievements: int
    achievements_by_tier: Dict[str, int]

    def to_dict(self) -> dict:
        return {
            "totalAchievements": self.total_achievements,
            "completedAchievements": self.completed_achievements,
            "completionRate": round(self.completion_rate, 4),
            "xpFromAchievements": self.xp_from_achievements,
            "achievementsByTier": dict(self.achievements_by_tier),
        }

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from goalquest.core.errors import ValidationError
from goalquest.models.level import DEFAULT_CURVE


@dataclass(frozen=True)
class UserXPState:
    """
    Snapshot of a user's XP and streak, owned by the caller for one request.

    current_level is always derived from total_xp and is never stored on its
    own. Operations return a new snapshot instead of mutating this one.
    """

    user_id: str
    total_xp: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[date] = None

    def __post_init__(self):
        if self.total_xp < 0:
            raise ValidationError(f"total_xp must be non-negative, got {self.total_xp}")
        if self.current_streak < 0:
            raise ValidationError(f"current_streak must be non-negative, got {self.current_streak}")
        if self.longest_streak < self.current_streak:
            # Older records only tracked the running count.
            object.__setattr__(self, "longest_streak", self.current_streak)

    @property
    def current_level(self) -> int:
        return DEFAULT_CURVE.level_for_xp(self.total_xp)

    def evolve(self, **changes) -> "UserXPState":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "totalXP": self.total_xp,
            "currentLevel": self.current_level,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastActivityDate": self.last_activity_date.isoformat() if self.last_activity_date else None,
        }

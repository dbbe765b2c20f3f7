from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

NotificationType = Literal["level_up", "achievement_unlocked", "streak_milestone"]


@dataclass(frozen=True)
class GamificationNotification:
    """User-facing message produced by a gamification event. Delivery is the caller's concern."""

    type: NotificationType
    title: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "data": dict(self.data),
        }

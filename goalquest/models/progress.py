from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @classmethod
    def parse(cls, value) -> Optional["Difficulty"]:
        """Return the matching difficulty, or None when unrecognized."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress update against a goal. Ephemeral, never stored here."""

    value: float
    max_value: float
    goal_difficulty: Optional[str] = Difficulty.MEDIUM.value
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def progress_percent(self) -> float:
        return self.value * 100 / self.max_value

    @property
    def is_completion(self) -> bool:
        return self.progress_percent >= 100

"""
Level curve domain model.

Level 1 starts at 0 XP. Each threshold is the total XP at which the next
level begins. The first thresholds are fixed; from level 4 onward the XP
needed for each level grows by a constant step, and the curve stops at
the max level.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from goalquest.core.errors import InvalidLevelCurveError


BASE_THRESHOLDS: Tuple[int, ...] = (
    100,    # Level 2
    250,    # Level 3
    500,    # Level 4
    1000,   # Level 5
    1750,   # Level 6
    2750,   # Level 7
    4000,   # Level 8
    5500,   # Level 9
    7250,   # Level 10
    9250,   # Level 11
    11500,  # Level 12
    14000,  # Level 13
    16750,  # Level 14
    19750,  # Level 15
    23000,  # Level 16
    26500,  # Level 17
    30250,  # Level 18
    34250,  # Level 19
    38500,  # Level 20
    43000,  # Level 21
)
STEP_GROWTH = 250
MAX_LEVEL = 50


def build_thresholds(max_level: int = MAX_LEVEL) -> Tuple[int, ...]:
    """Thresholds for levels 2..max_level, extending the base table as needed."""
    if max_level < 1:
        raise InvalidLevelCurveError(f"max_level must be >= 1, got {max_level}")
    needed = max_level - 1
    thresholds = list(BASE_THRESHOLDS[:needed])
    if len(thresholds) < needed:
        step = thresholds[-1] - thresholds[-2]
        while len(thresholds) < needed:
            step += STEP_GROWTH
            thresholds.append(thresholds[-1] + step)
    return tuple(thresholds)


@dataclass(frozen=True)
class LevelInfo:
    """Where a total XP value sits on the level curve."""

    current_level: int
    total_xp: int
    xp_for_current_level: int
    xp_for_next_level: Optional[int]  # None at the max level
    progress_to_next_level: float  # 0 <= p < 1
    is_max_level: bool

    def to_dict(self) -> dict:
        return {
            "currentLevel": self.current_level,
            "totalXP": self.total_xp,
            "xpForCurrentLevel": self.xp_for_current_level,
            "xpForNextLevel": self.xp_for_next_level,
            "progressToNextLevel": round(self.progress_to_next_level, 4),
            "isMaxLevel": self.is_max_level,
        }


class LevelCurve:
    """Monotonic step function from total XP to level."""

    def __init__(self, thresholds: Sequence[int]):
        values = tuple(int(t) for t in thresholds)
        if values and values[0] <= 0:
            raise InvalidLevelCurveError("first threshold must be positive")
        for lower, upper in zip(values, values[1:]):
            if upper <= lower:
                raise InvalidLevelCurveError(
                    f"thresholds must be strictly increasing ({lower} then {upper})"
                )
        self._thresholds = values

    @classmethod
    def default(cls, max_level: int = MAX_LEVEL) -> "LevelCurve":
        return cls(build_thresholds(max_level))

    @property
    def thresholds(self) -> Tuple[int, ...]:
        return self._thresholds

    @property
    def max_level(self) -> int:
        return len(self._thresholds) + 1

    def level_for_xp(self, total_xp: int) -> int:
        return 1 + bisect_right(self._thresholds, max(0, total_xp))

    def xp_for_level(self, level: int) -> int:
        """Total XP at which `level` begins."""
        if level <= 1:
            return 0
        level = min(level, self.max_level)
        return self._thresholds[level - 2]

    def info(self, total_xp: int) -> LevelInfo:
        total_xp = max(0, total_xp)
        level = self.level_for_xp(total_xp)
        floor_xp = self.xp_for_level(level)
        if level >= self.max_level:
            return LevelInfo(
                current_level=level,
                total_xp=total_xp,
                xp_for_current_level=floor_xp,
                xp_for_next_level=None,
                progress_to_next_level=0.0,
                is_max_level=True,
            )

        next_xp = self._thresholds[level - 1]
        progress = (total_xp - floor_xp) / (next_xp - floor_xp)
        return LevelInfo(
            current_level=level,
            total_xp=total_xp,
            xp_for_current_level=floor_xp,
            xp_for_next_level=next_xp,
            progress_to_next_level=progress,
            is_max_level=False,
        )


DEFAULT_CURVE = LevelCurve.default()

from __future__ import annotations

import logging
from dataclasses import dataclass

from goalquest.core.errors import InvalidAmountError
from goalquest.models.level import DEFAULT_CURVE, LevelInfo
from goalquest.models.user_state import UserXPState

logger = logging.getLogger("goalquest")


@dataclass(frozen=True)
class LevelUpResult:
    new_state: UserXPState
    leveled_up: bool
    new_level: int
    previous_level: int

    @property
    def levels_gained(self) -> int:
        return self.new_level - self.previous_level

    def to_dict(self) -> dict:
        return {
            "state": self.new_state.to_dict(),
            "leveledUp": self.leveled_up,
            "newLevel": self.new_level,
            "previousLevel": self.previous_level,
        }


class LevelEngine:
    """Cumulative XP totals and the levels derived from them."""

    @staticmethod
    def add_xp(state: UserXPState, amount: int) -> LevelUpResult:
        """
        Add XP to a user's running total.

        Not idempotent: every call adds `amount` again. Raises
        InvalidAmountError when amount is negative.
        """
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"XP amount must be an integer, got {amount!r}")
        if amount < 0:
            raise InvalidAmountError(f"XP amount must be non-negative, got {amount}")

        previous_level = state.current_level
        new_state = state.evolve(total_xp=state.total_xp + amount)
        new_level = new_state.current_level
        leveled_up = new_level > previous_level

        if leveled_up:
            logger.info(
                "levels.level_up",
                extra={
                    "event_type": "levels.level_up",
                    "user_id": state.user_id,
                    "from_level": previous_level,
                    "to_level": new_level,
                },
            )

        return LevelUpResult(
            new_state=new_state,
            leveled_up=leveled_up,
            new_level=new_level,
            previous_level=previous_level,
        )

    @staticmethod
    def level_info(state: UserXPState) -> LevelInfo:
        return DEFAULT_CURVE.info(state.total_xp)

    @staticmethod
    def progress_to_next_level(state: UserXPState) -> float:
        """Fraction of the current level completed, in [0, 1). 0.0 at the max level."""
        return DEFAULT_CURVE.info(state.total_xp).progress_to_next_level

    @staticmethod
    def xp_to_next_level(state: UserXPState) -> int:
        info = DEFAULT_CURVE.info(state.total_xp)
        if info.xp_for_next_level is None:
            return 0
        return info.xp_for_next_level - state.total_xp

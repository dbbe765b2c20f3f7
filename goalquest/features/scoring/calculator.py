"""
Score Calculator

Pure, deterministic conversion of a progress update into XP.
No external calls, no randomness, no side effects.

Scoring rules:
- 1 base XP per 10 percentage points of progress (overshoot past 100 counts)
- Difficulty multiplier: easy 1, medium 1.5, hard 2, expert 3
- Streak multiplier: 1 + 0.1 per consecutive active day
- Completion bonus: +50 once progress reaches 100%
- Award never drops below 1 XP

Multipliers are applied as exact decimals before flooring, so expert
progress of 150% on a 4-day streak is floor(15 * 3 * 1.4) = 63.

Malformed inputs are normalized rather than rejected. Every substitution
is logged and listed on the returned breakdown.
"""

import logging
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Optional, Tuple

from goalquest.core.errors import InvalidProgressEventError, UnknownActionError
from goalquest.models.progress import Difficulty, ProgressEvent

logger = logging.getLogger("goalquest")


def _exact(value) -> Fraction:
    """Decimal value of a multiplier as written (1.4, not 1.399999...)."""
    return Fraction(str(value))


@dataclass(frozen=True)
class ScoreBreakdown:
    progress_percent: float
    base_xp: int
    difficulty: Difficulty
    difficulty_multiplier: float
    streak_multiplier: float
    completion_bonus: int
    xp: int
    substitutions: Tuple[str, ...] = ()

    @property
    def is_completion(self) -> bool:
        return self.completion_bonus > 0

    def to_dict(self) -> dict:
        return {
            "progressPercent": round(self.progress_percent, 2),
            "baseXP": self.base_xp,
            "difficulty": self.difficulty.value,
            "difficultyMultiplier": self.difficulty_multiplier,
            "streakMultiplier": round(self.streak_multiplier, 2),
            "completionBonus": self.completion_bonus,
            "xp": self.xp,
            "substitutions": list(self.substitutions),
        }


class ScoreCalculator:
    """Progress and action XP scoring."""

    DIFFICULTY_MULTIPLIERS = {
        Difficulty.EASY: 1.0,
        Difficulty.MEDIUM: 1.5,
        Difficulty.HARD: 2.0,
        Difficulty.EXPERT: 3.0,
    }
    DEFAULT_DIFFICULTY = Difficulty.MEDIUM
    XP_PER_PERCENT_STEP = 10  # 1 XP per 10% progress
    COMPLETION_BONUS = 50
    STREAK_BONUS_PER_DAY = Fraction(1, 10)
    MIN_AWARD = 1

    # Flat XP for discrete actions
    ACTION_BASE_XP = {
        "create_goal": 5,
        "complete_goal": 10,
        "update_progress": 2,
        "daily_login": 1,
        "share_achievement": 3,
        "help_other_user": 5,
        "complete_challenge": 15,
    }
    ACTION_STREAK_CAP_DAYS = 30

    @staticmethod
    def streak_multiplier(current_streak: int) -> float:
        """1 + 10% per consecutive active day."""
        return float(1 + ScoreCalculator.STREAK_BONUS_PER_DAY * max(0, current_streak or 0))

    @staticmethod
    def resolve_difficulty(difficulty) -> Tuple[Difficulty, bool]:
        """Return (difficulty, substituted). Unknown or missing values fall back to medium."""
        parsed = Difficulty.parse(difficulty)
        if parsed is None:
            logger.warning(
                "scoring.difficulty_defaulted",
                extra={"event_type": "scoring.difficulty_defaulted", "received": repr(difficulty)},
            )
            return ScoreCalculator.DEFAULT_DIFFICULTY, True
        return parsed, False

    @staticmethod
    def score_progress(
        progress_percent: float,
        difficulty=DEFAULT_DIFFICULTY,
        streak_multiplier: Optional[float] = 1.0,
        is_completion: bool = False,
    ) -> ScoreBreakdown:
        """
        Compute XP for a progress update along with how it was derived.

        Args:
            progress_percent: (value / max_value) * 100, not clamped above 100
            difficulty: goal difficulty name or Difficulty
            streak_multiplier: 1 + 0.1 * current streak days
            is_completion: whether progress reached 100%

        Returns:
            ScoreBreakdown whose xp is always >= 1
        """
        substitutions = []

        percent = ScoreCalculator._normalize_percent(progress_percent)
        if percent != progress_percent:
            substitutions.append("progress_percent")

        resolved, defaulted = ScoreCalculator.resolve_difficulty(difficulty)
        if defaulted:
            substitutions.append("difficulty")
        multiplier = ScoreCalculator.DIFFICULTY_MULTIPLIERS[resolved]

        streak = ScoreCalculator._normalize_streak_multiplier(streak_multiplier)
        if streak != streak_multiplier:
            substitutions.append("streak_multiplier")

        base_xp = math.floor(percent / ScoreCalculator.XP_PER_PERCENT_STEP)
        bonus = ScoreCalculator.COMPLETION_BONUS if is_completion else 0
        exact = base_xp * _exact(multiplier) * _exact(streak) + bonus
        xp = max(ScoreCalculator.MIN_AWARD, math.floor(exact))

        return ScoreBreakdown(
            progress_percent=percent,
            base_xp=base_xp,
            difficulty=resolved,
            difficulty_multiplier=multiplier,
            streak_multiplier=streak,
            completion_bonus=bonus,
            xp=xp,
            substitutions=tuple(substitutions),
        )

    @staticmethod
    def compute_xp(
        progress_percent: float,
        difficulty=DEFAULT_DIFFICULTY,
        streak_multiplier: Optional[float] = 1.0,
        is_completion: bool = False,
    ) -> int:
        return ScoreCalculator.score_progress(
            progress_percent, difficulty, streak_multiplier, is_completion
        ).xp

    @staticmethod
    def score_event(event: ProgressEvent, current_streak: int = 0) -> ScoreBreakdown:
        """Validate a progress event and score it against the given streak."""
        ScoreCalculator.validate_event(event)
        return ScoreCalculator.score_progress(
            event.progress_percent,
            event.goal_difficulty,
            ScoreCalculator.streak_multiplier(current_streak),
            event.is_completion,
        )

    @staticmethod
    def validate_event(event: ProgressEvent) -> None:
        if event.max_value is None or not event.max_value > 0:
            raise InvalidProgressEventError(f"max_value must be greater than 0, got {event.max_value}")
        if event.value is None or not event.value >= 0:
            raise InvalidProgressEventError(f"value must be non-negative, got {event.value}")

    @staticmethod
    def compute_action_xp(action: str, difficulty=DEFAULT_DIFFICULTY, streak_days: int = 0) -> int:
        """
        XP for a discrete action (creating a goal, completing a challenge, ...).

        The streak bonus is 10% per day, capped at 30 days.
        """
        base = ScoreCalculator.ACTION_BASE_XP.get(action)
        if base is None:
            raise UnknownActionError(f"Unknown action: {action}")

        resolved, _ = ScoreCalculator.resolve_difficulty(difficulty)
        xp = base * _exact(ScoreCalculator.DIFFICULTY_MULTIPLIERS[resolved])
        if streak_days and streak_days > 0:
            capped = min(streak_days, ScoreCalculator.ACTION_STREAK_CAP_DAYS)
            xp *= 1 + ScoreCalculator.STREAK_BONUS_PER_DAY * capped
        # Round half up
        return math.floor(xp + Fraction(1, 2))

    @staticmethod
    def _normalize_percent(progress_percent) -> float:
        if isinstance(progress_percent, bool) or not isinstance(progress_percent, (int, float)):
            logger.warning("scoring.progress_defaulted", extra={"event_type": "scoring.progress_defaulted"})
            return 0.0
        if not math.isfinite(progress_percent) or progress_percent < 0:
            logger.warning("scoring.progress_defaulted", extra={"event_type": "scoring.progress_defaulted"})
            return 0.0
        return progress_percent

    @staticmethod
    def _normalize_streak_multiplier(streak_multiplier) -> float:
        if (
            isinstance(streak_multiplier, bool)
            or not isinstance(streak_multiplier, (int, float))
            or not math.isfinite(streak_multiplier)
            or streak_multiplier < 1
        ):
            logger.warning(
                "scoring.streak_multiplier_defaulted",
                extra={"event_type": "scoring.streak_multiplier_defaulted", "received": repr(streak_multiplier)},
            )
            return 1.0
        return streak_multiplier

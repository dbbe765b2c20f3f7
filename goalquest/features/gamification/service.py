from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from goalquest.core.errors import ValidationError
from goalquest.core.logging import log_event
from goalquest.features.achievements.catalog import DEFAULT_CATALOG
from goalquest.features.achievements.evaluator import AchievementEvaluator
from goalquest.features.levels.engine import LevelEngine
from goalquest.features.scoring.calculator import ScoreBreakdown, ScoreCalculator
from goalquest.features.streaks.tracker import StreakTracker
from goalquest.models.achievement import AchievementDefinition, AchievementProgress, AggregateStats
from goalquest.models.notification import GamificationNotification
from goalquest.models.progress import ProgressEvent
from goalquest.models.user_state import UserXPState


@dataclass(frozen=True)
class ProgressOutcome:
    new_state: UserXPState
    xp_awarded: int
    achievement_xp: int
    leveled_up: bool
    new_level: int
    streak: int
    goal_completed: bool
    breakdown: ScoreBreakdown
    newly_unlocked: Tuple[AchievementDefinition, ...] = ()
    achievement_progress: Tuple[AchievementProgress, ...] = ()
    notifications: Tuple[GamificationNotification, ...] = ()

    @property
    def total_xp_awarded(self) -> int:
        return self.xp_awarded + self.achievement_xp

    def to_response(self) -> dict:
        return {
            "xpAwarded": self.xp_awarded,
            "achievementXP": self.achievement_xp,
            "totalXPAwarded": self.total_xp_awarded,
            "leveledUp": self.leveled_up,
            "newLevel": self.new_level,
            "levelInfo": LevelEngine.level_info(self.new_state).to_dict(),
            "streak": self.streak,
            "longestStreak": self.new_state.longest_streak,
            "goalCompleted": self.goal_completed,
            "newlyUnlockedAchievements": [d.to_dict() for d in self.newly_unlocked],
            "notifications": [n.to_dict() for n in self.notifications],
            "breakdown": self.breakdown.to_dict(),
        }


@dataclass(frozen=True)
class ActionOutcome:
    new_state: UserXPState
    action: str
    xp_awarded: int
    leveled_up: bool
    new_level: int
    streak: int
    notifications: Tuple[GamificationNotification, ...] = field(default_factory=tuple)

    def to_response(self) -> dict:
        return {
            "action": self.action,
            "xpAwarded": self.xp_awarded,
            "leveledUp": self.leveled_up,
            "newLevel": self.new_level,
            "streak": self.streak,
            "notifications": [n.to_dict() for n in self.notifications],
        }


class GamificationService:
    """
    Wires scoring, levels, streaks and achievements for one request.

    Holds configuration only. Every call takes the caller's snapshot and
    returns a replacement; reading and writing storage stays with the caller.
    """

    def __init__(
        self,
        catalog: Sequence[AchievementDefinition] = DEFAULT_CATALOG,
        tz_name: Optional[str] = None,
        milestone_days: Optional[int] = None,
    ):
        catalog = tuple(catalog)
        ids = [d.id for d in catalog]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValidationError(f"Duplicate achievement ids in catalog: {', '.join(duplicates)}")
        self._catalog = catalog
        self._tz_name = tz_name
        self._milestone_days = milestone_days

    @property
    def catalog(self) -> Tuple[AchievementDefinition, ...]:
        return self._catalog

    def process_progress(
        self,
        state: UserXPState,
        event: ProgressEvent,
        *,
        stats: Optional[AggregateStats] = None,
        previously_completed: Iterable[str] = (),
        goal_already_completed: bool = False,
        module_id: Optional[str] = None,
        tz_name: Optional[str] = None,
    ) -> ProgressOutcome:
        """
        Record a progress update: streak, XP, level, and (when stats are given) achievements.

        Goal counts in `stats` should already include this event; streak, XP
        and level fields are refreshed from the new snapshot before evaluation.
        """
        ScoreCalculator.validate_event(event)
        starting_level = state.current_level

        today = StreakTracker.resolve_activity_date(event.occurred_at, tz_name or self._tz_name)
        streaked = StreakTracker.register_activity(state, today)

        breakdown = ScoreCalculator.score_event(event, streaked.current_streak)
        current = LevelEngine.add_xp(streaked, breakdown.xp).new_state

        unlocked: List[AchievementDefinition] = []
        progress: List[AchievementProgress] = []
        achievement_xp = 0
        if stats is not None:
            catalog = AchievementEvaluator.for_module(self._catalog, module_id)
            progress = AchievementEvaluator.evaluate(self._refresh_stats(stats, current), catalog)
            by_id = {d.id: d for d in catalog}
            for achievement_id in AchievementEvaluator.newly_completed(progress, previously_completed):
                definition = by_id[achievement_id]
                current = LevelEngine.add_xp(current, definition.xp_reward).new_state
                achievement_xp += definition.xp_reward
                unlocked.append(definition)

        new_level = current.current_level
        leveled_up = new_level > starting_level
        goal_completed = breakdown.is_completion and not goal_already_completed
        streak_advanced = streaked.last_activity_date != state.last_activity_date

        outcome = ProgressOutcome(
            new_state=current,
            xp_awarded=breakdown.xp,
            achievement_xp=achievement_xp,
            leveled_up=leveled_up,
            new_level=new_level,
            streak=current.current_streak,
            goal_completed=goal_completed,
            breakdown=breakdown,
            newly_unlocked=tuple(unlocked),
            achievement_progress=tuple(progress),
            notifications=tuple(
                self._notifications(leveled_up, new_level, unlocked, current.current_streak if streak_advanced else 0)
            ),
        )

        log_event(
            "info",
            "gamification.progress_recorded",
            user_id=state.user_id,
            event_type="gamification.progress_recorded",
            extra={
                "xp_awarded": outcome.total_xp_awarded,
                "new_level": new_level,
                "streak": outcome.streak,
                "unlocked": ",".join(d.id for d in unlocked),
            },
        )
        return outcome

    def process_action(
        self,
        state: UserXPState,
        action: str,
        *,
        difficulty=ScoreCalculator.DEFAULT_DIFFICULTY,
        today: Optional[date] = None,
        tz_name: Optional[str] = None,
    ) -> ActionOutcome:
        """Award flat XP for a discrete action after counting it toward the streak."""
        day = today or StreakTracker.resolve_activity_date(None, tz_name or self._tz_name)
        streaked = StreakTracker.register_activity(state, day)
        xp = ScoreCalculator.compute_action_xp(action, difficulty, streaked.current_streak)
        result = LevelEngine.add_xp(streaked, xp)
        streak_advanced = streaked.last_activity_date != state.last_activity_date

        return ActionOutcome(
            new_state=result.new_state,
            action=action,
            xp_awarded=xp,
            leveled_up=result.leveled_up,
            new_level=result.new_level,
            streak=result.new_state.current_streak,
            notifications=tuple(
                self._notifications(
                    result.leveled_up,
                    result.new_level,
                    [],
                    result.new_state.current_streak if streak_advanced else 0,
                )
            ),
        )

    def evaluate_achievements(
        self,
        stats: AggregateStats,
        module_id: Optional[str] = None,
    ) -> List[AchievementProgress]:
        return AchievementEvaluator.evaluate(stats, AchievementEvaluator.for_module(self._catalog, module_id))

    @staticmethod
    def _refresh_stats(stats: AggregateStats, state: UserXPState) -> AggregateStats:
        return replace(
            stats,
            current_streak=state.current_streak,
            longest_streak=max(stats.longest_streak, state.longest_streak),
            total_xp=state.total_xp,
            current_level=state.current_level,
        )

    def _notifications(
        self,
        leveled_up: bool,
        new_level: int,
        unlocked: Sequence[AchievementDefinition],
        streak: int,
    ) -> List[GamificationNotification]:
        notifications: List[GamificationNotification] = []

        if leveled_up:
            notifications.append(
                GamificationNotification(
                    type="level_up",
                    title="Level Up!",
                    message=f"Congratulations! You've reached level {new_level}!",
                    data={"newLevel": new_level},
                )
            )

        for definition in unlocked:
            notifications.append(
                GamificationNotification(
                    type="achievement_unlocked",
                    title="Achievement Unlocked!",
                    message=f'You\'ve earned the "{definition.name}" achievement!',
                    data={"achievementId": definition.id, "xpReward": definition.xp_reward},
                )
            )

        if StreakTracker.is_milestone(streak, self._milestone_days):
            notifications.append(
                GamificationNotification(
                    type="streak_milestone",
                    title="Streak Milestone!",
                    message=f"Amazing! You've maintained a {streak}-day streak!",
                    data={"streakCount": streak},
                )
            )

        return notifications


# Singleton service used by routes
gamification_service = GamificationService()

"""
Achievement Evaluator

Pure evaluation of achievement definitions against a user's aggregate
stats. Nothing is persisted and nothing is awarded here: callers diff the
result against stored completion flags (see newly_completed) and award XP
for new unlocks themselves.
"""

import logging
import math
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from goalquest.models.achievement import (
    AchievementCondition,
    AchievementDefinition,
    AchievementProgress,
    AchievementSummary,
    AggregateStats,
)

logger = logging.getLogger("goalquest")


class AchievementEvaluator:

    @staticmethod
    def evaluate(stats: AggregateStats, catalog: Sequence[AchievementDefinition]) -> List[AchievementProgress]:
        """Progress for every definition, in catalog order. Deterministic for equal inputs."""
        return [AchievementEvaluator.evaluate_one(stats, definition) for definition in catalog]

    @staticmethod
    def evaluate_one(stats: AggregateStats, definition: AchievementDefinition) -> AchievementProgress:
        current = AchievementEvaluator._extract(stats, definition)
        required = definition.threshold
        return AchievementProgress(
            achievement_id=definition.id,
            current=current,
            required=required,
            percentage=AchievementEvaluator.percentage(current, required),
            is_completed=current >= required,
        )

    @staticmethod
    def percentage(current: float, required: float) -> int:
        """round(current / required * 100) clamped to 0..100. A non-positive requirement is always 100."""
        if required <= 0:
            return 100
        ratio = current / required
        if ratio >= 1:
            return 100
        if not ratio > 0:
            return 0
        return math.floor(ratio * 100 + 0.5)

    @staticmethod
    def newly_completed(
        progress: Iterable[AchievementProgress],
        previously_completed: Iterable[str],
    ) -> List[str]:
        """Ids completed now that were not completed before, in evaluation order. Each id appears once."""
        already = set(previously_completed)
        unlocked = []
        for p in progress:
            if p.is_completed and p.achievement_id not in already:
                already.add(p.achievement_id)
                unlocked.append(p.achievement_id)
        return unlocked

    @staticmethod
    def summarize(
        progress: Sequence[AchievementProgress],
        catalog: Sequence[AchievementDefinition],
    ) -> AchievementSummary:
        by_id = {definition.id: definition for definition in catalog}
        completed = [by_id[p.achievement_id] for p in progress if p.is_completed and p.achievement_id in by_id]
        total = len(catalog)
        return AchievementSummary(
            total_achievements=total,
            completed_achievements=len(completed),
            completion_rate=len(completed) / total if total > 0 else 0.0,
            xp_from_achievements=sum(d.xp_reward for d in completed),
            achievements_by_tier=dict(Counter(d.tier for d in completed)),
        )

    @staticmethod
    def for_module(catalog: Sequence[AchievementDefinition], module_id: Optional[str]) -> List[AchievementDefinition]:
        """Global achievements plus those belonging to `module_id`. No module returns the whole catalog."""
        if not module_id:
            return list(catalog)
        return [d for d in catalog if d.module_id is None or d.module_id == module_id]

    @staticmethod
    def _extract(stats: AggregateStats, definition: AchievementDefinition) -> float:
        condition = definition.condition
        if isinstance(condition, AchievementCondition):
            return condition.extract(stats)

        try:
            value = condition(stats)
        except Exception:
            logger.warning(
                "achievements.extractor_failed",
                exc_info=True,
                extra={"event_type": "achievements.extractor_failed", "achievement_id": definition.id},
            )
            return 0

        if isinstance(value, bool):
            return int(value)
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            logger.warning(
                "achievements.extractor_non_numeric",
                extra={"event_type": "achievements.extractor_non_numeric", "achievement_id": definition.id},
            )
            return 0
        return value

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from goalquest.api.gamification import AggregateStatsIn
from goalquest.features.achievements.evaluator import AchievementEvaluator
from goalquest.features.gamification.service import gamification_service

router = APIRouter(prefix="/v1/achievements", tags=["achievements"])


class EvaluateRequest(BaseModel):
    stats: AggregateStatsIn
    module_id: Optional[str] = None
    previously_completed: List[str] = Field(default_factory=list)


@router.get("/catalog")
def get_catalog(module_id: Optional[str] = Query(None, description="Restrict to global + module achievements")) -> dict:
    catalog = AchievementEvaluator.for_module(gamification_service.catalog, module_id)
    return {"data": [d.to_dict() for d in catalog]}


@router.post("/evaluate")
def evaluate_achievements(payload: EvaluateRequest) -> dict:
    """
    Evaluate the catalog against the given stats. Read-only.

    Returns:
        {
            "data": [{"achievementId": "first_goal", "current": 1, "required": 1,
                      "percentage": 100, "isCompleted": true}, ...],
            "summary": {...},
            "newlyCompleted": ["first_goal"]
        }
    """
    catalog = AchievementEvaluator.for_module(gamification_service.catalog, payload.module_id)
    progress = AchievementEvaluator.evaluate(payload.stats.to_domain(), catalog)
    return {
        "data": [p.to_dict() for p in progress],
        "summary": AchievementEvaluator.summarize(progress, catalog).to_dict(),
        "newlyCompleted": AchievementEvaluator.newly_completed(progress, payload.previously_completed),
    }

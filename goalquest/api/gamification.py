"""
Gamification API Endpoints

Stateless: every request carries the user's current snapshot and every
response returns the replacement. Reading and writing storage stays with
the caller.

POST /v1/gamification/progress  - score a progress update
POST /v1/gamification/actions   - award XP for a discrete action
POST /v1/gamification/xp        - add XP to a snapshot
POST /v1/gamification/streak    - register activity for a day
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from goalquest.features.gamification.service import gamification_service
from goalquest.features.levels.engine import LevelEngine
from goalquest.features.streaks.tracker import StreakTracker
from goalquest.models.achievement import AggregateStats
from goalquest.models.progress import ProgressEvent
from goalquest.models.user_state import UserXPState

router = APIRouter(prefix="/v1/gamification", tags=["gamification"])


class UserStateIn(BaseModel):
    user_id: str = Field(..., min_length=1)
    total_xp: int = Field(0, ge=0)
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    last_activity_date: Optional[date] = None

    def to_domain(self) -> UserXPState:
        return UserXPState(
            user_id=self.user_id,
            total_xp=self.total_xp,
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            last_activity_date=self.last_activity_date,
        )


class ProgressEventIn(BaseModel):
    value: float
    max_value: float
    goal_difficulty: Optional[str] = "medium"
    occurred_at: Optional[datetime] = None

    def to_domain(self) -> ProgressEvent:
        if self.occurred_at is None:
            return ProgressEvent(value=self.value, max_value=self.max_value, goal_difficulty=self.goal_difficulty)
        return ProgressEvent(
            value=self.value,
            max_value=self.max_value,
            goal_difficulty=self.goal_difficulty,
            occurred_at=self.occurred_at,
        )


class AggregateStatsIn(BaseModel):
    total_goals: int = Field(0, ge=0)
    completed_goals: int = Field(0, ge=0)
    total_progress_entries: int = Field(0, ge=0)
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    total_xp: int = Field(0, ge=0)
    current_level: int = Field(1, ge=1)
    module_goals_completed: Dict[str, int] = Field(default_factory=dict)

    def to_domain(self) -> AggregateStats:
        return AggregateStats(**self.model_dump())


class ProgressRequest(BaseModel):
    state: UserStateIn
    event: ProgressEventIn
    stats: Optional[AggregateStatsIn] = None
    previously_completed: List[str] = Field(default_factory=list)
    goal_already_completed: bool = False
    module_id: Optional[str] = None
    timezone: Optional[str] = None


class ActionRequest(BaseModel):
    state: UserStateIn
    action: str = Field(..., min_length=1)
    difficulty: Optional[str] = "medium"
    today: Optional[date] = None
    timezone: Optional[str] = None


class AddXPRequest(BaseModel):
    state: UserStateIn
    amount: int


class StreakRequest(BaseModel):
    state: UserStateIn
    occurred_at: Optional[datetime] = None
    today: Optional[date] = None
    timezone: Optional[str] = None


@router.post("/progress")
def record_progress(payload: ProgressRequest) -> dict:
    """Score a progress update and return the refreshed snapshot."""
    outcome = gamification_service.process_progress(
        payload.state.to_domain(),
        payload.event.to_domain(),
        stats=payload.stats.to_domain() if payload.stats else None,
        previously_completed=payload.previously_completed,
        goal_already_completed=payload.goal_already_completed,
        module_id=payload.module_id,
        tz_name=payload.timezone,
    )
    return {"data": outcome.to_response(), "state": outcome.new_state.to_dict()}


@router.post("/actions")
def record_action(payload: ActionRequest) -> dict:
    outcome = gamification_service.process_action(
        payload.state.to_domain(),
        payload.action,
        difficulty=payload.difficulty,
        today=payload.today,
        tz_name=payload.timezone,
    )
    return {"data": outcome.to_response(), "state": outcome.new_state.to_dict()}


@router.post("/xp")
def add_xp(payload: AddXPRequest) -> dict:
    result = LevelEngine.add_xp(payload.state.to_domain(), payload.amount)
    return {"data": result.to_dict()}


@router.post("/streak")
def register_streak_activity(payload: StreakRequest) -> dict:
    """Register activity on `today`, or on the calendar day of `occurred_at` in the reference timezone."""
    state = payload.state.to_domain()
    day = payload.today or StreakTracker.resolve_activity_date(payload.occurred_at, payload.timezone)
    new_state = StreakTracker.register_activity(state, day)
    return {
        "state": new_state.to_dict(),
        "changed": new_state != state,
        "isActive": StreakTracker.is_streak_active(new_state, day),
    }

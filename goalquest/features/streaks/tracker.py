from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from goalquest.core.config import settings
from goalquest.core.errors import ValidationError
from goalquest.models.user_state import UserXPState

logger = logging.getLogger("goalquest")


class StreakTracker:
    """Deterministic, day-level streak state machine. Same-day activity is idempotent."""

    @staticmethod
    def register_activity(state: UserXPState, today: date) -> UserXPState:
        """
        Register qualifying activity on `today` and return the updated snapshot.

        - same day as the last activity: unchanged
        - the day after the last activity: streak + 1
        - first activity or a gap of 2+ days: streak restarts at 1
        """
        if isinstance(today, datetime):
            today = today.date()

        last = state.last_activity_date
        if last is not None:
            gap_days = (today - last).days
            if gap_days == 0:
                return state
            if gap_days < 0:
                # Out-of-order event; the recorded day is newer.
                logger.warning(
                    "streaks.out_of_order_activity",
                    extra={
                        "event_type": "streaks.out_of_order_activity",
                        "user_id": state.user_id,
                        "activity_day": today.isoformat(),
                        "last_active_day": last.isoformat(),
                    },
                )
                return state
            current = state.current_streak + 1 if gap_days == 1 else 1
        else:
            current = 1

        return state.evolve(
            current_streak=current,
            longest_streak=max(state.longest_streak, current),
            last_activity_date=today,
        )

    @staticmethod
    def resolve_activity_date(moment: Optional[datetime] = None, tz_name: Optional[str] = None) -> date:
        """Calendar day of `moment` in the reference timezone. Naive datetimes are taken as UTC."""
        moment = moment or datetime.now(timezone.utc)
        aware = moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
        zone = StreakTracker.reference_zone(tz_name)
        return aware.astimezone(zone).date()

    @staticmethod
    def is_streak_active(state: UserXPState, today: date) -> bool:
        """Active when the last activity was today or yesterday."""
        if state.last_activity_date is None:
            return False
        return 0 <= (today - state.last_activity_date).days <= 1

    @staticmethod
    def effective_streak(state: UserXPState, today: date) -> int:
        """Stored streak if still alive on `today`, else 0."""
        return state.current_streak if StreakTracker.is_streak_active(state, today) else 0

    @staticmethod
    def is_milestone(streak: int, every_days: Optional[int] = None) -> bool:
        stride = every_days or settings.STREAK_MILESTONE_DAYS
        return streak > 0 and streak % stride == 0

    @staticmethod
    def reference_zone(tz_name: Optional[str] = None) -> ZoneInfo:
        name = tz_name or settings.STREAK_TIMEZONE
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValidationError(f"Unknown timezone: {name}") from exc

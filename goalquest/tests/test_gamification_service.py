"""
Gamification Service Tests

End-to-end progress processing: streak, XP, level and achievements
applied to a caller-owned snapshot.
"""

import logging
from datetime import date, datetime, timezone

import pytest

from goalquest.core.errors import InvalidProgressEventError, UnknownActionError, ValidationError
from goalquest.features.achievements.catalog import CATALOG_BY_ID
from goalquest.features.gamification.service import GamificationService
from goalquest.models.achievement import AchievementDefinition, AggregateStats
from goalquest.models.progress import ProgressEvent
from goalquest.models.user_state import UserXPState


@pytest.fixture
def service():
    return GamificationService(tz_name="UTC")


def _event(value, max_value=100, difficulty="medium", at=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)):
    return ProgressEvent(value=value, max_value=max_value, goal_difficulty=difficulty, occurred_at=at)


class TestProcessProgress:

    def test_first_completion(self, service, fresh_state, completion_event):
        outcome = service.process_progress(fresh_state, completion_event)

        assert outcome.xp_awarded == 66
        assert outcome.new_state.total_xp == 66
        assert outcome.new_level == 1
        assert outcome.leveled_up is False
        assert outcome.streak == 1
        assert outcome.goal_completed is True
        assert outcome.new_state.last_activity_date == date(2024, 3, 1)
        assert outcome.notifications == ()

    def test_input_state_unchanged(self, service, fresh_state, completion_event):
        service.process_progress(fresh_state, completion_event)
        assert fresh_state == UserXPState(user_id="user_1")

    def test_achievement_unlock_awards_xp(self, service, fresh_state, completion_event, caplog):
        stats = AggregateStats(total_goals=1, completed_goals=1)
        with caplog.at_level(logging.INFO, logger="goalquest"):
            outcome = service.process_progress(fresh_state, completion_event, stats=stats)

        assert [d.id for d in outcome.newly_unlocked] == ["first_goal"]
        assert outcome.achievement_xp == 10
        assert outcome.total_xp_awarded == 76
        assert outcome.new_state.total_xp == 76
        assert [n.type for n in outcome.notifications] == ["achievement_unlocked"]
        assert any(r.getMessage() == "gamification.progress_recorded" for r in caplog.records)

    def test_previously_completed_not_awarded_again(self, service, fresh_state, completion_event):
        stats = AggregateStats(total_goals=1, completed_goals=1)
        outcome = service.process_progress(
            fresh_state, completion_event, stats=stats, previously_completed=["first_goal"]
        )
        assert outcome.newly_unlocked == ()
        assert outcome.achievement_xp == 0
        assert outcome.new_state.total_xp == 66

    def test_stats_refreshed_from_new_state(self, service, completion_event):
        state = UserXPState("u", total_xp=950)
        outcome = service.process_progress(
            state, completion_event, stats=AggregateStats(), previously_completed=[]
        )
        # 950 + 66 crosses the xp_collector threshold of 1000
        assert "xp_collector" in {d.id for d in outcome.newly_unlocked}
        assert outcome.new_state.total_xp == 950 + 66 + 100

    def test_module_filter_applies(self, service, fresh_state, completion_event):
        stats = AggregateStats(module_goals_completed={"fitness": 1, "learning": 1})
        outcome = service.process_progress(
            fresh_state, completion_event, stats=stats, module_id="learning"
        )
        assert [d.id for d in outcome.newly_unlocked] == ["knowledge_seeker"]

    def test_level_up_notification(self, service, completion_event):
        outcome = service.process_progress(UserXPState("u", total_xp=90), completion_event)
        assert outcome.leveled_up is True
        assert outcome.new_level == 2
        assert outcome.notifications[0].type == "level_up"
        assert outcome.notifications[0].data == {"newLevel": 2}

    def test_streak_milestone(self, service, completion_event):
        state = UserXPState("u", current_streak=6, longest_streak=6, last_activity_date=date(2024, 2, 29))
        outcome = service.process_progress(state, completion_event)

        assert outcome.streak == 7
        assert outcome.xp_awarded == 75
        assert [n.type for n in outcome.notifications] == ["streak_milestone"]

    def test_same_day_update_keeps_streak(self, service):
        state = UserXPState("u", total_xp=66, current_streak=1, longest_streak=1, last_activity_date=date(2024, 3, 1))
        outcome = service.process_progress(state, _event(50))

        assert outcome.streak == 1
        assert outcome.xp_awarded == 8
        assert outcome.goal_completed is False

    def test_completion_of_completed_goal(self, service, fresh_state, completion_event):
        outcome = service.process_progress(fresh_state, completion_event, goal_already_completed=True)
        assert outcome.goal_completed is False
        assert outcome.breakdown.completion_bonus == 50

    def test_activity_day_uses_timezone(self, service, fresh_state):
        late = _event(10, at=datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc))
        outcome = service.process_progress(fresh_state, late, tz_name="Asia/Tokyo")
        assert outcome.new_state.last_activity_date == date(2024, 3, 2)

    def test_invalid_event(self, service, fresh_state):
        with pytest.raises(InvalidProgressEventError):
            service.process_progress(fresh_state, _event(5, max_value=0))

    def test_response_shape(self, service, fresh_state, completion_event):
        payload = service.process_progress(fresh_state, completion_event).to_response()
        assert payload["xpAwarded"] == 66
        assert payload["levelInfo"]["currentLevel"] == 1
        assert payload["breakdown"]["streakMultiplier"] == 1.1
        assert payload["newlyUnlockedAchievements"] == []


class TestCatalogConfiguration:

    def test_duplicate_ids_rejected(self):
        definition = CATALOG_BY_ID["first_goal"]
        with pytest.raises(ValidationError) as exc:
            GamificationService(catalog=[definition, definition])
        assert "first_goal" in exc.value.message

    def test_each_unlock_paid_once(self, fresh_state, completion_event):
        catalog = [CATALOG_BY_ID["first_goal"], CATALOG_BY_ID["goal_finisher"]]
        outcome = GamificationService(catalog=catalog).process_progress(
            fresh_state, completion_event, stats=AggregateStats(total_goals=1)
        )
        assert [d.id for d in outcome.newly_unlocked] == ["first_goal"]
        assert outcome.achievement_xp == 10

    def test_infinite_extractor_does_not_fail_progress(self, fresh_state, completion_event):
        runaway = AchievementDefinition(
            id="runaway", name="Runaway", tier="bronze", condition=lambda _stats: float("inf"), threshold=5
        )
        outcome = GamificationService(catalog=[runaway]).process_progress(
            fresh_state, completion_event, stats=AggregateStats()
        )
        assert outcome.newly_unlocked == ()
        assert outcome.xp_awarded == 66


class TestProcessAction:

    def test_create_goal(self, service, fresh_state, day_one):
        outcome = service.process_action(fresh_state, "create_goal", difficulty="medium", today=day_one)
        assert outcome.xp_awarded == 8
        assert outcome.streak == 1
        assert outcome.new_state.total_xp == 8

    def test_unknown_action(self, service, fresh_state, day_one):
        with pytest.raises(UnknownActionError):
            service.process_action(fresh_state, "teleport", today=day_one)

# goalquest/conftest.py
from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from goalquest.models.progress import ProgressEvent
from goalquest.models.user_state import UserXPState


@pytest.fixture
def fresh_state():
    """A user who has never recorded any activity."""
    return UserXPState(user_id="user_1")


@pytest.fixture
def day_one():
    return date(2024, 3, 1)


@pytest.fixture
def completion_event():
    """100/100 on a medium goal, midday UTC on 2024-03-01."""
    return ProgressEvent(
        value=100,
        max_value=100,
        goal_difficulty="medium",
        occurred_at=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def client():
    from goalquest.main import app

    with TestClient(app) as test_client:
        yield test_client

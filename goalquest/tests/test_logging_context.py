"""Tests for structured logging and request_id propagation."""

import json
import logging

from goalquest.core.logging import (
    JsonFormatter,
    PrettyFormatter,
    bind_request_id,
    get_request_id,
    latency_bucket_ms,
    log_event,
    reset_request_id,
)
from goalquest.core.middleware.request_id import MAX_REQUEST_ID_LENGTH, resolve_request_id


def test_request_id_in_response_and_logs(client, caplog):
    with caplog.at_level(logging.INFO, logger="goalquest"):
        response = client.get("/healthz")
    rid = response.headers.get("x-request-id")
    assert rid
    records = [r for r in caplog.records if getattr(r, "request_id", None) == rid]
    assert records, "Expected logs to contain request_id from response"
    assert len({r.request_id for r in records}) == 1


def test_incoming_request_id_is_echoed(client):
    response = client.get("/healthz", headers={"x-request-id": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


def test_request_id_in_error_response(client):
    response = client.post(
        "/v1/gamification/xp",
        json={"state": {"user_id": "u"}, "amount": -1},
        headers={"x-request-id": "req-err"},
    )
    assert response.status_code == 400
    assert response.headers["x-request-id"] == "req-err"
    assert response.json()["error"]["request_id"] == "req-err"


def test_progress_log_carries_request_id(client, caplog):
    with caplog.at_level(logging.INFO, logger="goalquest"):
        client.post(
            "/v1/gamification/progress",
            json={"state": {"user_id": "u-42"}, "event": {"value": 10, "max_value": 100}},
            headers={"x-request-id": "req-progress"},
        )
    recorded = [r for r in caplog.records if r.getMessage() == "gamification.progress_recorded"]
    assert recorded
    assert recorded[0].request_id == "req-progress"
    assert recorded[0].user_id == "u-42"


def test_request_id_cleared_after_request(client):
    client.get("/healthz")
    assert get_request_id() is None


def test_json_formatter_includes_structured_fields():
    record = logging.LogRecord("goalquest", logging.INFO, __file__, 1, "levels.level_up", None, None)
    record.request_id = "rid-1"
    record.user_id = "u1"
    record.event_type = "levels.level_up"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["request_id"] == "rid-1"
    assert payload["user_id"] == "u1"
    assert payload["event_type"] == "levels.level_up"


def test_latency_buckets():
    assert latency_bucket_ms(5) != latency_bucket_ms(5000)


def test_oversized_request_id_is_replaced(client):
    response = client.get("/healthz", headers={"x-request-id": "x" * 500})
    rid = response.headers["x-request-id"]
    assert rid != "x" * 500
    assert len(rid) <= MAX_REQUEST_ID_LENGTH


def test_resolve_request_id():
    assert resolve_request_id("  req-7 ") == "req-7"
    assert resolve_request_id(None)
    assert resolve_request_id("") != ""


def test_bound_request_id_is_reset():
    token = bind_request_id("rid-bound")
    assert get_request_id() == "rid-bound"
    reset_request_id(token)
    assert get_request_id() is None


def test_pretty_formatter_appends_gamification_fields():
    record = logging.LogRecord("goalquest", logging.INFO, __file__, 1, "gamification.progress_recorded", None, None)
    record.request_id = "rid-2"
    record.user_id = "u7"
    record.xp_awarded = 66
    record.unlocked = ""
    line = PrettyFormatter().format(record)
    assert "[rid=rid-2] gamification.progress_recorded" in line
    assert "user_id=u7" in line
    assert "xp_awarded=66" in line
    assert "unlocked=" not in line


def test_log_event_defaults_event_type_to_message(caplog):
    with caplog.at_level(logging.INFO, logger="goalquest"):
        log_event("info", "levels.inspected", user_id="u9")
    record = next(r for r in caplog.records if r.getMessage() == "levels.inspected")
    assert record.event_type == "levels.inspected"
    assert record.user_id == "u9"

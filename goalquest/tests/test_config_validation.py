"""Tests for gamification configuration validation."""

import logging
from types import SimpleNamespace

import pytest

from goalquest.core.config import Settings, validate_config


def make_settings(**overrides):
    defaults = dict(
        ENV="development",
        CONFIG_STRICT=False,
        STREAK_TIMEZONE="UTC",
        STREAK_MILESTONE_DAYS=7,
    )
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def test_defaults_are_valid():
    assert validate_config(settings_obj=make_settings()) is True


def test_named_timezone_is_valid():
    assert validate_config(settings_obj=make_settings(STREAK_TIMEZONE="America/New_York")) is True


def test_unknown_timezone_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="goalquest"):
        ok = validate_config(settings_obj=make_settings(STREAK_TIMEZONE="Mars/Base"))
    assert ok is False
    assert any("STREAK_TIMEZONE" in r.getMessage() for r in caplog.records)


def test_unknown_timezone_strict_raises():
    with pytest.raises(RuntimeError):
        validate_config(strict=True, settings_obj=make_settings(STREAK_TIMEZONE="Mars/Base"))


def test_strict_flag_read_from_settings():
    with pytest.raises(RuntimeError):
        validate_config(settings_obj=make_settings(CONFIG_STRICT=True, STREAK_MILESTONE_DAYS=0))


@pytest.mark.parametrize("days", [0, -7, "seven"])
def test_milestone_must_be_positive(days):
    assert validate_config(settings_obj=make_settings(STREAK_MILESTONE_DAYS=days)) is False


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("STREAK_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("STREAK_MILESTONE_DAYS", "5")
    cfg = Settings(_env_file=None)
    assert cfg.STREAK_TIMEZONE == "Europe/Berlin"
    assert cfg.STREAK_MILESTONE_DAYS == 5

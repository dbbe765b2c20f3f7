import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Streaks
    STREAK_TIMEZONE: str = "UTC"  # IANA name used to turn timestamps into calendar days
    STREAK_MILESTONE_DAYS: int = 7

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate gamification configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("goalquest")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    problems = []
    tz_name = getattr(cfg, "STREAK_TIMEZONE", None)
    try:
        ZoneInfo(tz_name or "")
    except (ZoneInfoNotFoundError, ValueError):
        problems.append(f"STREAK_TIMEZONE is not a known timezone: {tz_name!r}")

    milestone = getattr(cfg, "STREAK_MILESTONE_DAYS", 0)
    if not isinstance(milestone, int) or milestone <= 0:
        problems.append("STREAK_MILESTONE_DAYS must be a positive integer")

    if problems:
        message = "Invalid configuration: " + "; ".join(problems)
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)
        return False

    return True

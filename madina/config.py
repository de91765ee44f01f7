"""
Configuration - Environment-driven settings for the mastery engine.

Values are read from environment variables (optionally loaded from a .env
file). Mirrors the DATABASE_URL / TEST_MODE conventions used by the
scheduler database layer.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_DATABASE_URL = "sqlite:///logs/mastery.db"
DEFAULT_LOG_CAP = 500


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""
    database_url: str
    test_mode: bool
    log_level: str
    calibration_log_cap: int
    error_log_cap: int


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the database URL from environment variables.

    Falls back to a local SQLite file. In test mode the database name
    'mastery' is replaced with 'test_mastery' so test runs never touch
    real progress.

    Returns:
        SQLAlchemy connection string
    """
    base_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL).strip()
    if not base_url:
        raise ValueError(
            "DATABASE_URL is set but empty. "
            "Unset it to use the local SQLite default, or provide a "
            "connection string (e.g. sqlite:///logs/mastery.db)"
        )

    if is_test_mode():
        return base_url.replace("mastery", "test_mastery")

    return base_url


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring non-integer %s=%r, using %d", name, raw, default
        )
        return default
    return max(1, value)


def load_settings() -> Settings:
    """
    Load settings from the environment (and .env, if present).

    Returns:
        Frozen Settings instance
    """
    load_dotenv()

    return Settings(
        database_url=get_database_url(),
        test_mode=is_test_mode(),
        log_level=os.getenv("MADINA_LOG_LEVEL", "WARNING").upper(),
        calibration_log_cap=_int_from_env("MADINA_CALIBRATION_LOG_CAP", DEFAULT_LOG_CAP),
        error_log_cap=_int_from_env("MADINA_ERROR_LOG_CAP", DEFAULT_LOG_CAP),
    )


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging for scripts and interactive use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

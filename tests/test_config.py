import pytest

from madina.config import (
    DEFAULT_DATABASE_URL,
    DEFAULT_LOG_CAP,
    get_database_url,
    is_test_mode,
    load_settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "TEST_MODE",
        "MADINA_LOG_LEVEL",
        "MADINA_CALIBRATION_LOG_CAP",
        "MADINA_ERROR_LOG_CAP",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_default_database_url(clean_env):
    assert get_database_url() == DEFAULT_DATABASE_URL
    assert not is_test_mode()


def test_test_mode_uses_separate_database(clean_env):
    clean_env.setenv("TEST_MODE", "TRUE")
    assert get_database_url() == "sqlite:///logs/test_mastery.db"


def test_explicit_database_url(clean_env):
    clean_env.setenv("DATABASE_URL", "postgresql://localhost/mastery")
    assert get_database_url() == "postgresql://localhost/mastery"


def test_empty_database_url_raises(clean_env):
    clean_env.setenv("DATABASE_URL", "   ")
    with pytest.raises(ValueError):
        get_database_url()


def test_load_settings(clean_env):
    clean_env.setenv("MADINA_LOG_LEVEL", "debug")
    clean_env.setenv("MADINA_CALIBRATION_LOG_CAP", "25")
    clean_env.setenv("MADINA_ERROR_LOG_CAP", "lots")

    settings = load_settings()
    assert settings.log_level == "DEBUG"
    assert settings.calibration_log_cap == 25
    assert settings.error_log_cap == DEFAULT_LOG_CAP
    assert settings.database_url == DEFAULT_DATABASE_URL


def test_log_caps_are_at_least_one(clean_env):
    clean_env.setenv("MADINA_ERROR_LOG_CAP", "0")
    assert load_settings().error_log_cap == 1


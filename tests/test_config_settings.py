"""Regression tests for runtime settings and logging configuration."""

from __future__ import annotations

import logging

import pytest

from splitter.config import (
    AppSettings,
    SettingsLoadError,
    config_configure_logging,
    config_load_database_url,
    config_load_settings,
)

LEDGER_ENVIRONMENT = {
    "LEDGER_OWNER": " 0xowner ",
    "LEDGER_PAYER": "0xpayer",
    "LEDGER_FIRST_BENEFICIARY": "0xfirst",
    "LEDGER_SECOND_BENEFICIARY": "0xsecond",
}


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run each test without dotenv files or inherited ledger variables."""

    monkeypatch.chdir(tmp_path)
    for variable_name in (*LEDGER_ENVIRONMENT, "DATABASE_URL", "LOG_LEVEL", "API_DEFAULT_LIMIT", "API_MAX_LIMIT"):
        monkeypatch.delenv(variable_name, raising=False)


def test_config_load_settings_reads_ledger_roles_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Map uppercase environment variables onto stripped role fields.

    Raises:
        AssertionError: Raised when settings do not reflect the environment.
    """

    for variable_name, value in LEDGER_ENVIRONMENT.items():
        monkeypatch.setenv(variable_name, value)
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = config_load_settings()

    assert settings.ledger_owner == "0xowner"
    assert settings.ledger_second_beneficiary == "0xsecond"
    assert settings.ledger_id == "DEFAULT_LEDGER"
    assert settings.log_level == "DEBUG"
    assert settings.api_default_limit == 50


def test_config_load_settings_wraps_missing_roles_in_load_error() -> None:
    """Fail startup with a typed error when ledger roles are absent.

    Raises:
        AssertionError: Raised when missing roles are accepted.
    """

    with pytest.raises(SettingsLoadError, match="ledger_owner"):
        config_load_settings()


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"ledger_payer": "   "}, "must not be blank"),
        ({"log_level": "verbose"}, "unsupported log_level"),
        ({"api_default_limit": 100, "api_max_limit": 10}, "api_max_limit"),
    ],
)
def test_app_settings_rejects_invalid_values(overrides: dict[str, object], message: str) -> None:
    """Reject blank roles, unknown log levels and inverted limits.

    Raises:
        AssertionError: Raised when invalid settings validate.
    """

    values: dict[str, object] = {
        "ledger_owner": "0xowner",
        "ledger_payer": "0xpayer",
        "ledger_first_beneficiary": "0xfirst",
        "ledger_second_beneficiary": "0xsecond",
    }
    values.update(overrides)

    with pytest.raises(ValueError, match=message):
        AppSettings(**values)


def test_config_load_database_url_ignores_ledger_roles(monkeypatch: pytest.MonkeyPatch) -> None:
    """Resolve the database URL for migrations without role settings.

    Raises:
        AssertionError: Raised when the URL is not returned.
    """

    monkeypatch.setenv("DATABASE_URL", "sqlite:///ledger.db")

    assert config_load_database_url() == "sqlite:///ledger.db"


def test_config_load_database_url_rejects_blank_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "  ")

    with pytest.raises(SettingsLoadError, match="must not be blank"):
        config_load_database_url()


def test_config_configure_logging_installs_single_root_handler() -> None:
    """Replace root handlers with one formatted stream handler.

    Raises:
        AssertionError: Raised when root logging is not configured.
    """

    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    original_level = root_logger.level
    try:
        config_configure_logging("WARNING")
        config_configure_logging("DEBUG")

        assert len(root_logger.handlers) == 1
        assert root_logger.level == logging.DEBUG
        with pytest.raises(ValueError):
            config_configure_logging("CHATTY")
    finally:
        root_logger.handlers = original_handlers
        root_logger.setLevel(original_level)

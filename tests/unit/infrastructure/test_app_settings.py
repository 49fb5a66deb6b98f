from __future__ import annotations

from collections.abc import Generator
from contextlib import suppress
from decimal import Decimal

import pytest
from pydantic import ValidationError

from py_ledgersync.infrastructure.config.settings import BaseAppSettings, get_settings


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> Generator:
    with suppress(Exception):
        get_settings.cache_clear()  # type: ignore[attr-defined]
    for key in (
        "ENV",
        "DATABASE_URL",
        "LOG_LEVEL",
        "JSON_LOGS",
        "LOGGING_ENABLED",
        "BALANCE_EPSILON",
        "DEFAULT_WAREHOUSE",
        "SYNC_AUTO_POST",
        "LEDGERSYNC__DATABASE_URL",
        "LEDGERSYNC__LOG_LEVEL",
        "LEDGERSYNC__LOGGING_ENABLED",
        "LEDGERSYNC__BALANCE_EPSILON",
        "LEDGERSYNC__SYNC_ACTOR",
    ):
        monkeypatch.delenv(key, raising=False)
    yield
    with suppress(Exception):
        get_settings.cache_clear()  # type: ignore[attr-defined]


def test_settings_test_profile_defaults() -> None:
    s = get_settings(ignore_env_file=True)
    assert s.env == "test"
    assert s.database_url.startswith("sqlite+aiosqlite")
    assert s.log_level.upper() == "DEBUG"
    assert s.json_logs is False
    assert s.logging_enabled is True


def test_ledger_defaults() -> None:
    s = get_settings(ignore_env_file=True)
    assert s.balance_epsilon == Decimal("0.005")
    assert s.money_scale == 2
    assert s.current_asset_limit == 1500
    assert s.current_liability_limit == 2500
    assert s.default_warehouse == "MAIN"
    assert s.sync_actor == "GL Sync"
    assert s.sync_auto_post is True


def test_settings_prod_profile_requires_db_url() -> None:
    with pytest.raises(ValidationError):
        _ = get_settings(forced_env="production", ignore_env_file=True)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@localhost:5432/db")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("JSON_LOGS", "true")
    s: BaseAppSettings = get_settings(ignore_env_file=True)
    assert s.env == "production"
    assert s.database_url.startswith("postgresql+")
    assert s.log_level.upper() == "WARNING"
    assert s.json_logs is True


def test_forced_env_switch(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", "production")
    s = get_settings(forced_env="test", ignore_env_file=True)
    assert s.env == "test"


def test_namespaced_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERSYNC__DATABASE_URL", "sqlite+aiosqlite:///namespaced.db")
    monkeypatch.setenv("LEDGERSYNC__LOG_LEVEL", "warning")
    monkeypatch.setenv("LEDGERSYNC__SYNC_ACTOR", "Night batch")
    s = get_settings(ignore_env_file=True)
    assert s.database_url.endswith("namespaced.db")
    assert s.log_level.upper() == "WARNING"
    assert s.sync_actor == "Night batch"


def test_balance_epsilon_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BALANCE_EPSILON", "0.01")
    s = get_settings(ignore_env_file=True)
    assert isinstance(s.balance_epsilon, Decimal)
    assert s.balance_epsilon == Decimal("0.01")


def test_negative_epsilon_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERSYNC__BALANCE_EPSILON", "-1")
    with pytest.raises(ValidationError):
        get_settings(ignore_env_file=True)


def test_logging_enabled_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGGING_ENABLED", "false")
    s = get_settings(ignore_env_file=True)
    assert s.logging_enabled is False

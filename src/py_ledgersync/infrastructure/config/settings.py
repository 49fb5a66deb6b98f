from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["test", "production"]


def _prefixed(name: str) -> AliasChoices:
    return AliasChoices(f"LEDGERSYNC__{name}", name)


class BaseAppSettings(BaseSettings):
    """
    Общие настройки приложения.

    Используется pydantic-settings для загрузки из ENV/.env.

    Помимо БД и логирования содержит параметры учётного ядра:
    - точность денежных сумм и допуск баланса
    - пороги разделения счетов на краткосрочные/долгосрочные
    - значения по умолчанию для синхронизации со складом
    """

    model_config = SettingsConfigDict(env_file=(".env",), env_file_encoding="utf-8", extra="ignore")

    # Поле env не связано напрямую с ENV, чтобы исключить коллизии и обеспечить явный контроль
    env: EnvName = Field(default="test")
    database_url: str = Field(alias="DATABASE_URL", validation_alias=_prefixed("DATABASE_URL"))
    log_level: str = Field(alias="LOG_LEVEL", default="INFO", validation_alias=_prefixed("LOG_LEVEL"))
    json_logs: bool = Field(alias="JSON_LOGS", default=False, validation_alias=_prefixed("JSON_LOGS"))
    logging_enabled: bool = Field(alias="LOGGING_ENABLED", default=True, validation_alias=_prefixed("LOGGING_ENABLED"))

    # Rotation options (used mainly when json_logs is true)
    log_file: str | None = Field(alias="LOG_FILE", default=None, validation_alias=_prefixed("LOG_FILE"))
    log_rotation: Literal["time", "size"] = Field(alias="LOG_ROTATION", default="time", validation_alias=_prefixed("LOG_ROTATION"))
    log_max_bytes: int = Field(alias="LOG_MAX_BYTES", default=10_485_760, validation_alias=_prefixed("LOG_MAX_BYTES"))
    log_backup_count: int = Field(alias="LOG_BACKUP_COUNT", default=7, validation_alias=_prefixed("LOG_BACKUP_COUNT"))
    log_rotate_when: str = Field(alias="LOG_ROTATE_WHEN", default="midnight", validation_alias=_prefixed("LOG_ROTATE_WHEN"))
    log_rotate_utc: bool = Field(alias="LOG_ROTATE_UTC", default=True, validation_alias=_prefixed("LOG_ROTATE_UTC"))

    # Money quantization and balance tolerance
    money_scale: int = Field(alias="MONEY_SCALE", default=2, validation_alias=_prefixed("MONEY_SCALE"))
    rounding: str = Field(alias="ROUNDING", default="ROUND_HALF_UP", validation_alias=_prefixed("ROUNDING"))
    balance_epsilon: Decimal = Field(
        alias="BALANCE_EPSILON", default=Decimal("0.005"), ge=0, validation_alias=_prefixed("BALANCE_EPSILON")
    )
    base_currency: str = Field(alias="BASE_CURRENCY", default="DKK", validation_alias=_prefixed("BASE_CURRENCY"))

    # Current vs non-current split (account code strictly below the limit is current)
    current_asset_limit: int = Field(alias="CURRENT_ASSET_LIMIT", default=1500, validation_alias=_prefixed("CURRENT_ASSET_LIMIT"))
    current_liability_limit: int = Field(
        alias="CURRENT_LIABILITY_LIMIT", default=2500, validation_alias=_prefixed("CURRENT_LIABILITY_LIMIT")
    )

    # Inventory sync defaults
    default_warehouse: str = Field(alias="DEFAULT_WAREHOUSE", default="MAIN", validation_alias=_prefixed("DEFAULT_WAREHOUSE"))
    default_uom: str = Field(alias="DEFAULT_UOM", default="pcs", validation_alias=_prefixed("DEFAULT_UOM"))
    sync_actor: str = Field(alias="SYNC_ACTOR", default="GL Sync", validation_alias=_prefixed("SYNC_ACTOR"))
    sync_auto_post: bool = Field(alias="SYNC_AUTO_POST", default=True, validation_alias=_prefixed("SYNC_AUTO_POST"))
    sync_remember_missing_documents: bool = Field(
        alias="SYNC_REMEMBER_MISSING_DOCUMENTS",
        default=True,
        validation_alias=_prefixed("SYNC_REMEMBER_MISSING_DOCUMENTS"),
    )

    # Commit retry on transient database errors
    db_retry_attempts: int = Field(alias="DB_RETRY_ATTEMPTS", default=3, validation_alias=_prefixed("DB_RETRY_ATTEMPTS"))
    db_retry_backoff_ms: int = Field(alias="DB_RETRY_BACKOFF_MS", default=50, validation_alias=_prefixed("DB_RETRY_BACKOFF_MS"))
    db_retry_max_backoff_ms: int = Field(
        alias="DB_RETRY_MAX_BACKOFF_MS", default=1000, validation_alias=_prefixed("DB_RETRY_MAX_BACKOFF_MS")
    )


class TestSettings(BaseAppSettings):
    """
    Тестовая среда.

    - SQLite in-memory по умолчанию
    - Подробный уровень логирования
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    env: EnvName = Field(default="test")
    database_url: str = Field(alias="DATABASE_URL", default="sqlite+aiosqlite:///:memory:", validation_alias=_prefixed("DATABASE_URL"))
    log_level: str = Field(alias="LOG_LEVEL", default="DEBUG", validation_alias=_prefixed("LOG_LEVEL"))
    json_logs: bool = Field(alias="JSON_LOGS", default=False, validation_alias=_prefixed("JSON_LOGS"))


class ProdSettings(BaseAppSettings):
    """
    Продакшен среда.

    Требует явного задания критичных переменных.
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    env: EnvName = Field(default="production")
    # database_url обязательно должно быть задано через ENV/секреты
    database_url: str = Field(alias="DATABASE_URL", default="__MISSING_DB_URL__", validation_alias=_prefixed("DATABASE_URL"))
    log_level: str = Field(alias="LOG_LEVEL", default="INFO", validation_alias=_prefixed("LOG_LEVEL"))
    json_logs: bool = Field(alias="JSON_LOGS", default=True, validation_alias=_prefixed("JSON_LOGS"))

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure DATABASE_URL provided for production profile."""
        if v == "__MISSING_DB_URL__":
            raise ValueError("DATABASE_URL required")
        return v


# Классы без чтения .env для тестов изолированных профилей
class TestSettingsNoFile(TestSettings):
    model_config = SettingsConfigDict(env_file=(), extra="ignore")


class ProdSettingsNoFile(ProdSettings):
    model_config = SettingsConfigDict(env_file=(), extra="ignore")


@lru_cache(maxsize=8)
def get_settings(forced_env: EnvName | None = None, *, ignore_env_file: bool = False) -> BaseAppSettings:
    """
    Фабрика настроек на основе ENV с кэшированием.

    Parameters:
    - forced_env: Явно выбрать профиль ("test" или "production"), перекрывает ENV.
    - ignore_env_file: Отключить чтение .env (используются *NoFile классы).
    """
    import os

    selector: EnvName = forced_env or os.getenv("ENV", "test")  # type: ignore[assignment]
    if selector == "production":
        cls = ProdSettingsNoFile if ignore_env_file else ProdSettings
    else:
        cls = TestSettingsNoFile if ignore_env_file else TestSettings

    instance = cls()
    instance.env = selector  # гарантируем согласованность поля env с выбором профиля
    return instance

# ops_console/config/loader.py
"""
Загрузчик конфигурации консоли мониторинга.
Единственный источник истины — config/config.json.
Секретные данные и адреса сервисов переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "ops_console"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
    ENVIRONMENT: str = "development"
    COMPONENT_MODE: str = ""


class DeploymentSettings(BaseModel):
    """Адреса и порты компонентов."""
    ACTIVE_RIDES_SERVICE_HOST: str = "active_rides"
    ACTIVE_RIDES_SERVICE_PORT: int = 8092
    WEB_ADMIN_HOST: str = "0.0.0.0"
    WEB_ADMIN_PORT: int = 8081

    @property
    def active_rides_url(self) -> str:
        """Базовый URL сервиса активных поездок."""
        return f"http://{self.ACTIVE_RIDES_SERVICE_HOST}:{self.ACTIVE_RIDES_SERVICE_PORT}"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = True
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760


class GoogleMapsSettings(BaseModel):
    """Настройки Google Maps API."""
    GOOGLE_MAPS_API_KEY: str = ""

    @field_validator("GOOGLE_MAPS_API_KEY", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает API ключ из переменных окружения."""
        if not v:
            return os.getenv("GOOGLE_MAPS_API_KEY", "")
        return v


class DatabaseSettings(BaseModel):
    """Настройки PostgreSQL (хранилище бронирований)."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "ops_console"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 2
    DB_MAX_POOL_SIZE: int = 10
    DB_COMMAND_TIMEOUT: int = 60
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_DELAY: float = 1.0

    @field_validator("DB_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("DB_PASSWORD", "")
        return v

    @property
    def dsn(self) -> str:
        """Возвращает DSN для подключения к PostgreSQL."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class RedisSettings(BaseModel):
    """Настройки Redis (хранилище телеметрии)."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "taxi"
    REDIS_MAX_CONNECTIONS: int = 50

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("REDIS_PASSWORD", "")
        return v

    @property
    def url(self) -> str:
        """Возвращает URL для подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class MonitoringSettings(BaseModel):
    """Настройки мониторинга активных поездок и карты."""
    LIVE_STATUSES: list[str] = Field(
        default_factory=lambda: ["confirmed", "arrived", "in_progress"]
    )
    ACTIVE_RIDES_POLL_INTERVAL: float = 10.0
    SUMMARY_POLL_INTERVAL: float = 30.0
    TELEMETRY_BATCH_SIZE: int = Field(default=30, ge=1)
    HTTP_CLIENT_TIMEOUT: float = 10.0

    MAP_DEFAULT_LAT: float = -15.3875
    MAP_DEFAULT_LON: float = 28.3228
    MAP_DEFAULT_ZOOM: int = 13
    MAP_FOCUS_ZOOM: int = 15
    MAP_FIT_PADDING: int = 50
    MAP_FIT_MAX_ZOOM: int = 15
    DIMMED_OPACITY: float = Field(default=0.3, ge=0.0, le=1.0)

    @property
    def default_center(self) -> tuple[float, float]:
        """Центр карты по умолчанию (регион обслуживания)."""
        return (self.MAP_DEFAULT_LAT, self.MAP_DEFAULT_LON)


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    google_maps: GoogleMapsSettings = Field(default_factory=GoogleMapsSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Секреты переопределяются из переменных окружения.
        """
        return cls.from_dict(load_config_json())

    @classmethod
    def from_dict(cls, config_data: dict[str, Any]) -> "Settings":
        """Создаёт объект Settings из плоского словаря конфигурации."""
        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        defaults = MonitoringSettings()

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "ops_console"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", True),
                LOG_LEVEL=data.get("LOG_LEVEL", "DEBUG"),
                ENVIRONMENT=data.get("ENVIRONMENT", "development"),
                COMPONENT_MODE=os.getenv("COMPONENT_MODE", data.get("COMPONENT_MODE", "")),
            ),
            deployment=DeploymentSettings(
                ACTIVE_RIDES_SERVICE_HOST=os.getenv(
                    "ACTIVE_RIDES_SERVICE_HOST",
                    data.get("ACTIVE_RIDES_SERVICE_HOST", "active_rides"),
                ),
                ACTIVE_RIDES_SERVICE_PORT=int(os.getenv(
                    "ACTIVE_RIDES_SERVICE_PORT",
                    data.get("ACTIVE_RIDES_SERVICE_PORT", 8092),
                )),
                WEB_ADMIN_HOST=data.get("WEB_ADMIN_HOST", "0.0.0.0"),
                WEB_ADMIN_PORT=int(os.getenv("WEB_ADMIN_PORT", data.get("WEB_ADMIN_PORT", 8081))),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=data.get("LOG_LEVEL", "DEBUG"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", True),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
            ),
            google_maps=GoogleMapsSettings(
                GOOGLE_MAPS_API_KEY=os.getenv("GOOGLE_MAPS_API_KEY", data.get("GOOGLE_MAPS_API_KEY", "")),
            ),
            database=DatabaseSettings(
                DB_HOST=os.getenv("DB_HOST", data.get("DB_HOST", "localhost")),
                DB_PORT=int(os.getenv("DB_PORT", data.get("DB_PORT", 5432))),
                DB_NAME=os.getenv("DB_NAME", data.get("DB_NAME", "ops_console")),
                DB_USER=os.getenv("DB_USER", data.get("DB_USER", "postgres")),
                DB_PASSWORD=os.getenv("DB_PASSWORD", data.get("DB_PASSWORD", "")),
                DB_MIN_POOL_SIZE=data.get("DB_MIN_POOL_SIZE", 2),
                DB_MAX_POOL_SIZE=data.get("DB_MAX_POOL_SIZE", 10),
                DB_COMMAND_TIMEOUT=data.get("DB_COMMAND_TIMEOUT", 60),
                DB_RETRY_ATTEMPTS=data.get("DB_RETRY_ATTEMPTS", 3),
                DB_RETRY_DELAY=data.get("DB_RETRY_DELAY", 1.0),
            ),
            redis=RedisSettings(
                REDIS_HOST=os.getenv("REDIS_HOST", data.get("REDIS_HOST", "localhost")),
                REDIS_PORT=int(os.getenv("REDIS_PORT", data.get("REDIS_PORT", 6379))),
                REDIS_DB=data.get("REDIS_DB", 0),
                REDIS_PASSWORD=os.getenv("REDIS_PASSWORD", data.get("REDIS_PASSWORD", "")),
                REDIS_NAMESPACE=data.get("REDIS_NAMESPACE", "taxi"),
                REDIS_MAX_CONNECTIONS=data.get("REDIS_MAX_CONNECTIONS", 50),
            ),
            monitoring=MonitoringSettings(
                LIVE_STATUSES=data.get("LIVE_STATUSES", defaults.LIVE_STATUSES),
                ACTIVE_RIDES_POLL_INTERVAL=data.get("ACTIVE_RIDES_POLL_INTERVAL", 10.0),
                SUMMARY_POLL_INTERVAL=data.get("SUMMARY_POLL_INTERVAL", 30.0),
                TELEMETRY_BATCH_SIZE=data.get("TELEMETRY_BATCH_SIZE", 30),
                HTTP_CLIENT_TIMEOUT=data.get("HTTP_CLIENT_TIMEOUT", 10.0),
                MAP_DEFAULT_LAT=data.get("MAP_DEFAULT_LAT", defaults.MAP_DEFAULT_LAT),
                MAP_DEFAULT_LON=data.get("MAP_DEFAULT_LON", defaults.MAP_DEFAULT_LON),
                MAP_DEFAULT_ZOOM=data.get("MAP_DEFAULT_ZOOM", 13),
                MAP_FOCUS_ZOOM=data.get("MAP_FOCUS_ZOOM", 15),
                MAP_FIT_PADDING=data.get("MAP_FIT_PADDING", 50),
                MAP_FIT_MAX_ZOOM=data.get("MAP_FIT_MAX_ZOOM", 15),
                DIMMED_OPACITY=data.get("DIMMED_OPACITY", 0.3),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()

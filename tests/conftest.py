# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test_api_key")

from ops_console.shared.models.rides import (  # noqa: E402
    DriverInfo,
    DriverTelemetrySample,
    EnrichedRideView,
    GeoPoint,
    PassengerInfo,
    RideRecord,
)


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "Системные настройки",
        "PROJECT_NAME": "ops_console_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
        "COMPONENT_MODE": "active_rides",
        "ACTIVE_RIDES_SERVICE_HOST": "rides.local",
        "ACTIVE_RIDES_SERVICE_PORT": 9092,
        "WEB_ADMIN_HOST": "127.0.0.1",
        "WEB_ADMIN_PORT": 9081,
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "colored",
        "GOOGLE_MAPS_API_KEY": "test_api_key",
        "DB_HOST": "localhost",
        "DB_PORT": 5432,
        "DB_NAME": "ops_console_test",
        "DB_USER": "postgres",
        "DB_PASSWORD": "test_password",
        "DB_MIN_POOL_SIZE": 2,
        "DB_MAX_POOL_SIZE": 5,
        "DB_COMMAND_TIMEOUT": 30,
        "DB_RETRY_ATTEMPTS": 2,
        "DB_RETRY_DELAY": 0.5,
        "REDIS_HOST": "localhost",
        "REDIS_PORT": 6379,
        "REDIS_DB": 1,
        "REDIS_PASSWORD": "",
        "REDIS_NAMESPACE": "taxi_test",
        "REDIS_MAX_CONNECTIONS": 10,
        "LIVE_STATUSES": ["confirmed", "arrived", "in_progress"],
        "ACTIVE_RIDES_POLL_INTERVAL": 5,
        "SUMMARY_POLL_INTERVAL": 15,
        "TELEMETRY_BATCH_SIZE": 30,
        "HTTP_CLIENT_TIMEOUT": 3,
        "MAP_DEFAULT_LAT": -15.3875,
        "MAP_DEFAULT_LON": 28.3228,
        "MAP_DEFAULT_ZOOM": 12,
        "MAP_FOCUS_ZOOM": 16,
        "MAP_FIT_PADDING": 40,
        "MAP_FIT_MAX_ZOOM": 14,
        "DIMMED_OPACITY": 0.3,
    }


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_db() -> AsyncMock:
    """Мок менеджера базы данных."""
    db = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="INSERT 0 1")
    db.fetchval = AsyncMock(return_value=None)
    return db


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Мок клиента Redis."""
    redis = AsyncMock()
    redis.hgetall = AsyncMock(return_value={})
    redis.hgetall_many = AsyncMock(return_value=[])
    redis.hset_mapping = AsyncMock(return_value=1)
    return redis


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

@pytest.fixture
def sample_booking_data() -> dict[str, Any]:
    """Пример сырого документа бронирования (как в колонке data)."""
    return {
        "status": "confirmed",
        "bookingType": "ride",
        "bookingClass": "standard",
        "origin": {"latitude": -15.40, "longitude": 28.31, "address": "Cairo Road"},
        "destination": {"latitude": -15.33, "longitude": 28.45, "address": "Kenneth Kaunda Airport"},
        "passengerInfo": {"fullName": "Mary Banda", "phoneNumber": "+260971000001"},
        "confirmedDriver": {"uid": "d1", "fullName": "John Phiri", "phoneNumber": "+260971000002"},
        "price": 185.5,
        "distance": "14.2 km",
        "duration": "25 min",
        "paymentMethod": "cash",
        "createdAt": 1_700_000_000_000,
        "updatedAt": 1_700_000_060_000,
    }


@pytest.fixture
def sample_telemetry_hash() -> dict[str, str]:
    """Пример хеша driver:last_seen:<id>."""
    return {
        "lat": "-15.39",
        "lon": "28.32",
        "heading": "90",
        "speed": "35",
        "timestamp": "1700000100",
    }


@pytest.fixture
def make_ride() -> Callable[..., RideRecord]:
    """Фабрика нормализованных поездок."""

    def _make(
        ride_id: str = "r1",
        status: str = "confirmed",
        driver_id: str | None = "d1",
        origin: tuple[float, float] | None = (-15.40, 28.31),
        destination: tuple[float, float] | None = (-15.33, 28.45),
        **overrides: Any,
    ) -> RideRecord:
        data: dict[str, Any] = {
            "id": ride_id,
            "status": status,
            "origin": GeoPoint(latitude=origin[0], longitude=origin[1], address="Cairo Road") if origin else None,
            "destination": (
                GeoPoint(latitude=destination[0], longitude=destination[1], address="Airport")
                if destination else None
            ),
            "passenger_info": PassengerInfo(full_name="Mary Banda", phone_number="+260971000001"),
            "confirmed_driver": (
                DriverInfo(uid=driver_id, full_name="John Phiri", phone_number="+260971000002")
                if driver_id else None
            ),
            "driver_id": driver_id,
            "price": 120,
        }
        data.update(overrides)
        return RideRecord(**data)

    return _make


@pytest.fixture
def make_sample() -> Callable[..., DriverTelemetrySample]:
    """Фабрика образцов телеметрии."""

    def _make(
        latitude: float = -15.39,
        longitude: float = 28.32,
        heading: float = 90.0,
    ) -> DriverTelemetrySample:
        return DriverTelemetrySample(
            latitude=latitude,
            longitude=longitude,
            heading=heading,
            updated_at=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
        )

    return _make


@pytest.fixture
def make_view(make_ride, make_sample) -> Callable[..., EnrichedRideView]:
    """Фабрика обогащённых поездок; live=True присоединяет телеметрию."""

    def _make(ride_id: str = "r1", live: bool = True, **kwargs: Any) -> EnrichedRideView:
        ride = make_ride(ride_id, **kwargs)
        return EnrichedRideView.enrich(ride, make_sample() if live else None)

    return _make


# =============================================================================
# УТИЛИТЫ
# =============================================================================

@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2))
    return config_file

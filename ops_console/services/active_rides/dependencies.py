# ops_console/services/active_rides/dependencies.py
"""
Зависимости для Active Rides Service.
"""

from __future__ import annotations

from typing import Optional

from ops_console.common.constants import TypeMsg
from ops_console.common.logger import log_info
from ops_console.core.monitoring import ActiveRidesService
from ops_console.core.rides import RideRepository
from ops_console.core.telemetry import TelemetryRepository
from ops_console.infra.database import DatabaseManager, close_db, init_db
from ops_console.infra.redis_client import RedisClient, close_redis, init_redis


_db: Optional[DatabaseManager] = None
_redis: Optional[RedisClient] = None
_active_rides_service: Optional[ActiveRidesService] = None


async def init_dependencies() -> None:
    """Инициализация всех зависимостей сервиса."""
    global _db, _redis, _active_rides_service

    from ops_console.config import settings

    _db = await init_db()
    _redis = await init_redis()

    _active_rides_service = ActiveRidesService(
        rides=RideRepository(_db),
        telemetry=TelemetryRepository(_redis, max_batch_size=settings.monitoring.TELEMETRY_BATCH_SIZE),
        live_statuses=settings.monitoring.LIVE_STATUSES,
    )

    await log_info("Active Rides Service инициализирован", type_msg=TypeMsg.INFO)


async def close_dependencies() -> None:
    """Закрытие всех ресурсов."""
    global _db, _redis, _active_rides_service

    _active_rides_service = None

    if _redis:
        await close_redis()
        _redis = None

    if _db:
        await close_db()
        _db = None


async def get_db() -> DatabaseManager:
    if _db is None:
        raise RuntimeError("DatabaseManager не инициализирован")
    return _db


async def get_redis() -> RedisClient:
    if _redis is None:
        raise RuntimeError("RedisClient не инициализирован")
    return _redis


async def get_active_rides_service() -> ActiveRidesService:
    if _active_rides_service is None:
        raise RuntimeError("ActiveRidesService не инициализирован")
    return _active_rides_service

# ops_console/core/telemetry/repository.py
"""
Репозиторий телеметрии водителей.

Последняя известная позиция каждого водителя лежит в Redis-хеше
driver:last_seen:<driver_id> (lat, lon, heading, speed, timestamp).
Хранилище принимает не более max_batch_size идентификаторов за один запрос.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from ops_console.common.exceptions import StoreQueryError, TelemetryBatchTooLarge
from ops_console.common.logger import log_debug, log_error
from ops_console.infra.redis_client import RedisClient
from ops_console.shared.models.rides import DriverTelemetrySample

TELEMETRY_BATCH_SIZE = 30


def _parse_timestamp(raw: str | None) -> datetime | None:
    """ISO-строка или секунды эпохи."""
    if not raw:
        return None
    try:
        return datetime.fromtimestamp(float(raw), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        pass
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_telemetry(data: Mapping[str, str] | None) -> DriverTelemetrySample | None:
    """
    Разбирает хеш телеметрии.

    Returns:
        Образец или None, если координат нет или они битые
    """
    if not data:
        return None
    try:
        latitude = float(data["lat"])
        longitude = float(data["lon"])
    except (KeyError, TypeError, ValueError):
        return None

    try:
        heading = float(data.get("heading") or 0)
    except (TypeError, ValueError):
        heading = 0.0

    return DriverTelemetrySample(
        latitude=latitude,
        longitude=longitude,
        heading=heading,
        updated_at=_parse_timestamp(data.get("timestamp")),
    )


class TelemetryRepository:
    """Пакетное чтение последних позиций водителей."""

    KEY_PREFIX = "driver:last_seen:"

    def __init__(self, redis: RedisClient, max_batch_size: int = TELEMETRY_BATCH_SIZE) -> None:
        """
        Args:
            redis: Клиент Redis (Dependency Injection)
            max_batch_size: Лимит идентификаторов в одном запросе
        """
        self._redis = redis
        self.max_batch_size = max_batch_size

    async def get_latest(self, driver_ids: Sequence[str]) -> dict[str, DriverTelemetrySample]:
        """
        Последние позиции для пакета водителей.

        Водители без телеметрии в результат не попадают.

        Raises:
            TelemetryBatchTooLarge: пакет больше max_batch_size
            StoreQueryError: запрос к Redis не удался
        """
        if len(driver_ids) > self.max_batch_size:
            raise TelemetryBatchTooLarge(len(driver_ids), self.max_batch_size)
        if not driver_ids:
            return {}

        try:
            hashes = await self._redis.hgetall_many(
                f"{self.KEY_PREFIX}{driver_id}" for driver_id in driver_ids
            )
        except Exception as e:
            await log_error(f"Ошибка чтения телеметрии ({len(driver_ids)} водителей): {e}")
            raise StoreQueryError("telemetry", str(e)) from e

        samples: dict[str, DriverTelemetrySample] = {}
        for driver_id, data in zip(driver_ids, hashes):
            sample = parse_telemetry(data)
            if sample is not None:
                samples[driver_id] = sample

        await log_debug(f"Телеметрия: {len(samples)} из {len(driver_ids)} водителей")
        return samples

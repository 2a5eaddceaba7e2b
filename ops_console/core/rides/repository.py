# ops_console/core/rides/repository.py
"""
Репозиторий бронирований.

Документы бронирований хранятся в PostgreSQL как jsonb со слабо
типизированной формой. Нормализация выполняется один раз здесь, на границе
хранилища: дальше по конвейеру поля уже не проверяются на отсутствие.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from ops_console.common.exceptions import StoreQueryError
from ops_console.common.logger import log_debug, log_error
from ops_console.infra.database import DatabaseManager
from ops_console.shared.models.rides import DriverInfo, GeoPoint, PassengerInfo, RideRecord


# =============================================================================
# НОРМАЛИЗАЦИЯ
# =============================================================================

def _to_float(value: Any) -> float | None:
    """Число из произвольного значения или None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_number(value: Any) -> float:
    """Числовое поле: отсутствующее или битое значение становится 0."""
    number = _to_float(value)
    return number if number is not None else 0


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _opt_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _to_epoch_ms(value: Any) -> int:
    """
    Метка времени в миллисекундах эпохи.

    Понимает число, datetime, ISO-строку и экспорт Firestore
    ({"_seconds": ..., "_nanoseconds": ...}). Всё остальное — 0.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    if isinstance(value, Mapping):
        seconds = _to_float(value.get("_seconds", value.get("seconds")))
        if seconds is None:
            return 0
        nanos = _to_float(value.get("_nanoseconds", value.get("nanoseconds"))) or 0
        return int(seconds * 1000 + nanos / 1_000_000)
    if isinstance(value, str):
        number = _to_float(value)
        if number is not None:
            return int(number)
        try:
            return _to_epoch_ms(datetime.fromisoformat(value))
        except ValueError:
            return 0
    number = _to_float(value)
    return int(number) if number is not None else 0


def normalize_point(raw: Any) -> GeoPoint | None:
    """Точка с обеими координатами или None."""
    if not isinstance(raw, Mapping):
        return None
    lat = _to_float(raw.get("latitude", raw.get("lat")))
    lon = _to_float(raw.get("longitude", raw.get("lng", raw.get("lon"))))
    if lat is None or lon is None:
        return None
    return GeoPoint(latitude=lat, longitude=lon, address=_opt_text(raw.get("address")))


def _normalize_passenger(raw: Any) -> PassengerInfo | None:
    if not isinstance(raw, Mapping):
        return None
    return PassengerInfo(
        full_name=_opt_text(raw.get("fullName")),
        phone_number=_opt_text(raw.get("phoneNumber")),
    )


def _normalize_driver(raw: Any) -> DriverInfo | None:
    if not isinstance(raw, Mapping):
        return None
    return DriverInfo(
        uid=_opt_text(raw.get("uid")),
        full_name=_opt_text(raw.get("fullName")),
        phone_number=_opt_text(raw.get("phoneNumber")),
    )


def normalize_ride(ride_id: str, raw: Mapping[str, Any] | None) -> RideRecord:
    """
    Приводит сырой документ бронирования к полностью заполненной RideRecord.

    Args:
        ride_id: Идентификатор документа
        raw: Сырые данные документа (могут быть неполными)

    Returns:
        Нормализованная запись
    """
    data: Mapping[str, Any] = raw or {}

    confirmed_driver = _normalize_driver(data.get("confirmedDriver"))
    driver_id = (confirmed_driver.uid if confirmed_driver else None) or data.get("driverId") or None

    stops_raw = data.get("stops")
    stops = [
        point
        for point in (normalize_point(s) for s in (stops_raw if isinstance(stops_raw, list) else []))
        if point is not None
    ]

    return RideRecord(
        id=str(ride_id),
        status=_to_text(data.get("status")) or "pending",
        booking_type=_to_text(data.get("bookingType")) or "ride",
        booking_class=_to_text(data.get("bookingClass")),
        origin=normalize_point(data.get("origin")),
        destination=normalize_point(data.get("destination")),
        stops=stops,
        passenger_info=_normalize_passenger(data.get("passengerInfo")),
        confirmed_driver=confirmed_driver,
        driver_id=str(driver_id) if driver_id else None,
        price=_to_number(data.get("price")),
        distance=_to_text(data.get("distance")),
        duration=_to_text(data.get("duration")),
        payment_method=_to_text(data.get("paymentMethod")),
        created_at=_to_epoch_ms(data.get("createdAt")),
        updated_at=_to_epoch_ms(data.get("updatedAt")),
    )


# =============================================================================
# РЕПОЗИТОРИЙ
# =============================================================================

class RideRepository:
    """Репозиторий бронирований (только чтение)."""

    def __init__(self, db: DatabaseManager) -> None:
        """
        Args:
            db: Менеджер базы данных (Dependency Injection)
        """
        self._db = db

    async def list_by_status(self, status: str) -> list[RideRecord]:
        """
        Возвращает бронирования с заданным статусом.
        Один индексированный запрос на статус вместо полного сканирования.

        Raises:
            StoreQueryError: запрос к хранилищу не удался
        """
        try:
            rows = await self._db.fetch(
                """
                SELECT id, status, data, created_at, updated_at
                FROM bookings
                WHERE status = $1
                ORDER BY created_at
                """,
                status,
            )
        except Exception as e:
            await log_error(f"Ошибка получения бронирований со статусом {status}: {e}")
            raise StoreQueryError("rides", f"статус {status}: {e}") from e

        rides = [self._row_to_ride(row) for row in rows]
        await log_debug(f"Бронирований со статусом {status}: {len(rides)}")
        return rides

    @staticmethod
    def _row_to_ride(row: Mapping[str, Any]) -> RideRecord:
        """Собирает сырой документ из строки и нормализует его."""
        data = row["data"]
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        doc: dict[str, Any] = dict(data) if isinstance(data, Mapping) else {}

        # Колонка status индексирована и авторитетна
        if row["status"]:
            doc["status"] = row["status"]
        doc.setdefault("createdAt", row["created_at"])
        doc.setdefault("updatedAt", row["updated_at"])

        return normalize_ride(row["id"], doc)

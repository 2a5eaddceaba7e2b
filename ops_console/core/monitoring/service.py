# ops_console/core/monitoring/service.py
"""
Сервис агрегации активных поездок.

Объединяет поездки в "живых" статусах с последней телеметрией назначенных
водителей. Поиск телеметрии идёт пакетами не больше лимита хранилища.
Любая ошибка запроса прерывает агрегацию целиком: частичных результатов нет.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Iterator, Sequence
from typing import TypeVar

from ops_console.common.constants import LIVE_STATUSES, RideStatus
from ops_console.common.exceptions import AggregationError
from ops_console.common.logger import log_debug, log_error
from ops_console.core.rides.repository import RideRepository
from ops_console.core.telemetry.repository import TelemetryRepository
from ops_console.shared.models.rides import (
    DriverTelemetrySample,
    EnrichedRideView,
    RideRecord,
    RideSummary,
)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Последовательные срезы длиной не больше size."""
    if size < 1:
        raise ValueError(f"Размер пакета должен быть положительным: {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def collect_driver_ids(rides: Iterable[RideRecord]) -> list[str]:
    """Уникальные идентификаторы водителей в порядке первого появления."""
    seen: dict[str, None] = {}
    for ride in rides:
        if ride.driver_id:
            seen.setdefault(ride.driver_id, None)
    return list(seen)


def summarize_rides(rides: Iterable[EnrichedRideView]) -> RideSummary:
    """Сводные счётчики по статусам и наличию GPS."""
    summary = RideSummary()
    for ride in rides:
        summary.total += 1
        if ride.status == RideStatus.CONFIRMED.value:
            summary.confirmed += 1
        elif ride.status == RideStatus.ARRIVED.value:
            summary.arrived += 1
        elif ride.status == RideStatus.IN_PROGRESS.value:
            summary.in_progress += 1
        if ride.has_live_location:
            summary.with_location += 1
    return summary


class ActiveRidesService:
    """
    Агрегация активных поездок.

    Реализует:
    - Один индексированный запрос на каждый живой статус
    - Пакетный поиск телеметрии (не больше max_batch_size идентификаторов)
    - Присоединение driver_location к каждой поездке
    """

    def __init__(
        self,
        rides: RideRepository,
        telemetry: TelemetryRepository,
        live_statuses: Sequence[str] = LIVE_STATUSES,
    ) -> None:
        """
        Args:
            rides: Репозиторий бронирований
            telemetry: Репозиторий телеметрии
            live_statuses: Статусы, считающиеся активными
        """
        self._rides = rides
        self._telemetry = telemetry
        self._live_statuses = tuple(live_statuses)

    async def get_active_rides(self) -> list[EnrichedRideView]:
        """
        Все поездки в живых статусах с присоединённой телеметрией.

        Raises:
            AggregationError: любой запрос к хранилищам или сборка представления не удались
        """
        try:
            rides = await self._load_rides()
            locations = await self._load_locations(collect_driver_ids(rides))
            enriched = [
                EnrichedRideView.enrich(ride, locations.get(ride.driver_id) if ride.driver_id else None)
                for ride in rides
            ]
        except Exception as e:
            await log_error(f"Агрегация активных поездок не удалась: {e}", exc_info=True)
            raise AggregationError(str(e)) from e

        await log_debug(
            f"Активных поездок: {len(enriched)}, с GPS: {sum(r.has_live_location for r in enriched)}"
        )
        return enriched

    async def get_summary(self) -> RideSummary:
        """Счётчики активных поездок."""
        return summarize_rides(await self.get_active_rides())

    async def _load_rides(self) -> list[RideRecord]:
        results = await asyncio.gather(
            *(self._rides.list_by_status(status) for status in self._live_statuses)
        )
        return [ride for batch in results for ride in batch]

    async def _load_locations(self, driver_ids: list[str]) -> dict[str, DriverTelemetrySample]:
        if not driver_ids:
            return {}

        batches = list(chunked(driver_ids, self._telemetry.max_batch_size))
        await log_debug(f"Телеметрия: {len(driver_ids)} водителей, пакетов: {len(batches)}")

        results = await asyncio.gather(*(self._telemetry.get_latest(batch) for batch in batches))

        merged: dict[str, DriverTelemetrySample] = {}
        for result in results:
            merged.update(result)
        return merged

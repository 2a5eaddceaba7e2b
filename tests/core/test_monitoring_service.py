# tests/core/test_monitoring_service.py
"""
Тесты сервиса агрегации активных поездок.
"""

from __future__ import annotations

from typing import Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ops_console.common.exceptions import AggregationError, StoreQueryError, TelemetryBatchTooLarge
from ops_console.core.monitoring import ActiveRidesService, chunked, collect_driver_ids, summarize_rides
from ops_console.shared.models.rides import DriverTelemetrySample, EnrichedRideView, RideRecord


class FakeTelemetry:
    """Телеметрия в памяти с лимитом пакета и журналом запросов."""

    def __init__(self, samples: dict[str, DriverTelemetrySample], max_batch_size: int = 30) -> None:
        self.samples = samples
        self.max_batch_size = max_batch_size
        self.batches: list[list[str]] = []

    async def get_latest(self, driver_ids):
        if len(driver_ids) > self.max_batch_size:
            raise TelemetryBatchTooLarge(len(driver_ids), self.max_batch_size)
        self.batches.append(list(driver_ids))
        return {d: self.samples[d] for d in driver_ids if d in self.samples}


def _rides_repo(by_status: dict[str, list[RideRecord]]) -> MagicMock:
    repo = MagicMock()
    repo.list_by_status = AsyncMock(side_effect=lambda status: by_status.get(status, []))
    return repo


class TestChunked:
    """Тесты для chunked."""

    def test_even_and_tail(self) -> None:
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]

    def test_empty(self) -> None:
        assert list(chunked([], 30)) == []

    def test_bad_size(self) -> None:
        with pytest.raises(ValueError):
            list(chunked([1], 0))


class TestCollectDriverIds:
    """Тесты для collect_driver_ids."""

    def test_ordered_unique(self, make_ride: Callable[..., RideRecord]) -> None:
        rides = [
            make_ride("r1", driver_id="d2"),
            make_ride("r2", driver_id=None),
            make_ride("r3", driver_id="d1"),
            make_ride("r4", driver_id="d2"),
        ]
        assert collect_driver_ids(rides) == ["d2", "d1"]


class TestActiveRidesService:
    """Тесты для ActiveRidesService."""

    @pytest.mark.asyncio
    async def test_enriches_ride_with_driver_location(self, make_ride, make_sample) -> None:
        """Поездка с водителем и телеметрией получает driverLocation."""
        sample = make_sample(latitude=-15.39, longitude=28.32, heading=90)
        rides = _rides_repo({"confirmed": [make_ride("r1", driver_id="d1")]})
        service = ActiveRidesService(rides, FakeTelemetry({"d1": sample}))

        result = await service.get_active_rides()

        assert len(result) == 1
        assert result[0].id == "r1"
        assert result[0].driver_location == sample
        dumped = result[0].model_dump(by_alias=True)
        assert dumped["driverLocation"]["heading"] == 90

    @pytest.mark.asyncio
    async def test_no_location_without_driver_or_sample(self, make_ride, make_sample) -> None:
        rides = _rides_repo({
            "confirmed": [make_ride("r1", driver_id=None)],
            "arrived": [make_ride("r2", status="arrived", driver_id="d_missing")],
        })
        telemetry = FakeTelemetry({"d1": make_sample()})

        result = await ActiveRidesService(rides, telemetry).get_active_rides()

        assert [r.driver_location for r in result] == [None, None]
        assert telemetry.batches == [["d_missing"]]

    @pytest.mark.asyncio
    async def test_queries_each_live_status(self, make_ride) -> None:
        rides = _rides_repo({
            "confirmed": [make_ride("r1")],
            "arrived": [make_ride("r2", status="arrived", driver_id="d2")],
            "in_progress": [make_ride("r3", status="in_progress", driver_id="d3")],
            "completed": [make_ride("r4", status="completed", driver_id="d4")],
        })

        result = await ActiveRidesService(rides, FakeTelemetry({})).get_active_rides()

        assert [r.id for r in result] == ["r1", "r2", "r3"]
        queried = sorted(call.args[0] for call in rides.list_by_status.call_args_list)
        assert queried == ["arrived", "confirmed", "in_progress"]

    @pytest.mark.asyncio
    async def test_batches_respect_store_limit(self, make_ride, make_sample) -> None:
        """45 водителей: два запроса по 30 и 15, результат как без лимита."""
        drivers = [f"d{i}" for i in range(45)]
        samples = {d: make_sample(latitude=-15 - i / 100) for i, d in enumerate(drivers)}
        rides_by_status = {"confirmed": [make_ride(f"r{i}", driver_id=d) for i, d in enumerate(drivers)]}

        limited = FakeTelemetry(samples, max_batch_size=30)
        unlimited = FakeTelemetry(samples, max_batch_size=1000)

        result = await ActiveRidesService(_rides_repo(rides_by_status), limited).get_active_rides()
        reference = await ActiveRidesService(_rides_repo(rides_by_status), unlimited).get_active_rides()

        assert [len(b) for b in limited.batches] == [30, 15]
        assert sorted(d for b in limited.batches for d in b) == sorted(drivers)
        assert [r.driver_location for r in result] == [r.driver_location for r in reference]
        assert all(r.has_live_location for r in result)

    @pytest.mark.asyncio
    async def test_shared_driver_looked_up_once(self, make_ride, make_sample) -> None:
        rides = _rides_repo({"confirmed": [make_ride("r1", driver_id="d1"), make_ride("r2", driver_id="d1")]})
        telemetry = FakeTelemetry({"d1": make_sample()})

        result = await ActiveRidesService(rides, telemetry).get_active_rides()

        assert telemetry.batches == [["d1"]]
        assert all(r.has_live_location for r in result)

    @pytest.mark.asyncio
    async def test_no_rides_no_telemetry_queries(self) -> None:
        telemetry = FakeTelemetry({})

        result = await ActiveRidesService(_rides_repo({}), telemetry).get_active_rides()

        assert result == []
        assert telemetry.batches == []

    @pytest.mark.asyncio
    async def test_ride_query_failure_fails_whole_request(self, make_ride) -> None:
        rides = _rides_repo({"confirmed": [make_ride("r1")]})
        rides.list_by_status.side_effect = StoreQueryError("rides", "timeout")

        with pytest.raises(AggregationError):
            await ActiveRidesService(rides, FakeTelemetry({})).get_active_rides()

    @pytest.mark.asyncio
    async def test_one_failed_batch_fails_whole_request(self, make_ride, make_sample) -> None:
        """Ошибка одного пакета телеметрии: частичного результата нет."""
        drivers = [f"d{i}" for i in range(40)]
        rides = _rides_repo({"confirmed": [make_ride(f"r{i}", driver_id=d) for i, d in enumerate(drivers)]})
        telemetry = MagicMock()
        telemetry.max_batch_size = 30
        telemetry.get_latest = AsyncMock(side_effect=[{}, StoreQueryError("telemetry", "boom")])

        with pytest.raises(AggregationError):
            await ActiveRidesService(rides, telemetry).get_active_rides()

    @pytest.mark.asyncio
    async def test_enrich_failure_is_aggregation_error(self, make_ride, make_sample) -> None:
        rides = _rides_repo({"confirmed": [make_ride("r1", driver_id="d1")]})
        telemetry = FakeTelemetry({"d1": make_sample()})

        with patch.object(EnrichedRideView, "enrich", side_effect=ValueError("bad view")):
            with pytest.raises(AggregationError):
                await ActiveRidesService(rides, telemetry).get_active_rides()

    @pytest.mark.asyncio
    async def test_get_summary(self, make_ride, make_sample) -> None:
        rides = _rides_repo({
            "confirmed": [make_ride("r1", driver_id="d1"), make_ride("r2", driver_id=None)],
            "in_progress": [make_ride("r3", status="in_progress", driver_id="d3")],
        })
        telemetry = FakeTelemetry({"d1": make_sample(), "d3": make_sample()})

        summary = await ActiveRidesService(rides, telemetry).get_summary()

        assert summary.total == 3
        assert summary.confirmed == 2
        assert summary.in_progress == 1
        assert summary.arrived == 0
        assert summary.with_location == 2


class TestSummarizeRides:
    """Тесты для summarize_rides."""

    def test_counts(self, make_view: Callable[..., EnrichedRideView]) -> None:
        rides = [
            make_view("r1", status="confirmed"),
            make_view("r2", status="arrived", live=False),
            make_view("r3", status="in_progress"),
        ]

        summary = summarize_rides(rides)

        assert (summary.total, summary.confirmed, summary.arrived, summary.in_progress) == (3, 1, 1, 1)
        assert summary.with_location == 2
        assert summary.model_dump(by_alias=True)["withLocation"] == 2

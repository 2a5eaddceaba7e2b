# tests/services/test_active_rides_app.py
"""
Тесты HTTP-слоя Active Rides Service.
"""

from __future__ import annotations

from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from ops_console.common.exceptions import AggregationError
from ops_console.services.active_rides.app import ACTIVE_RIDES_ERROR, app
from ops_console.services.active_rides.dependencies import get_active_rides_service
from ops_console.shared.models.rides import EnrichedRideView, RideSummary


@pytest.fixture
def service() -> MagicMock:
    service = MagicMock()
    service.get_active_rides = AsyncMock(return_value=[])
    service.get_summary = AsyncMock(return_value=RideSummary())
    return service


@pytest.fixture
def client(service: MagicMock) -> Generator[TestClient, None, None]:
    """Клиент без lifespan: хранилища подменены через dependency_overrides."""
    app.dependency_overrides[get_active_rides_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestActiveRidesEndpoint:
    """GET /api/v1/rides/active."""

    def test_returns_rides_in_camel_case(
        self,
        client: TestClient,
        service: MagicMock,
        make_view: Callable[..., EnrichedRideView],
    ) -> None:
        service.get_active_rides.return_value = [make_view("r1"), make_view("r2", live=False, driver_id=None)]

        response = client.get("/api/v1/rides/active")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [r["id"] for r in body["rides"]] == ["r1", "r2"]
        first = body["rides"][0]
        assert first["driverLocation"]["heading"] == 90.0
        assert first["passengerInfo"]["fullName"] == "Mary Banda"
        assert first["confirmedDriver"]["uid"] == "d1"
        assert body["rides"][1]["driverLocation"] is None

    def test_empty(self, client: TestClient) -> None:
        response = client.get("/api/v1/rides/active")

        assert response.status_code == 200
        assert response.json() == {"rides": [], "count": 0}

    def test_aggregation_failure(self, client: TestClient, service: MagicMock) -> None:
        """Ошибка агрегации: 500 и только сообщение, без частичных данных."""
        service.get_active_rides.side_effect = AggregationError("[telemetry] boom")

        response = client.get("/api/v1/rides/active")

        assert response.status_code == 500
        assert response.json() == {"error": ACTIVE_RIDES_ERROR}
        assert ACTIVE_RIDES_ERROR == "Failed to fetch active rides"

    def test_unexpected_failure_returns_error_body(self) -> None:
        """Сервис не инициализирован: тот же 500 с телом ошибки."""
        app.dependency_overrides.clear()
        client = TestClient(app, raise_server_exceptions=False)

        with patch("ops_console.services.active_rides.dependencies._active_rides_service", None):
            response = client.get("/api/v1/rides/active")

        assert response.status_code == 500
        assert response.json() == {"error": ACTIVE_RIDES_ERROR}


class TestSummaryEndpoint:
    """GET /api/v1/rides/summary."""

    def test_summary(self, client: TestClient, service: MagicMock) -> None:
        service.get_summary.return_value = RideSummary(total=3, confirmed=1, arrived=1, in_progress=1, with_location=2)

        response = client.get("/api/v1/rides/summary")

        assert response.status_code == 200
        assert response.json() == {
            "total": 3,
            "confirmed": 1,
            "arrived": 1,
            "inProgress": 1,
            "withLocation": 2,
        }

    def test_summary_failure(self, client: TestClient, service: MagicMock) -> None:
        service.get_summary.side_effect = AggregationError("[rides] timeout")

        response = client.get("/api/v1/rides/summary")

        assert response.status_code == 500
        assert response.json() == {"error": ACTIVE_RIDES_ERROR}


class TestHealth:
    """GET /health."""

    def test_degraded_without_stores(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["dependencies"] == {"postgres": "unhealthy", "redis": "unhealthy"}

    def test_healthy(self, client: TestClient) -> None:
        db = MagicMock()
        db.health_check = AsyncMock(return_value=True)
        redis = MagicMock()
        redis.health_check = AsyncMock(return_value=True)

        with patch("ops_console.services.active_rides.app.get_db", AsyncMock(return_value=db)), \
             patch("ops_console.services.active_rides.app.get_redis", AsyncMock(return_value=redis)):
            response = client.get("/health")

        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "active_rides"

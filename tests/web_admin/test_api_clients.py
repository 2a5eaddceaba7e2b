# tests/web_admin/test_api_clients.py
"""
Тесты HTTP-клиента консоли к Active Rides Service.
"""

from __future__ import annotations

import httpx
import pytest

from ops_console.web_admin.infra.api_clients import ActiveRidesClient

BASE_URL = "http://rides.test/api/v1/rides"


def _client(handler) -> ActiveRidesClient:
    return ActiveRidesClient(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


class TestActiveRidesClient:
    """Тесты для ActiveRidesClient."""

    @pytest.mark.asyncio
    async def test_get_active_rides(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={
                "rides": [{
                    "id": "r1",
                    "status": "in_progress",
                    "origin": {"latitude": -15.4, "longitude": 28.3, "address": "Cairo Road"},
                    "destination": None,
                    "stops": [],
                    "confirmedDriver": {"uid": "d1", "fullName": "John Phiri", "phoneNumber": None},
                    "driverId": "d1",
                    "price": 120,
                    "driverLocation": {"latitude": -15.39, "longitude": 28.32, "heading": 45, "updatedAt": None},
                }],
                "count": 1,
            })

        client = _client(handler)
        rides = await client.get_active_rides()
        await client.close()

        assert seen == ["/api/v1/rides/active"]
        assert len(rides) == 1
        ride = rides[0]
        assert ride.confirmed_driver.full_name == "John Phiri"
        assert ride.driver_location.heading == 45
        assert ride.has_live_location

    @pytest.mark.asyncio
    async def test_server_error_raises(self) -> None:
        client = _client(lambda request: httpx.Response(500, json={"error": "Failed to fetch active rides"}))

        with pytest.raises(httpx.HTTPStatusError):
            await client.get_active_rides()
        await client.close()

    @pytest.mark.asyncio
    async def test_get_summary(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={
            "total": 2, "confirmed": 1, "arrived": 0, "inProgress": 1, "withLocation": 1,
        }))

        summary = await client.get_summary()
        await client.close()

        assert summary.total == 2
        assert summary.in_progress == 1
        assert summary.with_location == 1

    def test_default_base_url_from_settings(self) -> None:
        from ops_console.config import settings

        client = ActiveRidesClient()

        assert client.base_url == f"{settings.deployment.active_rides_url}/api/v1/rides"
        assert client.timeout == settings.monitoring.HTTP_CLIENT_TIMEOUT

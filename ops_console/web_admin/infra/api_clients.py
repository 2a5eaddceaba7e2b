import httpx
from typing import Optional, List, Dict, Any
from ops_console.config import settings
from ops_console.shared.models.rides import ActiveRidesResponse, EnrichedRideView, RideSummary

class BaseClient:
    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def close(self):
        await self.client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.get(path, params=params)
        response.raise_for_status()
        return response.json()

class ActiveRidesClient(BaseClient):
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        base_url = base_url or f"{settings.deployment.active_rides_url}/api/v1/rides"
        timeout = timeout if timeout is not None else settings.monitoring.HTTP_CLIENT_TIMEOUT
        super().__init__(base_url, timeout=timeout, transport=transport)

    async def get_active_rides(self) -> List[EnrichedRideView]:
        """
        Возвращает активные поездки с телеметрией водителей.
        Ожидается ответ вида: { "rides": [...], "count": 3 }
        """
        data = await self._get("/active")
        return ActiveRidesResponse.model_validate(data).rides

    async def get_summary(self) -> RideSummary:
        data = await self._get("/summary")
        return RideSummary.model_validate(data)

# ops_console/services/active_rides/app.py
"""
FastAPI приложение для Active Rides Service.

Endpoints:
- GET /api/v1/rides/active - активные поездки с телеметрией водителей
- GET /api/v1/rides/summary - сводные счётчики активных поездок
- GET /health - проверка здоровья
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ops_console.common.constants import TypeMsg
from ops_console.common.exceptions import AggregationError
from ops_console.common.logger import log_error, log_info, log_warning
from ops_console.config import settings
from ops_console.core.monitoring import ActiveRidesService
from ops_console.services.active_rides.dependencies import (
    close_dependencies,
    get_active_rides_service,
    get_db,
    get_redis,
    init_dependencies,
)
from ops_console.shared.models.common import ErrorBody, HealthStatus
from ops_console.shared.models.rides import ActiveRidesResponse, RideSummary

ACTIVE_RIDES_ERROR = "Failed to fetch active rides"


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Жизненный цикл приложения."""
    await log_info("Active Rides Service запускается...", type_msg=TypeMsg.INFO)

    await init_dependencies()

    yield

    await close_dependencies()
    await log_info("Active Rides Service остановлен", type_msg=TypeMsg.INFO)


# =============================================================================
# ПРИЛОЖЕНИЕ
# =============================================================================

app = FastAPI(
    title="Active Rides Service",
    description="Агрегация активных поездок и телеметрии водителей для консоли мониторинга",
    version=settings.system.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(AggregationError)
async def aggregation_error_handler(request: Request, exc: AggregationError) -> JSONResponse:
    """Любая ошибка агрегации отдаётся одним 500 без частичных данных."""
    await log_warning(f"{request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorBody(error=ACTIVE_RIDES_ERROR).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    await log_error(f"{request.url.path}: необработанная ошибка: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorBody(error=ACTIVE_RIDES_ERROR).model_dump(),
    )


# =============================================================================
# HEALTH CHECK
# =============================================================================

@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    """Проверка здоровья сервиса."""
    deps = {}

    try:
        db = await get_db()
        deps["postgres"] = "healthy" if await db.health_check() else "unhealthy"
    except RuntimeError:
        deps["postgres"] = "unhealthy"

    try:
        redis = await get_redis()
        deps["redis"] = "healthy" if await redis.health_check() else "unhealthy"
    except RuntimeError:
        deps["redis"] = "unhealthy"

    overall = "healthy" if all(v == "healthy" for v in deps.values()) else "degraded"

    return HealthStatus(
        service="active_rides",
        status=overall,
        version=settings.system.VERSION,
        dependencies=deps,
    )


# =============================================================================
# ACTIVE RIDES API
# =============================================================================

@app.get(
    "/api/v1/rides/active",
    response_model=ActiveRidesResponse,
    responses={500: {"model": ErrorBody, "description": "Агрегация не удалась"}},
    tags=["Rides"],
)
async def get_active_rides(
    service: ActiveRidesService = Depends(get_active_rides_service),
) -> ActiveRidesResponse:
    """Все поездки в живых статусах с последней позицией водителя."""
    rides = await service.get_active_rides()
    return ActiveRidesResponse(rides=rides, count=len(rides))


@app.get(
    "/api/v1/rides/summary",
    response_model=RideSummary,
    responses={500: {"model": ErrorBody, "description": "Агрегация не удалась"}},
    tags=["Rides"],
)
async def get_rides_summary(
    service: ActiveRidesService = Depends(get_active_rides_service),
) -> RideSummary:
    """Счётчики активных поездок по статусам."""
    return await service.get_summary()

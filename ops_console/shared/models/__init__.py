# ops_console/shared/models/__init__.py
"""
Общие Pydantic-модели: HTTP-контракт сервиса активных поездок и админки.
"""

from ops_console.shared.models.common import (
    CamelModel,
    ErrorBody,
    HealthStatus,
)
from ops_console.shared.models.rides import (
    GeoPoint,
    PassengerInfo,
    DriverInfo,
    DriverTelemetrySample,
    RideRecord,
    EnrichedRideView,
    ActiveRidesResponse,
    RideSummary,
)

__all__ = [
    # Common
    "CamelModel",
    "ErrorBody",
    "HealthStatus",
    # Rides
    "GeoPoint",
    "PassengerInfo",
    "DriverInfo",
    "DriverTelemetrySample",
    "RideRecord",
    "EnrichedRideView",
    "ActiveRidesResponse",
    "RideSummary",
]

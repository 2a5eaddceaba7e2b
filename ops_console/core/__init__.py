# ops_console/core/__init__.py
"""
Доменный слой (Core Domain).
Чтение бронирований и телеметрии, агрегация активных поездок.
"""

from ops_console.core.rides import RideRepository, normalize_ride
from ops_console.core.telemetry import TelemetryRepository
from ops_console.core.monitoring import ActiveRidesService, summarize_rides

__all__ = [
    "RideRepository",
    "normalize_ride",
    "TelemetryRepository",
    "ActiveRidesService",
    "summarize_rides",
]

# ops_console/core/telemetry/__init__.py
"""
Телеметрия водителей: последние известные позиции.
"""

from ops_console.core.telemetry.repository import (
    TELEMETRY_BATCH_SIZE,
    TelemetryRepository,
    parse_telemetry,
)

__all__ = [
    "TELEMETRY_BATCH_SIZE",
    "TelemetryRepository",
    "parse_telemetry",
]

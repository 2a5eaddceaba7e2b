# ops_console/core/monitoring/__init__.py
"""
Мониторинг активных поездок: агрегация поездок и телеметрии.
"""

from ops_console.core.monitoring.service import (
    ActiveRidesService,
    chunked,
    collect_driver_ids,
    summarize_rides,
)

__all__ = [
    "ActiveRidesService",
    "chunked",
    "collect_driver_ids",
    "summarize_rides",
]

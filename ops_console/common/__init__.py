# ops_console/common/__init__.py
"""
Общие утилиты, константы, исключения и логгер.
"""

from ops_console.common.logger import get_logger, log_info, log_error, log_warning, log_debug, setup_logging
from ops_console.common.constants import TypeMsg, RideStatus, LIVE_STATUSES
from ops_console.common.exceptions import (
    MonitoringError,
    StoreQueryError,
    TelemetryBatchTooLarge,
    AggregationError,
)

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "setup_logging",
    "TypeMsg",
    "RideStatus",
    "LIVE_STATUSES",
    "MonitoringError",
    "StoreQueryError",
    "TelemetryBatchTooLarge",
    "AggregationError",
]

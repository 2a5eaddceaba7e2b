# ops_console/common/exceptions.py
"""
Исключения консоли мониторинга.
"""

from __future__ import annotations


class MonitoringError(Exception):
    """Базовое исключение подсистемы мониторинга."""


class StoreQueryError(MonitoringError):
    """Ошибка запроса к хранилищу (бронирования или телеметрия)."""

    def __init__(self, store: str, message: str) -> None:
        self.store = store
        super().__init__(f"[{store}] {message}")


class TelemetryBatchTooLarge(StoreQueryError):
    """Хранилище телеметрии отклоняет пакет идентификаторов сверх лимита."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__("telemetry", f"пакет из {size} идентификаторов превышает лимит {limit}")


class AggregationError(MonitoringError):
    """Агрегация активных поездок не удалась целиком (частичных результатов нет)."""

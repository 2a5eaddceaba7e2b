# ops_console/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RideStatus(str, Enum):
    """Статусы бронирования, которые видит консоль мониторинга."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ARRIVED = "arrived"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingType(str, Enum):
    """Тип бронирования."""
    RIDE = "ride"
    DELIVERY = "delivery"


BOOKING_TYPE_LABELS: dict[str, str] = {
    BookingType.RIDE.value: "Поездка",
    BookingType.DELIVERY.value: "Доставка",
}


# "Живые" статусы: поездка считается активной для мониторинга
LIVE_STATUSES: tuple[str, ...] = (
    RideStatus.CONFIRMED.value,
    RideStatus.ARRIVED.value,
    RideStatus.IN_PROGRESS.value,
)


# Единая палитра статусов для списка и карты
STATUS_STYLES: dict[str, dict[str, str]] = {
    RideStatus.CONFIRMED.value: {"label": "Подтверждена", "color": "#2563eb", "badge": "blue"},
    RideStatus.ARRIVED.value: {"label": "Водитель на месте", "color": "#8b5cf6", "badge": "purple"},
    RideStatus.IN_PROGRESS.value: {"label": "В пути", "color": "#16a34a", "badge": "green"},
}


def status_style(status: str) -> dict[str, str]:
    """Стиль статуса; неизвестные статусы рисуются как подтверждённые."""
    return STATUS_STYLES.get(status, STATUS_STYLES[RideStatus.CONFIRMED.value])

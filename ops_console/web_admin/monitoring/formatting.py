# ops_console/web_admin/monitoring/formatting.py
"""
Форматирование значений для списка, карты и карточки поездки.
"""

from __future__ import annotations

from datetime import datetime, timezone
from html import escape

from ops_console.common.constants import BOOKING_TYPE_LABELS, status_style
from ops_console.shared.models.rides import EnrichedRideView, GeoPoint

UNKNOWN = "Неизвестно"
FALLBACK_LOCATION_NOTE = "(Последнее известное место: посадка)"


def _to_datetime(value: datetime | int | float | None) -> datetime | None:
    """datetime или миллисекунды эпохи; 0 и None означают отсутствие метки."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def format_time_ago(value: datetime | int | float | None, now: datetime | None = None) -> str:
    """
    Относительное время: "12 с назад", "5 мин назад", "2 ч назад".

    Args:
        value: datetime или миллисекунды эпохи
        now: Текущее время (для тестов)
    """
    moment = _to_datetime(value)
    if moment is None:
        return UNKNOWN

    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - moment).total_seconds()))

    if seconds < 60:
        return f"{seconds} с назад"
    if seconds < 3600:
        return f"{seconds // 60} мин назад"
    return f"{seconds // 3600} ч назад"


def format_price(price: float, digits: int = 2) -> str:
    """Цена в квачах; отсутствующая цена показывается как K0."""
    return f"K{price:.{digits}f}"


def status_label(status: str) -> str:
    return status_style(status)["label"]


def booking_label(ride: EnrichedRideView) -> str:
    """"Поездка" или "Поездка · Комфорт"; неизвестный тип выводится как есть."""
    label = BOOKING_TYPE_LABELS.get(ride.booking_type, ride.booking_type)
    return f"{label} · {ride.booking_class}" if ride.booking_class else label


def passenger_name(ride: EnrichedRideView) -> str:
    if ride.passenger_info and ride.passenger_info.full_name:
        return ride.passenger_info.full_name
    return "Пассажир"


def driver_name(ride: EnrichedRideView) -> str:
    if ride.confirmed_driver and ride.confirmed_driver.full_name:
        return ride.confirmed_driver.full_name
    return "Водитель"


def address_or_unknown(point: GeoPoint | None) -> str:
    if point is None or not point.address:
        return UNKNOWN
    return point.address


# =============================================================================
# ПОДСКАЗКИ НА КАРТЕ (HTML)
# =============================================================================

def pickup_tooltip(ride: EnrichedRideView) -> str:
    return f"<strong>Посадка</strong><br/>{escape(address_or_unknown(ride.origin))}"


def destination_tooltip(ride: EnrichedRideView) -> str:
    return f"<strong>Назначение</strong><br/>{escape(address_or_unknown(ride.destination))}"


def driver_tooltip(ride: EnrichedRideView, *, fallback: bool) -> str:
    """
    Подсказка маркера водителя.

    Для позиции, подставленной из точки посадки, вместо телефона выводится
    пометка о том, что это не живая позиция.
    """
    lines = [
        f"<strong>{escape(driver_name(ride))}</strong>",
        f"Статус: {escape(status_label(ride.status))}",
    ]
    if fallback:
        lines.append(FALLBACK_LOCATION_NOTE)
    elif ride.confirmed_driver and ride.confirmed_driver.phone_number:
        lines.append(escape(ride.confirmed_driver.phone_number))
    return "<br/>".join(lines)

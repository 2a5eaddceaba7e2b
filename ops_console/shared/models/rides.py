# ops_console/shared/models/rides.py
"""
Модели активных поездок и телеметрии водителей.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from ops_console.shared.models.common import CamelModel


class GeoPoint(CamelModel):
    """Точка маршрута (посадка, назначение, промежуточная остановка)."""

    latitude: float
    longitude: float
    address: str | None = None

    @property
    def latlng(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class PassengerInfo(CamelModel):
    """Краткие данные пассажира."""

    full_name: str | None = None
    phone_number: str | None = None


class DriverInfo(CamelModel):
    """Краткие данные назначенного водителя."""

    uid: str | None = None
    full_name: str | None = None
    phone_number: str | None = None


class DriverTelemetrySample(CamelModel):
    """Последняя известная позиция водителя. Курс в градусах, 0 — север."""

    latitude: float
    longitude: float
    heading: float = 0.0
    updated_at: datetime | None = None

    @property
    def latlng(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class RideRecord(CamelModel):
    """
    Поездка в одном из "живых" статусов.

    Все поля уже нормализованы на границе хранилища: числа по умолчанию 0,
    вложенные объекты — None, списки — пустые.
    """

    id: str
    status: str
    booking_type: str = "ride"
    booking_class: str = ""
    origin: GeoPoint | None = None
    destination: GeoPoint | None = None
    stops: list[GeoPoint] = Field(default_factory=list)
    passenger_info: PassengerInfo | None = None
    confirmed_driver: DriverInfo | None = None
    driver_id: str | None = None
    price: float = 0
    distance: str = ""
    duration: str = ""
    payment_method: str = ""
    created_at: int = 0
    updated_at: int = 0


class EnrichedRideView(RideRecord):
    """
    Поездка с присоединённой телеметрией водителя.

    driver_location есть тогда и только тогда, когда у поездки есть водитель
    и у этого водителя есть образец телеметрии.
    """

    driver_location: DriverTelemetrySample | None = None

    @model_validator(mode="after")
    def _location_requires_driver(self) -> "EnrichedRideView":
        if self.driver_location is not None and not self.driver_id:
            raise ValueError("driver_location без назначенного водителя")
        return self

    @classmethod
    def enrich(
        cls,
        ride: RideRecord,
        sample: DriverTelemetrySample | None,
    ) -> "EnrichedRideView":
        """Присоединяет телеметрию к поездке."""
        return cls(**ride.model_dump(), driver_location=sample if ride.driver_id else None)

    @property
    def has_live_location(self) -> bool:
        return self.driver_location is not None


class ActiveRidesResponse(CamelModel):
    """Ответ GET /api/v1/rides/active."""

    rides: list[EnrichedRideView]
    count: int


class RideSummary(CamelModel):
    """Сводные счётчики активных поездок."""

    total: int = 0
    confirmed: int = 0
    arrived: int = 0
    in_progress: int = 0
    with_location: int = 0

# ops_console/core/rides/__init__.py
"""
Домен бронирований: чтение и нормализация активных поездок.
"""

from ops_console.core.rides.repository import RideRepository, normalize_point, normalize_ride

__all__ = [
    "RideRepository",
    "normalize_point",
    "normalize_ride",
]

# ops_console/services/__init__.py
"""
HTTP-сервисы консоли.

Сервисы:
- active_rides: агрегация активных поездок и телеметрии водителей
"""

__all__: list[str] = []

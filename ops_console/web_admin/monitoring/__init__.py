# ops_console/web_admin/monitoring/__init__.py
"""
Живой мониторинг активных поездок: опрос, выбор, синхронизация карты.
"""

from ops_console.web_admin.monitoring.controller import MonitoringController
from ops_console.web_admin.monitoring.map_sync import MapBackend, MapSyncEngine
from ops_console.web_admin.monitoring.poller import Poller
from ops_console.web_admin.monitoring.selection import SelectionState

__all__ = [
    "MonitoringController",
    "MapBackend",
    "MapSyncEngine",
    "Poller",
    "SelectionState",
]

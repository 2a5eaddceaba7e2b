# ops_console/config/__init__.py
"""
Модуль конфигурации.
Экспортирует настройки приложения.
"""

from ops_console.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]

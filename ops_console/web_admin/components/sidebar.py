# ops_console/web_admin/components/sidebar.py
"""
Компонент бокового меню.
"""

from __future__ import annotations

from nicegui import ui


def create_sidebar() -> None:
    """Создаёт боковое меню."""
    ui.label('Меню').classes('text-h6 q-mb-md')
    _menu_item('📊 Дашборд', '/')
    _menu_item('🗺️ Мониторинг поездок', '/monitoring')


def _menu_item(label: str, path: str) -> None:
    """Создаёт пункт меню."""
    ui.button(
        label,
        on_click=lambda: ui.navigate.to(path),
    ).props('flat align=left').classes('w-full justify-start')

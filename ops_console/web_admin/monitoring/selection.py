# ops_console/web_admin/monitoring/selection.py
"""
Выбор поездки, общий для списка и карты.

Состояния: ничего не выбрано / выбрана поездка ride_id. Список и карта
меняют выбор только через select(), поэтому расходиться им не в чем.
"""

from __future__ import annotations

from typing import Iterable, Optional


class SelectionState:
    """Не больше одной выбранной поездки."""

    def __init__(self) -> None:
        self._selected_id: Optional[str] = None

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def is_empty(self) -> bool:
        return self._selected_id is None

    def is_selected(self, ride_id: str) -> bool:
        return self._selected_id is not None and self._selected_id == ride_id

    def select(self, ride_id: str) -> Optional[str]:
        """
        Выбирает поездку; повторный выбор той же поездки снимает выбор.

        Returns:
            Новый выбор
        """
        self._set(None if ride_id == self._selected_id else ride_id)
        return self._selected_id

    def clear(self) -> None:
        self._set(None)

    def reconcile(self, ride_ids: Iterable[str]) -> bool:
        """
        Снимает выбор, если выбранной поездки нет в свежем списке.

        Returns:
            True если выбор был снят
        """
        if self._selected_id is None:
            return False
        if self._selected_id in set(ride_ids):
            return False
        self._set(None)
        return True

    def _set(self, value: Optional[str]) -> None:
        self._selected_id = value

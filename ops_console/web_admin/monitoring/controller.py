# ops_console/web_admin/monitoring/controller.py
"""
Контроллер страницы мониторинга.

Связывает опрос, список поездок, выбор и карту:
опрос -> список целиком -> сверка выбора -> синхронизация карты -> перерисовка панели.
"""

from __future__ import annotations

import inspect
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from ops_console.common.logger import log_debug
from ops_console.core.monitoring import summarize_rides
from ops_console.shared.models.rides import EnrichedRideView, RideSummary
from ops_console.web_admin.monitoring.map_sync import MapSyncEngine
from ops_console.web_admin.monitoring.poller import Poller
from ops_console.web_admin.monitoring.selection import SelectionState

FetchRides = Callable[[], Awaitable[list[EnrichedRideView]]]
Notify = Callable[[str], Any]
Changed = Callable[[], Any]

POLL_FAILED_MESSAGE = "Не удалось обновить активные поездки"


class MonitoringController:
    """
    Состояние страницы мониторинга.

    Список поездок заменяется целиком на каждом успешном опросе; сведение
    со старым состоянием делает MapSyncEngine.
    """

    def __init__(
        self,
        fetch_rides: FetchRides,
        map_engine: Optional[MapSyncEngine],
        interval: float,
        notify: Optional[Notify] = None,
        on_change: Optional[Changed] = None,
    ) -> None:
        """
        Args:
            fetch_rides: Получение активных поездок
            map_engine: Движок карты (None если карта недоступна)
            interval: Период опроса (секунды)
            notify: Неблокирующее уведомление об ошибке опроса
            on_change: Перерисовка списка и карточки
        """
        self.rides: list[EnrichedRideView] = []
        self.selection = SelectionState()
        self.loading = True
        self._map = map_engine
        self._notify = notify
        self._on_change = on_change
        self.poller: Poller[list[EnrichedRideView]] = Poller(
            fetch_rides,
            interval,
            on_result=self._apply_rides,
            on_error=self._handle_error,
            name="active_rides",
        )

    # =========================================================================
    # ЖИЗНЕННЫЙ ЦИКЛ
    # =========================================================================

    @property
    def live(self) -> bool:
        return self.poller.is_running

    def start(self) -> None:
        self.poller.start()

    def stop(self) -> None:
        """Окончательная остановка при закрытии страницы."""
        self.poller.stop()

    async def set_live(self, live: bool) -> None:
        """Переключатель Live / Пауза."""
        if live:
            self.poller.start()
        else:
            self.poller.pause()
        await self._changed()

    async def refresh(self) -> bool:
        return await self.poller.refresh()

    # =========================================================================
    # ВЫБОР
    # =========================================================================

    async def select(self, ride_id: str) -> None:
        """Единая точка выбора для списка и карты (повторный клик снимает выбор)."""
        self.selection.select(ride_id)
        await self._render()

    async def clear_selection(self) -> None:
        self.selection.clear()
        await self._render()

    @property
    def selected_ride(self) -> Optional[EnrichedRideView]:
        selected_id = self.selection.selected_id
        if selected_id is None:
            return None
        return next((ride for ride in self.rides if ride.id == selected_id), None)

    # =========================================================================
    # ДАННЫЕ
    # =========================================================================

    @property
    def last_updated(self) -> Optional[datetime]:
        return self.poller.last_success_at

    @property
    def stats(self) -> RideSummary:
        return summarize_rides(self.rides)

    async def _apply_rides(self, rides: list[EnrichedRideView]) -> None:
        self.rides = list(rides)
        self.loading = False
        if self.selection.reconcile(ride.id for ride in self.rides):
            await log_debug("Выбранная поездка пропала из списка, выбор снят")
        await self._render()

    async def _handle_error(self, error: Exception) -> None:
        self.loading = False
        if self._notify is not None:
            result = self._notify(POLL_FAILED_MESSAGE)
            if inspect.isawaitable(result):
                await result
        await self._changed()

    async def _render(self) -> None:
        if self._map is not None:
            await self._map.reconcile(self.rides, self.selection.selected_id)
        await self._changed()

    async def _changed(self) -> None:
        if self._on_change is None:
            return
        result = self._on_change()
        if inspect.isawaitable(result):
            await result

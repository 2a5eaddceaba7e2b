# ops_console/web_admin/monitoring/poller.py
"""
Периодический опрос с явным жизненным циклом.

Каждый цикл опроса принадлежит странице, которая его создала: start() при
открытии, stop() при отключении клиента. Ответы помечаются номером поколения;
ответ устаревшего поколения или пришедший после stop() отбрасывается.
"""

from __future__ import annotations

import asyncio
import inspect
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from ops_console.common.logger import log_debug, log_error, log_warning

T = TypeVar("T")

ResultCallback = Callable[[T], Any]
ErrorCallback = Callable[[Exception], Any]


async def _call(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    """Вызывает обработчик; корутины дожидаются."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class Poller(Generic[T]):
    """
    Опрос fetch() сразу при запуске и затем каждые interval секунд.

    Успешный результат передаётся в on_result целиком. Ошибка не прерывает
    цикл: она логируется и уходит в on_error, прежний результат остаётся
    у потребителя. Повторов и backoff нет, следующий опрос идёт по расписанию.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        interval: float,
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback] = None,
        name: str = "poller",
    ) -> None:
        """
        Args:
            fetch: Корутина получения данных
            interval: Период опроса (секунды)
            on_result: Обработчик успешного результата
            on_error: Обработчик ошибки (неблокирующее уведомление)
            name: Имя для логов
        """
        if interval <= 0:
            raise ValueError(f"Период опроса должен быть положительным: {interval}")
        self._fetch = fetch
        self.interval = interval
        self._on_result = on_result
        self._on_error = on_error
        self.name = name

        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self._closed = False
        self.last_success_at: Optional[datetime] = None
        self.last_error: Optional[Exception] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def generation(self) -> int:
        return self._generation

    def start(self) -> None:
        """Запускает цикл; первый опрос выполняется сразу."""
        if self.is_running:
            return
        self._closed = False
        self._task = asyncio.create_task(self._run(), name=f"poller:{self.name}")

    def pause(self) -> None:
        """Приостанавливает периодический опрос; refresh() продолжает работать."""
        self._cancel_task()

    def stop(self) -> None:
        """
        Останавливает цикл окончательно (страница закрыта). Результаты
        запросов, ещё находящихся в полёте, будут отброшены.
        """
        self._closed = True
        self._generation += 1
        self._cancel_task()

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def refresh(self) -> bool:
        """
        Внеочередной опрос. Запрос в полёте становится устаревшим.

        Returns:
            True если результат применён
        """
        return await self._poll_once()

    async def _run(self) -> None:
        await log_debug(f"Опрос {self.name} запущен, период {self.interval} с")
        try:
            while not self._closed:
                await self._poll_once()
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            await log_debug(f"Опрос {self.name} остановлен")
            raise

    async def _poll_once(self) -> bool:
        self._generation += 1
        generation = self._generation

        try:
            result = await self._fetch()
        except Exception as e:
            if not self._is_current(generation):
                return False
            self.last_error = e
            await log_warning(f"Опрос {self.name} не удался: {e}")
            await self._notify(self._on_error, e)
            return False

        if not self._is_current(generation):
            await log_debug(f"Опрос {self.name}: устаревший ответ поколения {generation} отброшен")
            return False

        self.last_error = None
        self.last_success_at = datetime.now(timezone.utc)
        await self._notify(self._on_result, result)
        return True

    async def _notify(self, callback: Optional[Callable[..., Any]], *args: Any) -> None:
        """Ошибка обработчика логируется и не останавливает цикл."""
        try:
            await _call(callback, *args)
        except Exception as e:
            await log_error(f"Опрос {self.name}: ошибка обработчика: {e}", exc_info=True)

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

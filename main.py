#!/usr/bin/env python3
# main.py
"""
Главная точка входа консоли оператора.
Запускает Active Rides Service или Web Admin UI в зависимости от режима.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from ops_console.config import settings
from ops_console.common.logger import setup_logging, log_info, log_error
from ops_console.common.constants import TypeMsg


MODES: dict[str, str] = {
    "1": "active_rides",
    "2": "web_admin",
}

# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def run_active_rides_service() -> None:
    """Запускает Active Rides Service (агрегация поездок и телеметрии)."""
    import uvicorn

    await log_info(
        f"Запуск Active Rides Service на порту {settings.deployment.ACTIVE_RIDES_SERVICE_PORT}...",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "ops_console.services.active_rides.app:app",
        host="0.0.0.0",
        port=settings.deployment.ACTIVE_RIDES_SERVICE_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve())
    _running_tasks.append(task)
    try:
        await task
    except asyncio.CancelledError:
        await log_info("Active Rides Service: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


def run_web_admin() -> None:
    """
    Запускает Web Admin UI.
    NiceGUI управляет собственным event loop, поэтому запуск синхронный.
    """
    from ops_console.web_admin.app import run_web as start_web_admin

    asyncio.run(log_info("Запуск Web Admin UI...", type_msg=TypeMsg.INFO))
    start_web_admin(
        host=settings.deployment.WEB_ADMIN_HOST,
        port=settings.deployment.WEB_ADMIN_PORT,
    )


def interactive_mode_selection() -> str:
    """
    Интерактивный выбор режима запуска.

    Returns:
        Выбранный режим
    """
    print("\n" + "=" * 80)
    print(f"  OPS CONSOLE v{settings.system.VERSION} — Выбор компонента для запуска")
    print("=" * 80)
    print(f"  1. active_rides   — Active Rides Service (:{settings.deployment.ACTIVE_RIDES_SERVICE_PORT})")
    print(f"  2. web_admin      — Web Admin UI (:{settings.deployment.WEB_ADMIN_PORT})")
    print("=" * 80)

    while True:
        choice = input("\nВыберите компонент (номер или название): ").strip().lower()

        if choice in MODES:
            return MODES[choice]
        elif choice in MODES.values():
            return choice
        else:
            print("❌ Неверный выбор. Попробуйте снова.")


def resolve_mode(mode: str | None = None) -> str:
    """Режим из аргумента, COMPONENT_MODE или интерактивного выбора."""
    if mode:
        return mode
    component_mode = settings.system.COMPONENT_MODE
    if component_mode in MODES.values():
        return component_mode
    return interactive_mode_selection()


async def main(mode: str | None = None) -> None:
    """
    Главная функция запуска асинхронных компонентов.

    Args:
        mode: Режим запуска (active_rides).
    """
    setup_logging()
    setup_signal_handlers()

    mode = resolve_mode(mode)

    await log_info(
        f"Ops Console v{settings.system.VERSION} — запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO,
    )

    if mode == "active_rides":
        await run_active_rides_service()
    else:
        await log_error(f"Неизвестный режим: {mode}")


def cli(mode: str | None = None) -> None:
    """Запуск из командной строки: python main.py [active_rides|web_admin]."""
    mode = resolve_mode(mode or (sys.argv[1] if len(sys.argv) > 1 else None))

    if mode == "web_admin":
        setup_logging()
        run_web_admin()
        return

    try:
        asyncio.run(main(mode))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli()

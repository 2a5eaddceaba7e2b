#!/usr/bin/env python3
"""
Entrypoint для Active Rides Service.

Запуск:
    python entrypoints/entrypoint_active_rides.py

Порт по умолчанию: 8092
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from ops_console.config import settings
from ops_console.common.logger import setup_logging


def main() -> None:
    """Запустить Active Rides Service."""
    setup_logging()
    uvicorn.run(
        "ops_console.services.active_rides.app:app",
        host="0.0.0.0",
        port=settings.deployment.ACTIVE_RIDES_SERVICE_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()

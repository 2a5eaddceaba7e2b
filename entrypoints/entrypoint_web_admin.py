#!/usr/bin/env python3
# entrypoint_web_admin.py
"""
Точка входа для запуска Web Admin компонента в Docker контейнере.
Консоль оператора: дашборд и живой мониторинг активных поездок.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from main import cli


if __name__ in {"__main__", "__mp_main__"}:
    instance_id = os.getenv("WEB_ADMIN_INSTANCE_ID", "0")
    print(f"🔐 Запуск Web Admin instance #{instance_id}")

    try:
        cli(mode="web_admin")
    except KeyboardInterrupt:
        pass

# ops_console/infra/__init__.py
"""
Инфраструктурный слой.
Подключения к внешним хранилищам: PostgreSQL (бронирования), Redis (телеметрия).
"""

from ops_console.infra.database import DatabaseManager, get_db, init_db, close_db
from ops_console.infra.redis_client import RedisClient, get_redis, init_redis, close_redis

__all__ = [
    "DatabaseManager",
    "get_db",
    "init_db",
    "close_db",
    "RedisClient",
    "get_redis",
    "init_redis",
    "close_redis",
]

import asyncio
from pathlib import Path

import asyncpg
from ops_console.config import settings

MIGRATION = Path(__file__).parent / "migrations" / "init.sql"

async def create_db():
    db_name = settings.database.DB_NAME
    try:
        # Connect to default postgres DB to create new DB
        sys_conn = await asyncpg.connect(
            user=settings.database.DB_USER,
            password=settings.database.DB_PASSWORD,
            host=settings.database.DB_HOST,
            port=settings.database.DB_PORT,
            database='postgres'
        )

        # Check if db exists
        exists = await sys_conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if not exists:
            print(f"Creating database {db_name}...")
            await sys_conn.execute(f'CREATE DATABASE "{db_name}"')
            print("Database created.")
        else:
            print(f"Database {db_name} already exists.")

        await sys_conn.close()

        # Apply schema
        conn = await asyncpg.connect(dsn=settings.database.dsn)
        await conn.execute(MIGRATION.read_text(encoding="utf-8"))
        await conn.close()
        print("Schema applied.")

    except (OSError, asyncpg.PostgresError) as e:
        print(f"Error: {e}")
        raise SystemExit(1) from e

if __name__ == "__main__":
    asyncio.run(create_db())

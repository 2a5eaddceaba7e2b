import asyncio
import sys
import os
import time

# Корень проекта в sys.path
sys.path.append(os.getcwd())

from ops_console.config import settings
from ops_console.core.telemetry import TelemetryRepository
from ops_console.infra.database import get_db
from ops_console.infra.redis_client import get_redis

# Несколько поездок вокруг центра региона по умолчанию
DEV_RIDES = [
    ("dev-ride-1", "confirmed", "dev-driver-1", (-15.3950, 28.3100), (-15.4100, 28.2870), True),
    ("dev-ride-2", "arrived", "dev-driver-2", (-15.3800, 28.3300), (-15.3650, 28.3500), True),
    ("dev-ride-3", "in_progress", "dev-driver-3", (-15.4000, 28.3400), (-15.4300, 28.3100), True),
    ("dev-ride-4", "confirmed", "dev-driver-4", (-15.3700, 28.3000), (-15.3550, 28.2900), False),
]

async def main():
    db = get_db()
    await db.connect(
        dsn=settings.database.dsn,
        min_size=1,
        max_size=1,
    )
    redis = get_redis()
    await redis.connect()

    print("Connected to DB and Redis")

    query = """
        INSERT INTO bookings (id, status, data, created_at, updated_at)
        VALUES ($1, $2, $3, NOW(), NOW())
        ON CONFLICT (id) DO UPDATE SET status = EXCLUDED.status, data = EXCLUDED.data, updated_at = NOW()
    """

    for ride_id, status, driver_id, origin, destination, has_gps in DEV_RIDES:
        doc = {
            "status": status,
            "bookingType": "ride",
            "bookingClass": "standard",
            "origin": {"latitude": origin[0], "longitude": origin[1], "address": f"Pickup {ride_id}"},
            "destination": {"latitude": destination[0], "longitude": destination[1], "address": f"Drop-off {ride_id}"},
            "passengerInfo": {"fullName": f"Passenger {ride_id[-1]}", "phoneNumber": "+260970000000"},
            "confirmedDriver": {"uid": driver_id, "fullName": f"Driver {driver_id[-1]}", "phoneNumber": "+260960000000"},
            "price": 85,
            "distance": "4.2 km",
            "duration": "12 min",
            "paymentMethod": "cash",
        }
        # jsonb-кодек пула сериализует dict сам
        await db.execute(query, ride_id, status, doc)

        if has_gps:
            await redis.hset_mapping(
                f"{TelemetryRepository.KEY_PREFIX}{driver_id}",
                {
                    "lat": str(origin[0] + 0.002),
                    "lon": str(origin[1] + 0.002),
                    "heading": "45",
                    "speed": "30",
                    "timestamp": str(time.time()),
                },
            )
        print(f"Ride {ride_id} ({status}) seeded")

    await redis.disconnect()
    await db.disconnect()

if __name__ == "__main__":
    asyncio.run(main())

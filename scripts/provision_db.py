"""Create missing tables (and demo data on a fresh schema) without starting the API."""
import asyncio
import json
import sys

from workout_tracker.config import get_settings
from workout_tracker.database import close_db, engine
from workout_tracker.kernel.provisioning import provision_schema
from workout_tracker.logging_config import configure_logging


async def main() -> int:
    settings = get_settings()
    configure_logging(log_level=settings.log_level, environment=settings.environment)
    try:
        report = await provision_schema(engine)
    finally:
        await close_db()
    print(json.dumps(report.as_dict(), indent=2))
    return 1 if report.degraded else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

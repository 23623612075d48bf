"""
Turn storefront maintenance mode on or off.

Usage:
    python -m app.scripts.set_maintenance on
    python -m app.scripts.set_maintenance off
    python -m app.scripts.set_maintenance status
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from app.core.database import Base, engine, get_db_session
from app.services.site_settings import SiteSettingsService
import app.models  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CHOICES = {"on": True, "true": True, "off": False, "false": False, "status": None}


async def set_maintenance(enabled: Optional[bool]) -> bool:
    """Set (or, with None, only read) the maintenance flag. Returns the current value."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_db_session() as db:
        service = SiteSettingsService(db)
        if enabled is not None:
            await service.set_maintenance_mode(enabled)
        current = await service.get_maintenance_mode()

    await engine.dispose()
    return current


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Toggle storefront maintenance mode")
    parser.add_argument("mode", choices=sorted(CHOICES), help="on/off (true/false) or status")
    args = parser.parse_args(argv)

    try:
        current = asyncio.run(set_maintenance(CHOICES[args.mode]))
    except Exception as e:
        logger.error(f"Failed to update maintenance mode: {e}")
        return 1

    logger.info(f"Maintenance mode is {'ON' if current else 'OFF'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
TourStack Backend — Template Seeding
======================================

What:  Inserts the built-in positioning templates (QR code, GPS, BLE, NFC,
       RFID, WiFi, UWB) into the database.
How:   `python -m tourstack.seed`. Safe to re-run: templates already present
       are skipped.
"""

import asyncio
import logging
import sys

from tourstack.database import async_session_factory, create_all, dispose_engine
from tourstack.services.template_service import template_service

logger = logging.getLogger("tourstack.seed")


async def seed() -> int:
    await create_all()
    async with async_session_factory() as session:
        try:
            created = await template_service.seed_builtin_templates(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    await dispose_engine()
    return len(created)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    count = asyncio.run(seed())
    logger.info("Seeding complete: %d template(s) created", count)


if __name__ == "__main__":
    main()

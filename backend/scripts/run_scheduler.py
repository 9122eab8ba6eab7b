from __future__ import annotations

import asyncio
import logging

from leadhub.config import settings
from leadhub.db import init_models
from leadhub.service_layer.bootstrap import build_services


def _quiet_logging() -> None:
    # Root defaults
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("asyncssh").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


async def main() -> None:
    _quiet_logging()
    await init_models()

    services = build_services()
    async with services.scheduler:
        logging.getLogger(__name__).info("Scheduler started")
        try:
            while True:
                await asyncio.sleep(3600)
        finally:
            logging.getLogger(__name__).info("Scheduler stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass

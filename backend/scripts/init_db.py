# scripts/init_db.py
import asyncio

from leadhub.db import init_models


async def main() -> None:
    await init_models()
    print("OK: created connectors/leads tables (idempotent).")


if __name__ == "__main__":
    asyncio.run(main())

import asyncio

from travelplan.core.database import engine, Base
from travelplan.core.logger import logger
import travelplan.models  # noqa: F401  registers every table on Base.metadata


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


if __name__ == "__main__":
    asyncio.run(init_db())

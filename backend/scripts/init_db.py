"""
Initialize the database: create all tables.
Run with: python -m scripts.init_db
"""

import asyncio
import logging
from medicare.database import engine, Base
from medicare.logging_config import setup_logging
from medicare.models import User, Profile, UserRole, Worker, MedicalVisit, IdSequence  # noqa: F401

logger = logging.getLogger("medicare.scripts.init_db")


async def init():
    setup_logging()
    logger.info("Creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("All tables created successfully.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init())

"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, knowledgebase.configs
System role: Database schema initialization

Usage:
    python -m knowledgebase.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from knowledgebase.boundary.db.base import Base
from knowledgebase.boundary.db.connection import get_async_engine
from knowledgebase.configs import get_settings
from knowledgebase.observability import configure_logging

# Import all models to register them with Base.metadata
from knowledgebase.boundary.db import models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: existing tables remain unchanged.

    Args:
        engine: Async engine bound to the target database
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:create_all_tables - Tables created: {sorted(Base.metadata.tables)}")


async def _main() -> None:
    engine = get_async_engine(get_settings().database)
    try:
        await create_all_tables(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(_main())

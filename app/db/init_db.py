"""
Schema bootstrap.

Models are imported here so their tables are registered on Base.metadata
before create_all runs.
"""
from sqlalchemy.ext.asyncio import AsyncEngine

from app.models.base import Base
from app.models import user, access_token, audit  # noqa: F401


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

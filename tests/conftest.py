"""
Shared test fixtures
"""
import os

os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("LOG_FILE", "logs/test.log")

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import Base, build_engine, seed_default_commands


@pytest_asyncio.fixture
async def session():
    """Fresh in-memory database with the default commands seeded"""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with maker() as db_session:
        await seed_default_commands(db_session)
        yield db_session

    await engine.dispose()

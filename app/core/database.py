"""
Database models and connection management
"""
from typing import AsyncGenerator, List, Optional
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, select, delete
)
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from app.core.config import settings


Base = declarative_base()

# Fields that may be set through create_command / update_command
COMMAND_FIELDS = {
    "name", "description", "prefix", "cooldown", "permission_level", "is_active"
}

DEFAULT_COMMANDS = [
    {
        "name": "repeat",
        "description": "Repeats whatever message the user sends",
        "prefix": "/",
        "cooldown": 3,
        "permission_level": "None",
        "is_active": True,
    },
]


class BotCommand(Base):
    """Configured bot commands table"""
    __tablename__ = "commands"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    prefix = Column(String(10), nullable=False, default="/")
    cooldown = Column(Integer, nullable=False, default=3)
    permission_level = Column(String(50), nullable=False, default="None")
    is_active = Column(Boolean, nullable=False, default=True)
    usage_count = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<BotCommand(id={self.id}, name={self.name}, active={self.is_active})>"


class CommandLog(Base):
    """Audit log of command invocations"""
    __tablename__ = "command_logs"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, nullable=False, default=func.now())
    user_id = Column(String(64), nullable=False)
    username = Column(String(255), nullable=False)
    command = Column(Text, nullable=False)
    server_id = Column(String(64), nullable=True)  # Telegram chat id
    server_name = Column(String(255), nullable=True)  # chat title
    status = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<CommandLog(id={self.id}, command={self.command}, status={self.status})>"


def build_engine(url: str):
    """Create an async engine; in-memory SQLite shares one connection"""
    if url.startswith("sqlite") and (":memory:" in url or url.endswith("://")):
        return create_async_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url, echo=False, future=True)


# Database engine and session
engine = build_engine(settings.DATABASE_URL)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def init_db():
    """Initialize database tables and seed default commands"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        await seed_default_commands(session)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session"""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def seed_default_commands(session: AsyncSession):
    """Create the built-in commands that are missing"""
    for fields in DEFAULT_COMMANDS:
        if await get_command_by_name(session, fields["name"]) is None:
            await create_command(session, **fields)


def _check_fields(fields: dict):
    unknown = set(fields) - COMMAND_FIELDS
    if unknown:
        raise ValueError(f"Unknown command fields: {', '.join(sorted(unknown))}")


# Bot commands

async def get_commands(session: AsyncSession) -> List[BotCommand]:
    """List all configured commands"""
    result = await session.execute(select(BotCommand).order_by(BotCommand.id))
    return list(result.scalars().all())


async def get_command(session: AsyncSession, command_id: int) -> Optional[BotCommand]:
    return await session.get(BotCommand, command_id)


async def get_command_by_name(session: AsyncSession, name: str) -> Optional[BotCommand]:
    result = await session.execute(
        select(BotCommand).where(BotCommand.name == name)
    )
    return result.scalar_one_or_none()


async def create_command(session: AsyncSession, **fields) -> BotCommand:
    """Create a command; usage_count always starts at zero"""
    _check_fields(fields)
    command = BotCommand(**fields)
    session.add(command)
    await session.commit()
    await session.refresh(command)
    return command


async def update_command(
    session: AsyncSession,
    command_id: int,
    **fields
) -> Optional[BotCommand]:
    """Apply a partial update, returns None if the command does not exist"""
    _check_fields(fields)
    command = await session.get(BotCommand, command_id)
    if command is None:
        return None

    for key, value in fields.items():
        setattr(command, key, value)

    await session.commit()
    await session.refresh(command)
    return command


async def delete_command(session: AsyncSession, command_id: int) -> bool:
    command = await session.get(BotCommand, command_id)
    if command is None:
        return False

    await session.delete(command)
    await session.commit()
    return True


async def increment_command_usage(session: AsyncSession, command_id: int):
    command = await session.get(BotCommand, command_id)
    if command is None:
        return

    command.usage_count += 1
    await session.commit()


# Command logs

async def get_command_logs(
    session: AsyncSession,
    limit: int = 100,
    offset: int = 0
) -> List[CommandLog]:
    """Get command logs, newest first"""
    result = await session.execute(
        select(CommandLog)
        .order_by(CommandLog.timestamp.desc(), CommandLog.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all())


async def create_command_log(
    session: AsyncSession,
    user_id: str,
    username: str,
    command: str,
    status: str,
    server_id: Optional[str] = None,
    server_name: Optional[str] = None
) -> CommandLog:
    """Save a command log entry"""
    log = CommandLog(
        user_id=user_id,
        username=username,
        command=command,
        status=status,
        server_id=server_id,
        server_name=server_name
    )
    session.add(log)
    await session.commit()
    await session.refresh(log)
    return log


async def clear_command_logs(session: AsyncSession):
    await session.execute(delete(CommandLog))
    await session.commit()

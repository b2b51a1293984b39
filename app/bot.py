"""
Main bot initialization
"""
import asyncio
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

from app.core.config import settings
from app.core.database import init_db
from app.core.jokes import joke_client
from app.core.logger import setup_logging
from app.handlers import register_handlers
from app.handlers.commands import BOT_COMMANDS

logger = setup_logging()


async def on_startup(bot: Bot):
    """Startup handler"""
    logger.info(f"Starting {settings.APP_NAME}...")

    logger.info("Initializing database...")
    await init_db()

    await bot.set_my_commands([
        BotCommand(command=cmd, description=desc)
        for cmd, desc in BOT_COMMANDS
    ])

    logger.info("Bot started successfully!")


async def on_shutdown(bot: Bot):
    """Shutdown handler"""
    logger.info("Shutting down...")

    await joke_client.close()

    logger.info("Bot stopped")


async def main():
    """Main entry point"""
    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    dp = Dispatcher(storage=MemoryStorage())

    register_handlers(dp)

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    try:
        await dp.start_polling(bot, skip_updates=True)
    except Exception as e:
        logger.error(f"Bot error: {e}")
        raise
    finally:
        await bot.session.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise

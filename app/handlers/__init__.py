"""
Handler registration
"""
from aiogram import Dispatcher

from app.handlers import commands


def register_handlers(dp: Dispatcher):
    """Register all handlers"""
    dp.include_router(commands.router)

"""
Core module initialization
"""
from app.core.config import settings
from app.core.database import init_db, get_db, create_command_log, get_command_logs
from app.core.calculator import calculate, format_calculation_result, CalculationResult, ErrorKind
from app.core.jokes import joke_client, JokeClient
from app.core.commands import command_router, CommandResult

__all__ = [
    'settings',
    'init_db',
    'get_db',
    'create_command_log',
    'get_command_logs',
    'calculate',
    'format_calculation_result',
    'CalculationResult',
    'ErrorKind',
    'joke_client',
    'JokeClient',
    'command_router',
    'CommandResult'
]

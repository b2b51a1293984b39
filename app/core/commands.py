"""
Command router - parses command text and dispatches to handlers
"""
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional, Tuple
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.calculator import calculate, format_calculation_result
from app.core.database import get_command_by_name, increment_command_usage, create_command_log
from app.core.jokes import JokeClient, JokeAPIError, joke_client, get_fallback_joke
import logging

logger = logging.getLogger(__name__)


class CommandStatus:
    """Status strings stored in command logs"""
    SUCCESS = "Success"
    ERROR = "Error"
    MISSING_ARGS = "Missing Args"
    MISSING_EXPRESSION = "Missing Expression"
    MISSING_ARGUMENTS = "Missing Arguments"
    MISSING_MESSAGE = "Missing Message"
    SIMULATED = "Simulated"
    UNKNOWN = "Unknown Command"
    INACTIVE = "Inactive"
    JOKE_FALLBACK = "API Error - Using Fallback"


@dataclass
class CommandResult:
    """Outcome of running a command"""
    command: str
    response: str
    status: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    parse_mode: Optional[str] = None  # "HTML" when the response carries markup


def parse_command(text: str) -> Tuple[str, str]:
    """
    Split command text into name and arguments

    "/calc@ParrotBot 2 + 2" -> ("calc", "2 + 2")
    """
    parts = (text or "").split()
    if not parts:
        return "", ""

    name = parts[0]
    if name.startswith("/"):
        name = name[1:]
    name = name.split("@", 1)[0].lower()

    return name, " ".join(parts[1:])


Handler = Callable[[str, str], Awaitable[CommandResult]]


class CommandRouter:
    """Routes command text to the matching handler"""

    def __init__(self, jokes: Optional[JokeClient] = None):
        self.jokes = jokes or joke_client
        # Built-in commands, always available
        self.builtin: Dict[str, Handler] = {
            "joke": self.handle_joke,
            "calculate": self.handle_calculate,
            "calc": self.handle_calculate,
            "dm": self.handle_dm,
        }
        # Handlers for commands configured in the database
        self.configurable: Dict[str, Handler] = {
            "repeat": self.handle_repeat,
        }

    async def run_command(self, text: str, session: AsyncSession) -> CommandResult:
        """
        Run a command and return its result

        Args:
            text: Full command text, e.g. "/repeat hello"
            session: Database session for looking up configured commands

        Returns:
            CommandResult; failures are reported through its status
        """
        name, args = parse_command(text)

        try:
            handler = self.builtin.get(name)
            if handler:
                return await handler(text, args)

            command = await get_command_by_name(session, name) if name else None
            if command is None:
                return CommandResult(text, f"Unknown command: /{name}", CommandStatus.UNKNOWN)

            if not command.is_active:
                return CommandResult(
                    text,
                    f"The {command.prefix}{command.name} command is currently disabled.",
                    CommandStatus.INACTIVE
                )

            handler = self.configurable.get(command.name)
            if handler is None:
                return CommandResult(text, f"Unknown command: {command.name}", CommandStatus.UNKNOWN)

            return await handler(text, args)

        except Exception as e:
            logger.error(f"Error running command {text!r}: {e}")
            return CommandResult(
                text,
                "An error occurred while testing the command",
                CommandStatus.ERROR
            )

    async def handle_repeat(self, text: str, args: str) -> CommandResult:
        if not args.strip():
            return CommandResult(
                text,
                "You need to provide a message to repeat!",
                CommandStatus.MISSING_ARGS
            )
        return CommandResult(text, args, CommandStatus.SUCCESS)

    async def handle_calculate(self, text: str, args: str) -> CommandResult:
        expression = args.strip()
        if not expression:
            return CommandResult(
                text,
                "Please provide a mathematical expression to calculate.",
                CommandStatus.MISSING_EXPRESSION
            )

        logger.info(f"Calculating expression: {expression!r}")
        outcome = calculate(expression)
        status = CommandStatus.SUCCESS if outcome.ok else CommandStatus.ERROR

        return CommandResult(
            text,
            format_calculation_result(expression, outcome),
            status,
            parse_mode="HTML"
        )

    async def handle_joke(self, text: str, args: str) -> CommandResult:
        try:
            joke = await self.jokes.get_random_joke()
        except JokeAPIError as e:
            logger.warning(f"Joke API unavailable, using fallback: {e}")
            return CommandResult(text, get_fallback_joke(), CommandStatus.JOKE_FALLBACK)

        return CommandResult(text, joke, CommandStatus.SUCCESS)

    async def handle_dm(self, text: str, args: str) -> CommandResult:
        """Describe the direct message that would be sent; nothing is delivered"""
        args = args.strip()
        if not args:
            return CommandResult(
                text,
                "Please provide either a username and message, "
                "or just a message to send to everyone.",
                CommandStatus.MISSING_ARGUMENTS
            )

        target, _, message = args.partition(" ")
        message = message.strip()
        if not message:
            return CommandResult(text, "Please provide a message to send.", CommandStatus.MISSING_MESSAGE)

        if target == "all":
            description = f'This would send a DM to ALL chat members with the message: "{message}"'
        else:
            description = f'This would send a DM to user "{target}" with the message: "{message}"'

        return CommandResult(
            text,
            f"{description}\n\nThis is a simulated response - "
            f"actual messages will not be sent in test mode.",
            CommandStatus.SIMULATED
        )

    async def record_invocation(
        self,
        session: AsyncSession,
        result: CommandResult,
        user_id: str,
        username: str,
        server_id: Optional[str] = None,
        server_name: Optional[str] = None
    ):
        """Count usage of configured commands and write an audit log entry"""
        name, _ = parse_command(result.command)
        command = await get_command_by_name(session, name) if name else None
        if command is not None:
            await increment_command_usage(session, command.id)

        await create_command_log(
            session,
            user_id=user_id,
            username=username,
            command=result.command,
            status=result.status,
            server_id=server_id,
            server_name=server_name
        )


# Global router instance
command_router = CommandRouter()

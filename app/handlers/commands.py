"""
Command handlers
"""
from aiogram import Router
from aiogram.types import Message
from aiogram.filters import Command, CommandStart

from app.core.config import settings
from app.core.commands import command_router, CommandResult
from app.core.database import async_session_maker, get_commands, get_command_logs
from app.utils.helpers import truncate_text, format_command_info, format_command_log
import logging

logger = logging.getLogger(__name__)

router = Router()

BOT_COMMANDS = [
    ("start", "Start the bot"),
    ("help", "Show help message"),
    ("repeat", "Repeat your message"),
    ("calculate", "Calculate an expression, e.g. /calculate 2 + 2"),
    ("calc", "Short form of /calculate"),
    ("joke", "Get a random joke"),
    ("dm", "Preview a direct message"),
]


def is_admin(message: Message) -> bool:
    """Check if the sender is a configured admin"""
    return message.from_user is not None and message.from_user.id in settings.ADMIN_IDS


def describe_sender(message: Message) -> dict:
    """Audit log fields for the sender and, outside private chats, the chat"""
    user = message.from_user
    chat = message.chat
    in_group = chat.type != "private"
    return {
        "user_id": str(user.id) if user else "unknown",
        "username": (user.username or user.full_name) if user else "unknown",
        "server_id": str(chat.id) if in_group else None,
        "server_name": chat.title if in_group else None,
    }


@router.message(CommandStart())
async def cmd_start(message: Message):
    """Handle /start command"""
    name = message.from_user.first_name if message.from_user else None

    await message.answer(
        f"👋 <b>Welcome to {settings.APP_NAME}!</b>\n\n"
        f"Hi, {name or 'friend'}! I can repeat messages, do quick maths "
        f"and tell jokes.\n\n"
        f"Type /help to see what I can do."
    )


@router.message(Command("help"))
async def cmd_help(message: Message):
    """Handle /help command"""
    help_text = f"""📖 <b>{settings.APP_NAME} help</b>

<b>💬 Commands:</b>
/repeat &lt;text&gt; - Repeat your message
/calculate &lt;expression&gt; - Calculate, e.g. <code>/calculate (2 + 3) * 4</code>
/calc &lt;expression&gt; - Same as /calculate
/joke - Get a random joke
/dm &lt;user|all&gt; &lt;text&gt; - Preview a direct message

<b>🧮 Calculator:</b>
Supports +, -, *, / and parentheses on decimal numbers."""

    if is_admin(message):
        help_text += (
            "\n\n<b>🔐 Admin:</b>\n"
            "/commands - List configured commands\n"
            "/logs - Show recent command logs"
        )

    await message.answer(help_text)


@router.message(Command("repeat", "calculate", "calc", "joke", "dm"))
async def cmd_dispatch(message: Message):
    """Run a bot command, reply with its result and record it"""
    logger.info(f"Command {message.text!r} from user {message.from_user.id if message.from_user else None}")

    async with async_session_maker() as session:
        result = await command_router.run_command(message.text, session)
        try:
            await reply_with_result(message, result)
        finally:
            try:
                await command_router.record_invocation(session, result, **describe_sender(message))
            except Exception as e:
                logger.error(f"Failed to record command {result.command!r}: {e}")


async def reply_with_result(message: Message, result: CommandResult):
    await message.reply(truncate_text(result.response), parse_mode=result.parse_mode)


@router.message(Command("commands"))
async def cmd_commands(message: Message):
    """List configured commands (admins only)"""
    if not is_admin(message):
        await message.answer("⛔ <b>Access denied</b>")
        return

    async with async_session_maker() as session:
        commands = await get_commands(session)

    if not commands:
        await message.answer("📭 <b>No commands configured</b>")
        return

    text = f"⌨️ <b>Configured commands ({len(commands)})</b>\n\n"
    text += "\n".join(format_command_info(cmd) for cmd in commands)
    await message.answer(truncate_text(text))


@router.message(Command("logs"))
async def cmd_logs(message: Message):
    """Show recent command logs (admins only)"""
    if not is_admin(message):
        await message.answer("⛔ <b>Access denied</b>")
        return

    async with async_session_maker() as session:
        logs = await get_command_logs(session, limit=10)

    if not logs:
        await message.answer("📭 <b>No commands logged yet</b>")
        return

    text = "📜 <b>Recent commands</b>\n\n"
    text += "\n".join(format_command_log(log) for log in logs)
    await message.answer(truncate_text(text))

"""
Utility functions
"""
import html
from datetime import datetime


def truncate_text(text: str, max_length: int = 4000) -> str:
    """Truncate text to max length with ellipsis"""
    if len(text) <= max_length:
        return text
    return text[:max_length-3] + "..."


def format_datetime(dt: datetime) -> str:
    """Format datetime for display"""
    return dt.strftime("%Y-%m-%d %H:%M")


def format_command_info(command) -> str:
    """Format a configured command for display"""
    status = "✅ active" if command.is_active else "❌ disabled"
    text = f"⌨️ <b>{html.escape(command.prefix + command.name)}</b> ({status})\n"
    text += f"📝 {html.escape(command.description)}\n"
    text += f"⏱ Cooldown: {command.cooldown}s · 🔐 {html.escape(command.permission_level)}\n"
    text += f"📊 Used {command.usage_count} times\n"
    return text


def format_command_log(log) -> str:
    """Format a command log entry as a single line"""
    icon = "✅" if log.status in ("Success", "Simulated") else "⚠️"
    where = f" in {html.escape(log.server_name)}" if log.server_name else ""
    return (
        f"{icon} {format_datetime(log.timestamp)} "
        f"<b>{html.escape(log.username)}</b>{where}: "
        f"<code>{html.escape(truncate_text(log.command, 80))}</code> ({html.escape(log.status)})"
    )

"""
Basic tests for Parrot-Bot
"""
import pytest
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import Mock, AsyncMock, patch


class TestConfig:
    """Test configuration loading"""

    def test_settings_exist(self):
        """Test that settings can be imported"""
        from app.core.config import settings
        assert settings is not None
        assert settings.APP_NAME == "Parrot-Bot"

    def test_database_defaults_to_memory(self):
        from app.core.config import settings
        assert ":memory:" in settings.DATABASE_URL

    def test_parse_admin_ids(self):
        from app.core.config import Settings

        assert Settings(BOT_TOKEN="x", ADMIN_IDS="1, 2").ADMIN_IDS == [1, 2]
        assert Settings(BOT_TOKEN="x", ADMIN_IDS="").ADMIN_IDS == []
        assert Settings(BOT_TOKEN="x", ADMIN_IDS=5).ADMIN_IDS == [5]

    def test_admin_ids_from_env(self, monkeypatch):
        from app.core.config import Settings

        monkeypatch.setenv("ADMIN_IDS", "10,20")
        assert Settings(BOT_TOKEN="x").ADMIN_IDS == [10, 20]


class TestHelpers:
    """Test utility functions"""

    def test_truncate_text(self):
        from app.utils.helpers import truncate_text

        short = "Short text"
        assert truncate_text(short, 100) == short

        long = "A" * 5000
        truncated = truncate_text(long, 100)
        assert len(truncated) <= 100
        assert truncated.endswith("...")

    def test_format_command_info(self):
        from app.utils.helpers import format_command_info

        command = SimpleNamespace(
            name="repeat", prefix="/", description="Repeats <text>",
            cooldown=3, permission_level="None", is_active=True, usage_count=4
        )
        text = format_command_info(command)
        assert "/repeat" in text
        assert "Repeats &lt;text&gt;" in text
        assert "Used 4 times" in text

    def test_format_command_log(self):
        from app.utils.helpers import format_command_log

        log = SimpleNamespace(
            timestamp=datetime(2024, 5, 1, 12, 30), username="dave",
            command="/calc 1 < 2", status="Error", server_name=None
        )
        text = format_command_log(log)
        assert "2024-05-01 12:30" in text
        assert "/calc 1 &lt; 2" in text
        assert text.startswith("⚠️")


def make_message(text: str, chat_type: str = "private"):
    message = Mock()
    message.text = text
    message.from_user = SimpleNamespace(id=42, username="alice", full_name="Alice", first_name="Alice")
    message.chat = SimpleNamespace(id=-100, type=chat_type, title="Team" if chat_type != "private" else None)
    message.reply = AsyncMock()
    message.answer = AsyncMock()
    return message


class _SessionContext:
    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, *exc):
        return False


class TestHandlers:
    """Test Telegram command handlers"""

    def test_describe_sender_private(self):
        from app.handlers.commands import describe_sender

        fields = describe_sender(make_message("/joke"))
        assert fields == {"user_id": "42", "username": "alice", "server_id": None, "server_name": None}

    def test_describe_sender_group(self):
        from app.handlers.commands import describe_sender

        fields = describe_sender(make_message("/joke", chat_type="supergroup"))
        assert fields["server_id"] == "-100"
        assert fields["server_name"] == "Team"

    @pytest.mark.asyncio
    async def test_calculate_replies_and_logs(self, session):
        from app.handlers import commands as handlers
        from app.core.database import get_command_logs

        message = make_message("/calculate (2 + 3) * 4", chat_type="group")

        with patch.object(handlers, "async_session_maker", lambda: _SessionContext(session)):
            await handlers.cmd_dispatch(message)

        message.reply.assert_awaited_once()
        text = message.reply.await_args.args[0]
        assert "<code>20</code>" in text
        assert message.reply.await_args.kwargs["parse_mode"] == "HTML"

        logs = await get_command_logs(session)
        assert len(logs) == 1
        assert logs[0].username == "alice"
        assert logs[0].server_name == "Team"
        assert logs[0].status == "Success"

    @pytest.mark.asyncio
    async def test_repeat_reply_is_plain_text(self, session):
        from app.handlers import commands as handlers

        message = make_message("/repeat <b>hi</b>")

        with patch.object(handlers, "async_session_maker", lambda: _SessionContext(session)):
            await handlers.cmd_dispatch(message)

        message.reply.assert_awaited_once_with("<b>hi</b>", parse_mode=None)

    @pytest.mark.asyncio
    async def test_long_expression_reply_keeps_markup_balanced(self, session):
        from app.handlers import commands as handlers
        from app.core.database import get_command_logs

        message = make_message("/calc " + "<" * 1500)

        with patch.object(handlers, "async_session_maker", lambda: _SessionContext(session)):
            await handlers.cmd_dispatch(message)

        text = message.reply.await_args.args[0]
        assert len(text) < 4000
        assert text.count("<code>") == text.count("</code>") == 1
        assert not text.endswith("&")

        logs = await get_command_logs(session)
        assert len(logs) == 1
        assert logs[0].status == "Error"

    @pytest.mark.asyncio
    async def test_command_is_logged_when_reply_fails(self, session):
        from app.handlers import commands as handlers
        from app.core.database import get_command_logs

        message = make_message("/calc 2 + 2")
        message.reply.side_effect = RuntimeError("Bad Request: can't parse entities")

        with patch.object(handlers, "async_session_maker", lambda: _SessionContext(session)):
            with pytest.raises(RuntimeError):
                await handlers.cmd_dispatch(message)

        logs = await get_command_logs(session)
        assert len(logs) == 1
        assert logs[0].command == "/calc 2 + 2"

    @pytest.mark.asyncio
    async def test_logs_requires_admin(self):
        from app.handlers import commands as handlers

        message = make_message("/logs")
        await handlers.cmd_logs(message)

        message.answer.assert_awaited_once()
        assert "Access denied" in message.answer.await_args.args[0]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""Pytest configuration and shared fixtures."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from tgnotify.config import NotifySettings


@pytest.fixture
def settings():
    """Fully configured settings; explicit values win over any TGNOTIFY_* env vars."""
    return NotifySettings(
        telegram_bot_token="123456:TEST-TOKEN",
        telegram_chat_id="42",
        parse_mode="plain",
        send_timeout=15.0,
        upload_timeout=30.0,
    )


@pytest.fixture
def mock_bot():
    """Stand-in for telegram.Bot with async API methods."""
    bot = MagicMock()
    bot.initialize = AsyncMock()
    bot.shutdown = AsyncMock()
    bot.send_message = AsyncMock(return_value=MagicMock(message_id=1))
    bot.send_photo = AsyncMock(return_value=MagicMock(message_id=2))
    return bot

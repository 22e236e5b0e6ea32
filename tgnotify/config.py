"""tgnotify configuration management."""

import logging

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional

logger = logging.getLogger("tgnotify.config")


class NotifySettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    telegram_chat_id: Optional[str] = Field(default=None, description="Chat, group or channel to notify")

    # Formatting
    parse_mode: str = Field(default="plain", description="Default parse mode: plain, markdown or html")

    # Transport
    send_timeout: float = Field(default=15.0, description="sendMessage timeout (seconds)")
    upload_timeout: float = Field(default=30.0, description="sendPhoto timeout (seconds)")
    api_base_url: str = Field(default="https://api.telegram.org/bot", description="Bot API base URL")

    model_config = {"env_prefix": "TGNOTIFY_", "env_file": ".env", "extra": "ignore"}

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)


def load_settings() -> NotifySettings:
    """Load settings from environment."""
    settings = NotifySettings()

    if not settings.telegram_configured:
        logger.warning(
            "Telegram is not configured. Set TGNOTIFY_TELEGRAM_BOT_TOKEN and "
            "TGNOTIFY_TELEGRAM_CHAT_ID (environment or .env) to send notifications."
        )

    return settings

"""Telegram channel adapter: delivers prepared text through the Bot API."""

import logging
from pathlib import Path
from typing import Optional, Union

from telegram import Bot
from telegram.error import BadRequest

from ..communication.errors import TelegramConfigError, TelegramSendError, is_parse_entity_error
from ..communication.outbound import (
    TELEGRAM_CAPTION_MAX_CHARS,
    TELEGRAM_TEXT_MAX_CHARS,
    ParseMode,
    PreparedText,
    enforce_length,
    normalize_parse_mode,
    plain_fallback,
    prepare_text,
)
from ..config import NotifySettings

logger = logging.getLogger("tgnotify.telegram")

_IMAGE_MIME_BY_EXT = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
}


def guess_image_mime_type(file_path: Union[str, Path]) -> Optional[str]:
    """MIME type for a supported photo upload, or None if unsupported."""
    return _IMAGE_MIME_BY_EXT.get(Path(file_path).suffix.lower())


def should_retry_as_plain(mode: ParseMode, e: Exception) -> bool:
    """Only converted Markdown falls back; caller-supplied HTML fails as-is."""
    return mode is ParseMode.MARKDOWN and is_parse_entity_error(e)


class TelegramSender:
    """Sends notifications to a single configured chat.

    Usage:
        async with TelegramSender(settings) as sender:
            await sender.send_message("**Build** passed", parse_mode="markdown")

    Markdown is sent as HTML first; if Telegram cannot parse the entities,
    the message is retried exactly once as plain text.
    """

    def __init__(self, settings: NotifySettings, bot: Optional[Bot] = None):
        self._settings = settings
        if bot is None:
            if not settings.telegram_bot_token:
                raise TelegramConfigError("Telegram config missing: bot token is not set.")
            bot = Bot(settings.telegram_bot_token, base_url=settings.api_base_url)
        self._bot = bot

    async def __aenter__(self) -> "TelegramSender":
        await self._bot.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._bot.shutdown()

    def _chat_id(self) -> str:
        chat_id = (self._settings.telegram_chat_id or "").strip()
        if not chat_id:
            raise TelegramConfigError("Telegram config missing: chat id is not set.")
        return chat_id

    def _mode(self, parse_mode: Union[str, ParseMode, None]) -> ParseMode:
        return normalize_parse_mode(parse_mode if parse_mode is not None else self._settings.parse_mode)

    async def _call(self, action: str, request):
        """Await a Bot API call, turning BadRequest into TelegramSendError."""
        try:
            return await request
        except BadRequest as e:
            raise TelegramSendError(action, e.message) from e

    async def _send_prepared_message(self, chat_id: str, prepared: PreparedText):
        return await self._call(
            "sendMessage",
            self._bot.send_message(
                chat_id=chat_id,
                text=prepared.text,
                parse_mode=prepared.parse_mode,
                read_timeout=self._settings.send_timeout,
                write_timeout=self._settings.send_timeout,
            ),
        )

    async def send_message(self, text: str, parse_mode: Union[str, ParseMode, None] = None):
        """Send a text message.

        Args:
            text: Message text
            parse_mode: "plain", "markdown" or "html" (default: settings.parse_mode)

        Returns:
            The telegram.Message that was sent
        """
        chat_id = self._chat_id()
        mode = self._mode(parse_mode)
        prepared = prepare_text(text, mode)
        enforce_length(prepared.visible_text, TELEGRAM_TEXT_MAX_CHARS, "message")

        try:
            message = await self._send_prepared_message(chat_id, prepared)
        except TelegramSendError as e:
            if not should_retry_as_plain(mode, e):
                raise
            logger.warning(f"Markdown rejected by Telegram ({e.description}), retrying as plain text")
            fallback = plain_fallback(prepared)
            enforce_length(fallback.visible_text, TELEGRAM_TEXT_MAX_CHARS, "message")
            message = await self._send_prepared_message(chat_id, fallback)

        logger.info(f"Sent {mode.value} message to {chat_id} ({len(prepared.visible_text)} chars)")
        return message

    async def _send_prepared_photo(
        self, chat_id: str, photo: bytes, filename: str, caption: Optional[PreparedText],
    ):
        return await self._call(
            "sendPhoto",
            self._bot.send_photo(
                chat_id=chat_id,
                photo=photo,
                filename=filename,
                caption=caption.text if caption else None,
                parse_mode=caption.parse_mode if caption else None,
                read_timeout=self._settings.upload_timeout,
                write_timeout=self._settings.upload_timeout,
            ),
        )

    async def send_photo(
        self,
        file_path: Union[str, Path],
        caption: Optional[str] = None,
        parse_mode: Union[str, ParseMode, None] = None,
    ):
        """Upload a local image with an optional caption.

        Args:
            file_path: jpg, jpeg, png, webp, gif or bmp file
            caption: Optional caption (blank captions are dropped)
            parse_mode: Caption parse mode (default: settings.parse_mode)

        Returns:
            The telegram.Message that was sent
        """
        chat_id = self._chat_id()

        path_text = str(file_path).strip() if file_path is not None else ""
        if not path_text:
            raise ValueError("Telegram photo file path is required")
        path = Path(path_text)

        mime_type = guess_image_mime_type(path)
        if not mime_type:
            raise ValueError("Unsupported image format. Use jpg, jpeg, png, webp, gif, or bmp.")

        photo = path.read_bytes()
        if not photo:
            raise ValueError("Image file is empty")

        mode = self._mode(parse_mode)
        caption_text = (caption or "").strip()
        prepared = prepare_text(caption_text, mode) if caption_text else None
        if prepared:
            enforce_length(prepared.visible_text, TELEGRAM_CAPTION_MAX_CHARS, "caption")

        try:
            message = await self._send_prepared_photo(chat_id, photo, path.name, prepared)
        except TelegramSendError as e:
            if not prepared or not should_retry_as_plain(mode, e):
                raise
            logger.warning(f"Caption markdown rejected by Telegram ({e.description}), retrying as plain text")
            fallback = plain_fallback(prepared)
            enforce_length(fallback.visible_text, TELEGRAM_CAPTION_MAX_CHARS, "caption")
            message = await self._send_prepared_photo(chat_id, photo, path.name, fallback)

        logger.info(f"Sent photo {path.name} ({mime_type}, {len(photo)} bytes) to {chat_id}")
        return message

"""Error types for outbound Telegram text, plus user-facing classification."""

import asyncio
from typing import Optional

from telegram.error import BadRequest, Forbidden, InvalidToken, NetworkError, RetryAfter, TimedOut


# ════════════════════════════════════════════════════════
# Formatting errors: raised synchronously by prepare_text()
# and enforce_length().  Never retried inside the core.
# ════════════════════════════════════════════════════════

class TelegramFormatError(ValueError):
    """Base class for errors raised while preparing outbound text."""
    pass

class EmptyInputError(TelegramFormatError):
    """Text has no visible content after line-ending normalization."""

    def __init__(self, message: str = "Telegram text is empty"):
        super().__init__(message)

class UnsafeMarkupError(TelegramFormatError):
    """Caller-supplied HTML failed allowlist validation.

    ``reason`` names the category: denylisted_tag, event_handler,
    unsupported_tag, closing_tag_attributes, bad_link, unexpected_attributes.
    """

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason

class TooLongError(TelegramFormatError):
    """Visible text exceeds the Telegram limit for a message or caption."""

    def __init__(self, label: str, length: int, max_chars: int):
        super().__init__(f"Telegram {label} too long ({length} chars; max {max_chars}).")
        self.label = label
        self.length = length
        self.max_chars = max_chars


# ════════════════════════════════════════════════════════
# Transport errors: raised by channels.telegram
# ════════════════════════════════════════════════════════

class TelegramConfigError(RuntimeError):
    """Bot token or chat id is missing."""
    pass

class TelegramSendError(RuntimeError):
    """Telegram Bot API rejected a request."""

    def __init__(self, action: str, description: str):
        super().__init__(f"Telegram {action} error: {description}")
        self.action = action
        self.description = description


_PARSE_ENTITY_MARKERS = ("parse entities", "can't parse entities", "can't find end of")


def is_parse_entity_error(e: Exception) -> bool:
    """True when Telegram refused a message because its markup did not parse."""
    if isinstance(e, TelegramSendError):
        description: Optional[str] = e.description
    elif isinstance(e, BadRequest):
        description = e.message
    else:
        return False
    description = (description or str(e)).lower()
    return any(marker in description for marker in _PARSE_ENTITY_MARKERS)


def classify_error(e: Exception) -> str:
    """Classify a send failure into a short user-facing message.

    Used by the CLI; the original exception is still logged by the caller.
    """
    # 1-3: Formatting errors carry their own readable message
    if isinstance(e, TooLongError):
        return f"{str(e)} Shorten the text; it is never truncated."
    if isinstance(e, UnsafeMarkupError):
        return f"HTML rejected: {e}"
    if isinstance(e, TelegramFormatError):
        return str(e)

    # 4: Missing configuration
    if isinstance(e, TelegramConfigError):
        return f"{e} Set TGNOTIFY_TELEGRAM_BOT_TOKEN and TGNOTIFY_TELEGRAM_CHAT_ID."

    # 5-6: Telegram API errors
    if isinstance(e, TelegramSendError):
        if is_parse_entity_error(e):
            return "Telegram could not parse the message markup."
        return str(e)
    if isinstance(e, (InvalidToken, Forbidden)):
        return "Authentication error. Check the bot token and that the bot can post to the chat."

    # 7: Rate limit
    if isinstance(e, RetryAfter):
        return f"Rate limited by Telegram. Retry after {e.retry_after} seconds."

    # 8-10: BadRequest and TimedOut both subclass NetworkError, check them first
    if isinstance(e, BadRequest):
        return f"Telegram rejected the request: {e.message}"
    if isinstance(e, (TimedOut, asyncio.TimeoutError)):
        return "Request to Telegram timed out. Please try again."
    if isinstance(e, NetworkError):
        return "Cannot connect to Telegram. Please check connectivity and try again."

    # 11: Local problems with a photo upload (missing, empty, wrong format)
    if isinstance(e, FileNotFoundError):
        return f"File not found: {e.filename}"
    if isinstance(e, ValueError):
        return str(e)

    # 12: Fallback, include type name for debugging
    type_name = type(e).__name__
    return f"Something went wrong ({type_name}). Check logs for details."

"""Communication sub-core: outbound Telegram text handling.

This package is the single source of truth for message formatting:
- Formatting: Markdown subset → Telegram HTML (escape, tokenize, restore)
- HTML validation: allowlist checks for caller-supplied markup
- Outbound: mode dispatch, visible text, length limits
- Errors: formatting/transport error types and user-facing classification

Nothing in here performs I/O.
"""

from .errors import (
    TelegramFormatError,
    EmptyInputError,
    UnsafeMarkupError,
    TooLongError,
    TelegramConfigError,
    TelegramSendError,
    classify_error,
    is_parse_entity_error,
)
from .formatting import escape_html, markdown_to_telegram_html, visible_text
from .html_validator import TELEGRAM_ALLOWED_HTML_TAGS, is_safe_html, validate_html
from .outbound import (
    TELEGRAM_CAPTION_MAX_CHARS,
    TELEGRAM_TEXT_MAX_CHARS,
    ParseMode,
    PreparedText,
    enforce_length,
    normalize_parse_mode,
    plain_fallback,
    prepare_text,
)

__all__ = [
    # Errors
    "TelegramFormatError",
    "EmptyInputError",
    "UnsafeMarkupError",
    "TooLongError",
    "TelegramConfigError",
    "TelegramSendError",
    "classify_error",
    "is_parse_entity_error",
    # Formatting
    "escape_html",
    "markdown_to_telegram_html",
    "visible_text",
    # HTML validation
    "TELEGRAM_ALLOWED_HTML_TAGS",
    "is_safe_html",
    "validate_html",
    # Outbound
    "TELEGRAM_CAPTION_MAX_CHARS",
    "TELEGRAM_TEXT_MAX_CHARS",
    "ParseMode",
    "PreparedText",
    "enforce_length",
    "normalize_parse_mode",
    "plain_fallback",
    "prepare_text",
]

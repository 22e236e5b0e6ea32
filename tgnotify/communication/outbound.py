"""Outbound text preparation: the single entry point before delivery.

Handles:
- Line-ending normalization (CRLF → LF) for every mode
- Empty-text rejection
- Mode dispatch: plain (as-is), markdown (converted), html (validated)
- Visible-text derivation and Telegram length limits

Design principle: limits are checked against what the user will see
(visible_text), never against the markup-bearing text.  Text that is too
long is rejected, never truncated.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import EmptyInputError, TooLongError
from .formatting import markdown_to_telegram_html, normalize_line_endings, visible_text
from .html_validator import validate_html

logger = logging.getLogger("tgnotify.outbound")

TELEGRAM_TEXT_MAX_CHARS = 4096
TELEGRAM_CAPTION_MAX_CHARS = 1024

TELEGRAM_HTML_PARSE_MODE = "HTML"


class ParseMode(str, Enum):
    """How the caller's text should be interpreted."""
    PLAIN = "plain"
    MARKDOWN = "markdown"
    HTML = "html"


@dataclass(frozen=True)
class PreparedText:
    """Text ready for the transport.

    Attributes:
        text: What to send
        visible_text: text with markup removed and entities decoded
        parse_mode: "HTML" when text carries markup, None for plain text
        normalized_source: Original input after CRLF → LF, for the
            plain-text fallback when Telegram rejects the markup
    """
    text: str
    visible_text: str
    normalized_source: str
    parse_mode: Optional[str] = None


def normalize_parse_mode(value: Union[str, ParseMode, None]) -> ParseMode:
    """Map loose user input to a ParseMode; anything unrecognized is plain."""
    if isinstance(value, ParseMode):
        return value
    if isinstance(value, str) and value.strip().lower() in (ParseMode.MARKDOWN.value, ParseMode.HTML.value):
        return ParseMode(value.strip().lower())
    return ParseMode.PLAIN


def prepare_text(text: str, mode: Union[str, ParseMode]) -> PreparedText:
    """Prepare a message or caption for Telegram.

    Args:
        text: Raw caller text
        mode: "plain", "markdown" or "html"

    Returns:
        PreparedText

    Raises:
        EmptyInputError: text is blank after normalization
        UnsafeMarkupError: html mode and the markup failed validation
        ValueError: mode is not a known parse mode
    """
    mode = ParseMode(mode)
    source = normalize_line_endings(text)
    if not source.strip():
        raise EmptyInputError()

    if mode is ParseMode.HTML:
        validate_html(source)
        return PreparedText(
            text=source,
            visible_text=visible_text(source),
            normalized_source=source,
            parse_mode=TELEGRAM_HTML_PARSE_MODE,
        )

    if mode is ParseMode.MARKDOWN:
        converted = markdown_to_telegram_html(source)
        return PreparedText(
            text=converted,
            visible_text=visible_text(converted),
            normalized_source=source,
            parse_mode=TELEGRAM_HTML_PARSE_MODE,
        )

    return PreparedText(text=source, visible_text=source, normalized_source=source)


def plain_fallback(prepared: PreparedText) -> PreparedText:
    """The same message as unformatted text, for a retry without parse_mode."""
    source = prepared.normalized_source
    return PreparedText(text=source, visible_text=source, normalized_source=source)


def enforce_length(visible: str, max_chars: int, label: str) -> None:
    """Raise TooLongError when the visible text exceeds ``max_chars``.

    Args:
        visible: PreparedText.visible_text
        max_chars: TELEGRAM_TEXT_MAX_CHARS or TELEGRAM_CAPTION_MAX_CHARS
        label: "message" or "caption", used in the error message
    """
    length = len(visible)
    if length > max_chars:
        logger.debug(f"Rejecting {label}: {length} visible chars (max {max_chars})")
        raise TooLongError(label, length, max_chars)

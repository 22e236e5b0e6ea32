"""HTML validator: allowlist checks for caller-supplied Telegram HTML.

Input for parse_mode=html is sent as-is, so it is validated instead of
sanitized: either every tag and attribute is acceptable, or the whole text
is rejected with UnsafeMarkupError.  Nothing is ever rewritten.

Rules:
- Denylisted tags (script, style, iframe, ...) are rejected first
- Event-handler attributes (onclick=, onload=, ...) are rejected anywhere
- Every tag must be in TELEGRAM_ALLOWED_HTML_TAGS
- Closing tags carry no attributes
- <a> carries exactly one href="http(s)://..." attribute; other tags none
"""

import logging
import re

from .errors import UnsafeMarkupError

logger = logging.getLogger("tgnotify.html_validator")

TELEGRAM_ALLOWED_HTML_TAGS = frozenset({
    "a",
    "b",
    "blockquote",
    "code",
    "del",
    "em",
    "i",
    "ins",
    "pre",
    "s",
    "spoiler",
    "strike",
    "strong",
    "tg-spoiler",
    "u",
})

DENYLISTED_HTML_TAGS = frozenset({
    "script",
    "style",
    "iframe",
    "object",
    "embed",
    "form",
    "input",
    "button",
    "img",
})

_DENYLIST_RE = re.compile(
    r'<\s*/?\s*(?:' + "|".join(sorted(DENYLISTED_HTML_TAGS)) + r')\b',
    re.IGNORECASE,
)
_EVENT_HANDLER_RE = re.compile(r'\son[a-z]+\s*=', re.IGNORECASE)
_TAG_RE = re.compile(r'<\s*(/?)\s*([a-zA-Z0-9-]+)([^>]*)>')
_HREF_RE = re.compile(r'^href="https?://[^"\s<>]+"$', re.IGNORECASE)


def validate_html(html_text: str) -> None:
    """Check caller-supplied HTML against the Telegram allowlist.

    Args:
        html_text: Markup to be sent with parse_mode=HTML

    Raises:
        UnsafeMarkupError: on the first violation found
    """
    if _DENYLIST_RE.search(html_text):
        raise UnsafeMarkupError(
            "Unsupported HTML tag for Telegram parse_mode=html.",
            reason="denylisted_tag",
        )
    if _EVENT_HANDLER_RE.search(html_text):
        raise UnsafeMarkupError(
            "Event handler attributes are not allowed for Telegram parse_mode=html.",
            reason="event_handler",
        )

    for match in _TAG_RE.finditer(html_text):
        closing = match.group(1) == "/"
        tag = match.group(2).lower()
        attrs = match.group(3).strip()

        if tag not in TELEGRAM_ALLOWED_HTML_TAGS:
            raise UnsafeMarkupError(
                f"Unsupported HTML tag <{tag}> for Telegram parse_mode=html.",
                reason="unsupported_tag",
            )

        if closing:
            if attrs:
                raise UnsafeMarkupError(
                    f"Closing tag </{tag}> must not include attributes.",
                    reason="closing_tag_attributes",
                )
            continue

        if tag == "a":
            if not _HREF_RE.match(attrs):
                raise UnsafeMarkupError(
                    'Only <a href="https://..."> links are allowed for Telegram parse_mode=html.',
                    reason="bad_link",
                )
            continue

        if attrs:
            raise UnsafeMarkupError(
                f"Tag <{tag}> does not allow attributes in parse_mode=html.",
                reason="unexpected_attributes",
            )

    logger.debug("HTML passed validation")


def is_safe_html(html_text: str) -> tuple[bool, str]:
    """Non-raising variant of validate_html.

    Returns:
        (True, "") when accepted, (False, reason_message) otherwise
    """
    try:
        validate_html(html_text)
        return True, ""
    except UnsafeMarkupError as e:
        return False, str(e)

"""Markdown subset to Telegram HTML converter.

Telegram supports a limited HTML subset:
  <b>bold</b>, <i>italic</i>, <u>underline</u>, <s>strikethrough</s>,
  <code>inline code</code>, <pre>code block</pre>,
  <a href="url">link</a>, <tg-spoiler>spoiler</tg-spoiler>

This module converts a small Markdown subset to HTML that Telegram will
accept.  Everything is escaped first; code spans and links are then hidden
behind placeholder tokens so the span formatter cannot re-match markers
inside them, and restored at the end.

Anything that does not parse as a recognized construct stays literal text.
"""

import logging
import re
import html as _html

logger = logging.getLogger("tgnotify.formatting")

_TOKEN_PREFIX = "@@TGN"

_LINK_URL_RE = re.compile(r'^https?://[^\s<>"\']+$', re.IGNORECASE)
_WHITESPACE_RE = re.compile(r'\s')
_TAG_RE = re.compile(r'<[^>]+>')
_ENTITY_RE = re.compile(r'&(amp|lt|gt|quot|#39);')
_ENTITIES = {"amp": "&", "lt": "<", "gt": ">", "quot": '"', "#39": "'"}

# Applied in this order: bold must consume ** before single-* italic runs.
_BOLD_RE = re.compile(r'\*\*([^*\n][^*\n]*?)\*\*')
_STRIKE_RE = re.compile(r'~~([^~\n][^~\n]*?)~~')
_ITALIC_STAR_RE = re.compile(r'(?<!\*)\*([^*\n]+?)\*(?!\*)')
_ITALIC_UNDERSCORE_RE = re.compile(r'(?<!_)_([^_\n]+?)_(?!_)')
_HEADING_RE = re.compile(r'^#{1,6}\s+(.*\S)\s*$')


# ============================================================
# ESCAPING
# ============================================================

def escape_html(text: str) -> str:
    """Escape &, <, > and double quotes in plain text."""
    return _html.escape(text, quote=False).replace('"', "&quot;")


def escape_attribute(value: str) -> str:
    """Escape quote characters in a value placed inside a quoted attribute."""
    return value.replace('"', "&quot;").replace("'", "&#39;")


def decode_entities(value: str) -> str:
    """Decode the five entities produced by escape_html/escape_attribute.

    Single pass, so ``&amp;lt;`` decodes to ``&lt;`` and not to ``<``.
    """
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(1)], value)


def strip_tags(value: str) -> str:
    """Remove every tag, keeping the text between them."""
    return _TAG_RE.sub("", value)


def visible_text(markup: str) -> str:
    """What the user sees once Telegram renders ``markup``."""
    return decode_entities(strip_tags(markup))


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


# ============================================================
# PLACEHOLDER TOKENS
# ============================================================

def token_prefix(source: str) -> str:
    """Pick a token prefix that occurs nowhere in ``source``.

    User text then cannot start a token, nor complete one whose first
    characters come from the text next to it.
    """
    prefix = _TOKEN_PREFIX
    counter = 0
    while prefix in source:
        counter += 1
        prefix = f"{_TOKEN_PREFIX}{counter}"
    return prefix


def _unique_token(prefix: str, kind: str, index: int, source: str) -> str:
    """Build a placeholder token that does not already occur in ``source``.

    The disambiguator uses '-' so no token contains a span-formatting marker.
    """
    token = f"{prefix}{kind}{index}@@"
    counter = 0
    while token in source:
        counter += 1
        token = f"{prefix}{kind}{index}-{counter}@@"
    return token


def extract_inline_code(escaped: str, prefix: str | None = None) -> tuple[str, dict[str, str]]:
    """Replace `code` spans with placeholder tokens.

    Spans never cross a newline.  An empty span (two backticks) stays as two
    literal backticks; an unmatched backtick stays literal.

    Returns:
        Tuple of (text_with_tokens, {token: "<code>...</code>"})
    """
    if prefix is None:
        prefix = token_prefix(escaped)
    replacements: dict[str, str] = {}
    out = []
    i = 0
    n = len(escaped)

    while i < n:
        ch = escaped[i]
        if ch != "`":
            out.append(ch)
            i += 1
            continue

        close = i + 1
        while close < n and escaped[close] not in ("`", "\n"):
            close += 1

        if close >= n or escaped[close] != "`":
            out.append(ch)
            i += 1
            continue

        inner = escaped[i + 1:close]
        if not inner:
            out.append("``")
            i = close + 1
            continue

        token = _unique_token(prefix, "CODE", len(replacements), escaped)
        replacements[token] = f"<code>{inner}</code>"
        out.append(token)
        i = close + 1

    return "".join(out), replacements


def _match_link(escaped: str, start: int) -> tuple[str, str, int] | None:
    """Try to read ``[label](url)`` at ``start``.

    Returns (label, url, end_index) or None.  No lenient matching: any
    violation means the '[' is not a link.
    """
    close_bracket = escaped.find("]", start + 1)
    if close_bracket == -1:
        return None

    label = escaped[start + 1:close_bracket]
    open_paren = close_bracket + 1
    # Nested brackets are left literal; the inner link can still match later
    if not label or "\n" in label or "[" in label:
        return None
    if open_paren >= len(escaped) or escaped[open_paren] != "(":
        return None

    close_paren = escaped.find(")", open_paren + 1)
    if close_paren == -1:
        return None

    url = escaped[open_paren + 1:close_paren]
    if not url or _WHITESPACE_RE.search(url) or not _LINK_URL_RE.match(url):
        return None

    return label, url, close_paren + 1


def extract_links(escaped: str, prefix: str | None = None) -> tuple[str, dict[str, str]]:
    """Replace [label](http(s)://url) links with placeholder tokens.

    Pass the prefix used for code tokens when ``escaped`` already holds them.

    Returns:
        Tuple of (text_with_tokens, {token: '<a href="...">label</a>'})
    """
    if prefix is None:
        prefix = token_prefix(escaped)
    replacements: dict[str, str] = {}
    out = []
    i = 0
    n = len(escaped)

    while i < n:
        ch = escaped[i]
        if ch != "[":
            out.append(ch)
            i += 1
            continue

        match = _match_link(escaped, i)
        if match is None:
            out.append(ch)
            i += 1
            continue

        label, url, end = match
        token = _unique_token(prefix, "LINK", len(replacements), escaped)
        replacements[token] = f'<a href="{escape_attribute(url)}">{label}</a>'
        out.append(token)
        i = end

    return "".join(out), replacements


def restore_placeholders(text: str, replacements: dict[str, str]) -> str:
    """Put the stored markup back in place of every token.

    One left-to-right pass over all tokens, so the trailing '@@' of a
    restored token is never read as the start of another.
    """
    if not replacements:
        return text
    pattern = re.compile("|".join(
        re.escape(token) for token in sorted(replacements, key=len, reverse=True)
    ))
    return pattern.sub(lambda m: replacements[m.group(0)], text)


# ============================================================
# SPAN FORMATTING
# ============================================================

def _format_bold(text: str) -> str:
    return _BOLD_RE.sub(r'<b>\1</b>', text)


def _format_strike(text: str) -> str:
    return _STRIKE_RE.sub(r'<s>\1</s>', text)


def _format_italic_star(text: str) -> str:
    return _ITALIC_STAR_RE.sub(r'<i>\1</i>', text)


def _format_italic_underscore(text: str) -> str:
    return _ITALIC_UNDERSCORE_RE.sub(r'<i>\1</i>', text)


def _format_headings(text: str) -> str:
    # Telegram has no headings: "# Title" → <b>Title</b>
    lines = []
    for line in text.split("\n"):
        m = _HEADING_RE.match(line)
        lines.append(f"<b>{m.group(1)}</b>" if m else line)
    return "\n".join(lines)


_SPAN_PASSES = (
    _format_bold,
    _format_strike,
    _format_italic_star,
    _format_italic_underscore,
    _format_headings,
)


def apply_span_formatting(text: str) -> str:
    """Apply bold, strikethrough, italic and heading passes, in that order.

    Handles:
    - **bold** → <b>bold</b>
    - ~~strikethrough~~ → <s>strikethrough</s>
    - *italic* / _italic_ → <i>italic</i> (not adjacent to a doubled marker)
    - # Heading (1-6 '#') → <b>Heading</b>

    Markers never span lines.
    """
    for apply_pass in _SPAN_PASSES:
        text = apply_pass(text)
    return text


# ============================================================
# PIPELINE
# ============================================================

def markdown_to_telegram_html(text: str) -> str:
    """Convert Markdown-subset text to Telegram-safe HTML.

    Pipeline: escape → code tokens → link tokens → span formatting →
    restore links → restore code.  Never raises on malformed Markdown.
    """
    escaped = escape_html(normalize_line_endings(text))
    prefix = token_prefix(escaped)
    with_code, code_spans = extract_inline_code(escaped, prefix)
    with_links, links = extract_links(with_code, prefix)
    formatted = apply_span_formatting(with_links)
    output = restore_placeholders(formatted, links)
    output = restore_placeholders(output, code_spans)
    logger.debug(f"Converted markdown: {len(code_spans)} code spans, {len(links)} links")
    return output

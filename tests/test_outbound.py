"""Tests for outbound text preparation and length limits."""

import dataclasses

import pytest

from tgnotify.communication.errors import EmptyInputError, TooLongError, UnsafeMarkupError
from tgnotify.communication.outbound import (
    TELEGRAM_CAPTION_MAX_CHARS,
    TELEGRAM_TEXT_MAX_CHARS,
    ParseMode,
    PreparedText,
    enforce_length,
    normalize_parse_mode,
    plain_fallback,
    prepare_text,
)


class TestPrepareText:
    """Test mode dispatch in prepare_text()."""

    def test_plain_is_normalized_only(self):
        prepared = prepare_text("a <b> **c**\r\nd", "plain")
        assert prepared == PreparedText(
            text="a <b> **c**\nd",
            visible_text="a <b> **c**\nd",
            normalized_source="a <b> **c**\nd",
            parse_mode=None,
        )

    @pytest.mark.parametrize("mode", ["plain", "markdown", "html"])
    def test_blank_text_rejected_in_every_mode(self, mode):
        with pytest.raises(EmptyInputError, match="Telegram text is empty"):
            prepare_text("  \r\n\t ", mode)

    def test_empty_check_runs_before_html_validation(self):
        with pytest.raises(EmptyInputError):
            prepare_text("", "html")

    def test_markdown(self):
        prepared = prepare_text("**hi** <x>\r\nnext", "markdown")
        assert prepared.text == "<b>hi</b> &lt;x&gt;\nnext"
        assert prepared.visible_text == "hi <x>\nnext"
        assert prepared.parse_mode == "HTML"
        assert prepared.normalized_source == "**hi** <x>\nnext"

    def test_html(self):
        prepared = prepare_text("<b>Done</b> &amp; more", "html")
        assert prepared.text == "<b>Done</b> &amp; more"
        assert prepared.visible_text == "Done & more"
        assert prepared.parse_mode == "HTML"

    def test_html_validation_failure(self):
        with pytest.raises(UnsafeMarkupError):
            prepare_text("<script>alert(1)</script>", "html")

    def test_accepts_enum(self):
        assert prepare_text("**x**", ParseMode.MARKDOWN).text == "<b>x</b>"

    def test_unknown_mode_is_programming_error(self):
        with pytest.raises(ValueError):
            prepare_text("hello", "rtf")

    def test_prepared_text_is_frozen(self):
        prepared = prepare_text("x", "plain")
        with pytest.raises(dataclasses.FrozenInstanceError):
            prepared.text = "y"

    def test_visible_text_never_has_structural_markup(self):
        markdown = prepare_text("**x** `y` [z](https://e.com)", "markdown")
        assert "<" not in markdown.visible_text
        html = prepare_text("<b>x</b> &lt;literal&gt;", "html")
        assert html.visible_text == "x <literal>"

    def test_plain_fallback(self):
        prepared = prepare_text("**x**", "markdown")
        fallback = plain_fallback(prepared)
        assert fallback.text == "**x**"
        assert fallback.visible_text == "**x**"
        assert fallback.parse_mode is None


class TestNormalizeParseMode:
    @pytest.mark.parametrize("value,expected", [
        (None, ParseMode.PLAIN),
        ("", ParseMode.PLAIN),
        ("plain", ParseMode.PLAIN),
        ("markdown", ParseMode.MARKDOWN),
        ("MARKDOWN", ParseMode.MARKDOWN),
        (" html ", ParseMode.HTML),
        ("MarkdownV2", ParseMode.PLAIN),
        (ParseMode.HTML, ParseMode.HTML),
    ])
    def test_mapping(self, value, expected):
        assert normalize_parse_mode(value) is expected


class TestEnforceLength:
    def test_limits(self):
        assert TELEGRAM_TEXT_MAX_CHARS == 4096
        assert TELEGRAM_CAPTION_MAX_CHARS == 1024

    def test_exact_boundary_passes(self):
        enforce_length("a" * TELEGRAM_TEXT_MAX_CHARS, TELEGRAM_TEXT_MAX_CHARS, "message")
        enforce_length("a" * TELEGRAM_CAPTION_MAX_CHARS, TELEGRAM_CAPTION_MAX_CHARS, "caption")

    def test_one_over_fails(self):
        with pytest.raises(TooLongError) as exc_info:
            enforce_length("a" * 4097, TELEGRAM_TEXT_MAX_CHARS, "message")
        assert str(exc_info.value) == "Telegram message too long (4097 chars; max 4096)."
        assert exc_info.value.length == 4097

    def test_caption_label(self):
        with pytest.raises(TooLongError, match="Telegram caption too long"):
            enforce_length("a" * 1025, TELEGRAM_CAPTION_MAX_CHARS, "caption")

    def test_markup_does_not_count(self):
        prepared = prepare_text("**" + "a" * 4096 + "**", "markdown")
        assert len(prepared.text) > 4096
        enforce_length(prepared.visible_text, TELEGRAM_TEXT_MAX_CHARS, "message")

    def test_escaped_entities_count_as_one_char(self):
        prepared = prepare_text("<" * 4096, "markdown")
        enforce_length(prepared.visible_text, TELEGRAM_TEXT_MAX_CHARS, "message")

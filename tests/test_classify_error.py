"""Tests for classify_error() and is_parse_entity_error()."""

import asyncio

from telegram.error import BadRequest, Forbidden, InvalidToken, NetworkError, RetryAfter, TimedOut

from tgnotify.communication.errors import (
    EmptyInputError,
    TelegramConfigError,
    TelegramSendError,
    TooLongError,
    UnsafeMarkupError,
    classify_error,
    is_parse_entity_error,
)


# ── Formatting errors ───────────────────────────────────────

class TestFormattingErrors:
    def test_too_long(self):
        msg = classify_error(TooLongError("caption", 1025, 1024))
        assert "Telegram caption too long (1025 chars; max 1024)." in msg
        assert "never truncated" in msg

    def test_unsafe_markup(self):
        msg = classify_error(UnsafeMarkupError("Unsupported HTML tag <div>.", reason="unsupported_tag"))
        assert msg.startswith("HTML rejected")
        assert "<div>" in msg

    def test_empty(self):
        assert classify_error(EmptyInputError()) == "Telegram text is empty"


# ── Transport errors ────────────────────────────────────────

class TestTransportErrors:
    def test_config(self):
        assert "TGNOTIFY_TELEGRAM_BOT_TOKEN" in classify_error(TelegramConfigError("Telegram config missing."))

    def test_send_parse_error(self):
        e = TelegramSendError("sendMessage", "Can't parse entities: bad tag")
        assert "could not parse" in classify_error(e)

    def test_send_other(self):
        e = TelegramSendError("sendPhoto", "Chat not found")
        assert classify_error(e) == "Telegram sendPhoto error: Chat not found"

    def test_forbidden(self):
        assert "Authentication" in classify_error(Forbidden("bot was blocked by the user"))

    def test_invalid_token(self):
        assert "Authentication" in classify_error(InvalidToken())

    def test_retry_after(self):
        assert "Rate limited" in classify_error(RetryAfter(5))

    def test_bad_request_is_not_a_connection_problem(self):
        assert classify_error(BadRequest("Chat not found")) == "Telegram rejected the request: Chat not found"

    def test_timed_out(self):
        assert "timed out" in classify_error(TimedOut())

    def test_asyncio_timeout(self):
        assert "timed out" in classify_error(asyncio.TimeoutError())

    def test_network(self):
        assert "Cannot connect" in classify_error(NetworkError("connection reset"))


# ── Local / fallback ────────────────────────────────────────

class TestFallback:
    def test_file_not_found(self):
        assert classify_error(FileNotFoundError(2, "No such file", "/x.png")) == "File not found: /x.png"

    def test_value_error(self):
        assert classify_error(ValueError("Image file is empty")) == "Image file is empty"

    def test_unknown(self):
        assert "KeyError" in classify_error(KeyError("x"))


class TestIsParseEntityError:
    def test_bad_request_markers(self):
        assert is_parse_entity_error(BadRequest("Bad Request: can't parse entities: x"))
        assert is_parse_entity_error(BadRequest("Can't find end of the entity starting at byte offset 4"))

    def test_send_error(self):
        assert is_parse_entity_error(TelegramSendError("sendPhoto", "can't parse entities"))

    def test_other_errors(self):
        assert not is_parse_entity_error(BadRequest("Chat not found"))
        assert not is_parse_entity_error(RuntimeError("can't parse entities"))
        assert not is_parse_entity_error(NetworkError("can't parse entities"))

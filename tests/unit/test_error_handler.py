"""
Unit tests for handlers/error_handler.py
"""

import pytest
from telegram.error import BadRequest, NetworkError

from handlers.error_handler import (
    CALLBACK_ERROR_TEXT,
    ERROR_MESSAGES,
    FALLBACK_TEXT,
    ErrorResponder,
    ErrorStats,
    error_keyboard,
    error_message,
)
from tests.builders import make_callback_update, make_context, make_text_update
from utils.errors import ErrorCategory, InvalidInputError


class TestMessages:

    def test_every_category_has_a_distinct_message(self):
        assert set(ERROR_MESSAGES) == set(ErrorCategory)
        assert len(set(ERROR_MESSAGES.values())) == len(ErrorCategory)

    def test_error_id_is_included(self):
        assert "ERR_ABC" in error_message(ErrorCategory.GENERAL, "ERR_ABC")

    def test_keyboards(self):
        assert error_keyboard(ErrorCategory.RATE_LIMITED) is None
        retry = error_keyboard(ErrorCategory.NETWORK)
        assert retry.inline_keyboard[0][0].callback_data == "retry_last_action"
        back = error_keyboard(ErrorCategory.VALIDATION)
        assert back.inline_keyboard[0][0].callback_data == "back_to_main"


class TestErrorResponder:

    @pytest.mark.asyncio
    async def test_message_update_gets_a_reply(self):
        responder = ErrorResponder()
        update = make_text_update("/search الصلاة")

        error_id = await responder.respond(InvalidInputError("bad"), update, make_context())

        assert error_id.startswith("ERR_")
        args, kwargs = update.effective_message.reply_text.call_args
        assert error_id in args[0]
        assert ERROR_MESSAGES[ErrorCategory.VALIDATION] in args[0]

    @pytest.mark.asyncio
    async def test_callback_update_gets_answer_and_edit(self):
        responder = ErrorResponder()
        update = make_callback_update("action_random")

        error_id = await responder.respond(NetworkError("boom"), update, make_context())

        update.callback_query.answer.assert_awaited_once_with(CALLBACK_ERROR_TEXT)
        text = update.callback_query.edit_message_text.call_args.args[0]
        assert error_id in text
        update.effective_message.reply_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_send_falls_back_to_plaintext(self):
        responder = ErrorResponder()
        update = make_text_update("/random")
        update.effective_message.reply_text.side_effect = BadRequest("can't parse entities")
        context = make_context()

        error_id = await responder.respond(RuntimeError("x"), update, context)

        context.bot.send_message.assert_awaited_once()
        kwargs = context.bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 111
        assert FALLBACK_TEXT in kwargs["text"]
        assert error_id in kwargs["text"]

    @pytest.mark.asyncio
    async def test_failed_fallback_is_only_logged(self):
        responder = ErrorResponder()
        update = make_text_update("/random")
        update.effective_message.reply_text.side_effect = BadRequest("x")
        context = make_context()
        context.bot.send_message.side_effect = NetworkError("down")

        error_id = await responder.respond(RuntimeError("x"), update, context)

        assert error_id.startswith("ERR_")

    @pytest.mark.asyncio
    async def test_errors_are_counted(self):
        stats = ErrorStats()
        responder = ErrorResponder(stats)

        await responder.respond(InvalidInputError("a"), make_text_update("x"), make_context())
        await responder.respond(RuntimeError("b"), make_text_update("y"), make_context())

        snapshot = stats.snapshot()
        assert snapshot["total"] == 2
        assert snapshot["by_category"] == {"validation": 1, "general": 1}
        assert snapshot["by_user"] == {111: 2}
        assert [entry["message"] for entry in snapshot["recent"]] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_application_error_without_update(self):
        stats = ErrorStats()
        responder = ErrorResponder(stats)
        context = make_context()
        context.error = RuntimeError("job failed")

        await responder.handle_application_error(None, context)

        assert stats.total == 1
        context.bot.send_message.assert_not_awaited()


class TestErrorStats:

    def test_recent_is_bounded(self):
        stats = ErrorStats(recent_size=3)
        for i in range(5):
            stats.record(f"ERR_{i}", ErrorCategory.GENERAL, None, str(i))

        assert stats.total == 5
        assert [e["error_id"] for e in stats.snapshot()["recent"]] == ["ERR_2", "ERR_3", "ERR_4"]

"""
Unit tests for the feature handlers and their message formatters.
HadithService and CacheService are AsyncMocks; Telegram I/O comes from tests.builders.
"""

from unittest.mock import AsyncMock

import pytest
from telegram.constants import ParseMode
from telegram.error import BadRequest

from handlers import admin_handler, messages, placeholder_handler, random_handler, search_handler, start_handler
from handlers.error_handler import ErrorStats
from handlers.replies import safe_edit_text
from models.hadith import Hadith
from models.user import User
from security.auth import UserSession
from security.rate_limiter import RateLimiter
from tests.builders import ADMIN_TELEGRAM_ID, make_callback_update, make_context, make_text_update


def sample_hadith(**overrides) -> Hadith:
    values = dict(
        id="abc123",
        text="إنما الأعمال بالنيات",
        arabic_text="إنما الأعمال بالنيات",
        narrator="عمر بن الخطاب",
        source="صحيح البخاري",
        grade="صحيح",
        is_verified=True,
    )
    values.update(overrides)
    return Hadith(**values)


def session_for(telegram_id: int) -> UserSession:
    return UserSession.for_user(User(id=1, telegram_id=telegram_id, first_name="Ali"), "private", ADMIN_TELEGRAM_ID)


@pytest.fixture
def hadith_service():
    service = AsyncMock()
    service.search.return_value = []
    service.get_by_id.return_value = None
    service.get_random.return_value = None
    return service


@pytest.fixture
def ctx(hadith_service):
    cache_service = AsyncMock()
    cache_service.clear.return_value = 3
    return make_context(
        hadith_service=hadith_service,
        cache_service=cache_service,
        rate_limiter=RateLimiter(limits={}),
        error_stats=ErrorStats(),
    )


class TestStart:

    @pytest.mark.asyncio
    async def test_start_greets_by_name_with_main_menu(self, ctx):
        update = make_text_update("/start")

        await start_handler.start_command(update, ctx, session_for(111))

        args, kwargs = update.effective_message.reply_text.call_args
        assert "Ali" in args[0]
        assert kwargs["parse_mode"] == ParseMode.MARKDOWN
        buttons = [b.callback_data for row in kwargs["reply_markup"].inline_keyboard for b in row]
        assert "action_search" in buttons and "action_random" in buttons

    @pytest.mark.asyncio
    async def test_back_to_main_edits_the_menu(self, ctx):
        update = make_callback_update("back_to_main")

        await start_handler.back_to_main(update, ctx, None)

        update.callback_query.answer.assert_awaited_once()
        update.callback_query.edit_message_text.assert_awaited_once()


class TestSearch:

    @pytest.mark.asyncio
    async def test_short_text_asks_for_more_and_skips_the_api(self, ctx, hadith_service):
        update = make_text_update("ص")

        await search_handler.handle_text_search(update, ctx, None)

        hadith_service.search.assert_not_awaited()
        update.effective_message.reply_text.assert_awaited_once_with(messages.SEARCH_PROMPT_TEXT)

    @pytest.mark.asyncio
    async def test_text_opening_with_whitespace_is_ignored(self, ctx, hadith_service):
        update = make_text_update("  الصلاة")

        await search_handler.handle_text_search(update, ctx, None)

        hadith_service.search.assert_not_awaited()
        update.effective_message.reply_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_results_replace_the_loading_message(self, ctx, hadith_service):
        hadith_service.search.return_value = [sample_hadith()]
        update = make_text_update("الأعمال")

        await search_handler.handle_text_search(update, ctx, None)

        hadith_service.search.assert_awaited_once_with("الأعمال")
        update.effective_message.reply_text.assert_awaited_once_with(messages.LOADING_TEXT)
        loading = update.effective_message.reply_text.return_value
        text = loading.edit_text.call_args.args[0]
        assert "/hadith_abc123" in text
        assert loading.edit_text.call_args.kwargs["parse_mode"] == ParseMode.HTML

    @pytest.mark.asyncio
    async def test_no_results_shows_tips(self, ctx):
        update = make_text_update("كلمة نادرة")

        await search_handler.handle_text_search(update, ctx, None)

        loading = update.effective_message.reply_text.return_value
        assert "لم يتم العثور على نتائج" in loading.edit_text.call_args.args[0]

    @pytest.mark.asyncio
    async def test_search_command_with_query(self, ctx, hadith_service):
        update = make_text_update("/search@SmartHadithBot الصبر ضياء")

        await search_handler.search_command(update, ctx, None)

        hadith_service.search.assert_awaited_once_with("الصبر ضياء")

    @pytest.mark.asyncio
    async def test_search_command_without_query_shows_menu(self, ctx, hadith_service):
        update = make_text_update("/search")

        await search_handler.search_command(update, ctx, None)

        hadith_service.search.assert_not_awaited()
        args, _ = update.effective_message.reply_text.call_args
        assert args[0] == messages.SEARCH_MENU_TEXT

    @pytest.mark.asyncio
    async def test_show_hadith_found(self, ctx, hadith_service):
        hadith_service.get_by_id.return_value = sample_hadith(search_count=4)
        update = make_text_update("/hadith_abc123")

        await search_handler.show_hadith(update, ctx, None, "abc123")

        hadith_service.get_by_id.assert_awaited_once_with("abc123")
        text = update.effective_message.reply_text.call_args.args[0]
        assert "إنما الأعمال بالنيات" in text
        assert "4" in text

    @pytest.mark.asyncio
    async def test_show_hadith_missing(self, ctx):
        update = make_text_update("/hadith_nope")

        await search_handler.show_hadith(update, ctx, None, "nope")

        assert update.effective_message.reply_text.call_args.args[0] == messages.HADITH_NOT_FOUND_TEXT


class TestRandom:

    @pytest.mark.asyncio
    async def test_button_edits_in_place(self, ctx, hadith_service):
        hadith_service.get_random.return_value = sample_hadith()
        update = make_callback_update("action_random")

        await random_handler.random_hadith(update, ctx, None)

        update.callback_query.answer.assert_awaited_once()
        text = update.callback_query.edit_message_text.call_args.args[0]
        assert "صحيح البخاري" in text

    @pytest.mark.asyncio
    async def test_command_replies_when_nothing_is_found(self, ctx):
        update = make_text_update("/random")

        await random_handler.random_hadith(update, ctx, None)

        assert update.effective_message.reply_text.call_args.args[0] == messages.RANDOM_NOT_FOUND_TEXT


class TestAdmin:

    @pytest.mark.asyncio
    async def test_non_admin_is_refused(self, ctx):
        update = make_text_update("/admin")

        await admin_handler.admin_command(update, ctx, session_for(111))

        assert update.effective_message.reply_text.call_args.args[0] == messages.ADMIN_ONLY_TEXT

    @pytest.mark.asyncio
    async def test_admin_sees_the_panel(self, ctx):
        update = make_text_update("/admin")

        await admin_handler.admin_command(update, ctx, session_for(ADMIN_TELEGRAM_ID))

        args, kwargs = update.effective_message.reply_text.call_args
        assert "لوحة الإدارة" in args[0]
        assert kwargs["parse_mode"] == ParseMode.HTML

    @pytest.mark.asyncio
    async def test_disabled_panel(self, ctx, monkeypatch):
        monkeypatch.setattr(admin_handler, "ENABLE_ADMIN_PANEL", False)
        update = make_text_update("/admin")

        await admin_handler.admin_command(update, ctx, session_for(ADMIN_TELEGRAM_ID))

        assert update.effective_message.reply_text.call_args.args[0] == messages.ADMIN_DISABLED_TEXT

    @pytest.mark.asyncio
    async def test_clear_cache_button(self, ctx):
        update = make_callback_update("admin_clear_cache")

        await admin_handler.admin_action(update, ctx, session_for(ADMIN_TELEGRAM_ID))

        ctx.bot_data["cache_service"].clear.assert_awaited_once()
        assert "3" in update.callback_query.answer.call_args.args[0]
        update.callback_query.edit_message_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_admin_button_from_non_admin_gets_an_alert(self, ctx):
        update = make_callback_update("admin_clear_cache")

        await admin_handler.admin_action(update, ctx, session_for(111))

        ctx.bot_data["cache_service"].clear.assert_not_awaited()
        update.callback_query.answer.assert_awaited_once_with(messages.ADMIN_ONLY_TEXT, show_alert=True)


class TestPlaceholders:

    @pytest.mark.asyncio
    async def test_callback_is_answered(self, ctx):
        update = make_callback_update("favorite_add_1")

        await placeholder_handler.coming_soon("قريباً")(update, ctx, None)

        update.callback_query.answer.assert_awaited_once_with("قريباً", show_alert=False)

    @pytest.mark.asyncio
    async def test_command_gets_a_reply(self, ctx):
        update = make_text_update("/settings")

        await placeholder_handler.coming_soon("قريباً")(update, ctx, None)

        assert "قريباً" in update.effective_message.reply_text.call_args.args[0]


class TestReplies:

    @pytest.mark.asyncio
    async def test_not_modified_is_ignored(self):
        update = make_callback_update("admin_refresh")
        update.callback_query.edit_message_text.side_effect = BadRequest("Message is not modified")

        assert await safe_edit_text(update, "same") is None
        update.effective_message.reply_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_edit_failures_fall_back_to_reply(self):
        update = make_callback_update("action_about")
        update.callback_query.edit_message_text.side_effect = BadRequest("Message to edit not found")

        await safe_edit_text(update, "about")

        update.effective_message.reply_text.assert_awaited_once_with("about")


class TestFormatters:

    def test_welcome_text_strips_markdown_from_names(self):
        assert "مرحباً *boldname*!" in messages.welcome_text("*bold*_name_")

    def test_hadith_card_escapes_html(self):
        text = messages.format_hadith(sample_hadith(narrator="<script>"))
        assert "&lt;script&gt;" in text
        assert "<script>" not in text

    def test_search_results_are_capped(self):
        results = [sample_hadith(id=f"id{i}") for i in range(12)]
        text = messages.format_search_results(results, "الأعمال")
        assert "/hadith_id9" in text
        assert "/hadith_id10" not in text
        assert "12" in text

    def test_grade_emoji(self):
        assert messages.grade_emoji("صحيح") != messages.grade_emoji("ضعيف")

    def test_long_hadith_card_fits_one_message(self):
        hadith = sample_hadith(
            text="ق" * 4000,
            arabic_text="ق" * 4000,
            narrator="ر" * 1000,
            source="م" * 1000,
            hadith_number="1" * 500,
            grade="د" * 500,
            chapter="ب" * 1000,
            topic="و" * 1000,
            translation="t" * 2000,
            explanation="ش" * 2000,
            search_count=3,
        )

        text = messages.format_hadith(hadith)

        assert len(text) <= messages.MESSAGE_LIMIT
        assert "..." in text
        assert "abc123" in text

    def test_escaped_markup_still_fits_one_message(self):
        text = messages.format_hadith(sample_hadith(text="&" * 4000, arabic_text="&" * 4000))
        assert len(text) <= messages.MESSAGE_LIMIT
        assert "&amp;" in text

    def test_long_query_is_shortened_when_echoed(self):
        query = "س" * 4000
        results = [sample_hadith(id=f"id{i}", source="م" * 500, text="ق" * 500) for i in range(12)]

        assert len(messages.format_no_results(query)) <= messages.MESSAGE_LIMIT
        assert len(messages.format_search_results(results, query)) <= messages.MESSAGE_LIMIT

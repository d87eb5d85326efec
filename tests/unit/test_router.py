"""
Unit tests for handlers/router.py and utils/update_info.py
"""

from unittest.mock import AsyncMock

import pytest

from handlers.router import Router
from main import build_router
from tests.builders import make_callback_update, make_context, make_text_update
from utils.update_info import UpdateInfo, describe_update, parse_command


class TestParseCommand:

    def test_plain_command(self):
        assert parse_command("/start") == ("start", [])

    def test_bot_mention_is_ignored(self):
        assert parse_command("/search@SmartHadithBot الصبر") == ("search", ["الصبر"])

    def test_arguments(self):
        assert parse_command("/search إنما الأعمال") == ("search", ["إنما", "الأعمال"])

    @pytest.mark.parametrize("text", [None, "", "hello", "/", "/@bot"])
    def test_not_a_command(self, text):
        assert parse_command(text) == (None, [])


class TestDescribeUpdate:

    def test_command(self):
        info = describe_update(make_text_update("/hadith_abc123"))
        assert info.is_command
        assert info.command == "hadith_abc123"
        assert info.user_id == 111
        assert info.chat_type == "private"

    def test_free_text(self):
        info = describe_update(make_text_update("الصلاة"))
        assert info.is_text
        assert info.text == "الصلاة"

    def test_callback(self):
        info = describe_update(make_callback_update("action_random"))
        assert info.is_callback
        assert info.callback_data == "action_random"

    def test_new_members(self):
        update = make_text_update(None)
        update.message.new_chat_members = [object()]
        assert describe_update(update).update_type == "chat_member"


class TestRouter:

    def test_exact_command_is_case_insensitive(self):
        router = Router()
        handler = AsyncMock()
        router.command("start", handler)

        assert router.resolve(UpdateInfo(update_type="command", command="START")) == (handler, ())

    def test_pattern_command_passes_groups(self):
        router = Router()
        handler = AsyncMock()
        router.command_pattern(r"hadith_([A-Za-z0-9]+)", handler)

        route = router.resolve(UpdateInfo(update_type="command", command="hadith_ab12"))
        assert route == (handler, ("ab12",))
        assert router.resolve(UpdateInfo(update_type="command", command="hadith_")) is None

    def test_exact_callback_beats_prefix(self):
        router = Router()
        exact, prefix = AsyncMock(), AsyncMock()
        router.callback_prefix("admin_", prefix)
        router.callback("admin_special", exact)

        assert router.resolve(UpdateInfo(update_type="callback_query", callback_data="admin_special"))[0] is exact
        assert router.resolve(UpdateInfo(update_type="callback_query", callback_data="admin_other"))[0] is prefix

    def test_first_registered_prefix_wins(self):
        router = Router()
        first, second = AsyncMock(), AsyncMock()
        router.callback_prefix("favorite_", first)
        router.callback_prefix("favorite_add_", second)

        route = router.resolve(UpdateInfo(update_type="callback_query", callback_data="favorite_add_1"))
        assert route[0] is first

    def test_unknown_command_is_ignored(self):
        router = Router()
        router.text(AsyncMock())
        assert router.resolve(UpdateInfo(update_type="command", command="nope")) is None

    @pytest.mark.asyncio
    async def test_dispatch_calls_handler_with_session_and_groups(self):
        router = Router()
        handler = AsyncMock()
        router.command_pattern(r"hadith_([A-Za-z0-9]+)", handler)
        update, context, session = make_text_update("/hadith_xyz"), make_context(), object()

        assert await router.dispatch(update, context, session) is True
        handler.assert_awaited_once_with(update, context, session, "xyz")

    @pytest.mark.asyncio
    async def test_dispatch_unmatched_returns_false(self):
        assert await Router().dispatch(make_text_update("hello"), make_context()) is False


class TestApplicationRoutes:

    @pytest.mark.parametrize("command", [
        "start", "help", "search", "random", "favorites", "fav", "settings", "stats", "admin", "hadith_ab12",
    ])
    def test_commands_are_routed(self, command):
        assert build_router().resolve(UpdateInfo(update_type="command", command=command)) is not None

    @pytest.mark.parametrize("data", [
        "back_to_main", "action_search", "action_random", "action_favorites", "action_reminders",
        "action_settings", "action_stats", "action_about", "action_dua", "action_admin",
        "search_general", "filter_bukhari", "nav_next", "favorite_add_1", "favorites_list",
        "share_1", "copy_1", "related_1", "more_from_book_1", "tag_x", "collection_x",
        "settings_lang", "reminder_on", "lang_ar", "admin_refresh", "loading", "cancel",
        "retry_last_action",
    ])
    def test_callbacks_are_routed(self, data):
        assert build_router().resolve(UpdateInfo(update_type="callback_query", callback_data=data)) is not None

    def test_free_text_is_routed(self):
        assert build_router().resolve(UpdateInfo(update_type="text", text="الصلاة")) is not None

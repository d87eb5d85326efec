"""
handlers/placeholder_handler.py
--------------------------------
Features that are announced but not built yet (favorites, settings,
reminders, personal stats, search filters...). Each answers a short
"coming soon" notice. Also logs chat membership changes.
"""

from telegram import Update
from telegram.constants import ChatMemberStatus
from telegram.ext import ContextTypes

from config import ENABLE_GROUPS
from handlers import keyboards, messages
from handlers.replies import safe_answer_callback, safe_reply
from handlers.router import Handler, Router
from utils.logger import get_logger

logger = get_logger(__name__)

_PENDING_FEATURES: dict[str, str] = {
    "search_": "قريباً... هذه الميزة قيد التطوير",
    "filter_": "قريباً... الفلاتر قيد التطوير",
    "nav_": "قريباً... التنقل قيد التطوير",
    "favorite_": "قريباً... المفضلة قيد التطوير",
    "favorites_": "قريباً... المفضلة قيد التطوير",
    "tag_": "قريباً... الوسوم قيد التطوير",
    "collection_": "قريباً... المجموعات قيد التطوير",
    "settings_": "قريباً... الإعدادات قيد التطوير",
    "reminder_": "قريباً... التذكيرات قيد التطوير",
    "lang_": "قريباً... اختيار اللغة قيد التطوير",
    "share_": "قريباً... المشاركة قيد التطوير",
    "copy_": "قريباً... النسخ قيد التطوير",
    "related_": "قريباً... الأحاديث المشابهة قيد التطوير",
    "more_from_book_": "قريباً... البحث في نفس الكتاب قيد التطوير",
}


def coming_soon(text: str = messages.COMING_SOON_TEXT) -> Handler:
    """Build a handler that only announces a pending feature."""

    async def handler(update: Update, context: ContextTypes.DEFAULT_TYPE, session, *args) -> None:
        if update.callback_query is not None:
            await safe_answer_callback(update, text)
        else:
            await safe_reply(update, f"🚧 {text}", reply_markup=keyboards.back_to_main())

    return handler


async def handle_membership(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Log joins/leaves and the bot being added to or removed from chats."""
    if not ENABLE_GROUPS:
        return

    chat = update.effective_chat
    change = update.my_chat_member
    if change is not None:
        status = change.new_chat_member.status
        if status in (ChatMemberStatus.MEMBER, ChatMemberStatus.ADMINISTRATOR):
            logger.info(f"➕ Bot added to {chat.type} {chat.id} ({chat.title})")
        elif status in (ChatMemberStatus.LEFT, ChatMemberStatus.BANNED):
            logger.info(f"➖ Bot removed from {chat.type} {chat.id} ({chat.title})")
        return

    message = update.message
    if message is not None and message.new_chat_members:
        logger.info(f"👥 {len(message.new_chat_members)} member(s) joined chat {chat.id}")
    elif message is not None and message.left_chat_member:
        logger.info(f"👋 Member {message.left_chat_member.id} left chat {chat.id}")


def register(router: Router) -> None:
    router.command(["favorites", "fav"], coming_soon("قريباً... المفضلة قيد التطوير"))
    router.command("settings", coming_soon("قريباً... الإعدادات قيد التطوير"))
    router.command("stats", coming_soon("قريباً... الإحصائيات قيد التطوير"))
    router.callback("action_favorites", coming_soon("قريباً... المفضلة قيد التطوير"))
    router.callback("action_reminders", coming_soon("قريباً... التذكيرات قيد التطوير"))
    router.callback("action_settings", coming_soon("قريباً... الإعدادات قيد التطوير"))
    router.callback("action_stats", coming_soon("قريباً... الإحصائيات قيد التطوير"))
    for prefix, text in _PENDING_FEATURES.items():
        router.callback_prefix(prefix, coming_soon(text))
    router.membership(handle_membership)

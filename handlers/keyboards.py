"""
handlers/keyboards.py
----------------------
Inline keyboards. Callback data strings are the routing keys used in
handlers/router.py registrations.
"""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

RETRY_CALLBACK = "retry_last_action"


def main_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("🔍 بحث في الأحاديث", callback_data="action_search"),
            InlineKeyboardButton("🎲 حديث عشوائي", callback_data="action_random"),
        ],
        [
            InlineKeyboardButton("⭐ مفضلاتي", callback_data="action_favorites"),
            InlineKeyboardButton("⏰ التذكيرات", callback_data="action_reminders"),
        ],
        [
            InlineKeyboardButton("📊 الإحصائيات", callback_data="action_stats"),
            InlineKeyboardButton("⚙️ الإعدادات", callback_data="action_settings"),
        ],
        [
            InlineKeyboardButton("📚 عن البوت", callback_data="action_about"),
            InlineKeyboardButton("🤲 دعاء", callback_data="action_dua"),
        ],
    ])


def search_options() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("🔍 بحث عام", callback_data="search_general"),
            InlineKeyboardButton("🎯 بحث متقدم", callback_data="search_advanced"),
        ],
        [
            InlineKeyboardButton("📚 البحث في كتاب", callback_data="search_by_book"),
            InlineKeyboardButton("👤 البحث بالراوي", callback_data="search_by_narrator"),
        ],
        [
            InlineKeyboardButton("🏷️ البحث بالموضوع", callback_data="search_by_topic"),
            InlineKeyboardButton("⭐ الأحاديث الصحيحة", callback_data="search_sahih_only"),
        ],
        [InlineKeyboardButton("🔙 العودة", callback_data="back_to_main")],
    ])


def hadith_actions(hadith_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("⭐ حفظ", callback_data=f"favorite_add_{hadith_id}"),
            InlineKeyboardButton("📤 مشاركة", callback_data=f"share_{hadith_id}"),
        ],
        [
            InlineKeyboardButton("🔗 أحاديث مشابهة", callback_data=f"related_{hadith_id}"),
            InlineKeyboardButton("🎲 حديث آخر", callback_data="action_random"),
        ],
        [InlineKeyboardButton("🏠 القائمة الرئيسية", callback_data="back_to_main")],
    ])


def back_to_main() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("🏠 القائمة الرئيسية", callback_data="back_to_main")],
    ])


def retry_or_back() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("🔄 إعادة المحاولة", callback_data=RETRY_CALLBACK),
            InlineKeyboardButton("🏠 القائمة الرئيسية", callback_data="back_to_main"),
        ],
    ])


def admin_panel() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("🔄 تحديث", callback_data="admin_refresh"),
            InlineKeyboardButton("🧹 تنظيف الكاش", callback_data="admin_clear_cache"),
        ],
        [InlineKeyboardButton("🏠 القائمة الرئيسية", callback_data="back_to_main")],
    ])

"""
handlers/start_handler.py
--------------------------
Handles /start and /help and the main-menu navigation callbacks.
"""

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from handlers import keyboards, messages
from handlers.replies import safe_answer_callback, safe_edit_text, safe_reply
from handlers.router import Router
from utils.logger import get_logger

logger = get_logger(__name__)


def _display_name(update: Update, session) -> str:
    if session is not None:
        return session.user.display_name
    user = update.effective_user
    return (user.first_name if user else None) or "أخي الكريم"


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Handle /start - show the welcome text and the main menu."""
    logger.info(f"User {update.effective_user.id} started the bot.")
    await safe_reply(
        update,
        messages.welcome_text(_display_name(update, session)),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=keyboards.main_menu(),
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Handle /help - show usage and all available commands."""
    await safe_reply(
        update, messages.HELP_TEXT, parse_mode=ParseMode.MARKDOWN, reply_markup=keyboards.back_to_main()
    )


async def back_to_main(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    await safe_answer_callback(update)
    await safe_edit_text(
        update,
        messages.welcome_text(_display_name(update, session)),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=keyboards.main_menu(),
    )


async def show_about(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    await safe_answer_callback(update)
    await safe_edit_text(
        update, messages.ABOUT_TEXT, parse_mode=ParseMode.MARKDOWN, reply_markup=keyboards.back_to_main()
    )


async def show_dua(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    await safe_answer_callback(update)
    await safe_edit_text(
        update, messages.DUA_TEXT, parse_mode=ParseMode.MARKDOWN, reply_markup=keyboards.back_to_main()
    )


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    await safe_answer_callback(update, "تم الإلغاء")
    await safe_edit_text(update, messages.CANCELLED_TEXT, reply_markup=keyboards.back_to_main())


async def loading(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    await safe_answer_callback(update, "⏳ جاري التحميل...")


async def retry_last_action(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """The error keyboard's retry button: ask the user to resend and show the menu."""
    await safe_answer_callback(update, "🔄 يرجى إعادة إرسال طلبك")
    await back_to_main(update, context, session)


def register(router: Router) -> None:
    router.command("start", start_command)
    router.command("help", help_command)
    router.callback("back_to_main", back_to_main)
    router.callback("action_about", show_about)
    router.callback("action_dua", show_dua)
    router.callback("cancel", cancel)
    router.callback("loading", loading)
    router.callback(keyboards.RETRY_CALLBACK, retry_last_action)

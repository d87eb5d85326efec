"""
handlers/random_handler.py
---------------------------
Handles /random and the "random hadith" button.
"""

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from handlers import keyboards, messages
from handlers.replies import safe_answer_callback, safe_edit_text
from handlers.router import Router
from utils.logger import get_logger

logger = get_logger(__name__)


async def random_hadith(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Show one random verified hadith (edits the menu when pressed as a button)."""
    await safe_answer_callback(update, "🎲 حديث عشوائي")
    hadith = await context.bot_data["hadith_service"].get_random()

    if hadith is None:
        await safe_edit_text(update, messages.RANDOM_NOT_FOUND_TEXT, reply_markup=keyboards.back_to_main())
        return

    logger.info(f"Served random hadith {hadith.id} to user {update.effective_user.id}")
    await safe_edit_text(
        update,
        messages.format_hadith(hadith),
        parse_mode=ParseMode.HTML,
        reply_markup=keyboards.hadith_actions(hadith.id),
    )


def register(router: Router) -> None:
    router.command("random", random_hadith)
    router.callback("action_random", random_hadith)

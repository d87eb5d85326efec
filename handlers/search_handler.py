"""
handlers/search_handler.py
---------------------------
Hadith search: /search, free-text queries and /hadith_<id> lookups.
Delegates all logic to HadithService (``context.bot_data["hadith_service"]``).
"""

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from handlers import keyboards, messages
from handlers.replies import safe_answer_callback, safe_edit_text, safe_reply
from handlers.router import Router
from services.hadith_service import HadithService
from utils.logger import get_logger
from utils.update_info import parse_command

logger = get_logger(__name__)

MIN_QUERY_LENGTH = 2


def _service(context: ContextTypes.DEFAULT_TYPE) -> HadithService:
    return context.bot_data["hadith_service"]


async def search_command(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Handle /search [text] - search directly, or show the search menu."""
    _, args = parse_command(update.effective_message.text)
    query = " ".join(args)
    if query:
        await run_search(update, context, query)
        return
    await safe_reply(
        update, messages.SEARCH_MENU_TEXT, parse_mode=ParseMode.MARKDOWN, reply_markup=keyboards.search_options()
    )


async def show_search_options(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    await safe_answer_callback(update, "البحث في الأحاديث")
    await safe_edit_text(
        update, messages.SEARCH_MENU_TEXT, parse_mode=ParseMode.MARKDOWN, reply_markup=keyboards.search_options()
    )


async def handle_text_search(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Treat any plain text message as a search query; text opening with whitespace is ignored."""
    raw = update.effective_message.text or ""
    if not raw or raw[0].isspace():
        return
    query = raw.strip()
    if len(query) < MIN_QUERY_LENGTH:
        await safe_reply(update, messages.SEARCH_PROMPT_TEXT)
        return
    await run_search(update, context, query)


async def run_search(update: Update, context: ContextTypes.DEFAULT_TYPE, query: str) -> None:
    """
    Search, then replace a loading message with the results.

    Args:
        update: The triggering update.
        context: PTB context holding the HadithService.
        query: The user's search text.
    """
    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        await safe_reply(update, messages.SEARCH_PROMPT_TEXT)
        return

    loading_message = await safe_reply(update, messages.LOADING_TEXT)
    results = await _service(context).search(query)
    logger.info(f"User {update.effective_user.id} searched '{query}': {len(results)} results")

    if results:
        text = messages.format_search_results(results, query)
        markup = keyboards.back_to_main()
    else:
        text = messages.format_no_results(query)
        markup = keyboards.search_options()

    if loading_message is not None:
        await loading_message.edit_text(text, parse_mode=ParseMode.HTML, reply_markup=markup)
    else:
        await safe_reply(update, text, parse_mode=ParseMode.HTML, reply_markup=markup)


async def show_hadith(update: Update, context: ContextTypes.DEFAULT_TYPE, session, hadith_id: str) -> None:
    """Handle /hadith_<id> - show one stored hadith in full."""
    hadith = await _service(context).get_by_id(hadith_id)
    if hadith is None:
        await safe_reply(update, messages.HADITH_NOT_FOUND_TEXT, reply_markup=keyboards.back_to_main())
        return
    await safe_reply(
        update,
        messages.format_hadith(hadith),
        parse_mode=ParseMode.HTML,
        reply_markup=keyboards.hadith_actions(hadith.id),
    )


def register(router: Router) -> None:
    router.command("search", search_command)
    router.command_pattern(r"hadith_([A-Za-z0-9]+)", show_hadith)
    router.callback("action_search", show_search_options)
    router.text(handle_text_search)

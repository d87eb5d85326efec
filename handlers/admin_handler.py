"""
handlers/admin_handler.py
--------------------------
Admin panel: rate-limiter and error statistics, cache maintenance.
Only the configured ADMIN_ID may use it, and only when
ENABLE_ADMIN_PANEL is on.
"""

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from config import ENABLE_ADMIN_PANEL
from handlers import keyboards, messages
from handlers.replies import safe_answer_callback, safe_edit_text, safe_reply
from handlers.router import Router
from utils.logger import get_logger

logger = get_logger(__name__)


def _is_admin(session) -> bool:
    return session is not None and session.is_admin()


def _panel_text(context: ContextTypes.DEFAULT_TYPE) -> str:
    return messages.format_admin_stats(
        context.bot_data["rate_limiter"].stats(),
        context.bot_data["error_stats"].snapshot(),
    )


async def admin_command(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Handle /admin - show the statistics panel."""
    if not ENABLE_ADMIN_PANEL:
        await safe_reply(update, messages.ADMIN_DISABLED_TEXT)
        return
    if not _is_admin(session):
        logger.warning(f"🚫 Non-admin {update.effective_user.id} tried /admin")
        await safe_reply(update, messages.ADMIN_ONLY_TEXT)
        return
    await safe_reply(update, _panel_text(context), parse_mode=ParseMode.HTML, reply_markup=keyboards.admin_panel())


async def admin_action(update: Update, context: ContextTypes.DEFAULT_TYPE, session) -> None:
    """Handle action_admin and admin_* buttons."""
    if not ENABLE_ADMIN_PANEL or not _is_admin(session):
        await safe_answer_callback(update, messages.ADMIN_ONLY_TEXT, show_alert=True)
        return

    data = update.callback_query.data
    if data == "admin_clear_cache":
        removed = await context.bot_data["cache_service"].clear()
        logger.info(f"Admin {update.effective_user.id} cleared the cache ({removed} entries).")
        await safe_answer_callback(update, f"🧹 تم حذف {removed} عنصر من الكاش")
    elif data in ("admin_refresh", "action_admin"):
        await safe_answer_callback(update)
    else:
        await safe_answer_callback(update, messages.COMING_SOON_TEXT)
        return

    await safe_edit_text(update, _panel_text(context), parse_mode=ParseMode.HTML, reply_markup=keyboards.admin_panel())


def register(router: Router) -> None:
    router.command("admin", admin_command)
    router.callback("action_admin", admin_action)
    router.callback_prefix("admin_", admin_action)

"""
handlers/replies.py
--------------------
Send helpers that work for both message and callback-query updates.
"""

from typing import Optional

from telegram import Message, Update
from telegram.error import BadRequest

from utils.logger import get_logger

logger = get_logger(__name__)


async def safe_reply(update: Update, text: str, **kwargs) -> Optional[Message]:
    """Reply in the chat the update came from. Returns None if there is no message."""
    message = update.effective_message
    if message is None:
        logger.debug("safe_reply: update has no message to reply to")
        return None
    return await message.reply_text(text, **kwargs)


async def safe_edit_text(update: Update, text: str, **kwargs) -> Optional[Message]:
    """
    Edit the message a button belongs to, or reply when not in a callback.

    A "message is not modified" error is ignored; any other edit
    failure (e.g. the message is too old) falls back to a new reply.
    """
    query = update.callback_query
    if query is None or query.message is None:
        return await safe_reply(update, text, **kwargs)
    try:
        return await query.edit_message_text(text, **kwargs)
    except BadRequest as e:
        if "not modified" in str(e).lower():
            return None
        logger.info(f"Edit failed ({e}); sending a new message instead.")
        return await safe_reply(update, text, **kwargs)


async def safe_answer_callback(update: Update, text: Optional[str] = None, show_alert: bool = False) -> None:
    """Answer a callback query; expired queries are logged and ignored."""
    query = update.callback_query
    if query is None:
        return
    try:
        await query.answer(text, show_alert=show_alert)
    except BadRequest as e:
        logger.debug(f"Could not answer callback query: {e}")

"""
handlers/error_handler.py
--------------------------
Turns any exception escaping a handler into one log entry and one
user-visible message carrying a traceable error ID.

Delivery:
    - callback query -> short alert + edit of the button's message
    - message        -> reply
    If that send fails, a single plaintext fallback goes to the chat;
    if the fallback fails too, the failure is only logged.
"""

import uuid
from collections import Counter, deque
from datetime import datetime, timezone
from typing import Optional

from telegram import InlineKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from handlers import keyboards
from security.auth import UserSession
from utils.errors import ErrorCategory, classify_error
from utils.logger import get_logger
from utils.update_info import UpdateInfo, describe_update

logger = get_logger(__name__)

CALLBACK_ERROR_TEXT = "حدث خطأ، يرجى المحاولة مرة أخرى"
FALLBACK_TEXT = "❌ حدث خطأ غير متوقع"
RECENT_ERRORS = 100

ERROR_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.BAD_REQUEST: "⚠️ *طلب غير صالح*\n\nيرجى التحقق من طلبك والمحاولة مرة أخرى.",
    ErrorCategory.UNAUTHORIZED: "🔐 *غير مصرح*\n\nلا يمكن التحقق من هويتك، يرجى إعادة تشغيل البوت بـ /start",
    ErrorCategory.FORBIDDEN: "⛔ *غير مسموح*\n\nليس لديك صلاحية لتنفيذ هذا الإجراء.",
    ErrorCategory.NOT_FOUND: "🔍 *غير موجود*\n\nلم يتم العثور على المحتوى المطلوب.",
    ErrorCategory.RATE_LIMITED: "⏳ *طلبات كثيرة*\n\nيرجى الانتظار قليلاً قبل المحاولة مرة أخرى.",
    ErrorCategory.SERVER_ERROR: "🛠️ *الخدمة غير متاحة مؤقتاً*\n\nخدمة الأحاديث لا تستجيب حالياً، يرجى المحاولة بعد قليل.",
    ErrorCategory.TRANSPORT: "📡 *خطأ في الاتصال بالخدمة*\n\nحدث خطأ أثناء التواصل مع الخدمة، يرجى المحاولة مرة أخرى.",
    ErrorCategory.DATABASE: "💾 *خطأ في قاعدة البيانات*\n\nنواجه مشكلة مؤقتة في حفظ البيانات، يرجى المحاولة لاحقاً.",
    ErrorCategory.NETWORK: "🌐 *مشكلة في الشبكة*\n\nتعذر الاتصال، يرجى التحقق من الاتصال والمحاولة مرة أخرى.",
    ErrorCategory.VALIDATION: "📝 *بيانات غير صحيحة*\n\nيرجى التحقق من المدخلات والمحاولة مرة أخرى.",
    ErrorCategory.GENERAL: "❌ *حدث خطأ غير متوقع*\n\nنعتذر، حدث خطأ أثناء معالجة طلبك.",
}

_RETRYABLE = {
    ErrorCategory.SERVER_ERROR,
    ErrorCategory.TRANSPORT,
    ErrorCategory.DATABASE,
    ErrorCategory.NETWORK,
    ErrorCategory.GENERAL,
}


def new_error_id() -> str:
    return f"ERR_{uuid.uuid4().hex[:12].upper()}"


def error_message(category: ErrorCategory, error_id: str) -> str:
    """User-facing Markdown text for a category, stamped with the error ID."""
    return f"{ERROR_MESSAGES[category]}\n\n🆔 *رقم الخطأ:* `{error_id}`"


def error_keyboard(category: ErrorCategory) -> Optional[InlineKeyboardMarkup]:
    if category == ErrorCategory.RATE_LIMITED:
        return None
    if category in _RETRYABLE:
        return keyboards.retry_or_back()
    return keyboards.back_to_main()


class ErrorStats:
    """In-memory error counters for the admin panel."""

    def __init__(self, recent_size: int = RECENT_ERRORS):
        self.total = 0
        self.by_category: Counter = Counter()
        self.by_user: Counter = Counter()
        self.recent: deque = deque(maxlen=recent_size)

    def record(self, error_id: str, category: ErrorCategory, user_id: Optional[int], message: str) -> None:
        self.total += 1
        self.by_category[category.value] += 1
        if user_id is not None:
            self.by_user[user_id] += 1
        self.recent.append({
            "error_id": error_id,
            "category": category.value,
            "user_id": user_id,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def snapshot(self) -> dict:
        return {
            "total": self.total,
            "by_category": dict(self.by_category),
            "by_user": dict(self.by_user),
            "recent": list(self.recent),
        }


class ErrorResponder:
    """Logs, counts and answers errors raised while handling an update."""

    def __init__(self, stats: Optional[ErrorStats] = None):
        self.stats = stats or ErrorStats()

    async def respond(
        self,
        error: BaseException,
        update: object,
        context: ContextTypes.DEFAULT_TYPE,
        session: Optional[UserSession] = None,
        operation: Optional[str] = None,
    ) -> str:
        """
        Handle one error end to end.

        Args:
            error: The exception that escaped the handler chain.
            update: The update being handled (may be None for job errors).
            context: PTB callback context.
            session: The authenticated session, when the gate produced one.
            operation: Short label for the log; derived from the update if omitted.

        Returns:
            The generated error ID.
        """
        error_id = new_error_id()
        category = classify_error(error)
        info = describe_update(update) if isinstance(update, Update) else UpdateInfo()
        operation = operation or info.command or info.callback_data or info.update_type
        internal_id = session.user.id if session else None

        logger.error(
            f"[{error_id}] {category.value} error in '{operation}': {error!r} | "
            f"user_id={internal_id} telegram_id={info.user_id} chat_type={info.chat_type} "
            f"update_type={info.update_type} command={info.command} "
            f"callback_data={info.callback_data}",
            exc_info=(type(error), error, error.__traceback__),
        )
        self.stats.record(error_id, category, info.user_id, str(error))

        if isinstance(update, Update):
            await self._deliver(update, context, category, error_id, info)
        return error_id

    async def handle_application_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        """PTB error handler for failures outside the pipeline (jobs, dispatch)."""
        await self.respond(context.error, update, context, operation="application")

    async def _deliver(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE,
        category: ErrorCategory,
        error_id: str,
        info: UpdateInfo,
    ) -> None:
        text = error_message(category, error_id)
        markup = error_keyboard(category)
        try:
            query = update.callback_query
            if query is not None:
                await query.answer(CALLBACK_ERROR_TEXT)
                await query.edit_message_text(text, parse_mode=ParseMode.MARKDOWN, reply_markup=markup)
            elif update.effective_message is not None:
                await update.effective_message.reply_text(
                    text, parse_mode=ParseMode.MARKDOWN, reply_markup=markup
                )
            return
        except Exception as send_error:
            logger.warning(f"[{error_id}] Could not send error message: {send_error!r}")

        if info.chat_id is None:
            return
        try:
            await context.bot.send_message(chat_id=info.chat_id, text=f"{FALLBACK_TEXT}\n{error_id}")
        except Exception as fallback_error:
            logger.error(f"[{error_id}] Fallback error message failed too: {fallback_error!r}")

"""
security/auth.py
-----------------
Session/authentication gate run before every handler.

Registers or refreshes the sender, refuses blocked users, silently
drops other bots and attaches a UserSession the handlers can use.
Activity timestamps and analytics are written in the background.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Optional

from telegram import Update
from telegram.ext import ContextTypes

from config import ADMIN_ID, ENABLE_ANALYTICS
from db.connection import run_in_db
from models.user import User
from repositories.analytics_repo import AnalyticsRepository
from repositories.user_repo import UserRepository
from utils.logger import get_logger
from utils.tasks import TaskSink
from utils.update_info import describe_update

logger = get_logger(__name__)

BLOCKED_MESSAGE = "⛔ تم حظر حسابك من استخدام البوت"
SLOW_GATE_SECONDS = 0.1

_ACTIVITY_KINDS = {
    "command": "command",
    "callback_query": "callback",
    "text": "message",
}


@dataclass
class UserSession:
    """
    Per-update view of the authenticated sender.

    Attributes:
        user: The persisted User.
        chat_type: Type of the chat the update came from.
        preferences: Deserialized user preferences.
        admin_id: Telegram ID granted admin rights.
    """
    user: User
    chat_type: Optional[str] = None
    preferences: dict = field(default_factory=dict)
    admin_id: int = ADMIN_ID

    @classmethod
    def for_user(cls, user: User, chat_type: Optional[str], admin_id: int = ADMIN_ID) -> "UserSession":
        return cls(user=user, chat_type=chat_type, preferences=user.preference_map(), admin_id=admin_id)

    def is_admin(self) -> bool:
        return bool(self.admin_id) and self.user.telegram_id == self.admin_id

    def is_premium(self) -> bool:
        return bool(self.user.is_premium)

    def is_group(self) -> bool:
        return self.chat_type in ("group", "supergroup")

    def is_private(self) -> bool:
        return self.chat_type == "private"

    def get_preference(self, key: str, default: Any = None) -> Any:
        return self.preferences.get(key, default)


class SessionGate:
    """
    Authenticates the sender of an update.

    Args:
        users: User repository.
        analytics: Analytics repository (used when analytics are enabled).
        tasks: Sink for fire-and-forget writes.
        admin_id: Telegram ID granted admin rights.
        analytics_enabled: Record per-day activity counters.
    """

    def __init__(
        self,
        users: Optional[UserRepository] = None,
        analytics: Optional[AnalyticsRepository] = None,
        tasks: Optional[TaskSink] = None,
        admin_id: int = ADMIN_ID,
        analytics_enabled: bool = ENABLE_ANALYTICS,
    ):
        self.users = users or UserRepository()
        self.analytics = analytics or AnalyticsRepository()
        self.tasks = tasks or TaskSink()
        self.admin_id = admin_id
        self.analytics_enabled = analytics_enabled

    async def authenticate(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> tuple[bool, Optional[UserSession]]:
        """
        Run the gate for one update.

        Returns:
            ``(proceed, session)``. ``proceed`` is False for updates
            without a sender, foreign bots and blocked users. On any
            internal failure the update proceeds without a session.
        """
        started = time.perf_counter()
        try:
            return await self._authenticate(update, context)
        except Exception as e:
            tg_user = update.effective_user
            logger.error(
                f"Auth gate failed for user {tg_user.id if tg_user else None}; "
                f"continuing without session: {e!r}"
            )
            return True, None
        finally:
            elapsed = time.perf_counter() - started
            if elapsed > SLOW_GATE_SECONDS:
                logger.warning(f"🐢 Slow auth gate: {elapsed * 1000:.0f}ms")

    async def _authenticate(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> tuple[bool, Optional[UserSession]]:
        tg_user = update.effective_user
        if not tg_user:
            return False, None

        if tg_user.is_bot and tg_user.id != context.bot.id:
            logger.warning(
                f"🚫 Dropped update from bot account: user_id={tg_user.id}, "
                f"username={tg_user.username}"
            )
            return False, None

        user = await run_in_db(
            self.users.find_or_create,
            tg_user.id,
            tg_user.username,
            tg_user.first_name,
            tg_user.last_name,
            tg_user.language_code,
        )

        if user.is_blocked:
            logger.warning(f"⛔ Blocked user {tg_user.id} tried to use the bot.")
            try:
                if update.callback_query is not None:
                    await update.callback_query.answer(BLOCKED_MESSAGE, show_alert=True)
                elif update.effective_message is not None:
                    await update.effective_message.reply_text(BLOCKED_MESSAGE)
            except Exception as e:
                logger.error(f"Failed to notify blocked user {tg_user.id}: {e!r}")
            return False, None

        if not user.is_active:
            await run_in_db(self.users.reactivate, user.id)
            user.is_active = True
            logger.info(f"User {tg_user.id} reactivated.")

        chat = update.effective_chat
        session = UserSession.for_user(user, chat.type if chat else None, self.admin_id)

        self.tasks.spawn(run_in_db(self.users.update_activity, user.id), "update_activity")
        if self.analytics_enabled:
            kind = _ACTIVITY_KINDS.get(describe_update(update).update_type)
            if kind:
                self.tasks.spawn(
                    run_in_db(self.analytics.record_activity, user.id, kind), "record_analytics"
                )

        return True, session

"""
handlers/pipeline.py
---------------------
The single entry point for every inbound update.

    logging/timing -> session gate -> rate limiter -> router

Any exception escaping the chain is handed to the ErrorResponder, which
logs it once and answers the user. The gate and the rate limiter fail
open: if they break, the update is still served.
"""

import time
from typing import Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from config import SLOW_UPDATE_SECONDS
from handlers.error_handler import ErrorResponder
from handlers.router import Router
from security.auth import SessionGate, UserSession
from security.rate_limiter import RateLimitDecision, RateLimiter, resolve_operation
from utils.logger import get_logger
from utils.update_info import UpdateInfo, describe_update

logger = get_logger(__name__)


class Pipeline:
    """
    Wires the per-update middleware chain.

    Args:
        gate: Session/authentication gate.
        limiter: Rate limiter.
        router: Feature handler router.
        responder: Error responder.
        slow_seconds: Updates slower than this are logged as warnings.
    """

    def __init__(
        self,
        gate: SessionGate,
        limiter: RateLimiter,
        router: Router,
        responder: ErrorResponder,
        slow_seconds: float = SLOW_UPDATE_SECONDS,
    ):
        self.gate = gate
        self.limiter = limiter
        self.router = router
        self.responder = responder
        self.slow_seconds = slow_seconds

    async def handle_update(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Process one update end to end. Never raises."""
        info = describe_update(update)
        session: Optional[UserSession] = None
        started = time.perf_counter()
        logger.info(
            f"📥 {info.update_type} from user {info.user_id} "
            f"(chat={info.chat_id}, message={info.message_id})"
        )

        try:
            proceed, session = await self.gate.authenticate(update, context)
            if not proceed:
                return
            if not await self._within_rate_limit(update, info, session):
                return
            await self.router.dispatch(update, context, session, info)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.debug(f"💥 Update {update.update_id} failed after {elapsed * 1000:.0f}ms: {e!r}")
            await self.responder.respond(e, update, context, session)
        finally:
            elapsed = time.perf_counter() - started
            if elapsed > self.slow_seconds:
                logger.warning(f"🐢 Slow update {update.update_id}: {elapsed * 1000:.0f}ms ({info.update_type})")
            else:
                logger.debug(f"Update {update.update_id} handled in {elapsed * 1000:.0f}ms")

    async def _within_rate_limit(
        self, update: Update, info: UpdateInfo, session: Optional[UserSession]
    ) -> bool:
        try:
            is_admin = session.is_admin() if session else False
            operation = resolve_operation(info, is_admin)
            if operation is None or info.user_id is None:
                return True
            decision = self.limiter.check(info.user_id, operation, is_admin)
        except Exception as e:
            logger.error(f"Rate limiter failed; letting update through: {e!r}")
            return True

        if decision.allowed:
            return True
        await self._reject(update, decision)
        return False

    @staticmethod
    async def _reject(update: Update, decision: RateLimitDecision) -> None:
        query = update.callback_query
        if query is not None:
            # Alerts are plain text and capped at 200 characters.
            await query.answer(decision.message.replace("*", "")[:200], show_alert=True)
        elif update.effective_message is not None:
            await update.effective_message.reply_text(decision.message, parse_mode=ParseMode.MARKDOWN)

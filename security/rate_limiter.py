"""
security/rate_limiter.py
-------------------------
Per-user, per-operation sliding-window rate limiting.

Each (telegram user, operation) pair keeps the timestamps of its recent
requests. When a window fills up the pair is blocked until one full
window has passed. State lives in memory only and resets on restart.

Configuration (via .env, see config.RATE_LIMITS):
    RATE_LIMIT_<OP>_REQUESTS: Max requests per window.
    RATE_LIMIT_<OP>_WINDOW: Window duration in seconds.
    ADMIN_RATE_MULTIPLIER: Limit multiplier for the admin.
"""

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from config import ADMIN_RATE_MULTIPLIER, RATE_LIMIT_MAX_AGE, RATE_LIMITS
from utils.logger import get_logger
from utils.update_info import UpdateInfo

logger = get_logger(__name__)

OPERATION_NAMES: dict[str, str] = {
    "search": "البحث",
    "random": "الحديث العشوائي",
    "favorite": "إدارة المفضلات",
    "admin": "عمليات الإدارة",
    "command": "الأوامر",
    "callback": "التفاعل مع الأزرار",
}

_COMMAND_OPERATIONS: dict[str, str] = {
    "search": "search",
    "random": "random",
    "favorites": "favorite",
    "fav": "favorite",
}

_CALLBACK_PREFIXES: tuple[tuple[str, str], ...] = (
    ("search_", "search"),
    ("nav_", "search"),
    ("favorite_", "favorite"),
)


def operation_name(operation: str) -> str:
    return OPERATION_NAMES.get(operation, operation)


def resolve_operation(info: UpdateInfo, is_admin: bool = False) -> Optional[str]:
    """
    Map an update to the operation it is rate-limited under.

    Returns:
        The operation name, or None when the update is not limited.
    """
    if info.is_command:
        name = (info.command or "").lower()
        if name == "admin":
            return "admin" if is_admin else "command"
        return _COMMAND_OPERATIONS.get(name, "command")

    if info.is_callback:
        data = info.callback_data or ""
        for prefix, operation in _CALLBACK_PREFIXES:
            if data.startswith(prefix):
                return operation
        if data.startswith("admin_") and is_admin:
            return "admin"
        return "callback"

    if info.is_text:
        return "search"

    return None


@dataclass
class RateLimitWindow:
    """Sliding window state for one (user, operation) key."""
    timestamps: list[float] = field(default_factory=list)
    blocked: bool = False
    blocked_until: float = 0.0


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one rate-limit check."""
    allowed: bool
    operation: Optional[str] = None
    retry_after: int = 0
    message: Optional[str] = None


class RateLimiter:
    """
    In-memory sliding-window rate limiter.

    Args:
        limits: operation -> (max requests, window seconds).
        admin_multiplier: Applied to every limit when the caller is admin.
        max_age: Idle seconds after which `cleanup` evicts a key.
        clock: Monotonic clock in seconds (injected in tests).
    """

    def __init__(
        self,
        limits: Optional[dict[str, tuple[int, int]]] = None,
        admin_multiplier: int = ADMIN_RATE_MULTIPLIER,
        max_age: int = RATE_LIMIT_MAX_AGE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limits = dict(limits if limits is not None else RATE_LIMITS)
        self.admin_multiplier = admin_multiplier
        self.max_age = max_age
        self._clock = clock
        self._windows: dict[tuple[int, str], RateLimitWindow] = {}
        self._lock = threading.Lock()

    # ── CHECK ─────────────────────────────────────────────

    def check(self, user_id: int, operation: str, is_admin: bool = False) -> RateLimitDecision:
        """
        Record one request and decide whether it may proceed.

        Args:
            user_id: Telegram user ID.
            operation: Operation name from `resolve_operation`.
            is_admin: Admins get `admin_multiplier` times the limit.

        Returns:
            A RateLimitDecision; `message` is set when rejected.
        """
        if operation not in self.limits:
            return RateLimitDecision(allowed=True, operation=operation)

        limit, window = self.limits[operation]
        if is_admin:
            limit *= self.admin_multiplier

        with self._lock:
            now = self._clock()
            state = self._windows.setdefault((user_id, operation), RateLimitWindow())

            if state.blocked and now < state.blocked_until:
                remaining = math.ceil(state.blocked_until - now)
                return RateLimitDecision(
                    allowed=False,
                    operation=operation,
                    retry_after=remaining,
                    message=self._still_blocked_message(operation, remaining),
                )

            cutoff = now - window
            state.timestamps = [t for t in state.timestamps if t > cutoff]
            if state.blocked:
                state.blocked = False
                state.blocked_until = 0.0

            if len(state.timestamps) >= limit:
                state.blocked = True
                state.blocked_until = now + window
                blocked = True
            else:
                state.timestamps.append(now)
                blocked = False

        if blocked:
            logger.warning(
                f"⚠️ Rate limit hit: user={user_id} operation={operation} "
                f"limit={limit}/{window}s"
            )
            return RateLimitDecision(
                allowed=False,
                operation=operation,
                retry_after=window,
                message=self._limit_exceeded_message(operation, limit, window),
            )
        return RateLimitDecision(allowed=True, operation=operation)

    # ── MANAGEMENT ────────────────────────────────────────

    def reset_user(self, user_id: int) -> int:
        """Forget every window of a user. Returns the number of keys removed."""
        with self._lock:
            keys = [k for k in self._windows if k[0] == user_id]
            for key in keys:
                del self._windows[key]
        logger.info(f"Rate limits reset for user {user_id} ({len(keys)} keys).")
        return len(keys)

    def set_user_block(self, user_id: int, blocked: bool, duration: int = 3600) -> None:
        """
        Block or unblock a user for every configured operation.

        Args:
            user_id: Telegram user ID.
            blocked: True to block, False to lift an existing block.
            duration: Block length in seconds.
        """
        with self._lock:
            now = self._clock()
            for operation in self.limits:
                state = self._windows.setdefault((user_id, operation), RateLimitWindow())
                state.blocked = blocked
                state.blocked_until = now + duration if blocked else 0.0
        action = f"blocked for {duration}s" if blocked else "unblocked"
        logger.info(f"🔒 User {user_id} {action} on all operations.")

    def cleanup(self) -> int:
        """
        Evict keys with no request younger than `max_age` and no active block.

        Returns:
            The number of keys removed.
        """
        with self._lock:
            now = self._clock()
            cutoff = now - self.max_age
            stale = [
                key for key, state in self._windows.items()
                if not (state.blocked and now < state.blocked_until)
                and all(t <= cutoff for t in state.timestamps)
            ]
            for key in stale:
                del self._windows[key]
            remaining = len(self._windows)
        logger.debug(f"Rate limit cleanup: removed {len(stale)}, {remaining} keys remaining")
        return len(stale)

    def stats(self) -> dict:
        """Snapshot for the admin panel."""
        with self._lock:
            now = self._clock()
            users = {user_id for user_id, _ in self._windows}
            blocked = sum(
                1 for state in self._windows.values()
                if state.blocked and now < state.blocked_until
            )
            requests = sum(len(state.timestamps) for state in self._windows.values())
            return {
                "total_keys": len(self._windows),
                "total_users": len(users),
                "blocked_keys": blocked,
                "tracked_requests": requests,
            }

    # ── MESSAGES ──────────────────────────────────────────

    @staticmethod
    def _still_blocked_message(operation: str, remaining: int) -> str:
        return (
            "⚠️ *تم تجاوز الحد المسموح*\n\n"
            f"عذراً، لقد تجاوزت الحد المسموح لعملية *{operation_name(operation)}*\n\n"
            f"⏱️ *الوقت المتبقي:* {remaining} ثانية\n\n"
            "💡 *نصيحة:* استخدم البوت بشكل معتدل لتجنب هذا التحديد"
        )

    @staticmethod
    def _limit_exceeded_message(operation: str, limit: int, window: int) -> str:
        return (
            "🚫 *تم تجاوز الحد المسموح!*\n\n"
            f"لقد تجاوزت الحد المسموح لعملية *{operation_name(operation)}*\n\n"
            f"📊 *الحد المسموح:* {limit} طلب كل {window} ثانية\n"
            f"⏱️ *مدة الحظر:* {window} ثانية\n\n"
            "يرجى الانتظار قبل المحاولة مرة أخرى."
        )

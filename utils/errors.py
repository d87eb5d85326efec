"""
utils/errors.py
---------------
Exception taxonomy for the bot and the classifier that maps any
exception raised while handling an update to an ErrorCategory.

Classification rules are applied in order:
    1. explicit transport status code (HTTP / Telegram)
    2. persistence-layer errors
    3. network connection failures
    4. validation errors
    5. rate-limit errors
    6. general fallback
"""

import errno
from enum import Enum
from typing import Optional

import httpx
import psycopg2
from telegram import error as tg_error


# ── Taxonomy ──────────────────────────────────────────────

class BotError(Exception):
    """Base class for all errors raised by the bot itself."""

    status_code: Optional[int] = None


class InvalidInputError(BotError):
    """Malformed or empty caller-supplied input (e.g. a blank query)."""


class UnauthorizedError(BotError):
    status_code = 401


class ForbiddenError(BotError):
    status_code = 403


class RateLimitedError(BotError):
    """Quota exceeded. Informational, not a system fault."""

    status_code = 429


class UpstreamUnavailableError(BotError):
    """External API timeout, connection failure or 5xx."""


class UpstreamBadResponseError(BotError):
    """External API answered with a payload we cannot use."""


class StorageError(BotError):
    """Persistence failure."""


class ErrorCategory(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TRANSPORT = "transport"
    DATABASE = "database"
    NETWORK = "network"
    VALIDATION = "validation"
    GENERAL = "general"


_STATUS_CATEGORIES: dict[int, ErrorCategory] = {
    400: ErrorCategory.BAD_REQUEST,
    401: ErrorCategory.UNAUTHORIZED,
    403: ErrorCategory.FORBIDDEN,
    404: ErrorCategory.NOT_FOUND,
    429: ErrorCategory.RATE_LIMITED,
    502: ErrorCategory.SERVER_ERROR,
    503: ErrorCategory.SERVER_ERROR,
    504: ErrorCategory.SERVER_ERROR,
}

_NETWORK_ERRNOS = (errno.ECONNREFUSED, errno.ETIMEDOUT)


# ── Classifier ────────────────────────────────────────────

def status_code_of(error: BaseException) -> Optional[int]:
    """
    Extract an explicit transport status code from an exception.

    Returns:
        The HTTP-like status code, or None when the error carries none.
    """
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    if isinstance(error, tg_error.RetryAfter):
        return 429
    if isinstance(error, tg_error.Forbidden):
        return 403
    if isinstance(error, tg_error.InvalidToken):
        return 401
    if isinstance(error, tg_error.BadRequest):
        return 400
    code = getattr(error, "status_code", None)
    return code if isinstance(code, int) else None


def _message_of(error: BaseException) -> str:
    return str(error).lower()


def _is_storage_error(error: BaseException) -> bool:
    return (
        isinstance(error, (psycopg2.Error, StorageError))
        or "database" in _message_of(error)
    )


def _is_network_error(error: BaseException) -> bool:
    if isinstance(error, (
        httpx.TransportError,
        tg_error.NetworkError,
        ConnectionError,
        TimeoutError,
        UpstreamUnavailableError,
    )):
        return True
    return isinstance(error, OSError) and error.errno in _NETWORK_ERRNOS


def classify_error(error: BaseException) -> ErrorCategory:
    """
    Assign an exception to exactly one ErrorCategory.

    Args:
        error: Any exception caught while handling an update.

    Returns:
        The matching ErrorCategory (GENERAL when no rule applies).
    """
    code = status_code_of(error)
    if code is not None:
        return _STATUS_CATEGORIES.get(code, ErrorCategory.TRANSPORT)

    if _is_storage_error(error):
        return ErrorCategory.DATABASE

    if _is_network_error(error):
        return ErrorCategory.NETWORK

    if isinstance(error, InvalidInputError) or "validation" in _message_of(error):
        return ErrorCategory.VALIDATION

    if isinstance(error, RateLimitedError) or "rate limit" in _message_of(error):
        return ErrorCategory.RATE_LIMITED

    return ErrorCategory.GENERAL

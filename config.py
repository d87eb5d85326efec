"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    """Read a boolean flag ("1", "true", "yes", "on" are truthy)."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
BOT_USERNAME: str = os.getenv("BOT_USERNAME", "")
ADMIN_ID: int = int(os.getenv("ADMIN_ID", "0"))

# ── Dorar Hadith API ──────────────────────────────────────
DORAR_API_URL: str = os.getenv("DORAR_API_URL", "https://dorar.net/dorar_api.json")
API_TIMEOUT: float = float(os.getenv("API_TIMEOUT", "10"))
API_USER_AGENT: str = "Smart-Hadith-Bot/1.0.0"
CACHE_TTL: int = int(os.getenv("CACHE_TTL", "3600"))

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "hadith_bot")
DB_USER: str = os.getenv("DB_USER", "hadith_bot_user")
DB_PASS: str = os.getenv("DB_PASS", "")
DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
DB_TIMEOUT: float = float(os.getenv("DB_TIMEOUT", "10"))

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE: bool = _get_bool("LOG_TO_FILE", False)
LOG_DIR: str = os.getenv("LOG_DIR", "logs")

# ── Rate Limiting ─────────────────────────────────────────
# operation -> (max requests, window in seconds)
_DEFAULT_RATE_LIMITS: dict[str, tuple[int, int]] = {
    "search": (30, 60),
    "random": (10, 60),
    "favorite": (50, 60),
    "admin": (100, 60),
    "command": (50, 60),
    "callback": (100, 60),
}

RATE_LIMITS: dict[str, tuple[int, int]] = {
    op: (
        int(os.getenv(f"RATE_LIMIT_{op.upper()}_REQUESTS", str(limit))),
        int(os.getenv(f"RATE_LIMIT_{op.upper()}_WINDOW", str(window))),
    )
    for op, (limit, window) in _DEFAULT_RATE_LIMITS.items()
}
ADMIN_RATE_MULTIPLIER: int = int(os.getenv("ADMIN_RATE_MULTIPLIER", "5"))
RATE_LIMIT_MAX_AGE: int = int(os.getenv("RATE_LIMIT_MAX_AGE", str(24 * 60 * 60)))

# ── Feature Toggles ───────────────────────────────────────
ENABLE_ANALYTICS: bool = _get_bool("ENABLE_ANALYTICS", True)
ENABLE_GROUPS: bool = _get_bool("ENABLE_GROUPS", True)
ENABLE_ADMIN_PANEL: bool = _get_bool("ENABLE_ADMIN_PANEL", True)

# ── Performance ───────────────────────────────────────────
SLOW_UPDATE_SECONDS: float = float(os.getenv("SLOW_UPDATE_SECONDS", "1.0"))
CACHE_CLEANUP_INTERVAL: int = 60 * 60
RATE_LIMIT_CLEANUP_INTERVAL: int = 30 * 60

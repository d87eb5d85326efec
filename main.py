"""
main.py
-------
Entry point for the Smart Hadith Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Build every component once and wire them together.
    - Route every update through the request pipeline.
    - Schedule the cache and rate-limit sweeps.
"""

from telegram import BotCommand, Update
from telegram.ext import Application, ContextTypes, TypeHandler

from api.dorar_client import DorarClient
from config import (
    CACHE_CLEANUP_INTERVAL,
    RATE_LIMIT_CLEANUP_INTERVAL,
    TELEGRAM_BOT_TOKEN,
)
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers import admin_handler, placeholder_handler, random_handler, search_handler, start_handler
from handlers.error_handler import ErrorResponder, ErrorStats
from handlers.pipeline import Pipeline
from handlers.router import Router
from security.auth import SessionGate
from security.rate_limiter import RateLimiter
from services.cache_service import CacheService
from services.hadith_service import HadithService
from utils.logger import get_logger
from utils.tasks import TaskSink

logger = get_logger(__name__)


def build_router() -> Router:
    """Register every feature handler. Earlier registrations win on prefix ties."""
    router = Router()
    for module in (start_handler, search_handler, random_handler, admin_handler, placeholder_handler):
        module.register(router)
    return router


async def cleanup_cache(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Scheduled job: drop expired cache rows."""
    await context.bot_data["cache_service"].cleanup_expired()


async def cleanup_rate_limits(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Scheduled job: evict idle rate-limit windows."""
    context.bot_data["rate_limiter"].cleanup()


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    commands = [
        BotCommand("start", "🚀 القائمة الرئيسية"),
        BotCommand("help", "📖 عرض المساعدة"),
        BotCommand("search", "🔍 البحث في الأحاديث"),
        BotCommand("random", "🎲 حديث عشوائي"),
        BotCommand("favorites", "⭐ مفضلاتي"),
        BotCommand("settings", "⚙️ الإعدادات"),
        BotCommand("stats", "📊 إحصائياتي"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")


async def shutdown(application: Application) -> None:
    """Flush background writes and close the HTTP client."""
    await application.bot_data["tasks"].drain()
    await application.bot_data["dorar_client"].aclose()
    logger.info("HTTP client closed.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Build components ───────────────────────────────
    tasks = TaskSink()
    dorar_client = DorarClient()
    cache_service = CacheService()
    hadith_service = HadithService(client=dorar_client, cache=cache_service)
    rate_limiter = RateLimiter()
    error_stats = ErrorStats()
    responder = ErrorResponder(error_stats)
    pipeline = Pipeline(
        gate=SessionGate(tasks=tasks),
        limiter=rate_limiter,
        router=build_router(),
        responder=responder,
    )

    # ── 3. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = (
        Application.builder()
        .token(TELEGRAM_BOT_TOKEN)
        .concurrent_updates(True)
        .post_init(set_bot_commands)
        .post_shutdown(shutdown)
        .build()
    )
    app.bot_data.update(
        tasks=tasks,
        dorar_client=dorar_client,
        cache_service=cache_service,
        hadith_service=hadith_service,
        rate_limiter=rate_limiter,
        error_stats=error_stats,
    )

    # ── 4. One handler for every update ───────────────────
    app.add_handler(TypeHandler(Update, pipeline.handle_update))
    app.add_error_handler(responder.handle_application_error)

    # ── 5. Schedule jobs ──────────────────────────────────
    job_queue = app.job_queue
    if job_queue:
        job_queue.run_repeating(cleanup_cache, interval=CACHE_CLEANUP_INTERVAL, first=60, name="cache_cleanup")
        job_queue.run_repeating(
            cleanup_rate_limits, interval=RATE_LIMIT_CLEANUP_INTERVAL, first=60, name="rate_limit_cleanup"
        )
        logger.info(
            f"Scheduled cache sweep (every {CACHE_CLEANUP_INTERVAL}s) "
            f"+ rate-limit sweep (every {RATE_LIMIT_CLEANUP_INTERVAL}s)"
        )

    # ── 6. Start polling ──────────────────────────────────
    logger.info("🚀 Smart Hadith Bot is running! Press Ctrl+C to stop.")
    app.run_polling(
        drop_pending_updates=True,
        allowed_updates=["message", "callback_query", "my_chat_member", "chat_member"],
    )

    # ── 7. Cleanup on shutdown ────────────────────────────
    close_pool()
    logger.info("Smart Hadith Bot stopped.")


if __name__ == "__main__":
    main()

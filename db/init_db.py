"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users table: every Telegram user that ever talked to the bot
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    telegram_id     BIGINT UNIQUE NOT NULL,
    username        VARCHAR(64),
    first_name      VARCHAR(128),
    last_name       VARCHAR(128),
    language_code   VARCHAR(10),
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    is_blocked      BOOLEAN NOT NULL DEFAULT FALSE,
    is_premium      BOOLEAN NOT NULL DEFAULT FALSE,
    preferences     TEXT NOT NULL DEFAULT '{}',
    last_activity   TIMESTAMPTZ DEFAULT NOW(),
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Hadiths table: canonical, normalized search results
CREATE TABLE IF NOT EXISTS hadiths (
    id              VARCHAR(32) PRIMARY KEY,
    dorar_id        TEXT UNIQUE,
    text            TEXT NOT NULL DEFAULT '',
    arabic_text     TEXT NOT NULL DEFAULT '',
    narrator        TEXT,
    source          TEXT,
    book            TEXT,
    chapter         TEXT,
    hadith_number   TEXT,
    grade           TEXT,
    topic           TEXT,
    keywords        TEXT,
    translation     TEXT,
    explanation     TEXT,
    is_verified     BOOLEAN NOT NULL DEFAULT FALSE,
    search_count    INT NOT NULL DEFAULT 0,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Widen columns created by older schemas
ALTER TABLE hadiths
    ALTER COLUMN dorar_id TYPE TEXT,
    ALTER COLUMN hadith_number TYPE TEXT,
    ALTER COLUMN grade TYPE TEXT;

-- Cache table: API responses keyed by namespace:op:params
CREATE TABLE IF NOT EXISTS cache (
    key             VARCHAR(255) PRIMARY KEY,
    data            TEXT NOT NULL,
    expires_at      TIMESTAMPTZ NOT NULL
);

-- Daily per-user activity counters
CREATE TABLE IF NOT EXISTS user_analytics (
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    date            DATE NOT NULL DEFAULT CURRENT_DATE,
    message_count   INT NOT NULL DEFAULT 0,
    command_count   INT NOT NULL DEFAULT 0,
    callback_count  INT NOT NULL DEFAULT 0,
    last_active_hour SMALLINT,
    PRIMARY KEY (user_id, date)
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_hadiths_verified ON hadiths(is_verified);
CREATE INDEX IF NOT EXISTS idx_cache_expires ON cache(expires_at);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("✅ Database schema created successfully.")

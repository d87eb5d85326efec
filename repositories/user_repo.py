"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from models.user import User
from utils.logger import get_logger

logger = get_logger(__name__)

_USER_COLUMNS = """
    id, telegram_id, username, first_name, last_name, language_code,
    is_active, is_blocked, is_premium, preferences, last_activity, created_at
"""


class UserRepository:
    """Repository for CRUD operations on the users table."""

    def find_or_create(
        self,
        telegram_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        language_code: Optional[str] = None,
    ) -> User:
        """
        Insert a user if they don't exist, otherwise refresh their profile.
        Uses PostgreSQL's ON CONFLICT (upsert) for atomicity.

        Args:
            telegram_id: The Telegram user ID.
            username: Telegram @username.
            first_name: First name from Telegram.
            last_name: Last name from Telegram.
            language_code: Client language code.

        Returns:
            The persisted User.
        """
        sql = f"""
            INSERT INTO users (telegram_id, username, first_name, last_name, language_code)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (telegram_id) DO UPDATE SET
                username = EXCLUDED.username,
                first_name = EXCLUDED.first_name,
                last_name = EXCLUDED.last_name,
                language_code = EXCLUDED.language_code,
                last_activity = NOW()
            RETURNING {_USER_COLUMNS};
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (telegram_id, username, first_name, last_name, language_code))
                row = cur.fetchone()
            conn.commit()
            return self._row_to_user(row)
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to find or create user {telegram_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def update_activity(self, user_id: int) -> None:
        """Stamp `last_activity` with the current time."""
        self._execute(
            "UPDATE users SET last_activity = NOW() WHERE id = %s;",
            (user_id,),
            f"update activity for user #{user_id}",
        )

    def reactivate(self, user_id: int) -> None:
        """Flip an inactive user back to active."""
        self._execute(
            "UPDATE users SET is_active = TRUE, last_activity = NOW() WHERE id = %s;",
            (user_id,),
            f"reactivate user #{user_id}",
        )

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _execute(sql: str, params: tuple, action: str) -> None:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_user(row: tuple) -> User:
        """Convert a database row tuple to a User domain object."""
        return User(
            id=row[0],
            telegram_id=row[1],
            username=row[2],
            first_name=row[3],
            last_name=row[4],
            language_code=row[5],
            is_active=row[6],
            is_blocked=row[7],
            is_premium=row[8],
            preferences=row[9] or "{}",
            last_activity=row[10],
            created_at=row[11],
        )

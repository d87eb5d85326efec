"""
repositories/analytics_repo.py
-------------------------------
Daily per-user activity counters (`user_analytics` table).
"""

from datetime import datetime

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

# activity -> counter column
_COUNTERS = {
    "message": "message_count",
    "command": "command_count",
    "callback": "callback_count",
}


class AnalyticsRepository:
    """Repository for the user_analytics table."""

    def record_activity(self, user_id: int, activity: str) -> None:
        """
        Increment today's counter for one activity kind.

        Args:
            user_id: Internal user ID.
            activity: One of 'message', 'command', 'callback'.

        Raises:
            ValueError: For an unknown activity kind.
        """
        column = _COUNTERS.get(activity)
        if column is None:
            raise ValueError(f"Unknown activity kind: {activity!r}")

        sql = f"""
            INSERT INTO user_analytics (user_id, date, {column}, last_active_hour)
            VALUES (%s, CURRENT_DATE, 1, %s)
            ON CONFLICT (user_id, date) DO UPDATE SET
                {column} = user_analytics.{column} + 1,
                last_active_hour = EXCLUDED.last_active_hour;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, datetime.now().hour))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to record {activity} for user #{user_id}: {e}")
            raise
        finally:
            release_connection(conn)

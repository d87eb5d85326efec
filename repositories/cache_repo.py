"""
repositories/cache_repo.py
---------------------------
Raw key/value persistence for the API cache (`cache` table).
Expiry semantics live in services/cache_service.py; this layer only
stores and deletes rows.
"""

from datetime import datetime
from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class CacheRepository:
    """Repository for the cache table."""

    def get(self, key: str) -> Optional[tuple[str, datetime]]:
        """
        Fetch a raw cache row.

        Returns:
            ``(json_data, expires_at)`` or None when the key is absent.
        """
        sql = "SELECT data, expires_at FROM cache WHERE key = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (key,))
                row = cur.fetchone()
                return (row[0], row[1]) if row else None
        finally:
            release_connection(conn)

    def set(self, key: str, data: str, expires_at: datetime) -> None:
        """Create or overwrite a cache row."""
        sql = """
            INSERT INTO cache (key, data, expires_at)
            VALUES (%s, %s, %s)
            ON CONFLICT (key)
            DO UPDATE SET data = EXCLUDED.data, expires_at = EXCLUDED.expires_at;
        """
        self._execute(sql, (key, data, expires_at), f"set cache key {key}")

    def delete(self, key: str) -> bool:
        """Delete one row. Returns True if it existed."""
        return self._execute("DELETE FROM cache WHERE key = %s;", (key,), f"delete cache key {key}") > 0

    def clear(self) -> int:
        """Delete every row. Returns the number removed."""
        return self._execute("DELETE FROM cache;", (), "clear cache")

    def delete_expired(self, now: datetime) -> int:
        """Delete rows whose expiry is before `now`. Returns the number removed."""
        return self._execute("DELETE FROM cache WHERE expires_at < %s;", (now,), "clean up cache")

    @staticmethod
    def _execute(sql: str, params: tuple, action: str) -> int:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                affected = cur.rowcount
            conn.commit()
            return affected
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise
        finally:
            release_connection(conn)

"""
repositories/hadith_repo.py
----------------------------
Data access layer for canonical hadith records.
All SQL queries related to the `hadiths` table live here.
"""

from dataclasses import dataclass
from typing import Optional

from db.connection import get_connection, release_connection
from models.hadith import Hadith
from utils.logger import get_logger

logger = get_logger(__name__)

_HADITH_COLUMNS = """
    id, dorar_id, text, arabic_text, narrator, source, book, chapter,
    hadith_number, grade, topic, keywords, translation, explanation,
    is_verified, search_count
"""

# Every column an upsert overwrites. `id` and `search_count` are never touched.
_WRITABLE_COLUMNS = (
    "dorar_id", "text", "arabic_text", "narrator", "source", "book", "chapter",
    "hadith_number", "grade", "topic", "keywords", "translation", "explanation",
    "is_verified",
)


@dataclass
class HadithFilters:
    """Optional filters for random selection."""
    topic: Optional[str] = None
    narrator: Optional[str] = None
    source: Optional[str] = None
    grade: Optional[str] = None
    verified_only: bool = True

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "HadithFilters":
        data = data or {}
        return cls(
            topic=data.get("topic"),
            narrator=data.get("narrator"),
            source=data.get("source"),
            grade=data.get("grade"),
        )


class HadithRepository:
    """Repository for CRUD operations on the hadiths table."""

    # ── CREATE / UPSERT ───────────────────────────────────

    def insert(self, hadith: Hadith) -> Hadith:
        """
        Insert a hadith that has no external ID.

        Returns:
            The same Hadith (its `id` is generated client-side).
        """
        columns = ("id",) + _WRITABLE_COLUMNS
        sql = f"""
            INSERT INTO hadiths ({", ".join(columns)})
            VALUES ({", ".join(["%s"] * len(columns))})
            RETURNING {_HADITH_COLUMNS};
        """
        return self._write(sql, self._params(hadith), f"insert hadith {hadith.id}")

    def upsert_by_dorar_id(self, hadith: Hadith) -> Hadith:
        """
        Insert or update a hadith keyed by its Dorar ID.

        On conflict every writable column is refreshed; the existing internal
        ID and search counter are kept.

        Args:
            hadith: Normalized hadith with `dorar_id` set.

        Returns:
            The persisted Hadith (with the stored internal ID).
        """
        columns = ("id",) + _WRITABLE_COLUMNS
        updates = ",\n                ".join(
            f"{col} = EXCLUDED.{col}" for col in _WRITABLE_COLUMNS if col != "dorar_id"
        )
        sql = f"""
            INSERT INTO hadiths ({", ".join(columns)})
            VALUES ({", ".join(["%s"] * len(columns))})
            ON CONFLICT (dorar_id) DO UPDATE SET
                {updates},
                updated_at = NOW()
            RETURNING {_HADITH_COLUMNS};
        """
        return self._write(
            sql, self._params(hadith), f"upsert hadith dorar_id={hadith.dorar_id}"
        )

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, hadith_id: str) -> Optional[Hadith]:
        """Fetch a single hadith by internal ID."""
        sql = f"SELECT {_HADITH_COLUMNS} FROM hadiths WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (hadith_id,))
                row = cur.fetchone()
                return self._row_to_hadith(row) if row else None
        finally:
            release_connection(conn)

    def count(self, filters: HadithFilters) -> int:
        """Count hadiths matching the filters."""
        where, params = self._where(filters)
        sql = f"SELECT COUNT(*) FROM hadiths{where};"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return int(cur.fetchone()[0])
        finally:
            release_connection(conn)

    def find_one(self, filters: HadithFilters, offset: int = 0) -> Optional[Hadith]:
        """
        Fetch the hadith at position `offset` among those matching the filters.

        Rows are ordered by internal ID so an offset is stable between calls
        as long as nothing is inserted in between.
        """
        where, params = self._where(filters)
        sql = f"SELECT {_HADITH_COLUMNS} FROM hadiths{where} ORDER BY id LIMIT 1 OFFSET %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params + [offset])
                row = cur.fetchone()
                return self._row_to_hadith(row) if row else None
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def increment_search_count(self, hadith_id: str) -> None:
        """Bump the search counter of a hadith by one."""
        sql = "UPDATE hadiths SET search_count = search_count + 1 WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (hadith_id,))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to increment search count for {hadith_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    def _write(self, sql: str, params: tuple, action: str) -> Hadith:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
            conn.commit()
            return self._row_to_hadith(row)
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise
        finally:
            release_connection(conn)

    @staticmethod
    def _params(hadith: Hadith) -> tuple:
        values = tuple(getattr(hadith, col) for col in _WRITABLE_COLUMNS)
        return (hadith.id,) + values

    @staticmethod
    def _where(filters: HadithFilters) -> tuple[str, list]:
        clauses: list[str] = []
        params: list = []
        if filters.verified_only:
            clauses.append("is_verified = TRUE")
        for column in ("topic", "narrator", "source"):
            value = getattr(filters, column)
            if value:
                clauses.append(f"{column} ILIKE %s")
                params.append(f"%{value}%")
        if filters.grade:
            clauses.append("grade = %s")
            params.append(filters.grade)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    @staticmethod
    def _row_to_hadith(row: tuple) -> Hadith:
        """Convert a database row tuple to a Hadith domain object."""
        return Hadith(
            id=row[0],
            dorar_id=row[1],
            text=row[2] or "",
            arabic_text=row[3] or "",
            narrator=row[4] or "",
            source=row[5] or "",
            book=row[6] or "",
            chapter=row[7] or "",
            hadith_number=row[8],
            grade=row[9],
            topic=row[10],
            keywords=row[11] or "",
            translation=row[12] or "",
            explanation=row[13] or "",
            is_verified=bool(row[14]),
            search_count=int(row[15] or 0),
        )

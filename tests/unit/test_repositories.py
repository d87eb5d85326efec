"""
Smoke tests for the psycopg2 repositories.

The connection pool is replaced by a MagicMock connection so the SQL
sent, the commit/rollback behaviour and row mapping can be checked
without a database.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from db.init_db import SCHEMA_SQL
from models.hadith import Hadith
from repositories import analytics_repo, cache_repo, hadith_repo, user_repo
from repositories.analytics_repo import AnalyticsRepository
from repositories.cache_repo import CacheRepository
from repositories.hadith_repo import HadithFilters, HadithRepository
from repositories.user_repo import UserRepository


@pytest.fixture
def cursor():
    return MagicMock()


@pytest.fixture
def conn(monkeypatch, cursor):
    connection = MagicMock()
    connection.cursor.return_value.__enter__.return_value = cursor
    released = []
    for module in (analytics_repo, cache_repo, hadith_repo, user_repo):
        monkeypatch.setattr(module, "get_connection", lambda: connection)
        monkeypatch.setattr(module, "release_connection", released.append)
    connection.released = released
    return connection


def hadith_row(**overrides) -> tuple:
    values = dict(
        id="abc", dorar_id="d1", text="نص", arabic_text="نص", narrator="أبو هريرة",
        source="صحيح مسلم", book="", chapter=None, hadith_number="12", grade="صحيح",
        topic=None, keywords="", translation=None, explanation=None, is_verified=True,
        search_count=None,
    )
    values.update(overrides)
    return tuple(values.values())


class TestHadithRepository:

    def test_upsert_keeps_id_and_counter(self, conn, cursor):
        cursor.fetchone.return_value = hadith_row(id="stored-id", search_count=7)

        result = HadithRepository().upsert_by_dorar_id(Hadith(id="fresh-id", dorar_id="d1", text="نص"))

        sql = cursor.execute.call_args.args[0]
        assert "ON CONFLICT (dorar_id)" in sql
        assert "search_count =" not in sql
        assert " id = EXCLUDED.id" not in sql
        assert result.id == "stored-id"
        assert result.search_count == 7
        conn.commit.assert_called_once()
        assert conn.released == [conn]

    def test_row_mapping_fills_empty_strings(self, conn, cursor):
        cursor.fetchone.return_value = hadith_row()

        hadith = HadithRepository().get_by_id("abc")

        assert hadith.chapter == ""
        assert hadith.translation == ""
        assert hadith.search_count == 0
        assert hadith.is_verified is True

    def test_get_missing(self, conn, cursor):
        cursor.fetchone.return_value = None
        assert HadithRepository().get_by_id("nope") is None

    def test_filters_build_where_clause(self, conn, cursor):
        cursor.fetchone.return_value = (3,)

        count = HadithRepository().count(HadithFilters(topic="الصلاة", grade="صحيح"))

        sql, params = cursor.execute.call_args.args
        assert count == 3
        assert "is_verified = TRUE" in sql
        assert "topic ILIKE %s" in sql
        assert params == ["%الصلاة%", "صحيح"]

    def test_find_one_passes_offset_last(self, conn, cursor):
        cursor.fetchone.return_value = hadith_row()

        HadithRepository().find_one(HadithFilters(verified_only=False), offset=5)

        sql, params = cursor.execute.call_args.args
        assert "WHERE" not in sql
        assert params == [5]

    def test_failed_write_rolls_back_and_raises(self, conn, cursor):
        cursor.execute.side_effect = RuntimeError("constraint violated")

        with pytest.raises(RuntimeError):
            HadithRepository().insert(Hadith(text="x"))

        conn.rollback.assert_called_once()
        assert conn.released == [conn]


class TestCacheRepository:

    def test_get_returns_data_and_expiry(self, conn, cursor):
        expires = datetime(2030, 1, 1)
        cursor.fetchone.return_value = ('{"a": 1}', expires)

        assert CacheRepository().get("k") == ('{"a": 1}', expires)

    def test_delete_reports_rowcount(self, conn, cursor):
        cursor.rowcount = 0
        assert CacheRepository().delete("missing") is False

    def test_clear_returns_removed(self, conn, cursor):
        cursor.rowcount = 4
        assert CacheRepository().clear() == 4


class TestAnalyticsRepository:

    def test_counter_column_is_chosen_by_activity(self, conn, cursor):
        AnalyticsRepository().record_activity(5, "callback")

        sql, params = cursor.execute.call_args.args
        assert "callback_count = user_analytics.callback_count + 1" in sql
        assert params[0] == 5

    def test_unknown_activity_is_rejected(self, conn, cursor):
        with pytest.raises(ValueError):
            AnalyticsRepository().record_activity(5, "drop table")
        cursor.execute.assert_not_called()


class TestUserRepository:

    def test_find_or_create_upserts(self, conn, cursor):
        cursor.fetchone.return_value = (
            1, 111, "tester", "Ali", None, "ar", True, False, False, "{}", None, None,
        )

        user = UserRepository().find_or_create(111, username="tester", first_name="Ali")

        assert "ON CONFLICT (telegram_id)" in cursor.execute.call_args.args[0]
        assert user.telegram_id == 111
        assert user.display_name == "Ali"


class TestSchema:

    @pytest.mark.parametrize("column", ["dorar_id", "hadith_number", "grade"])
    def test_api_sourced_columns_are_unbounded_text(self, column):
        hadiths = SCHEMA_SQL.split("CREATE TABLE IF NOT EXISTS hadiths", 1)[1].split(");", 1)[0]
        definition = next(line.split() for line in hadiths.splitlines() if line.split()[:1] == [column])
        assert definition[1].rstrip(",") == "TEXT"

    def test_existing_tables_are_widened(self):
        for column in ("dorar_id", "hadith_number", "grade"):
            assert f"ALTER COLUMN {column} TYPE TEXT" in SCHEMA_SQL

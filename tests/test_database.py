from unittest.mock import MagicMock

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from student_records.core.config import Settings
from student_records.core.database import Database, _connect_args, is_unique_violation
from student_records.core.exceptions import StoreConnectionError


@pytest.fixture()
def unreachable_db(tmp_path):
    """Database whose SQLite file lives in a directory that does not exist."""
    settings = Settings(
        _env_file=None,
        DB_URL=f"sqlite:///{tmp_path / 'missing' / 'students.db'}",
    )
    database = Database(settings)
    yield database
    database.dispose()


def test_test_connection_succeeds(db):
    assert db.test_connection() is True


def test_test_connection_reports_failure(unreachable_db):
    assert unreachable_db.test_connection() is False


def test_get_connection_raises_store_connection_error(unreachable_db):
    with pytest.raises(StoreConnectionError) as exc_info:
        unreachable_db.get_connection()

    assert exc_info.value.code == "STORE_CONNECTION_ERROR"
    assert exc_info.value.__cause__ is not None
    # Also usable as the builtin ConnectionError
    assert isinstance(exc_info.value, ConnectionError)


def test_init_db_raises_when_unreachable(unreachable_db):
    with pytest.raises(StoreConnectionError):
        unreachable_db.init_db()


def test_init_db_creates_table(settings):
    database = Database(settings)
    try:
        database.init_db()
        assert "students" in inspect(database.engine).get_table_names()
        # Running it again is a no-op for an existing table
        database.init_db()
    finally:
        database.dispose()


def test_each_scope_gets_a_new_connection(db):
    with db.connection() as first:
        first_dbapi = first.connection.dbapi_connection
    with db.connection() as second:
        second_dbapi = second.connection.dbapi_connection

    assert first_dbapi is not second_dbapi
    assert first.closed
    assert second.closed


def test_connection_scope_closes_on_error(db):
    with pytest.raises(RuntimeError):
        with db.connection() as conn:
            conn.execute(text("SELECT 1"))
            raise RuntimeError("boom")

    assert conn.closed


def test_uncommitted_work_is_rolled_back_on_close(db):
    with db.connection() as conn:
        conn.execute(
            text("INSERT INTO students (name, email, age, course) VALUES (:n, :e, :a, :c)"),
            {"n": "Ghost", "e": "ghost@x.com", "a": 30, "c": "CS"},
        )

    with db.connection() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM students")).scalar_one() == 0


def test_close_connection_swallows_errors(db, caplog):
    conn = MagicMock()
    conn.close.side_effect = RuntimeError("socket already gone")

    db.close_connection(conn)

    assert conn.close.called
    assert "Error closing database connection" in caplog.text


def test_close_connection_accepts_none(db):
    db.close_connection(None)


def test_connect_args_use_driver_timeout_names(settings):
    sqlite_url = settings.get_database_url()
    pg_url = Settings(_env_file=None, DB_URL="postgresql://h:5432/d").get_database_url()

    assert _connect_args(sqlite_url, 7) == {"timeout": 7}
    assert _connect_args(pg_url, 7) == {"connect_timeout": 7}


def test_dialect_name(db):
    assert db.dialect_name == "sqlite"


class _PgError(Exception):
    def __init__(self, pgcode):
        super().__init__("pg error")
        self.pgcode = pgcode


class _SqliteError(Exception):
    def __init__(self, errorname):
        super().__init__("sqlite error")
        self.sqlite_errorname = errorname


def _integrity(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO students ...", {}, orig)


@pytest.mark.parametrize(
    "orig, expected",
    [
        (_PgError("23505"), True),
        (_PgError("23514"), False),  # check_violation
        (_SqliteError("SQLITE_CONSTRAINT_UNIQUE"), True),
        (_SqliteError("SQLITE_CONSTRAINT_CHECK"), False),
        (Exception(1062, "Duplicate entry 'a@x.com' for key 'email'"), True),
        (Exception(3819, "Check constraint 'ck_students_age_positive' is violated."), False),
        (Exception("Duplicate entry without a code"), False),
    ],
)
def test_is_unique_violation_uses_structured_codes(orig, expected):
    assert is_unique_violation(_integrity(orig)) is expected


def test_drop_tables_removes_students(settings):
    database = Database(settings)
    try:
        database.create_tables()
        database.drop_tables()
        assert "students" not in inspect(database.engine).get_table_names()
    finally:
        database.dispose()

import pytest

from student_records.core.config import Settings
from student_records.core.database import Database
from student_records.schemas.student import Student
from student_records.services.student import student as crud_student


@pytest.fixture()
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file.

    A file (not ``sqlite://``) is used so that every operation really opens
    and closes its own connection, as it would against a server.
    """
    return Settings(
        _env_file=None,
        DB_URL=f"sqlite:///{tmp_path / 'students.db'}",
        DB_CONNECT_TIMEOUT=5,
    )


@pytest.fixture()
def db(settings):
    """A Database whose students table exists for the duration of the test.

    The table is dropped again on teardown.
    """
    database = Database(settings)
    database.create_tables()
    try:
        yield database
    finally:
        database.drop_tables()
        database.dispose()


@pytest.fixture()
def student_factory(db):
    """Factory fixture that inserts students through the service layer."""

    def _create_student(
        name: str = "John Doe",
        email: str = "john@x.com",
        age: int = 20,
        course: str = "CS",
    ) -> Student:
        student = Student(name=name, email=email, age=age, course=course)
        assert crud_student.create_student(db, student) is True
        return student

    return _create_student

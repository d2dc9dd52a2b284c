import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from student_records.core.database import Database, is_unique_violation
from student_records.core.exceptions import DuplicateKeyError, StoreError
from student_records.models.student import STUDENT_COLUMNS, students_table
from student_records.schemas.student import Student, StudentUpdate

logger = logging.getLogger(__name__)

_select_students = select(*(students_table.c[name] for name in STUDENT_COLUMNS))
_by_name = (students_table.c.name, students_table.c.id)

# Widest integer any supported driver can bind (signed 64-bit)
_ID_MIN, _ID_MAX = -(2 ** 63), 2 ** 63 - 1


def _is_storable_id(student_id: int) -> bool:
    """Ids outside the signed 64-bit range can never match a row."""
    return _ID_MIN <= student_id <= _ID_MAX


@contextmanager
def _store_errors(action: str):
    """Log the failure with context and re-raise it as an application error."""
    try:
        yield
    except (OverflowError, ValueError) as e:
        # Raised by the driver while binding a value it cannot represent
        logger.error(f"Cannot bind value while {action}: {e}")
        raise StoreError(f"{action} failed: {e}", details={"action": action}) from e
    except IntegrityError as e:
        if is_unique_violation(e):
            logger.warning(f"Duplicate key while {action}: {e.orig}")
            raise DuplicateKeyError(
                f"A student with this email already exists ({action})",
                details={"action": action},
            ) from e
        logger.error(f"Constraint violation while {action}: {e.orig}")
        raise StoreError(f"{action} failed: {e.orig}", details={"action": action}) from e
    except SQLAlchemyError as e:
        logger.error(f"Error {action}: {e}")
        raise StoreError(f"{action} failed: {e}", details={"action": action}) from e


def _row_to_student(row: Row) -> Student:
    """Map a result row by column name, never by position."""
    mapping = row._mapping
    return Student(
        id=mapping["id"],
        name=mapping["name"],
        email=mapping["email"],
        age=mapping["age"],
        course=mapping["course"],
        created_at=mapping["created_at"],
    )


def create_student(db: Database, student: Student) -> bool:
    """
    Insert a new student.

    The store assigns id and created_at. The new id is written back onto
    `student`; created_at shows up on the next fetch.

    Raises:
        ValueError: if `student.id` is already set.
        DuplicateKeyError: if the email is already taken.
        StoreError: for any other store failure (e.g. age <= 0, or a value
            too large for the column type).
    """
    if student.id is not None:
        raise ValueError("Cannot create a student that already has an id")

    logger.info(f"Adding new student: {student.name}")
    stmt = insert(students_table).values(
        name=student.name,
        email=student.email,
        age=student.age,
        course=student.course,
    )
    with _store_errors("adding student"):
        with db.connection() as conn:
            result = conn.execute(stmt)
            inserted = result.rowcount
            new_id = result.inserted_primary_key[0] if inserted == 1 else None
            conn.commit()

    if inserted != 1:
        logger.warning(f"Failed to add student: {student.name}")
        return False

    student.id = new_id
    logger.info(f"Student added with ID: {student.id}")
    return True


def get_student(db: Database, student_id: int) -> Optional[Student]:
    """Fetch one student by ID; None if there is no such row."""
    if not _is_storable_id(student_id):
        logger.info(f"No student found with ID: {student_id}")
        return None

    stmt = _select_students.where(students_table.c.id == student_id)
    with _store_errors("retrieving student"):
        with db.connection() as conn:
            row = conn.execute(stmt).first()

    if row is None:
        logger.info(f"No student found with ID: {student_id}")
        return None
    return _row_to_student(row)


def get_student_by_email(db: Database, email: str) -> Optional[Student]:
    """Fetch one student by email"""
    stmt = _select_students.where(students_table.c.email == email)
    with _store_errors("retrieving student by email"):
        with db.connection() as conn:
            row = conn.execute(stmt).first()
    return _row_to_student(row) if row is not None else None


def get_students(db: Database, skip: int = 0, limit: Optional[int] = None) -> List[Student]:
    """All students ordered by name, with optional paging."""
    stmt = _select_students.order_by(*_by_name).offset(skip)
    if limit is not None:
        stmt = stmt.limit(limit)
    with _store_errors("retrieving all students"):
        with db.connection() as conn:
            students = [_row_to_student(row) for row in conn.execute(stmt)]

    logger.info(f"Retrieved {len(students)} students.")
    return students


def search_students_by_name(db: Database, name: str) -> List[Student]:
    """
    Students whose name contains `name`, ordered by name.

    An empty string matches everyone. LIKE wildcards typed by the user are
    escaped, and case sensitivity follows the store's collation.
    """
    stmt = (
        _select_students
        .where(students_table.c.name.contains(name, autoescape=True))
        .order_by(*_by_name)
    )
    with _store_errors("searching students by name"):
        with db.connection() as conn:
            students = [_row_to_student(row) for row in conn.execute(stmt)]

    logger.info(f"Found {len(students)} students matching name: {name}")
    return students


def get_students_by_course(db: Database, course: str) -> List[Student]:
    stmt = (
        _select_students
        .where(students_table.c.course == course)
        .order_by(*_by_name)
    )
    with _store_errors("retrieving students by course"):
        with db.connection() as conn:
            students = [_row_to_student(row) for row in conn.execute(stmt)]

    logger.info(f"Found {len(students)} students in course: {course}")
    return students


def update_student(db: Database, student: Student) -> bool:
    """
    Overwrite every mutable column of the row with `student.id`.

    Returns:
        True if a row was updated, False if no row has that id.
    """
    if student.id is None:
        raise ValueError("Cannot update a student without an id")
    if not _is_storable_id(student.id):
        logger.info(f"No student found with ID: {student.id}")
        return False

    logger.info(f"Updating student with ID: {student.id}")
    stmt = (
        update(students_table)
        .where(students_table.c.id == student.id)
        .values(
            name=student.name,
            email=student.email,
            age=student.age,
            course=student.course,
        )
    )
    with _store_errors("updating student"):
        with db.connection() as conn:
            rowcount = conn.execute(stmt).rowcount
            conn.commit()

    if rowcount != 1:
        logger.info(f"No student found with ID: {student.id}")
        return False
    return True


def patch_student(db: Database, student_id: int, changes: StudentUpdate) -> bool:
    """
    Change only the fields set in `changes`.

    Read-modify-write: the current row is fetched, the changes are applied
    in memory and the whole row is written back with update_student.
    """
    current = get_student(db, student_id)
    if current is None:
        return False

    updated = current.model_copy(update=changes.model_dump(exclude_none=True))
    return update_student(db, updated)


def delete_student(db: Database, student_id: int) -> bool:
    """True if a row was removed, False if none matched."""
    if not _is_storable_id(student_id):
        logger.info(f"No student found with ID: {student_id}")
        return False

    logger.info(f"Deleting student with ID: {student_id}")
    stmt = delete(students_table).where(students_table.c.id == student_id)
    with _store_errors("deleting student"):
        with db.connection() as conn:
            rowcount = conn.execute(stmt).rowcount
            conn.commit()

    if rowcount != 1:
        logger.info(f"No student found with ID: {student_id}")
        return False
    return True


def count_students(db: Database) -> int:
    stmt = select(func.count()).select_from(students_table)
    with _store_errors("counting students"):
        with db.connection() as conn:
            count = conn.execute(stmt).scalar_one()

    logger.info(f"Total students in database: {count}")
    return count


def student_exists(db: Database, student_id: int) -> bool:
    if not _is_storable_id(student_id):
        return False
    stmt = select(students_table.c.id).where(students_table.c.id == student_id).limit(1)
    with _store_errors("checking student existence"):
        with db.connection() as conn:
            exists = conn.execute(stmt).first() is not None
    return exists

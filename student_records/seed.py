import logging
from typing import Callable, List

from student_records.core.database import Database
from student_records.core.exceptions import DuplicateKeyError, StoreError
from student_records.schemas.student import Student
from student_records.services.student import student as crud_student
from student_records.shell import display_student_list

logger = logging.getLogger(__name__)


def sample_students() -> List[Student]:
    return [
        Student(name="John Doe", email="john.doe@email.com", age=20, course="Computer Science"),
        Student(name="Jane Smith", email="jane.smith@email.com", age=22, course="Mathematics"),
        Student(name="Bob Johnson", email="bob.johnson@email.com", age=21, course="Physics"),
        Student(name="Alice Brown", email="alice.brown@email.com", age=19, course="Computer Science"),
        Student(name="Charlie Davis", email="charlie.davis@email.com", age=23, course="Chemistry"),
    ]


def seed_data(db: Database, out: Callable[[str], None] = print) -> int:
    """
    Insert the sample students.

    Students whose email already exists are skipped, so running this twice
    is harmless. Returns the number of students actually added.
    """
    out("Adding sample students to database...")
    added = 0
    for student in sample_students():
        try:
            if crud_student.create_student(db, student):
                out(f"  ✅ Added: {student.name}")
                added += 1
            else:
                out(f"  ❌ Failed to add: {student.name}")
        except DuplicateKeyError:
            out(f"  ⚠️ Student already exists: {student.name}")
        except StoreError as e:
            out(f"  ❌ Error adding {student.name}: {e.message}")

    out("Sample data insertion completed!")
    return added


def demonstrate_read_operations(db: Database, out: Callable[[str], None] = print):
    out("1. Getting all students:")
    display_student_list(crud_student.get_students(db), out)

    first = next(iter(crud_student.search_students_by_name(db, "John Doe")), None)
    out("\n2. Getting student by ID:")
    student = crud_student.get_student(db, first.id) if first else None
    out(f"  {student}" if student else "  No student found")

    out("\n3. Searching students by name (containing 'John'):")
    display_student_list(crud_student.search_students_by_name(db, "John"), out)

    out("\n4. Getting students by course (Computer Science):")
    display_student_list(crud_student.get_students_by_course(db, "Computer Science"), out)

    out("\n5. Total number of students:")
    out(f"  Total students: {crud_student.count_students(db)}")


def demonstrate_update_operations(db: Database, out: Callable[[str], None] = print):
    out("Updating student information...")
    student = crud_student.get_student_by_email(db, "john.doe@email.com")
    if student is None:
        out("No student found to update")
        return

    out(f"Original data: {student}")
    student.age += 1
    try:
        updated = crud_student.update_student(db, student)
    except DuplicateKeyError:
        out("⚠️ Email already used by another student")
        return

    if updated:
        out("✅ Student updated successfully!")
        out(f"Updated data: {crud_student.get_student(db, student.id)}")
    else:
        out("❌ Failed to update student")


def demonstrate_delete_operations(db: Database, out: Callable[[str], None] = print):
    out("Demonstrating delete operation...")
    out(f"Students before deletion: {crud_student.count_students(db)}")

    students = crud_student.get_students(db)
    if not students:
        out("No students to delete")
        return

    last = students[-1]
    out(f"Deleting student: {last.name}")
    if crud_student.delete_student(db, last.id):
        out("✅ Student deleted successfully!")
        out(f"Students after deletion: {crud_student.count_students(db)}")
    else:
        out("❌ Failed to delete student")


def demonstrate_crud_operations(db: Database, out: Callable[[str], None] = print):
    """Scripted walk-through of every CRUD operation with the sample data."""
    out("Demonstrating CRUD operations with sample data...\n")

    out("🔹 CREATE Operations (Adding Students)")
    seed_data(db, out)

    out("\n🔹 READ Operations (Retrieving Students)")
    demonstrate_read_operations(db, out)

    out("\n🔹 UPDATE Operations (Modifying Students)")
    demonstrate_update_operations(db, out)

    out("\n🔹 DELETE Operations (Removing Students)")
    demonstrate_delete_operations(db, out)


if __name__ == "__main__":
    from student_records.core.config import get_settings
    from student_records.core.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    database = Database(settings)
    database.init_db()
    seed_data(database)

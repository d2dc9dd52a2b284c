"""
Interactive practice menu.

Every handler reads its input line by line, calls one student service
function and prints the outcome. Errors are reported and the loop keeps
running; only "8. Exit" leaves it.
"""
import logging
from typing import Callable, List, Optional

from student_records.core.database import Database
from student_records.core.exceptions import DuplicateKeyError, StudentRecordsError
from student_records.schemas.student import Student
from student_records.services.student import student as crud_student

logger = logging.getLogger(__name__)

LINE = "-" * 80
ROW_FORMAT = "  {:<5} {:<20} {:<25} {:<5} {:<15}"

MENU_OPTIONS = (
    "Add New Student",
    "View All Students",
    "Find Student by ID",
    "Update Student",
    "Delete Student",
    "Search Students by Name",
    "Search Students by Course",
    "Exit",
)


def display_student_list(students: List[Student], out: Callable[[str], None] = print):
    """Print students as a fixed-width table."""
    if not students:
        out("  No students found.")
        return

    out(f"  Found {len(students)} student(s):")
    out(f"  {LINE}")
    out(ROW_FORMAT.format("ID", "Name", "Email", "Age", "Course"))
    out(f"  {LINE}")
    for student in students:
        out(ROW_FORMAT.format(student.id, student.name, student.email, student.age, student.course))


class InteractiveMenu:
    """Numbered menu over the student service, driven by line input."""

    def __init__(
        self,
        db: Database,
        read: Callable[[str], str] = input,
        out: Callable[[str], None] = print,
    ):
        self.db = db
        self.read = read
        self.out = out
        self.handlers = {
            1: self.handle_add_student,
            2: self.handle_view_all_students,
            3: self.handle_find_student,
            4: self.handle_update_student,
            5: self.handle_delete_student,
            6: self.handle_search_by_name,
            7: self.handle_search_by_course,
        }

    def display_menu(self):
        self.out("\n" + "=" * 50)
        self.out("           STUDENT RECORDS PRACTICE MENU")
        self.out("=" * 50)
        for number, label in enumerate(MENU_OPTIONS, start=1):
            self.out(f"{number}. {label}")
        self.out("=" * 50)

    def run(self):
        exit_choice = len(MENU_OPTIONS)
        while True:
            self.display_menu()
            try:
                choice = int(self.read(f"Enter your choice (1-{exit_choice}): "))
            except ValueError:
                self.out("Invalid input! Please enter a number.")
                continue
            except EOFError:
                self.out("\nInput closed. Exiting interactive menu...")
                return

            if choice == exit_choice:
                self.out("Exiting interactive menu...")
                return

            handler = self.handlers.get(choice)
            if handler is None:
                self.out(f"Invalid choice! Please enter 1-{exit_choice}.")
                continue

            try:
                self.dispatch(handler)
                self.read("\nPress Enter to continue...")
            except EOFError:
                self.out("\nInput closed. Exiting interactive menu...")
                return

    def dispatch(self, handler: Callable[[], None]):
        """Run one handler, turning errors into messages."""
        try:
            handler()
        except ValueError:
            self.out("Invalid input! Please enter a number.")
        except DuplicateKeyError:
            self.out("⚠️ A student with that email already exists!")
        except StudentRecordsError as e:
            logger.error(f"Operation abandoned: {e.message}")
            self.out(f"❌ {e.message}")

    # =========================================================
    # HANDLERS
    # =========================================================

    def _read_id(self, prompt: str) -> int:
        return int(self.read(prompt))

    def _find_or_report(self, student_id: int) -> Optional[Student]:
        student = crud_student.get_student(self.db, student_id)
        if student is None:
            self.out(f"No student found with ID: {student_id}")
        return student

    def handle_add_student(self):
        self.out("\n--- Add New Student ---")
        name = self.read("Enter name: ")
        email = self.read("Enter email: ")
        age = int(self.read("Enter age: "))
        course = self.read("Enter course: ")

        student = Student(name=name, email=email, age=age, course=course)
        if crud_student.create_student(self.db, student):
            self.out(f"✅ Student added successfully! (ID: {student.id})")
        else:
            self.out("❌ Failed to add student!")

    def handle_view_all_students(self):
        self.out("\n--- All Students ---")
        display_student_list(crud_student.get_students(self.db), self.out)

    def handle_find_student(self):
        self.out("\n--- Find Student by ID ---")
        student = self._find_or_report(self._read_id("Enter student ID: "))
        if student is not None:
            self.out(f"Student found: {student}")

    def handle_update_student(self):
        self.out("\n--- Update Student ---")
        student = self._find_or_report(self._read_id("Enter student ID to update: "))
        if student is None:
            return

        self.out(f"Current data: {student}")
        self.out("Enter new values (press Enter to keep current value):")

        name = self.read(f"Name [{student.name}]: ").strip()
        email = self.read(f"Email [{student.email}]: ").strip()
        age = self.read(f"Age [{student.age}]: ").strip()
        course = self.read(f"Course [{student.course}]: ").strip()

        if name:
            student.name = name
        if email:
            student.email = email
        if age:
            student.age = int(age)
        if course:
            student.course = course

        if crud_student.update_student(self.db, student):
            self.out("✅ Student updated successfully!")
        else:
            self.out("❌ Failed to update student!")

    def handle_delete_student(self):
        self.out("\n--- Delete Student ---")
        student_id = self._read_id("Enter student ID to delete: ")
        student = self._find_or_report(student_id)
        if student is None:
            return

        self.out(f"Student to delete: {student}")
        confirmation = self.read("Are you sure? (y/N): ")
        if not confirmation.strip().lower().startswith("y"):
            self.out("Delete operation cancelled.")
            return

        if crud_student.delete_student(self.db, student_id):
            self.out("✅ Student deleted successfully!")
        else:
            self.out("❌ Failed to delete student!")

    def handle_search_by_name(self):
        self.out("\n--- Search Students by Name ---")
        name = self.read("Enter name to search: ")
        display_student_list(crud_student.search_students_by_name(self.db, name), self.out)

    def handle_search_by_course(self):
        self.out("\n--- Search Students by Course ---")
        course = self.read("Enter course name: ")
        display_student_list(crud_student.get_students_by_course(self.db, course), self.out)

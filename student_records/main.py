import argparse
import sys
from typing import Optional, Sequence

from student_records.core.config import Settings, get_settings, print_config
from student_records.core.database import Database
from student_records.core.exceptions import StudentRecordsError
from student_records.core.logging import setup_logging
from student_records.seed import demonstrate_crud_operations
from student_records.shell import InteractiveMenu

TABLE_STRUCTURE = (
    "- id: Auto-increment primary key",
    "- name: Student's full name (max 100 chars)",
    "- email: Unique email address (max 150 chars)",
    "- age: Student's age (must be positive)",
    "- course: Student's course/major (max 100 chars)",
    "- created_at: Timestamp when record was created",
)


def _step(title: str):
    print(title)
    print("-" * 40)


def run(settings: Settings, db: Database, skip_demo: bool = False, menu: Optional[InteractiveMenu] = None) -> int:
    """Walk through the four demo steps. Returns the process exit code."""
    print("=" * 60)
    print(f"         {settings.PROJECT_NAME.upper()} - CRUD DEMO")
    print("=" * 60)
    print()

    _step("Step 1: Testing Database Connection")
    if not db.test_connection():
        print("❌ Database connection failed!")
        print("Please check DB_URL, DB_USERNAME and DB_PASSWORD.")
        return 1
    print("✅ Database connection successful!")
    print()

    _step("Step 2: Creating Database Table")
    try:
        db.create_tables()
    except StudentRecordsError as e:
        print(f"❌ Error creating table: {e.message}")
        return 1
    print("✅ Table 'students' is ready!")
    print("\nTable structure:")
    for line in TABLE_STRUCTURE:
        print(line)
    print()

    if not skip_demo:
        _step("Step 3: Demonstrating CRUD Operations")
        try:
            demonstrate_crud_operations(db)
        except StudentRecordsError as e:
            print(f"❌ Demo stopped: {e.message}")
        print()

    _step("Step 4: Interactive Practice Menu")
    (menu or InteractiveMenu(db)).run()

    print("\nThank you for practising CRUD!")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Student records CRUD demo.")
    parser.add_argument(
        "--skip-demo",
        action="store_true",
        help="Skip the scripted CRUD walk-through and go straight to the menu.",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the configuration (password masked) before starting.",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logger = setup_logging(settings.LOG_LEVEL)
    if settings.uses_placeholder_credentials:
        logger.warning("⚠️ DB_PASSWORD is not set; using the insecure placeholder default")
    db = Database(settings)
    if args.show_config:
        print_config(settings)
        print(f"Database Dialect: {db.dialect_name}")

    try:
        return run(settings, db, skip_demo=args.skip_demo)
    finally:
        db.dispose()


if __name__ == "__main__":
    sys.exit(main())

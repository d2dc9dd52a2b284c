from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func
from student_records.core.database import Base


class Student(Base):
    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("age > 0", name="ck_students_age_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False)
    age = Column(Integer, nullable=False)
    course = Column(String(100), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


students_table = Student.__table__

# Column list used by every SELECT; rows are mapped back by these names
STUDENT_COLUMNS = ("id", "name", "email", "age", "course", "created_at")

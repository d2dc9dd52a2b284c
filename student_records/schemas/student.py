from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StudentBase(BaseModel):
    name: str
    email: str
    age: int
    course: str


class StudentUpdate(BaseModel):
    """Partial change set; fields left as None keep their stored value."""
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    course: Optional[str] = None


class Student(StudentBase):
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def __str__(self) -> str:
        return (
            f"Student(id={self.id}, name='{self.name}', email='{self.email}', "
            f"age={self.age}, course='{self.course}')"
        )

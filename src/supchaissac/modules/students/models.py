"""
Student Models

Pupil roster imported once per school year from the school software.
Rows are replaced wholesale by a new import; there is no workflow.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from supchaissac.modules.shared import BaseModel


class Student(BaseModel):
    """One pupil of the roster for a given school year."""

    __tablename__ = "students"

    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Kept as exported ("12/03/2012"), never parsed
    birth_date: Mapped[str | None] = mapped_column(String(20), nullable=True)
    usage_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    accompaniment_project: Mapped[str | None] = mapped_column(String(100), nullable=True)
    school_year: Mapped[str] = mapped_column(String(9), nullable=False)
    imported_by: Mapped[str | None] = mapped_column(String(200), nullable=True)

    __table_args__ = (
        Index("ix_students_school_year_class", "school_year", "class_name"),
        Index("ix_students_school_year_last_name", "school_year", "last_name"),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, {self.last_name} {self.first_name}, {self.class_name})>"

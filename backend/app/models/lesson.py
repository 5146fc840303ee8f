# backend/app/models/lesson.py
"""
Lesson models for the swim school.

A lesson is taught by one instructor over a fixed time range and carries a
roster of attendees. Roster rows snapshot the attendee's name and swimming
preferences at booking time, so a lesson can list walk-in students that never
registered an account.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import LessonType
from ..database import Base
from .base_enum import create_safe_enum

if TYPE_CHECKING:
    from .instructor import Instructor


class Lesson(Base):
    """
    Scheduled swim lesson.

    Attributes:
        id: ULID primary key
        type_lesson: PUBLIC, PRIVATE or MIXED
        specialties: Swimming style values taught in the lesson
        instructor_id: Teaching instructor
        start_time: School-local start datetime
        end_time: School-local end datetime
    """

    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    type_lesson: Mapped[LessonType] = mapped_column(
        create_safe_enum(LessonType, "lesson_type_enum"), nullable=False
    )
    specialties: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    instructor_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("instructors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    instructor: Mapped["Instructor"] = relationship("Instructor", back_populates="lessons")
    students: Mapped[List["LessonStudent"]] = relationship(
        "LessonStudent",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="LessonStudent.position",
        lazy="selectin",
    )

    __table_args__ = (CheckConstraint("start_time < end_time", name="ck_lesson_time_order"),)

    @property
    def student_ids(self) -> List[str]:
        return [attendee.student_id for attendee in self.students]

    def has_student(self, student_id: str) -> bool:
        return student_id in self.student_ids

    def __repr__(self) -> str:
        return (
            f"<Lesson(id={self.id}, type={self.type_lesson}, instructor={self.instructor_id}, "
            f"{self.start_time}-{self.end_time})>"
        )


class LessonStudent(Base):
    """Roster entry of a lesson."""

    __tablename__ = "lesson_students"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    lesson_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    preferences: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="students")

    __table_args__ = (UniqueConstraint("lesson_id", "student_id", name="uq_lesson_student"),)

    def __repr__(self) -> str:
        return f"<LessonStudent(lesson={self.lesson_id}, student={self.student_id})>"

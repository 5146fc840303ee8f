"""Student model for the swim school."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.enums import LessonType
from ..database import Base
from .base_enum import create_safe_enum


class Student(Base):
    """
    Registered student.

    The primary key is chosen by the student at sign-up (the mobile client
    uses the phone number) and is the same id that appears on lesson rosters.
    """

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    preferences: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)

    # Preferred lesson format plus up to two fallbacks, used to rank open lessons
    type_preference: Mapped[Optional[LessonType]] = mapped_column(
        create_safe_enum(LessonType, "student_type_preference_enum"), nullable=True
    )
    type_priority1: Mapped[Optional[LessonType]] = mapped_column(
        create_safe_enum(LessonType, "student_type_priority1_enum"), nullable=True
    )
    type_priority2: Mapped[Optional[LessonType]] = mapped_column(
        create_safe_enum(LessonType, "student_type_priority2_enum"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def ranked_lesson_types(self) -> List[LessonType]:
        """Lesson types in the order the student prefers them."""
        ranked: List[LessonType] = []
        for lesson_type in (self.type_preference, self.type_priority1, self.type_priority2):
            if lesson_type is not None and lesson_type not in ranked:
                ranked.append(lesson_type)
        return ranked

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.name})>"

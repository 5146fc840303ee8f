# backend/app/repositories/factory.py
"""
Repository Factory for the swim school backend.

Provides centralized creation of repository instances so services never
construct repositories directly.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .instructor_repository import InstructorRepository
    from .lesson_repository import LessonRepository
    from .student_repository import StudentRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_instructor_repository(db: Session) -> "InstructorRepository":
        from .instructor_repository import InstructorRepository

        return InstructorRepository(db)

    @staticmethod
    def create_student_repository(db: Session) -> "StudentRepository":
        from .student_repository import StudentRepository

        return StudentRepository(db)

    @staticmethod
    def create_lesson_repository(db: Session) -> "LessonRepository":
        from .lesson_repository import LessonRepository

        return LessonRepository(db)

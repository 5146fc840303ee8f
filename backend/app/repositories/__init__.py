# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the swim school backend.

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Shared lookups and writes for every model
- RepositoryFactory: Factory for creating repository instances
- InstructorRepository: Instructors and their weekly availability
- StudentRepository: Registered students
- LessonRepository: Lessons, rosters and the scheduling lookups

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    lessons = RepositoryFactory.create_lesson_repository(db)
    mondays = lessons.get_by_instructor_on_weekday(instructor_id, 1)
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .instructor_repository import InstructorRepository
from .lesson_repository import LessonRepository
from .student_repository import StudentRepository

__all__ = [
    "BaseRepository",
    "InstructorRepository",
    "LessonRepository",
    "RepositoryFactory",
    "StudentRepository",
]

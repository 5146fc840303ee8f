# backend/app/repositories/student_repository.py
"""Student Repository for the swim school backend."""

from sqlalchemy.orm import Query, Session

from ..models.student import Student
from .base_repository import BaseRepository


class StudentRepository(BaseRepository[Student]):
    """Repository for student data access."""

    def __init__(self, db: Session):
        super().__init__(db, Student)

    def _apply_default_ordering(self, query: Query) -> Query:
        return query.order_by(Student.created_at, Student.id)

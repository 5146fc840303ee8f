# backend/app/repositories/lesson_repository.py
"""
Lesson Repository for the swim school backend.

Implements lesson queries used by scheduling validation:
- Lessons of an instructor on a weekday
- Lessons starting inside a time range
- Lessons a student attends
- Roster (attendee) maintenance
"""

from datetime import datetime
import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import sunday_based_weekday
from ..models.lesson import Lesson, LessonStudent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class LessonRepository(BaseRepository[Lesson]):
    """
    Repository for lesson data access.

    Times passed in and out are naive school-local datetimes.
    """

    def __init__(self, db: Session):
        super().__init__(db, Lesson)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Lesson.students))

    def _apply_default_ordering(self, query: Query) -> Query:
        return query.order_by(Lesson.start_time, Lesson.id)

    def _lessons(self) -> Query:
        return self._apply_eager_loading(self._build_query())

    def get_by_instructor(self, instructor_id: str) -> List[Lesson]:
        query = self._lessons().filter(Lesson.instructor_id == instructor_id)
        return self._execute_query(self._apply_default_ordering(query))

    def get_by_instructor_on_weekday(
        self,
        instructor_id: str,
        weekday: int,
        exclude_lesson_id: Optional[str] = None,
    ) -> List[Lesson]:
        """Lessons of the instructor held on ``weekday`` (Sunday = 0) in any week."""
        query = self._lessons().filter(Lesson.instructor_id == instructor_id)
        if exclude_lesson_id:
            query = query.filter(Lesson.id != exclude_lesson_id)
        return [
            lesson
            for lesson in self._execute_query(self._apply_default_ordering(query))
            if sunday_based_weekday(lesson.start_time) == weekday
        ]

    def get_starting_between(
        self,
        start: datetime,
        end: datetime,
        exclude_lesson_id: Optional[str] = None,
    ) -> List[Lesson]:
        """Lessons whose start lies in [start, end] inclusive."""
        query = self._lessons().filter(Lesson.start_time >= start, Lesson.start_time <= end)
        if exclude_lesson_id:
            query = query.filter(Lesson.id != exclude_lesson_id)
        return self._execute_query(self._apply_default_ordering(query))

    def get_starting_after(self, moment: datetime) -> List[Lesson]:
        query = self._lessons().filter(Lesson.start_time > moment)
        return self._execute_query(self._apply_default_ordering(query))

    def get_by_student(self, student_id: str) -> List[Lesson]:
        """Lessons whose roster contains the student."""
        query = (
            self._lessons()
            .join(Lesson.students)
            .filter(LessonStudent.student_id == student_id)
        )
        return self._execute_query(self._apply_default_ordering(query))

    def get_roster_entries(self, student_id: str) -> List[LessonStudent]:
        try:
            return (
                self.db.query(LessonStudent).filter(LessonStudent.student_id == student_id).all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading roster entries of student {student_id}: {e}")
            raise RepositoryException(f"Failed to load roster entries: {str(e)}")

    def delete_by_instructor(self, instructor_id: str) -> int:
        """Delete the instructor's lessons through the ORM; returns the count."""
        lessons = self.get_by_instructor(instructor_id)
        try:
            for lesson in lessons:
                self.db.delete(lesson)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting lessons of instructor {instructor_id}: {e}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete lessons: {str(e)}")
        return len(lessons)

    def set_roster(self, lesson: Lesson, attendees: Sequence[dict]) -> None:
        """
        Replace the lesson roster.

        Each attendee is a dict with ``id``, ``name`` and ``preferences``.
        """
        try:
            lesson.students.clear()
            # Flush removals first so re-added students do not trip the unique constraint
            self.db.flush()
            for position, attendee in enumerate(attendees):
                lesson.students.append(
                    LessonStudent(
                        student_id=attendee["id"],
                        name=attendee["name"],
                        preferences=list(attendee["preferences"]),
                        position=position,
                    )
                )
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error storing roster of lesson {lesson.id}: {e}")
            self.db.rollback()
            raise RepositoryException(f"Failed to store lesson roster: {str(e)}")

    def add_attendee(
        self, lesson: Lesson, *, student_id: str, name: str, preferences: List[str]
    ) -> None:
        try:
            position = max((entry.position for entry in lesson.students), default=-1) + 1
            lesson.students.append(
                LessonStudent(
                    student_id=student_id,
                    name=name,
                    preferences=list(preferences),
                    position=position,
                )
            )
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding student {student_id} to lesson {lesson.id}: {e}")
            self.db.rollback()
            raise RepositoryException(f"Failed to add student to lesson: {str(e)}")

    def remove_attendee(self, lesson: Lesson, student_id: str) -> bool:
        entry = next((e for e in lesson.students if e.student_id == student_id), None)
        if entry is None:
            return False
        try:
            lesson.students.remove(entry)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing student {student_id} from lesson {lesson.id}: {e}")
            self.db.rollback()
            raise RepositoryException(f"Failed to remove student from lesson: {str(e)}")
        return True

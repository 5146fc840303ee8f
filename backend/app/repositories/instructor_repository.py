# backend/app/repositories/instructor_repository.py
"""
Instructor Repository for the swim school backend.

Handles instructor rows and their weekly availability windows.
"""

from datetime import time
import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.instructor import Instructor, InstructorAvailability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

WeeklyWindows = Sequence[Optional[Tuple[time, time]]]


class InstructorRepository(BaseRepository[Instructor]):
    """Repository for instructor data access."""

    def __init__(self, db: Session):
        super().__init__(db, Instructor)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Instructor.availability_windows))

    def create_with_availability(
        self,
        *,
        name: str,
        specialties: List[str],
        hashed_password: str,
        availabilities: WeeklyWindows,
    ) -> Instructor:
        """Create an instructor together with one availability row per available day."""
        instructor = self.create(
            name=name, specialties=list(specialties), hashed_password=hashed_password
        )
        self.replace_availability(instructor, availabilities)
        return instructor

    def replace_availability(self, instructor: Instructor, availabilities: WeeklyWindows) -> None:
        """Swap the instructor's weekly windows; None entries remove the day."""
        try:
            instructor.availability_windows.clear()
            # Deletes must reach the database before re-inserting the same days
            self.db.flush()
            for day, window in enumerate(availabilities):
                if window is None:
                    continue
                instructor.availability_windows.append(
                    InstructorAvailability(
                        day_of_week=day, start_time=window[0], end_time=window[1]
                    )
                )
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing availability of instructor {instructor.id}: {e}")
            self.db.rollback()
            raise RepositoryException(f"Failed to store availability: {str(e)}")

    def find_by_specialties(self, specialties: Sequence[str]) -> List[Instructor]:
        """Instructors that teach every requested specialty."""
        # Specialties are a JSON list; the instructor table is small enough to filter in memory
        wanted = set(specialties)
        return [
            instructor
            for instructor in self.get_all()
            if wanted.issubset(set(instructor.specialties or []))
        ]

    def find_available_on_day(self, day_of_week: int) -> List[Instructor]:
        """Instructors with an availability window on the given Sunday-based day."""
        try:
            query = (
                self._apply_eager_loading(self._build_query())
                .join(Instructor.availability_windows)
                .filter(InstructorAvailability.day_of_week == day_of_week)
                .order_by(Instructor.id)
            )
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding instructors available on day {day_of_week}: {e}")
            raise RepositoryException(f"Failed to find available instructors: {str(e)}")

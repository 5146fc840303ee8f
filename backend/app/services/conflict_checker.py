# backend/app/services/conflict_checker.py
"""
Conflict Checker Service for the swim school backend.

Handles lesson conflict detection:
- Instructor time-slot conflicts on the lesson's weekday, across weeks
- Student double-booking across overlapping lessons
"""

from datetime import datetime, timedelta
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import LessonConflictException, StudentDoubleBookingException
from ..core.timezone_utils import sunday_based_weekday
from ..models.lesson import Lesson
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.lesson_repository import LessonRepository
from .base import BaseService
from .scheduling_rules import (
    first_overlapping,
    intervals_overlap,
    overlaps_by_time_of_day,
    shared_students,
)

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """
    Service for checking lesson conflicts.

    Times are naive school-local datetimes. ``exclude_lesson_id`` lets an
    update ignore the lesson being replaced.
    """

    def __init__(self, db: Session, repository: Optional[LessonRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_lesson_repository(db)

    @BaseService.measure_operation("check_instructor_conflicts")
    def check_instructor_conflicts(
        self,
        instructor_id: str,
        start: datetime,
        end: datetime,
        exclude_lesson_id: Optional[str] = None,
    ) -> None:
        """
        Reject a lesson overlapping another lesson of the same instructor.

        The instructor keeps a weekly timetable: any lesson on the same weekday
        whose time of day overlaps counts, whichever week it falls in.

        Raises:
            LessonConflictException: naming the first overlapping lesson
        """
        same_weekday = self.repository.get_by_instructor_on_weekday(
            instructor_id, sunday_based_weekday(start), exclude_lesson_id=exclude_lesson_id
        )
        conflict = first_overlapping(
            start, end, same_weekday, exclude_lesson_id, overlap=overlaps_by_time_of_day
        )
        if conflict is not None:
            self.logger.warning(
                f"Lesson {start}-{end} of instructor {instructor_id} overlaps lesson {conflict.id}"
            )
            prometheus_metrics.inc_scheduling_rejection("LESSON_CONFLICT")
            raise LessonConflictException(conflict.id)

    @BaseService.measure_operation("check_student_double_booking")
    def check_student_double_booking(
        self,
        student_ids: Iterable[str],
        start: datetime,
        end: datetime,
        exclude_lesson_id: Optional[str] = None,
    ) -> None:
        """
        Reject a roster whose students already attend an overlapping lesson.

        Raises:
            StudentDoubleBookingException: with the clashing student ids
        """
        wanted = list(student_ids)
        for lesson in self._overlapping_lessons(start, end, exclude_lesson_id):
            clashing = shared_students(wanted, lesson)
            if clashing:
                self.logger.warning(
                    f"Students {clashing} already attend lesson {lesson.id} overlapping {start}-{end}"
                )
                prometheus_metrics.inc_scheduling_rejection("STUDENT_DOUBLE_BOOKING")
                raise StudentDoubleBookingException(clashing, lesson.id)

    def _overlapping_lessons(
        self, start: datetime, end: datetime, exclude_lesson_id: Optional[str]
    ) -> list[Lesson]:
        padding = timedelta(hours=settings.student_overlap_padding_hours)
        nearby = self.repository.get_starting_between(
            start - padding, end + padding, exclude_lesson_id=exclude_lesson_id
        )
        return [
            lesson
            for lesson in nearby
            if intervals_overlap(start, end, lesson.start_time, lesson.end_time)
        ]

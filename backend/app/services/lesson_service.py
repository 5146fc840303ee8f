# backend/app/services/lesson_service.py
"""
Lesson Service Layer

Creating or replacing a lesson runs these checks in order:
1. The lesson payload on its own (styles, duration, roster)
2. The instructor exists and teaches every style of the lesson
3. The lesson falls inside the instructor's availability window that day
4. No other lesson of the instructor overlaps it
5. No student on the roster attends another overlapping lesson
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DAYS_IN_WEEK
from ..core.exceptions import (
    InstructorUnavailableException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import sunday_based_weekday, to_school_local
from ..models.instructor import Instructor
from ..models.lesson import Lesson
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.instructor_repository import InstructorRepository
from ..repositories.lesson_repository import LessonRepository
from ..schemas.lesson import LessonCreate, LessonUpdate
from .base import BaseService
from .conflict_checker import ConflictChecker
from .scheduling_rules import (
    Attendee,
    day_name,
    fits_window,
    format_window,
    validate_lesson_payload,
)

logger = logging.getLogger(__name__)


class LessonService(BaseService):
    """Service layer for lesson scheduling."""

    def __init__(
        self,
        db: Session,
        lesson_repository: Optional[LessonRepository] = None,
        instructor_repository: Optional[InstructorRepository] = None,
        conflict_checker: Optional[ConflictChecker] = None,
    ):
        super().__init__(db)
        self.lesson_repository = lesson_repository or RepositoryFactory.create_lesson_repository(db)
        self.instructor_repository = (
            instructor_repository or RepositoryFactory.create_instructor_repository(db)
        )
        self.conflict_checker = conflict_checker or ConflictChecker(db, self.lesson_repository)

    @BaseService.measure_operation("create_lesson")
    def create_lesson(self, data: LessonCreate, day_of_week: Optional[int] = None) -> Lesson:
        """
        Schedule a new lesson.

        Args:
            data: Lesson payload
            day_of_week: Optional Sunday-based day the client believes the lesson is on

        Raises:
            ValidationException: On any broken scheduling rule
            NotFoundException: If the instructor does not exist
        """
        start = data.start_and_end_time.start_time
        end = data.start_and_end_time.end_time
        lesson_day = sunday_based_weekday(start)

        if day_of_week is not None:
            if not 0 <= day_of_week < DAYS_IN_WEEK:
                raise ValidationException(
                    "Invalid day of the week. Must be between 0 and 6.", code="INVALID_DAY"
                )
            if day_of_week != lesson_day:
                raise ValidationException(
                    f"The lesson starts on {day_name(lesson_day)} but day {day_of_week} "
                    f"({day_name(day_of_week)}) was requested.",
                    code="DAY_MISMATCH",
                )

        self.log_operation(
            "create_lesson", instructor_id=data.instructor_id, start=str(start), end=str(end)
        )
        self._validate_schedule(data, start, end)

        with self.transaction():
            lesson = self.lesson_repository.create(
                type_lesson=data.type_lesson,
                specialties=[specialty.value for specialty in data.specialties],
                instructor_id=data.instructor_id,
                start_time=start,
                end_time=end,
            )
            self.lesson_repository.set_roster(lesson, self._roster(data))

        prometheus_metrics.inc_lesson_scheduled(data.type_lesson.value)
        self.logger.info(f"Lesson created successfully with ID: {lesson.id}")
        return lesson

    @BaseService.measure_operation("update_lesson")
    def update_lesson(self, lesson_id: str, data: LessonUpdate) -> Lesson:
        """Replace a lesson; the lesson itself never conflicts with its old slot."""
        lesson = self.get_lesson(lesson_id)
        start = data.start_and_end_time.start_time
        end = data.start_and_end_time.end_time

        self._validate_schedule(data, start, end, exclude_lesson_id=lesson_id)

        with self.transaction():
            lesson.type_lesson = data.type_lesson
            lesson.specialties = [specialty.value for specialty in data.specialties]
            lesson.instructor_id = data.instructor_id
            lesson.start_time = start
            lesson.end_time = end
            self.lesson_repository.set_roster(lesson, self._roster(data))

        self.logger.info(f"Lesson {lesson_id} updated")
        return lesson

    def _validate_schedule(
        self,
        data: LessonCreate,
        start: datetime,
        end: datetime,
        exclude_lesson_id: Optional[str] = None,
    ) -> None:
        try:
            validate_lesson_payload(
                data.type_lesson,
                [specialty.value for specialty in data.specialties],
                start,
                end,
                [
                    Attendee(s.id, s.name, [p.value for p in s.preferences])
                    for s in data.students
                ],
            )
        except ValidationException as exc:
            self.logger.warning(f"Rejected lesson payload: {exc.message}")
            prometheus_metrics.inc_scheduling_rejection(exc.code)
            raise

        instructor = self.instructor_repository.get_by_id(data.instructor_id)
        if instructor is None:
            raise NotFoundException(
                f"Instructor with ID {data.instructor_id} not found", code="INSTRUCTOR_NOT_FOUND"
            )
        self._check_instructor_fit(instructor, data, start, end)

        self.conflict_checker.check_instructor_conflicts(
            instructor.id, start, end, exclude_lesson_id=exclude_lesson_id
        )
        self.conflict_checker.check_student_double_booking(
            [student.id for student in data.students],
            start,
            end,
            exclude_lesson_id=exclude_lesson_id,
        )

    def _check_instructor_fit(
        self, instructor: Instructor, data: LessonCreate, start: datetime, end: datetime
    ) -> None:
        taught = set(instructor.specialties or [])
        if not all(specialty.value in taught for specialty in data.specialties):
            self.logger.warning(
                f"Instructor {instructor.id} does not teach all of {data.specialties}"
            )
            prometheus_metrics.inc_scheduling_rejection("SPECIALTY_NOT_TAUGHT")
            raise ValidationException(
                "The instructor is not teaching the entire swimming styles of this lesson",
                code="SPECIALTY_NOT_TAUGHT",
            )

        lesson_day = sunday_based_weekday(start)
        window = instructor.window_for_day(lesson_day)
        if window is None:
            prometheus_metrics.inc_scheduling_rejection("INSTRUCTOR_UNAVAILABLE")
            raise InstructorUnavailableException(
                f"The Instructor {instructor.name} is not teaching on {day_name(lesson_day)}",
                details={"day": lesson_day},
            )
        if not fits_window(start, end, window):
            self.logger.warning(
                f"Lesson {start}-{end} outside window {format_window(window)} of {instructor.id}"
            )
            prometheus_metrics.inc_scheduling_rejection("INSTRUCTOR_UNAVAILABLE")
            raise InstructorUnavailableException(
                f"The Instructor {instructor.name} is available only for "
                f"{format_window(window)} on {day_name(lesson_day)}",
                details={"day": lesson_day, "window": format_window(window)},
            )

    @staticmethod
    def _roster(data: LessonCreate) -> List[dict]:
        return [
            {
                "id": student.id,
                "name": student.name,
                "preferences": [preference.value for preference in student.preferences],
            }
            for student in data.students
        ]

    @BaseService.measure_operation("get_lesson")
    def get_lesson(self, lesson_id: str) -> Lesson:
        lesson = self.lesson_repository.get_by_id(lesson_id)
        if lesson is None:
            raise NotFoundException(f"Lesson with ID {lesson_id} not found", code="LESSON_NOT_FOUND")
        return lesson

    @BaseService.measure_operation("get_lessons_within_range")
    def get_lessons_within_range(self, start: datetime, end: datetime) -> List[Lesson]:
        """Lessons starting in [start, end] inclusive."""
        start, end = to_school_local(start), to_school_local(end)
        if start > end:
            raise ValidationException(
                "Start date must be before or equal to end date.", code="INVALID_TIME_RANGE"
            )
        return self.lesson_repository.get_starting_between(start, end)

    @BaseService.measure_operation("get_instructor_lessons_by_day")
    def get_instructor_lessons_by_day(self, instructor_id: str, day: datetime) -> List[Lesson]:
        """Lessons of the instructor held on the same weekday as ``day``."""
        weekday = sunday_based_weekday(to_school_local(day))
        return self.lesson_repository.get_by_instructor_on_weekday(instructor_id, weekday)

    @BaseService.measure_operation("get_lessons_by_student")
    def get_lessons_by_student(self, student_id: str) -> List[Lesson]:
        return self.lesson_repository.get_by_student(student_id)

    @BaseService.measure_operation("delete_lesson")
    def delete_lesson(self, lesson_id: str) -> None:
        lesson = self.get_lesson(lesson_id)
        with self.transaction():
            self.lesson_repository.delete_entity(lesson)
        self.logger.info(f"Lesson {lesson_id} deleted")

    @BaseService.measure_operation("delete_lessons_by_instructor")
    def delete_lessons_by_instructor(self, instructor_id: str) -> int:
        if not self.instructor_repository.exists(id=instructor_id):
            raise NotFoundException(
                f"Instructor with ID {instructor_id} not found", code="INSTRUCTOR_NOT_FOUND"
            )
        with self.transaction():
            deleted = self.lesson_repository.delete_by_instructor(instructor_id)
        self.logger.info(f"Deleted {deleted} lessons of instructor {instructor_id}")
        return deleted

    @BaseService.measure_operation("delete_all_lessons")
    def delete_all_lessons(self) -> int:
        with self.transaction():
            deleted = self.lesson_repository.delete_all()
        self.logger.info(f"Deleted all lessons ({deleted})")
        return deleted


# backend/app/services/instructor_service.py
"""
Instructor Service Layer

Handles instructor business logic: registration, login, lookups by specialty
and availability, and profile updates that must stay consistent with the
instructor's already scheduled lessons.
"""

from datetime import time
import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..auth import burn_password_check, get_password_hash, verify_password
from ..core.constants import DAYS_IN_WEEK
from ..core.enums import Swimming
from ..core.exceptions import NotFoundException, UnauthorizedException, ValidationException
from ..core.timezone_utils import sunday_based_weekday
from ..models.instructor import Instructor
from ..repositories.factory import RepositoryFactory
from ..repositories.instructor_repository import InstructorRepository
from ..repositories.lesson_repository import LessonRepository
from ..schemas.instructor import AvailabilityWindow, InstructorCreate, InstructorUpdate
from .base import BaseService
from .scheduling_rules import day_name, fits_window_by_hour, format_window, window_contains_range

logger = logging.getLogger(__name__)

WeeklyWindows = List[Optional[Tuple[time, time]]]


def _to_windows(availabilities: Sequence[Optional[AvailabilityWindow]]) -> WeeklyWindows:
    return [
        None if window is None else (window.start_time, window.end_time)
        for window in availabilities
    ]


class InstructorService(BaseService):
    """
    Service layer for instructor-related operations.

    Deleting an instructor also deletes every lesson they teach.
    """

    def __init__(
        self,
        db: Session,
        instructor_repository: Optional[InstructorRepository] = None,
        lesson_repository: Optional[LessonRepository] = None,
    ):
        super().__init__(db)
        self.instructor_repository = (
            instructor_repository or RepositoryFactory.create_instructor_repository(db)
        )
        self.lesson_repository = lesson_repository or RepositoryFactory.create_lesson_repository(db)

    @BaseService.measure_operation("create_instructor")
    def create_instructor(self, data: InstructorCreate) -> Instructor:
        self.log_operation("create_instructor", instructor_name=data.name)
        with self.transaction():
            instructor = self.instructor_repository.create_with_availability(
                name=data.name,
                specialties=[specialty.value for specialty in data.specialties],
                hashed_password=get_password_hash(data.password),
                availabilities=_to_windows(data.availabilities),
            )
        self.logger.info(f"Created instructor {instructor.id} ({instructor.name})")
        return instructor

    @BaseService.measure_operation("login_instructor")
    def login(self, instructor_id: str, password: str) -> Instructor:
        """
        Verify instructor credentials.

        Raises:
            UnauthorizedException: unknown id or wrong password
        """
        instructor = self.instructor_repository.get_by_id(instructor_id)
        if instructor is None:
            burn_password_check(password)
            self.logger.warning(f"Login attempt for unknown instructor {instructor_id}")
            raise UnauthorizedException("Invalid id or password", code="INVALID_CREDENTIALS")
        if not verify_password(password, instructor.hashed_password):
            self.logger.warning(f"Wrong password for instructor {instructor_id}")
            raise UnauthorizedException("Invalid id or password", code="INVALID_CREDENTIALS")
        return instructor

    @BaseService.measure_operation("get_all_instructors")
    def get_all_instructors(self) -> List[Instructor]:
        return self.instructor_repository.get_all()

    @BaseService.measure_operation("get_instructor")
    def get_instructor(self, instructor_id: str) -> Instructor:
        """
        Raises:
            NotFoundException: If the instructor does not exist
        """
        instructor = self.instructor_repository.get_by_id(instructor_id)
        if instructor is None:
            raise NotFoundException(
                f"Instructor with ID {instructor_id} not found", code="INSTRUCTOR_NOT_FOUND"
            )
        return instructor

    @BaseService.measure_operation("get_instructors_by_specialties")
    def get_instructors_by_specialties(self, specialties: Sequence[Swimming]) -> List[Instructor]:
        """Instructors that teach every one of the given styles."""
        if not specialties:
            raise ValidationException("At least one swimming style is required")
        return self.instructor_repository.find_by_specialties(
            [specialty.value for specialty in specialties]
        )

    @BaseService.measure_operation("get_available_instructors")
    def get_available_instructors(
        self, day_of_week: int, start_time: time, end_time: time
    ) -> List[Instructor]:
        """
        Instructors whose window on the given day contains [start_time, end_time].

        An end_time of 00:00 means end of day.
        """
        if not 0 <= day_of_week < DAYS_IN_WEEK:
            raise ValidationException(
                "Invalid day of the week. Must be between 0 and 6.", code="INVALID_DAY"
            )
        if end_time != time(0, 0) and start_time >= end_time:
            raise ValidationException(
                "Start time must be before end time.", code="INVALID_TIME_RANGE"
            )

        candidates = self.instructor_repository.find_available_on_day(day_of_week)
        return [
            instructor
            for instructor in candidates
            if window_contains_range(instructor.window_for_day(day_of_week), start_time, end_time)
        ]

    @BaseService.measure_operation("update_instructor")
    def update_instructor(self, instructor_id: str, data: InstructorUpdate) -> Instructor:
        """
        Replace name, specialties and availability.

        Every scheduled lesson must still fit: its day stays available, it fits
        the new window by hour, and its styles remain in the new specialties.
        Lessons then take over the new specialty list.

        Raises:
            NotFoundException: If the instructor does not exist
            ValidationException: If an existing lesson would no longer fit
        """
        instructor = self.get_instructor(instructor_id)
        specialties = [specialty.value for specialty in data.specialties]
        windows = _to_windows(data.availabilities)
        lessons = self.lesson_repository.get_by_instructor(instructor_id)

        for lesson in lessons:
            self._check_lesson_still_fits(lesson, windows, specialties)

        with self.transaction():
            self.instructor_repository.update(
                instructor_id, name=data.name, specialties=specialties
            )
            self.instructor_repository.replace_availability(instructor, windows)
            for lesson in lessons:
                lesson.specialties = list(specialties)
            self.lesson_repository.flush()

        self.logger.info(
            f"Updated instructor {instructor_id}; {len(lessons)} lessons now teach {specialties}"
        )
        return instructor

    def _check_lesson_still_fits(
        self, lesson, windows: WeeklyWindows, specialties: List[str]
    ) -> None:
        lesson_day = sunday_based_weekday(lesson.start_time)
        window = windows[lesson_day]
        if window is None:
            raise ValidationException(
                f"Conflict: Existing lesson {lesson.id} on {day_name(lesson_day)}, cannot remove "
                "availability on a same day of an existing lesson.",
                code="LESSON_DAY_UNAVAILABLE",
                details={"lesson_id": lesson.id, "day": lesson_day},
            )
        if not fits_window_by_hour(lesson.start_time, lesson.end_time, window):
            raise ValidationException(
                f"Conflict: Existing lesson {lesson.id} on {day_name(lesson_day)} does not fit "
                f"within the new availability window ({format_window(window)}).",
                code="LESSON_OUTSIDE_WINDOW",
                details={"lesson_id": lesson.id, "day": lesson_day},
            )
        for specialty in lesson.specialties:
            if specialty not in specialties:
                raise ValidationException(
                    f"Conflict: Existing lesson {lesson.id} requires specialty {specialty}, "
                    "which is missing in the updated specialties.",
                    code="LESSON_SPECIALTY_REMOVED",
                    details={"lesson_id": lesson.id, "specialty": specialty},
                )

    @BaseService.measure_operation("delete_instructor")
    def delete_instructor(self, instructor_id: str) -> None:
        instructor = self.get_instructor(instructor_id)
        with self.transaction():
            deleted_lessons = self.lesson_repository.delete_by_instructor(instructor_id)
            self.instructor_repository.delete_entity(instructor)
        self.logger.info(f"Deleted instructor {instructor_id} and {deleted_lessons} lessons")

    @BaseService.measure_operation("delete_all_instructors")
    def delete_all_instructors(self) -> int:
        with self.transaction():
            self.lesson_repository.delete_all()
            deleted = self.instructor_repository.delete_all()
        self.logger.info(f"Deleted all instructors ({deleted})")
        return deleted

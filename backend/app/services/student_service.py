# backend/app/services/student_service.py
"""
Student Service Layer

Handles student accounts and self-service booking: listing the student's
lessons, finding open lessons that match their preferences, and joining or
leaving group lessons. Roster rows keep a snapshot of the student's name and
preferences, so profile edits are copied onto every roster they appear on.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..auth import burn_password_check, get_password_hash, verify_password
from ..core.config import settings
from ..core.enums import LessonType
from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    StudentDoubleBookingException,
    UnauthorizedException,
    ValidationException,
)
from ..core.timezone_utils import get_school_now
from ..models.lesson import Lesson
from ..models.student import Student
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.lesson_repository import LessonRepository
from ..repositories.student_repository import StudentRepository
from ..schemas.student import StudentCreate, StudentUpdate, TypePreference
from .base import BaseService
from .scheduling_rules import first_overlapping, rank_by_type_preference

logger = logging.getLogger(__name__)


def _type_preference_columns(type_preference: Optional[TypePreference]) -> dict:
    if type_preference is None:
        return {"type_preference": None, "type_priority1": None, "type_priority2": None}
    return {
        "type_preference": type_preference.preference,
        "type_priority1": type_preference.priority1,
        "type_priority2": type_preference.priority2,
    }


class StudentService(BaseService):
    """Service layer for student accounts and self-service booking."""

    def __init__(
        self,
        db: Session,
        student_repository: Optional[StudentRepository] = None,
        lesson_repository: Optional[LessonRepository] = None,
    ):
        super().__init__(db)
        self.student_repository = (
            student_repository or RepositoryFactory.create_student_repository(db)
        )
        self.lesson_repository = lesson_repository or RepositoryFactory.create_lesson_repository(db)

    @BaseService.measure_operation("create_student")
    def create_student(self, data: StudentCreate) -> Student:
        """
        Register a student under the id they picked.

        Raises:
            ConflictException: If the id is already taken
        """
        if self.student_repository.exists(id=data.id):
            self.logger.warning(f"Student id {data.id} already registered")
            raise ConflictException(
                f"Student with ID {data.id} already exists", code="STUDENT_ALREADY_EXISTS"
            )
        with self.transaction():
            student = self.student_repository.create(
                id=data.id,
                name=data.name,
                preferences=[preference.value for preference in data.preferences],
                hashed_password=get_password_hash(data.password),
                **_type_preference_columns(data.type_preference),
            )
        self.logger.info(f"Created student {student.id}")
        return student

    @BaseService.measure_operation("login_student")
    def login(self, student_id: str, password: str) -> Student:
        student = self.student_repository.get_by_id(student_id)
        if student is None:
            burn_password_check(password)
            self.logger.warning(f"Login attempt for unknown student {student_id}")
            raise UnauthorizedException("Invalid id or password", code="INVALID_CREDENTIALS")
        if not verify_password(password, student.hashed_password):
            self.logger.warning(f"Wrong password for student {student_id}")
            raise UnauthorizedException("Invalid id or password", code="INVALID_CREDENTIALS")
        return student

    @BaseService.measure_operation("get_all_students")
    def get_all_students(self) -> List[Student]:
        return self.student_repository.get_all()

    @BaseService.measure_operation("get_student")
    def get_student(self, student_id: str) -> Student:
        student = self.student_repository.get_by_id(student_id)
        if student is None:
            raise NotFoundException(
                f"Student with ID {student_id} not found", code="STUDENT_NOT_FOUND"
            )
        return student

    @BaseService.measure_operation("update_student")
    def update_student(self, student_id: str, data: StudentUpdate) -> Student:
        """Replace the profile and refresh the student's roster snapshots."""
        self.get_student(student_id)
        preferences = [preference.value for preference in data.preferences]
        with self.transaction():
            student = self.student_repository.update(
                student_id,
                name=data.name,
                preferences=preferences,
                **_type_preference_columns(data.type_preference),
            )
            entries = self.lesson_repository.get_roster_entries(student_id)
            for entry in entries:
                entry.name = data.name
                entry.preferences = list(preferences)
            self.lesson_repository.flush()
        self.logger.info(f"Updated student {student_id} and {len(entries)} roster entries")
        return student

    @BaseService.measure_operation("delete_student")
    def delete_student(self, student_id: str) -> None:
        """Delete the student, drop them from every roster and remove emptied lessons."""
        student = self.get_student(student_id)
        with self.transaction():
            emptied = self._remove_from_rosters(student_id)
            self.student_repository.delete_entity(student)
        self.logger.info(f"Deleted student {student_id}; removed {emptied} emptied lessons")

    @BaseService.measure_operation("delete_all_students")
    def delete_all_students(self) -> int:
        students = self.student_repository.get_all()
        with self.transaction():
            for student in students:
                self._remove_from_rosters(student.id)
            deleted = self.student_repository.delete_all()
        self.logger.info(f"Deleted all students ({deleted})")
        return deleted

    def _remove_from_rosters(self, student_id: str) -> int:
        emptied = 0
        for lesson in self.lesson_repository.get_by_student(student_id):
            self.lesson_repository.remove_attendee(lesson, student_id)
            if not lesson.students:
                self.lesson_repository.delete_entity(lesson)
                emptied += 1
        return emptied

    @BaseService.measure_operation("get_my_lessons")
    def get_my_lessons(self, student_id: str) -> List[Lesson]:
        self.get_student(student_id)
        return self.lesson_repository.get_by_student(student_id)

    @BaseService.measure_operation("get_available_lessons")
    def get_available_lessons(self, student_id: str) -> List[Lesson]:
        """
        Future group lessons the student could join, best matches first.

        A lesson qualifies when it is not private, has a free seat, does not
        already list the student, teaches every style the student wants, and
        does not overlap a lesson the student attends.
        """
        student = self.get_student(student_id)
        my_lessons = self.lesson_repository.get_by_student(student_id)
        wanted = set(student.preferences or [])

        candidates = [
            lesson
            for lesson in self.lesson_repository.get_starting_after(get_school_now())
            if LessonType(lesson.type_lesson) != LessonType.PRIVATE
            and len(lesson.students) < settings.max_students_per_lesson
            and not lesson.has_student(student_id)
            and wanted.issubset(set(lesson.specialties or []))
            and first_overlapping(lesson.start_time, lesson.end_time, my_lessons) is None
        ]
        return rank_by_type_preference(candidates, student.ranked_lesson_types())

    @BaseService.measure_operation("join_lesson")
    def join_lesson(self, student_id: str, lesson_id: str) -> Lesson:
        """
        Add the student to a group lesson.

        Raises:
            NotFoundException: Unknown student or lesson
            ValidationException: Private or started lesson, or uncovered preferences
            ConflictException: Lesson full or student already attending
            StudentDoubleBookingException: Overlaps another lesson of the student
        """
        student = self.get_student(student_id)
        lesson = self._get_lesson(lesson_id)
        self._check_can_join(student, lesson)

        with self.transaction():
            self.lesson_repository.add_attendee(
                lesson,
                student_id=student.id,
                name=student.name,
                preferences=list(student.preferences or []),
            )
        prometheus_metrics.inc_roster_change("join")
        self.logger.info(f"Student {student_id} joined lesson {lesson_id}")
        return lesson

    def _check_can_join(self, student: Student, lesson: Lesson) -> None:
        if LessonType(lesson.type_lesson) == LessonType.PRIVATE:
            raise ValidationException(
                "Private lessons cannot be joined.", code="LESSON_PRIVATE"
            )
        if lesson.start_time <= get_school_now():
            raise ValidationException(
                "The lesson has already started.", code="LESSON_ALREADY_STARTED"
            )
        if lesson.has_student(student.id):
            raise ConflictException(
                f"Student {student.id} already attends lesson {lesson.id}",
                code="ALREADY_ATTENDING",
            )
        if len(lesson.students) >= settings.max_students_per_lesson:
            raise ConflictException(f"Lesson {lesson.id} is full", code="LESSON_FULL")
        if not set(student.preferences or []).issubset(set(lesson.specialties or [])):
            raise ValidationException(
                "The lesson is not answering the full requirements of the student "
                f"{student.name} which wanted {', '.join(student.preferences)} while the "
                f"lesson offers {', '.join(lesson.specialties)}",
                code="PREFERENCES_NOT_COVERED",
            )
        clash = first_overlapping(
            lesson.start_time,
            lesson.end_time,
            self.lesson_repository.get_by_student(student.id),
            exclude_lesson_id=lesson.id,
        )
        if clash is not None:
            prometheus_metrics.inc_scheduling_rejection("STUDENT_DOUBLE_BOOKING")
            raise StudentDoubleBookingException([student.id], clash.id)

    @BaseService.measure_operation("leave_lesson")
    def leave_lesson(self, student_id: str, lesson_id: str) -> Optional[Lesson]:
        """
        Remove the student from a lesson.

        Returns the lesson, or None when it was deleted because nobody is left.
        """
        self.get_student(student_id)
        lesson = self._get_lesson(lesson_id)
        if not lesson.has_student(student_id):
            raise NotFoundException(
                f"Student {student_id} does not attend lesson {lesson_id}",
                code="NOT_ATTENDING",
            )

        with self.transaction():
            self.lesson_repository.remove_attendee(lesson, student_id)
            if not lesson.students:
                self.lesson_repository.delete_entity(lesson)
                lesson = None
        prometheus_metrics.inc_roster_change("leave")
        self.logger.info(f"Student {student_id} left lesson {lesson_id}")
        return lesson

    def _get_lesson(self, lesson_id: str) -> Lesson:
        lesson = self.lesson_repository.get_by_id(lesson_id)
        if lesson is None:
            raise NotFoundException(f"Lesson with ID {lesson_id} not found", code="LESSON_NOT_FOUND")
        return lesson

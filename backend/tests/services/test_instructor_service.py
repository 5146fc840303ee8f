from datetime import time, timedelta

import pytest

from app.core.enums import Swimming
from app.core.exceptions import NotFoundException, UnauthorizedException, ValidationException
from app.core.ulid_helper import generate_ulid
from app.schemas.instructor import InstructorUpdate

from ..conftest import TEST_PASSWORD, WEEKLY_AVAILABILITY, at


def _update(name="Yotam", specialties=("CHEST", "BACK_STROKE"), availabilities=None):
    return InstructorUpdate(
        name=name,
        specialties=list(specialties),
        availabilities=WEEKLY_AVAILABILITY if availabilities is None else availabilities,
    )


class TestCreateAndLogin:
    def test_create_stores_weekly_availability(self, instructor):
        week = instructor.weekly_availability()
        assert week[0] is None
        assert week[1] == (time(8, 0), time(16, 0))
        assert week[3] == (time(10, 0), time(18, 0))
        assert instructor.specialties == ["CHEST", "BACK_STROKE"]

    def test_password_is_hashed(self, instructor):
        assert instructor.hashed_password != TEST_PASSWORD
        assert instructor.hashed_password.startswith("$2")

    def test_login(self, instructor_service, instructor):
        assert instructor_service.login(instructor.id, TEST_PASSWORD).id == instructor.id

    def test_login_wrong_password(self, instructor_service, instructor):
        with pytest.raises(UnauthorizedException):
            instructor_service.login(instructor.id, "wrong-password")

    def test_login_unknown_id(self, instructor_service):
        with pytest.raises(UnauthorizedException):
            instructor_service.login(generate_ulid(), TEST_PASSWORD)


class TestLookups:
    def test_get_unknown_instructor(self, instructor_service):
        with pytest.raises(NotFoundException) as exc_info:
            instructor_service.get_instructor(generate_ulid())
        assert exc_info.value.code == "INSTRUCTOR_NOT_FOUND"

    def test_by_specialties_requires_all(self, instructor_service, make_instructor):
        both = make_instructor(name="Both", specialties=["CHEST", "ROWING"])
        make_instructor(name="Chest only", specialties=["CHEST"])

        found = instructor_service.get_instructors_by_specialties(
            [Swimming.CHEST, Swimming.ROWING]
        )
        assert [instructor.id for instructor in found] == [both.id]

    def test_available_instructors(self, instructor_service, instructor, make_instructor):
        make_instructor(
            name="Afternoons",
            availabilities=[None, {"start_time": "13:00", "end_time": "20:00"}] + [None] * 5,
        )

        found = instructor_service.get_available_instructors(1, time(9, 0), time(11, 0))
        assert [found_instructor.id for found_instructor in found] == [instructor.id]

    def test_available_instructors_end_of_day(self, instructor_service, make_instructor):
        late = make_instructor(
            name="Late",
            availabilities=[None, {"start_time": "18:00", "end_time": "23:59"}] + [None] * 5,
        )
        midnight = make_instructor(
            name="Midnight",
            availabilities=[None, {"start_time": "17:00", "end_time": "00:00"}] + [None] * 5,
        )
        make_instructor(name="Early")

        found = instructor_service.get_available_instructors(1, time(19, 0), time(0, 0))
        assert sorted(instructor.id for instructor in found) == sorted([late.id, midnight.id])

    def test_available_instructors_invalid_day(self, instructor_service):
        with pytest.raises(ValidationException) as exc_info:
            instructor_service.get_available_instructors(7, time(9, 0), time(10, 0))
        assert exc_info.value.code == "INVALID_DAY"

    def test_available_instructors_inverted_range(self, instructor_service):
        with pytest.raises(ValidationException) as exc_info:
            instructor_service.get_available_instructors(1, time(11, 0), time(10, 0))
        assert exc_info.value.code == "INVALID_TIME_RANGE"


class TestUpdateInstructor:
    def test_update_replaces_profile(self, instructor_service, instructor):
        week = [None] * 7
        week[5] = {"start_time": "07:00", "end_time": "12:00"}

        updated = instructor_service.update_instructor(
            instructor.id, _update(name="Yotam B", specialties=["ROWING"], availabilities=week)
        )

        assert updated.name == "Yotam B"
        assert updated.specialties == ["ROWING"]
        assert updated.weekly_availability()[5] == (time(7, 0), time(12, 0))
        assert updated.weekly_availability()[1] is None

    def test_lessons_inherit_new_specialties(
        self, instructor_service, lesson_service, make_lesson, instructor, monday
    ):
        lesson = make_lesson(instructor.id, at(monday, 10))

        instructor_service.update_instructor(
            instructor.id, _update(specialties=["CHEST", "BUTTERFLY_STROKE"])
        )

        assert lesson_service.get_lesson(lesson.id).specialties == ["CHEST", "BUTTERFLY_STROKE"]

    def test_cannot_remove_day_with_lessons(self, instructor_service, make_lesson, instructor, monday):
        make_lesson(instructor.id, at(monday, 10))
        week = list(WEEKLY_AVAILABILITY)
        week[1] = None

        with pytest.raises(ValidationException) as exc_info:
            instructor_service.update_instructor(instructor.id, _update(availabilities=week))
        assert exc_info.value.code == "LESSON_DAY_UNAVAILABLE"

    def test_cannot_shrink_window_under_lesson(
        self, instructor_service, make_lesson, instructor, monday
    ):
        make_lesson(instructor.id, at(monday, 14))
        week = list(WEEKLY_AVAILABILITY)
        week[1] = {"start_time": "08:00", "end_time": "12:00"}

        with pytest.raises(ValidationException) as exc_info:
            instructor_service.update_instructor(instructor.id, _update(availabilities=week))
        assert exc_info.value.code == "LESSON_OUTSIDE_WINDOW"

    def test_window_check_compares_hours_only(
        self, instructor_service, make_lesson, instructor, monday
    ):
        make_lesson(instructor.id, at(monday, 10))
        week = list(WEEKLY_AVAILABILITY)
        # 10:00-11:00 still fits 10:30-11:30 when only hours are compared
        week[1] = {"start_time": "10:30", "end_time": "11:30"}

        updated = instructor_service.update_instructor(instructor.id, _update(availabilities=week))
        assert updated.weekly_availability()[1] == (time(10, 30), time(11, 30))

    def test_cannot_drop_taught_specialty(self, instructor_service, make_lesson, instructor, monday):
        make_lesson(instructor.id, at(monday, 10))

        with pytest.raises(ValidationException) as exc_info:
            instructor_service.update_instructor(instructor.id, _update(specialties=["ROWING"]))
        assert exc_info.value.code == "LESSON_SPECIALTY_REMOVED"

    def test_update_unknown_instructor(self, instructor_service):
        with pytest.raises(NotFoundException):
            instructor_service.update_instructor(generate_ulid(), _update())


class TestDeleteInstructor:
    def test_delete_removes_lessons(
        self, instructor_service, lesson_service, make_lesson, instructor, monday
    ):
        lesson = make_lesson(instructor.id, at(monday, 10))

        instructor_service.delete_instructor(instructor.id)

        with pytest.raises(NotFoundException):
            instructor_service.get_instructor(instructor.id)
        with pytest.raises(NotFoundException):
            lesson_service.get_lesson(lesson.id)

    def test_delete_all(self, instructor_service, make_instructor, make_lesson, monday):
        first = make_instructor(name="One")
        make_instructor(name="Two")
        make_lesson(first.id, at(monday + timedelta(days=7), 10))

        assert instructor_service.delete_all_instructors() == 2
        assert instructor_service.get_all_instructors() == []

# backend/tests/services/test_student_service.py
"""Tests for StudentService accounts and self-service booking."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from app.core.exceptions import (
    ConflictException,
    NotFoundException,
    StudentDoubleBookingException,
    UnauthorizedException,
    ValidationException,
)
from app.schemas.student import StudentUpdate

from ..conftest import TEST_PASSWORD, at

NOA = {"id": "0501234567", "name": "Noa", "preferences": ["CHEST"]}
DAN = {"id": "0527654321", "name": "Dan", "preferences": ["CHEST"]}


class TestAccounts:
    def test_create_student(self, make_student):
        student = make_student(type_preference={"preference": "MIXED", "priority1": "PUBLIC"})

        assert student.id == "0501234567"
        assert student.preferences == ["CHEST"]
        assert student.hashed_password != TEST_PASSWORD
        assert [t.value for t in student.ranked_lesson_types()] == ["MIXED", "PUBLIC"]

    def test_duplicate_id_is_rejected(self, make_student):
        make_student()
        with pytest.raises(ConflictException) as exc_info:
            make_student(name="Someone else")
        assert exc_info.value.code == "STUDENT_ALREADY_EXISTS"

    def test_login(self, student_service, make_student):
        make_student()
        assert student_service.login("0501234567", TEST_PASSWORD).name == "Noa"

    def test_login_rejects_wrong_password(self, student_service, make_student):
        make_student()
        with pytest.raises(UnauthorizedException):
            student_service.login("0501234567", "not-it")

    def test_login_unknown_student(self, student_service):
        with pytest.raises(UnauthorizedException):
            student_service.login("missing", TEST_PASSWORD)

    def test_update_refreshes_roster_snapshots(
        self, student_service, lesson_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[NOA])

        student_service.update_student(
            "0501234567",
            StudentUpdate(name="Noa Levi", preferences=["CHEST", "BACK_STROKE"]),
        )

        entry = lesson_service.get_lesson(lesson.id).students[0]
        assert entry.name == "Noa Levi"
        assert entry.preferences == ["CHEST", "BACK_STROKE"]

    def test_update_unknown_student(self, student_service):
        with pytest.raises(NotFoundException):
            student_service.update_student("missing", StudentUpdate(name="X", preferences=["CHEST"]))


class TestDeleteStudent:
    def test_delete_removes_from_rosters_and_empty_lessons(
        self, student_service, lesson_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        shared = make_lesson(instructor.id, at(monday, 10), students=[NOA, DAN])
        solo = make_lesson(instructor.id, at(monday, 12), students=[NOA])

        student_service.delete_student("0501234567")

        assert lesson_service.get_lesson(shared.id).student_ids == [DAN["id"]]
        with pytest.raises(NotFoundException):
            lesson_service.get_lesson(solo.id)
        with pytest.raises(NotFoundException):
            student_service.get_student("0501234567")

    def test_delete_all_students(
        self, student_service, lesson_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        make_student(student_id=DAN["id"], name="Dan")
        lesson = make_lesson(instructor.id, at(monday, 10), students=[NOA, DAN])

        assert student_service.delete_all_students() == 2
        with pytest.raises(NotFoundException):
            lesson_service.get_lesson(lesson.id)


class TestAvailableLessons:
    def test_filters_and_ranks(
        self, student_service, make_student, make_instructor, make_lesson, instructor, monday
    ):
        make_student(type_preference={"preference": "MIXED"})
        other = make_instructor(name="Yoni", specialties=["CHEST", "ROWING"])

        public = make_lesson(instructor.id, at(monday, 10), students=[DAN])
        mixed = make_lesson(
            other.id,
            at(monday, 12),
            type_lesson="MIXED",
            students=[{"id": "s-9", "name": "Gal", "preferences": ["CHEST"]}],
        )
        # Private lessons are never offered
        make_lesson(
            other.id,
            at(monday, 14),
            type_lesson="PRIVATE",
            students=[{"id": "s-8", "name": "Omer", "preferences": ["CHEST"]}],
        )
        # Does not teach what Noa wants
        make_lesson(
            other.id,
            at(monday, 8),
            specialties=["ROWING"],
            students=[{"id": "s-7", "name": "Tal", "preferences": ["ROWING"]}],
        )

        found = student_service.get_available_lessons("0501234567")
        assert [lesson.id for lesson in found] == [mixed.id, public.id]

    def test_excludes_attended_and_overlapping(
        self, student_service, make_student, make_instructor, make_lesson, instructor, monday
    ):
        make_student()
        other = make_instructor(name="Yoni")
        make_lesson(instructor.id, at(monday, 10), students=[NOA])
        make_lesson(other.id, at(monday, 10, 30), students=[DAN])
        later = make_lesson(other.id, at(monday, 12), students=[DAN])

        found = student_service.get_available_lessons("0501234567")
        assert [lesson.id for lesson in found] == [later.id]

    def test_excludes_full_lessons(
        self, student_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        make_lesson(instructor.id, at(monday, 10), students=[DAN])

        with patch("app.services.student_service.settings.max_students_per_lesson", 1):
            assert student_service.get_available_lessons("0501234567") == []


class TestJoinLesson:
    def test_join(self, student_service, make_student, make_lesson, instructor, monday):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[DAN])

        joined = student_service.join_lesson("0501234567", lesson.id)

        assert joined.student_ids == [DAN["id"], "0501234567"]
        assert joined.students[-1].name == "Noa"

    def test_handle_ids_are_not_limited_to_phone_numbers(
        self, student_service, make_student, make_lesson, instructor, monday
    ):
        make_student(student_id="noa.swims")
        lesson = make_lesson(
            instructor.id,
            at(monday, 10),
            students=[{"id": "gal-2", "name": "Gal", "preferences": ["CHEST"]}],
        )

        joined = student_service.join_lesson("noa.swims", lesson.id)

        assert joined.student_ids == ["gal-2", "noa.swims"]

    def test_cannot_join_private(self, student_service, make_student, make_lesson, instructor, monday):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), type_lesson="PRIVATE", students=[DAN])

        with pytest.raises(ValidationException) as exc_info:
            student_service.join_lesson("0501234567", lesson.id)
        assert exc_info.value.code == "LESSON_PRIVATE"

    def test_cannot_join_twice(self, student_service, make_student, make_lesson, instructor, monday):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[NOA])

        with pytest.raises(ConflictException) as exc_info:
            student_service.join_lesson("0501234567", lesson.id)
        assert exc_info.value.code == "ALREADY_ATTENDING"

    def test_cannot_join_full_lesson(
        self, student_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[DAN])

        with patch("app.services.student_service.settings.max_students_per_lesson", 1):
            with pytest.raises(ConflictException) as exc_info:
                student_service.join_lesson("0501234567", lesson.id)
        assert exc_info.value.code == "LESSON_FULL"

    def test_preferences_must_be_covered(
        self, student_service, make_student, make_lesson, instructor, monday
    ):
        make_student(preferences=["CHEST", "BACK_STROKE"])
        lesson = make_lesson(instructor.id, at(monday, 10), students=[DAN])

        with pytest.raises(ValidationException) as exc_info:
            student_service.join_lesson("0501234567", lesson.id)
        assert exc_info.value.code == "PREFERENCES_NOT_COVERED"

    def test_cannot_join_overlapping_lesson(
        self, student_service, make_student, make_instructor, make_lesson, instructor, monday
    ):
        make_student()
        other = make_instructor(name="Yoni")
        attended = make_lesson(instructor.id, at(monday, 10), students=[NOA])
        lesson = make_lesson(other.id, at(monday, 10, 30), students=[DAN])

        with pytest.raises(StudentDoubleBookingException) as exc_info:
            student_service.join_lesson("0501234567", lesson.id)
        assert exc_info.value.details["conflicting_lesson_id"] == attended.id

    def test_cannot_join_started_lesson(
        self, student_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[DAN])

        with patch(
            "app.services.student_service.get_school_now",
            return_value=at(monday, 10) + timedelta(minutes=5),
        ):
            with pytest.raises(ValidationException) as exc_info:
                student_service.join_lesson("0501234567", lesson.id)
        assert exc_info.value.code == "LESSON_ALREADY_STARTED"

    def test_join_unknown_lesson(self, student_service, make_student):
        make_student()
        with pytest.raises(NotFoundException):
            student_service.join_lesson("0501234567", "01K2K8CVN3A55280PFKJD9YHKV")


class TestLeaveLesson:
    def test_leave_keeps_lesson_with_others(
        self, student_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[NOA, DAN])

        remaining = student_service.leave_lesson("0501234567", lesson.id)

        assert remaining.student_ids == [DAN["id"]]

    def test_last_student_leaving_deletes_lesson(
        self, student_service, lesson_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[NOA])

        assert student_service.leave_lesson("0501234567", lesson.id) is None
        with pytest.raises(NotFoundException):
            lesson_service.get_lesson(lesson.id)

    def test_leave_lesson_not_attended(
        self, student_service, make_student, make_lesson, instructor, monday
    ):
        make_student()
        lesson = make_lesson(instructor.id, at(monday, 10), students=[DAN])

        with pytest.raises(NotFoundException) as exc_info:
            student_service.leave_lesson("0501234567", lesson.id)
        assert exc_info.value.code == "NOT_ATTENDING"

    def test_my_lessons(self, student_service, make_student, make_lesson, instructor, monday):
        make_student()
        first = make_lesson(instructor.id, at(monday, 12), students=[NOA])
        second = make_lesson(instructor.id, at(monday, 9), students=[NOA])

        assert [lesson.id for lesson in student_service.get_my_lessons("0501234567")] == [
            second.id,
            first.id,
        ]

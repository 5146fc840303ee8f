from datetime import timedelta

from app.core.enums import LessonType
from app.repositories import RepositoryFactory

from ..conftest import at


def _lesson(db, instructor, start):
    repository = RepositoryFactory.create_lesson_repository(db)
    lesson = repository.create(
        type_lesson=LessonType.PUBLIC,
        specialties=["CHEST"],
        instructor_id=instructor.id,
        start_time=start,
        end_time=start + timedelta(hours=1),
    )
    return repository, lesson


class TestLessonRepository:
    def test_set_roster_replaces_attendees(self, db, instructor, monday):
        repository, lesson = _lesson(db, instructor, at(monday, 10))

        repository.set_roster(lesson, [{"id": "a", "name": "A", "preferences": ["CHEST"]}])
        repository.set_roster(
            lesson,
            [
                {"id": "b", "name": "B", "preferences": ["CHEST"]},
                {"id": "a", "name": "A", "preferences": ["CHEST"]},
            ],
        )

        assert lesson.student_ids == ["b", "a"]
        assert [entry.position for entry in lesson.students] == [0, 1]

    def test_add_and_remove_attendee(self, db, instructor, monday):
        repository, lesson = _lesson(db, instructor, at(monday, 10))
        repository.set_roster(lesson, [{"id": "a", "name": "A", "preferences": ["CHEST"]}])

        repository.add_attendee(lesson, student_id="b", name="B", preferences=["CHEST"])
        assert lesson.student_ids == ["a", "b"]
        assert lesson.students[-1].position == 1

        assert repository.remove_attendee(lesson, "a") is True
        assert repository.remove_attendee(lesson, "missing") is False
        assert lesson.student_ids == ["b"]

    def test_range_queries(self, db, instructor, monday):
        repository, early = _lesson(db, instructor, at(monday, 9))
        _, late = _lesson(db, instructor, at(monday, 14))

        assert repository.get_starting_between(at(monday, 9), at(monday, 14)) == [early, late]
        assert repository.get_starting_between(
            at(monday, 9), at(monday, 14), exclude_lesson_id=early.id
        ) == [late]
        _, next_week = _lesson(db, instructor, at(monday + timedelta(days=7), 9))
        assert repository.get_by_instructor_on_weekday(instructor.id, 1) == [early, late, next_week]
        assert repository.get_by_instructor_on_weekday(
            instructor.id, 1, exclude_lesson_id=late.id
        ) == [early, next_week]
        assert repository.get_by_instructor_on_weekday(instructor.id, 3) == []
        assert repository.get_starting_after(at(monday, 9)) == [late, next_week]

    def test_roster_entries_and_student_lookup(self, db, instructor, monday):
        repository, lesson = _lesson(db, instructor, at(monday, 10))
        repository.set_roster(lesson, [{"id": "a", "name": "A", "preferences": ["CHEST"]}])

        assert [entry.lesson_id for entry in repository.get_roster_entries("a")] == [lesson.id]
        assert repository.get_by_student("a") == [lesson]
        assert repository.get_by_student("b") == []

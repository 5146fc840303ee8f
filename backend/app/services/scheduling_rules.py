# backend/app/services/scheduling_rules.py
"""
Pure scheduling helpers.

Everything here works on naive school-local datetimes and plain values, with
no database access, so the rules can be unit tested directly.
"""

from datetime import datetime, time, timedelta
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from ..core.config import settings
from ..core.enums import DayOfWeek, LessonType
from ..core.exceptions import ValidationException

Window = Tuple[time, time]

MIDNIGHT = time(0, 0)
LAST_MINUTE = time(23, 59)
END_OF_DAY = timedelta(days=1)


class Attendee(NamedTuple):
    id: str
    name: str
    preferences: List[str]


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Half-open overlap: touching edges do not overlap."""
    return start_a < end_b and end_a > start_b


def _offset(value: time) -> timedelta:
    return timedelta(hours=value.hour, minutes=value.minute, seconds=value.second)


def window_bounds(window: Window) -> Tuple[timedelta, timedelta]:
    """Window as offsets from midnight; an end of 00:00 is the end of the day."""
    window_start, window_end = window
    end = END_OF_DAY if window_end == MIDNIGHT else _offset(window_end)
    return _offset(window_start), end


def daily_span(start: datetime, end: datetime) -> Tuple[timedelta, timedelta]:
    """
    Offsets of [start, end] from midnight of the start date.

    Seconds are the finest unit compared. The end offset passes one day when
    the lesson runs past midnight.
    """
    midnight = datetime.combine(start.date(), time.min)
    return start.replace(microsecond=0) - midnight, end.replace(microsecond=0) - midnight


def overlaps_by_time_of_day(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Overlap of the daily spans, whatever the dates."""
    a_start, a_end = daily_span(start_a, end_a)
    b_start, b_end = daily_span(start_b, end_b)
    return a_start < b_end and a_end > b_start


def fits_window(start: datetime, end: datetime, window: Window) -> bool:
    """True when [start, end] lies inside the daily window by time of day."""
    window_start, window_end = window_bounds(window)
    lesson_start, lesson_end = daily_span(start, end)
    return window_start <= lesson_start and lesson_end <= window_end


def fits_window_by_hour(start: datetime, end: datetime, window: Window) -> bool:
    """Coarser check used when an instructor edits availability under existing lessons."""
    window_start, window_end = window_bounds(window)
    lesson_start, lesson_end = daily_span(start, end)
    hour = timedelta(hours=1)
    return lesson_start // hour >= window_start // hour and lesson_end // hour <= window_end // hour


def window_contains_range(window: Window, start: time, end: time) -> bool:
    """
    True when the window fully contains [start, end].

    An end of 00:00 asks for the rest of the day, which a window ending at
    23:59 or at midnight covers.
    """
    window_start, window_end = window_bounds(window)
    if window_start > _offset(start):
        return False
    if end == MIDNIGHT:
        return window_end >= _offset(LAST_MINUTE)
    return window_end >= _offset(end)


def day_name(day_of_week: int) -> str:
    return DayOfWeek.from_index(day_of_week).value


def format_window(window: Window) -> str:
    return f"{window[0].strftime('%H:%M')} - {window[1].strftime('%H:%M')}"


def expected_duration(type_lesson: LessonType) -> timedelta:
    if type_lesson == LessonType.PRIVATE:
        return timedelta(minutes=settings.private_lesson_minutes)
    return timedelta(minutes=settings.group_lesson_minutes)


def describe_duration(duration: timedelta) -> str:
    minutes = int(duration.total_seconds() // 60)
    if minutes % 60 == 0:
        hours = minutes // 60
        return "1 hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


def validate_lesson_payload(
    type_lesson: LessonType,
    specialties: Sequence[str],
    start: datetime,
    end: datetime,
    students: Sequence[Attendee],
) -> None:
    """
    Check a lesson on its own, before any instructor or roster lookups.

    Raises:
        ValidationException: naming the first rule the lesson breaks
    """
    if not specialties:
        raise ValidationException("A lesson must teach at least one swimming style.")

    duration = expected_duration(type_lesson)
    if end - start != duration:
        raise ValidationException(
            f"Invalid duration for {type_lesson.value} lesson. "
            f"It must last exactly {describe_duration(duration)}.",
            code="INVALID_LESSON_DURATION",
        )

    max_students = settings.max_students_per_lesson
    if not students or len(students) > max_students:
        raise ValidationException(
            f"The number of students taking the lesson must be between 1 to {max_students}.",
            code="INVALID_STUDENT_COUNT",
        )

    if type_lesson == LessonType.PRIVATE and len(students) != 1:
        raise ValidationException("Private lesson must contain only sole student.")

    ids = [student.id for student in students]
    if len(ids) != len(set(ids)):
        raise ValidationException("Duplicate students with the same id are not allowed.")

    offered = set(specialties)
    for student in students:
        if not student.name:
            raise ValidationException("A student has illegal name, which must be not empty")
        if not student.preferences:
            raise ValidationException(
                "Every student's preferences must be at least one of the specialties "
                "that are being taught in the lesson."
            )
        if not set(student.preferences).issubset(offered):
            raise ValidationException(
                "The lesson is not answering the full requirements of the student "
                f"{student.name} which wanted {', '.join(student.preferences)} while the "
                f"lesson offers {', '.join(specialties)}",
                code="PREFERENCES_NOT_COVERED",
            )


def first_overlapping(
    start: datetime,
    end: datetime,
    lessons: Iterable,
    exclude_lesson_id: Optional[str] = None,
    overlap: Callable[[datetime, datetime, datetime, datetime], bool] = intervals_overlap,
):
    """
    First lesson in ``lessons`` overlapping [start, end), or None.

    ``overlap`` decides what overlapping means; pass ``overlaps_by_time_of_day``
    to compare lessons of different weeks.
    """
    for lesson in lessons:
        if exclude_lesson_id and lesson.id == exclude_lesson_id:
            continue
        if overlap(start, end, lesson.start_time, lesson.end_time):
            return lesson
    return None


def shared_students(student_ids: Iterable[str], lesson) -> List[str]:
    """Ids from ``student_ids`` already on the lesson roster, in input order."""
    booked = set(lesson.student_ids)
    return [student_id for student_id in student_ids if student_id in booked]


def rank_by_type_preference(lessons: Sequence, ranked_types: Sequence[LessonType]) -> List:
    """
    Order lessons by the student's preferred lesson types.

    Lessons of the first preferred type come first, then the fallbacks, then
    everything else. Each group is ordered by start time.
    """
    order = {lesson_type: index for index, lesson_type in enumerate(ranked_types)}
    fallback = len(order)
    return sorted(
        lessons,
        key=lambda lesson: (order.get(LessonType(lesson.type_lesson), fallback), lesson.start_time),
    )

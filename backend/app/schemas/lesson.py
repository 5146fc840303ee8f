"""
Pydantic schemas for lessons.

Only structural validation happens here. Scheduling rules (durations, roster
size, preference coverage) are enforced by LessonService so every client gets
the same business error messages.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from ..core.constants import MAX_NAME_LENGTH, MAX_STUDENT_ID_LENGTH
from ..core.enums import LessonType, Swimming
from ..core.timezone_utils import from_school_local, to_school_local
from .common import StrictModel, StrictRequestModel


class LessonTimeRange(StrictRequestModel):
    start_time: datetime = Field(..., description="Lesson start")
    end_time: datetime = Field(..., description="Lesson end")

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_to_school_time(cls, v: datetime) -> datetime:
        return to_school_local(v)

    @model_validator(mode="after")
    def check_order(self) -> "LessonTimeRange":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class LessonAttendee(StrictRequestModel):
    """Student on a lesson roster."""

    id: str = Field(..., min_length=1, max_length=MAX_STUDENT_ID_LENGTH, description="Student id")
    name: str = Field(..., max_length=MAX_NAME_LENGTH)
    preferences: List[Swimming] = Field(default_factory=list)


class LessonCreate(StrictRequestModel):
    """Request body for creating or replacing a lesson."""

    type_lesson: LessonType
    specialties: List[Swimming]
    instructor_id: str = Field(..., min_length=1)
    start_and_end_time: LessonTimeRange
    students: List[LessonAttendee]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type_lesson": "PUBLIC",
                "specialties": ["CHEST"],
                "instructor_id": "01K2K8CVN3A55280PFKJD9YHKV",
                "start_and_end_time": {
                    "start_time": "2026-11-02T10:00:00",
                    "end_time": "2026-11-02T11:00:00",
                },
                "students": [{"id": "0501234567", "name": "Noa", "preferences": ["CHEST"]}],
            }
        }
    )


class LessonUpdate(LessonCreate):
    """Full replacement of a lesson."""


class LessonTimeRangeResponse(StrictModel):
    start_time: datetime
    end_time: datetime


class LessonAttendeeResponse(StrictModel):
    id: str
    name: str
    preferences: List[Swimming]


class LessonResponse(StrictModel):
    id: str = Field(..., description="Lesson ID (ULID)")
    type_lesson: LessonType
    specialties: List[Swimming]
    instructor_id: str
    start_and_end_time: LessonTimeRangeResponse
    students: List[LessonAttendeeResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_lesson(cls, lesson: Any) -> "LessonResponse":
        return cls(
            id=lesson.id,
            type_lesson=lesson.type_lesson,
            specialties=list(lesson.specialties or []),
            instructor_id=lesson.instructor_id,
            start_and_end_time=LessonTimeRangeResponse(
                start_time=from_school_local(lesson.start_time),
                end_time=from_school_local(lesson.end_time),
            ),
            students=[
                LessonAttendeeResponse(
                    id=attendee.student_id,
                    name=attendee.name,
                    preferences=list(attendee.preferences or []),
                )
                for attendee in lesson.students
            ],
            created_at=lesson.created_at,
            updated_at=lesson.updated_at,
        )

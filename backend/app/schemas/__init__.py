# backend/app/schemas/__init__.py
"""Pydantic schemas for the swim school API."""

from .common import DeleteCountResponse, LoginRequest, MessageResponse
from .instructor import (
    AvailabilityWindow,
    InstructorCreate,
    InstructorResponse,
    InstructorUpdate,
)
from .lesson import (
    LessonAttendee,
    LessonCreate,
    LessonResponse,
    LessonTimeRange,
    LessonUpdate,
)
from .student import StudentCreate, StudentResponse, StudentUpdate, TypePreference

__all__ = [
    "AvailabilityWindow",
    "DeleteCountResponse",
    "InstructorCreate",
    "InstructorResponse",
    "InstructorUpdate",
    "LessonAttendee",
    "LessonCreate",
    "LessonResponse",
    "LessonTimeRange",
    "LessonUpdate",
    "LoginRequest",
    "MessageResponse",
    "StudentCreate",
    "StudentResponse",
    "StudentUpdate",
    "TypePreference",
]

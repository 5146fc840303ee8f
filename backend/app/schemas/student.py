"""Pydantic schemas for students."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_validator

from ..core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_STUDENT_ID_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from ..core.enums import LessonType, Swimming
from .common import StrictModel, StrictRequestModel


class TypePreference(StrictRequestModel):
    """Preferred lesson format with up to two fallbacks."""

    preference: LessonType = Field(..., description="Most wanted lesson type")
    priority1: Optional[LessonType] = Field(None, description="First fallback")
    priority2: Optional[LessonType] = Field(None, description="Second fallback")


class StudentBase(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    preferences: List[Swimming] = Field(
        ..., min_length=1, description="Swimming styles the student wants to learn"
    )
    type_preference: Optional[TypePreference] = None

    @field_validator("preferences")
    @classmethod
    def dedupe_preferences(cls, v: List[Swimming]) -> List[Swimming]:
        return list(dict.fromkeys(v))


class StudentCreate(StudentBase):
    """Request body for student sign-up."""

    id: str = Field(
        ...,
        min_length=1,
        max_length=MAX_STUDENT_ID_LENGTH,
        description="Client chosen id, typically a phone number",
    )
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0501234567",
                "name": "Noa",
                "preferences": ["CHEST"],
                "type_preference": {"preference": "PRIVATE", "priority1": "MIXED"},
                "password": "secret123",
            }
        }
    )


class StudentUpdate(StudentBase):
    """Full replacement of a student's profile; id and password are unchanged."""


class StudentResponse(StrictModel):
    id: str
    name: str
    preferences: List[Swimming]
    type_preference: Optional[TypePreference] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_student(cls, student: Any) -> "StudentResponse":
        type_preference = None
        if student.type_preference is not None:
            type_preference = TypePreference(
                preference=student.type_preference,
                priority1=student.type_priority1,
                priority2=student.type_priority2,
            )
        return cls(
            id=student.id,
            name=student.name,
            preferences=list(student.preferences or []),
            type_preference=type_preference,
            created_at=student.created_at,
            updated_at=student.updated_at,
        )

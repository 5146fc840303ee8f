"""
Pydantic schemas for instructors.

Availability is exchanged as a 7-item list (Sunday first) where each entry is
either null or a window of wall-clock times.
"""

from datetime import datetime, time
from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from ..core.constants import (
    DAYS_IN_WEEK,
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from ..core.enums import Swimming
from ..core.timezone_utils import to_school_local
from .common import StrictModel, StrictRequestModel


class AvailabilityWindow(StrictRequestModel):
    """
    Daily availability window.

    Accepts plain times ("09:00") or full ISO datetimes; datetimes are reduced
    to their school-local time of day.
    """

    start_time: time = Field(..., description="Window start (time of day)")
    end_time: time = Field(..., description="Window end (time of day)")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def accept_datetimes(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return to_school_local(v).time()
        if isinstance(v, str) and "T" in v:
            parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
            return to_school_local(parsed).time()
        return v

    @model_validator(mode="after")
    def check_order(self) -> "AvailabilityWindow":
        # An end of 00:00 closes the window at midnight
        if self.end_time != time(0, 0) and self.start_time >= self.end_time:
            raise ValueError(
                f"Start time ({self.start_time.strftime('%H:%M')}) cannot be greater or equal "
                f"to end time ({self.end_time.strftime('%H:%M')})."
            )
        return self


def _empty_week() -> List[Optional[AvailabilityWindow]]:
    return [None] * DAYS_IN_WEEK


class InstructorBase(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH, description="Display name")
    specialties: List[Swimming] = Field(
        ..., min_length=1, description="Swimming styles the instructor teaches"
    )
    availabilities: List[Optional[AvailabilityWindow]] = Field(
        default_factory=_empty_week,
        min_length=DAYS_IN_WEEK,
        max_length=DAYS_IN_WEEK,
        description="Seven entries, Sunday first; null marks an unavailable day",
    )

    @field_validator("specialties")
    @classmethod
    def dedupe_specialties(cls, v: List[Swimming]) -> List[Swimming]:
        return list(dict.fromkeys(v))


class InstructorCreate(InstructorBase):
    """Request body for creating an instructor."""

    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Yotam",
                "specialties": ["CHEST", "BACK_STROKE"],
                "availabilities": [
                    None,
                    {"start_time": "08:00", "end_time": "16:00"},
                    None,
                    {"start_time": "10:00", "end_time": "18:00"},
                    None,
                    None,
                    None,
                ],
                "password": "secret123",
            }
        }
    )


class InstructorUpdate(InstructorBase):
    """Full replacement of an instructor's profile; the password is left unchanged."""


class InstructorAvailabilityResponse(StrictModel):
    start_time: time
    end_time: time


class InstructorResponse(StrictModel):
    """Instructor as returned by the API (never includes the password)."""

    id: str = Field(..., description="Instructor ID (ULID)")
    name: str
    specialties: List[Swimming]
    availabilities: List[Optional[InstructorAvailabilityResponse]]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_instructor(cls, instructor: Any) -> "InstructorResponse":
        return cls(
            id=instructor.id,
            name=instructor.name,
            specialties=list(instructor.specialties or []),
            availabilities=[
                None
                if window is None
                else InstructorAvailabilityResponse(start_time=window[0], end_time=window[1])
                for window in instructor.weekly_availability()
            ],
            created_at=instructor.created_at,
            updated_at=instructor.updated_at,
        )

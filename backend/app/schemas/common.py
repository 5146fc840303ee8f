"""Shared schema bases and small response types used across the API."""

from pydantic import BaseModel, ConfigDict, Field

from ..core.constants import MAX_PASSWORD_LENGTH, MAX_STUDENT_ID_LENGTH, MIN_PASSWORD_LENGTH


class StrictModel(BaseModel):
    """Response base: unknown fields are a bug, never silently dropped."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Request base that rejects unexpected fields and trims strings."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)


class LoginRequest(StrictRequestModel):
    """Credentials for instructor and student login."""

    id: str = Field(..., min_length=1, max_length=MAX_STUDENT_ID_LENGTH, description="Account id")
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH, description="Password"
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"id": "0501234567", "password": "secret123"}}
    )


class MessageResponse(StrictModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Human-readable result message")


class DeleteCountResponse(StrictModel):
    """Result of a bulk delete."""

    message: str = Field(..., description="Human-readable result message")
    deleted_count: int = Field(..., ge=0, description="Number of deleted records")

# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the swim school platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Raised when credentials are missing or wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific scheduling exceptions
#
# The scheduling rejections are reported as 400s so clients can surface the
# message directly on the booking form.


class InstructorUnavailableException(ValidationException):
    """Raised when a lesson falls outside the instructor's weekly availability."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INSTRUCTOR_UNAVAILABLE", details=details)


class LessonConflictException(ValidationException):
    """Raised when a lesson overlaps another lesson of the same instructor."""

    def __init__(self, conflicting_lesson_id: str):
        super().__init__(
            message=(
                "Overlapping lessons detected between new lesson and existing lesson "
                f"{conflicting_lesson_id}"
            ),
            code="LESSON_CONFLICT",
            details={"conflicting_lesson_id": conflicting_lesson_id},
        )


class StudentDoubleBookingException(ValidationException):
    """Raised when a student would attend two overlapping lessons."""

    def __init__(self, student_ids: list[str], conflicting_lesson_id: str):
        super().__init__(
            message=(
                "One or more students in the target lesson already attend an overlapping lesson."
            ),
            code="STUDENT_DOUBLE_BOOKING",
            details={
                "student_ids": student_ids,
                "conflicting_lesson_id": conflicting_lesson_id,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """

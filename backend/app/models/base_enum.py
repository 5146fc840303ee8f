# backend/app/models/base_enum.py
"""
Safe enum helpers for SQLAlchemy.

SQLAlchemy's Enum type persists member NAMES by default. The helpers here
make columns persist enum VALUES so raw SQL, seeds and the API all agree on
the stored string.

Usage:
    from app.models.base_enum import create_safe_enum

    class Lesson(Base):
        type_lesson = mapped_column(create_safe_enum(LessonType, "lesson_type_enum"))
"""

from enum import Enum
from typing import Sequence, Type

from sqlalchemy import Enum as SAEnum


def create_safe_enum(
    enum_class: Type[Enum],
    name: str,
    *,
    native_enum: bool = False,
    validate_strings: bool = True,
) -> SAEnum:
    """
    Create a SQLAlchemy Enum that correctly uses enum values (not names).

    Args:
        enum_class: The Python Enum class to use
        name: Database type / check constraint name
        native_enum: Whether to use a native database enum type
        validate_strings: Whether to validate string values

    Returns:
        SQLAlchemy Enum column type configured for value-based storage
    """
    return SAEnum(
        enum_class,
        name=name,
        native_enum=native_enum,
        validate_strings=validate_strings,
        values_callable=_get_enum_values,
    )


def _get_enum_values(enum_class: Type[Enum]) -> Sequence[str]:
    """Extract values from an enum class for SAEnum storage."""
    return [member.value for member in enum_class]

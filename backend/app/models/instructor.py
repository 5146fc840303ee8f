# backend/app/models/instructor.py
"""
Instructor models for the swim school.

An instructor teaches a set of swimming styles and has a recurring weekly
availability: at most one window per day of the week. Days without a row in
``instructor_availabilities`` are days the instructor does not teach.

Classes:
    Instructor: Instructor profile and credentials
    InstructorAvailability: One weekly availability window
"""

from datetime import datetime, time
from typing import TYPE_CHECKING, List, Optional, Tuple

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.constants import DAYS_IN_WEEK
from ..database import Base

if TYPE_CHECKING:
    from .lesson import Lesson


class Instructor(Base):
    """
    Swimming instructor.

    Attributes:
        id: ULID primary key
        name: Display name
        specialties: Swimming style values the instructor teaches
        hashed_password: Bcrypt hash of the login password
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "instructors"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    specialties: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    availability_windows: Mapped[List["InstructorAvailability"]] = relationship(
        "InstructorAvailability",
        back_populates="instructor",
        cascade="all, delete-orphan",
        order_by="InstructorAvailability.day_of_week",
        lazy="selectin",
    )
    lessons: Mapped[List["Lesson"]] = relationship(
        "Lesson",
        back_populates="instructor",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def weekly_availability(self) -> List[Optional[Tuple[time, time]]]:
        """Return 7 entries (Sunday first); None marks an unavailable day."""
        week: List[Optional[Tuple[time, time]]] = [None] * DAYS_IN_WEEK
        for window in self.availability_windows:
            week[window.day_of_week] = (window.start_time, window.end_time)
        return week

    def window_for_day(self, day_of_week: int) -> Optional[Tuple[time, time]]:
        return self.weekly_availability()[day_of_week]

    def __repr__(self) -> str:
        return f"<Instructor(id={self.id}, name={self.name})>"


class InstructorAvailability(Base):
    """Recurring availability window of an instructor for one day of the week."""

    __tablename__ = "instructor_availabilities"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("instructors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # 0 = Sunday ... 6 = Saturday
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    # 00:00 ends the window at midnight; ordering is validated by the schema
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    instructor: Mapped["Instructor"] = relationship(
        "Instructor", back_populates="availability_windows"
    )

    __table_args__ = (
        UniqueConstraint("instructor_id", "day_of_week", name="uq_instructor_availability_day"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_day_range"),
    )

    def __repr__(self) -> str:
        return (
            f"<InstructorAvailability(instructor={self.instructor_id}, day={self.day_of_week}, "
            f"{self.start_time}-{self.end_time})>"
        )

"""Domain enums for the swim school."""

from enum import Enum
from typing import List


class Swimming(str, Enum):
    """Swimming styles an instructor teaches and a student wants to learn."""

    CHEST = "CHEST"
    BACK_STROKE = "BACK_STROKE"
    BUTTERFLY_STROKE = "BUTTERFLY_STROKE"
    ROWING = "ROWING"

    @classmethod
    def get_all_values(cls) -> List[str]:
        return [member.value for member in cls]


class LessonType(str, Enum):
    """Lesson formats offered by the school."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    MIXED = "MIXED"

    @classmethod
    def get_all_values(cls) -> List[str]:
        return [member.value for member in cls]


class DayOfWeek(str, Enum):
    """Days of the week, ordered Sunday first to match availability indexes."""

    SUN = "SUN"
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"

    @classmethod
    def from_index(cls, index: int) -> "DayOfWeek":
        """Return the day for a Sunday-based index (0 = Sunday)."""
        return list(cls)[index]

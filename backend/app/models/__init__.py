"""
Database models for the swim school backend.

The models are organized by functionality:
- Instructors and their weekly availability windows
- Students
- Lessons and their rosters
"""

from .instructor import Instructor, InstructorAvailability
from .lesson import Lesson, LessonStudent
from .student import Student

__all__ = [
    "Instructor",
    "InstructorAvailability",
    "Lesson",
    "LessonStudent",
    "Student",
]

# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import instructors, lessons, students

__all__ = [
    "instructors",
    "lessons",
    "students",
]

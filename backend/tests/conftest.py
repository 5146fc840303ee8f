# backend/tests/conftest.py
"""
Pytest configuration for the swim school backend.

Every test gets its own in-memory SQLite database, so no cleanup between
tests is needed and nothing can ever touch a real database.
"""

import os
import sys

# CRITICAL: Configure the environment BEFORE any app imports!
os.environ["SITE_MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SCHOOL_TIMEZONE"] = "UTC"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"  # bcrypt minimum, keeps hashing fast

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.database import build_engine, get_db, init_db
from app.main import app
from app.models.instructor import Instructor
from app.models.lesson import Lesson
from app.models.student import Student
from app.schemas.instructor import InstructorCreate
from app.schemas.lesson import LessonCreate
from app.schemas.student import StudentCreate
from app.services.instructor_service import InstructorService
from app.services.lesson_service import LessonService
from app.services.student_service import StudentService

TEST_PASSWORD = "secret123"

# Sunday first: Monday 08:00-16:00 and Wednesday 10:00-18:00
WEEKLY_AVAILABILITY = [
    None,
    {"start_time": "08:00", "end_time": "16:00"},
    None,
    {"start_time": "10:00", "end_time": "18:00"},
    None,
    None,
    None,
]


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """Naive school-local datetime on ``day``."""
    return datetime.combine(day, time(hour, minute))


def lesson_payload(
    instructor_id: str,
    start: datetime,
    *,
    type_lesson: str = "PUBLIC",
    specialties: Iterable[str] = ("CHEST",),
    students: Optional[List[dict]] = None,
    minutes: Optional[int] = None,
) -> dict:
    """JSON-ready lesson body; the duration defaults to the valid one for the type."""
    if minutes is None:
        minutes = 45 if type_lesson == "PRIVATE" else 60
    if students is None:
        students = [{"id": "s-1", "name": "Noa", "preferences": ["CHEST"]}]
    return {
        "type_lesson": type_lesson,
        "specialties": list(specialties),
        "instructor_id": instructor_id,
        "start_and_end_time": {
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(minutes=minutes)).isoformat(),
        },
        "students": students,
    }


@pytest.fixture(scope="function")
def db():
    """Fresh in-memory database and session for each test."""
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    engine.dispose()


@pytest.fixture
def client(db: Session):
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - the lifespan would create tables on the app engine
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def monday() -> date:
    """A Monday at least a week in the future, so lessons are always upcoming."""
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) % 7 + 7)


@pytest.fixture
def wednesday(monday: date) -> date:
    return monday + timedelta(days=2)


@pytest.fixture
def instructor_service(db: Session) -> InstructorService:
    return InstructorService(db)


@pytest.fixture
def lesson_service(db: Session) -> LessonService:
    return LessonService(db)


@pytest.fixture
def student_service(db: Session) -> StudentService:
    return StudentService(db)


@pytest.fixture
def make_instructor(instructor_service: InstructorService) -> Callable[..., Instructor]:
    def _make(
        name: str = "Yotam",
        specialties: Iterable[str] = ("CHEST", "BACK_STROKE"),
        availabilities: Optional[list] = None,
    ) -> Instructor:
        return instructor_service.create_instructor(
            InstructorCreate(
                name=name,
                specialties=list(specialties),
                availabilities=WEEKLY_AVAILABILITY if availabilities is None else availabilities,
                password=TEST_PASSWORD,
            )
        )

    return _make


@pytest.fixture
def make_student(student_service: StudentService) -> Callable[..., Student]:
    def _make(
        student_id: str = "0501234567",
        name: str = "Noa",
        preferences: Iterable[str] = ("CHEST",),
        type_preference: Optional[dict] = None,
    ) -> Student:
        return student_service.create_student(
            StudentCreate(
                id=student_id,
                name=name,
                preferences=list(preferences),
                type_preference=type_preference,
                password=TEST_PASSWORD,
            )
        )

    return _make


@pytest.fixture
def make_lesson(lesson_service: LessonService) -> Callable[..., Lesson]:
    def _make(instructor_id: str, start: datetime, **kwargs) -> Lesson:
        return lesson_service.create_lesson(
            LessonCreate.model_validate(lesson_payload(instructor_id, start, **kwargs))
        )

    return _make


@pytest.fixture
def instructor(make_instructor) -> Instructor:
    return make_instructor()

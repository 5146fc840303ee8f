# backend/app/routes/v1/students.py
"""
Student routes - API v1

Versioned student endpoints under /api/v1/students.
All business logic delegated to StudentService.

Endpoints:
    POST /                                   → Register a student
    POST /login                              → Verify student credentials
    GET /                                    → List students
    GET /{student_id}                        → Get one student
    PUT /{student_id}                        → Replace a student's profile
    DELETE /{student_id}                     → Delete a student
    DELETE /                                 → Delete all students
    GET /{student_id}/lessons                → Lessons the student attends
    GET /{student_id}/available-lessons      → Open lessons matching the student
    POST /{student_id}/lessons/{lesson_id}   → Join a lesson
    DELETE /{student_id}/lessons/{lesson_id} → Leave a lesson
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.exceptions import DomainException
from ...database import get_db
from ...schemas.common import DeleteCountResponse, LoginRequest, MessageResponse
from ...schemas.lesson import LessonResponse
from ...schemas.student import StudentCreate, StudentResponse, StudentUpdate
from ...services.student_service import StudentService
from ._shared import handle_domain_exception, raise_unexpected

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["students-v1"])


def get_student_service(db: Session = Depends(get_db)) -> StudentService:
    """Dependency to get student service."""
    return StudentService(db)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    service: StudentService = Depends(get_student_service),
) -> StudentResponse:
    """Register a student; 409 when the id is already taken."""
    try:
        student = await asyncio.to_thread(service.create_student, payload)
        return StudentResponse.from_student(student)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("create_student", e)


@router.post("/login", response_model=StudentResponse)
async def login_student(
    payload: LoginRequest,
    service: StudentService = Depends(get_student_service),
) -> StudentResponse:
    try:
        student = await asyncio.to_thread(service.login, payload.id, payload.password)
        return StudentResponse.from_student(student)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("login_student", e)


@router.get("", response_model=List[StudentResponse])
async def get_all_students(
    service: StudentService = Depends(get_student_service),
) -> List[StudentResponse]:
    try:
        students = await asyncio.to_thread(service.get_all_students)
        return [StudentResponse.from_student(student) for student in students]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_all_students", e)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    service: StudentService = Depends(get_student_service),
) -> StudentResponse:
    try:
        student = await asyncio.to_thread(service.get_student, student_id)
        return StudentResponse.from_student(student)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_student", e)


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    payload: StudentUpdate,
    service: StudentService = Depends(get_student_service),
) -> StudentResponse:
    """Replace the profile; lesson rosters pick up the new name and preferences."""
    try:
        student = await asyncio.to_thread(service.update_student, student_id, payload)
        return StudentResponse.from_student(student)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("update_student", e)


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: str,
    service: StudentService = Depends(get_student_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(service.delete_student, student_id)
        return MessageResponse(message=f"Student {student_id} deleted")
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("delete_student", e)


@router.delete("", response_model=DeleteCountResponse)
async def delete_all_students(
    service: StudentService = Depends(get_student_service),
) -> DeleteCountResponse:
    try:
        deleted = await asyncio.to_thread(service.delete_all_students)
        return DeleteCountResponse(message="All students deleted", deleted_count=deleted)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("delete_all_students", e)


@router.get("/{student_id}/lessons", response_model=List[LessonResponse])
async def get_my_lessons(
    student_id: str,
    service: StudentService = Depends(get_student_service),
) -> List[LessonResponse]:
    try:
        lessons = await asyncio.to_thread(service.get_my_lessons, student_id)
        return [LessonResponse.from_lesson(lesson) for lesson in lessons]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_my_lessons", e)


@router.get("/{student_id}/available-lessons", response_model=List[LessonResponse])
async def get_available_lessons(
    student_id: str,
    service: StudentService = Depends(get_student_service),
) -> List[LessonResponse]:
    """Upcoming group lessons the student can join, preferred lesson types first."""
    try:
        lessons = await asyncio.to_thread(service.get_available_lessons, student_id)
        return [LessonResponse.from_lesson(lesson) for lesson in lessons]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_available_lessons", e)


@router.post("/{student_id}/lessons/{lesson_id}", response_model=LessonResponse)
async def join_lesson(
    student_id: str,
    lesson_id: str,
    service: StudentService = Depends(get_student_service),
) -> LessonResponse:
    try:
        lesson = await asyncio.to_thread(service.join_lesson, student_id, lesson_id)
        return LessonResponse.from_lesson(lesson)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("join_lesson", e)


@router.delete("/{student_id}/lessons/{lesson_id}", response_model=MessageResponse)
async def leave_lesson(
    student_id: str,
    lesson_id: str,
    service: StudentService = Depends(get_student_service),
) -> MessageResponse:
    """Leave a lesson; a lesson left without students is deleted."""
    try:
        lesson = await asyncio.to_thread(service.leave_lesson, student_id, lesson_id)
        if lesson is None:
            return MessageResponse(
                message=f"Student {student_id} left lesson {lesson_id}; the empty lesson was removed"
            )
        return MessageResponse(message=f"Student {student_id} left lesson {lesson_id}")
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("leave_lesson", e)

# backend/app/routes/v1/lessons.py
"""
Lesson routes - API v1

Versioned lesson endpoints under /api/v1/lessons.
All scheduling rules are enforced by LessonService.

Endpoints:
    POST /                                   → Schedule a lesson
    GET /                                    → Lessons starting within a range
    GET /instructor/{instructor_id}/day      → An instructor's lessons on a weekday
    GET /students/{student_id}               → Lessons a student attends
    DELETE /instructor/{instructor_id}       → Delete an instructor's lessons
    GET /{lesson_id}                         → Get one lesson
    PUT /{lesson_id}                         → Replace a lesson
    DELETE /{lesson_id}                      → Delete one lesson
    DELETE /                                 → Delete all lessons
"""

import asyncio
from datetime import datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.exceptions import DomainException
from ...database import get_db
from ...schemas.common import DeleteCountResponse, MessageResponse
from ...schemas.lesson import LessonCreate, LessonResponse, LessonUpdate
from ...services.lesson_service import LessonService
from ._shared import handle_domain_exception, raise_unexpected

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["lessons-v1"])


def get_lesson_service(db: Session = Depends(get_db)) -> LessonService:
    """Dependency to get lesson service."""
    return LessonService(db)


@router.post("", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    payload: LessonCreate,
    day: Optional[int] = Query(
        None, description="Expected day of week (0 = Sunday); must match the start time"
    ),
    service: LessonService = Depends(get_lesson_service),
) -> LessonResponse:
    """
    Schedule a lesson.

    Rejected with 400 when the lesson breaks a scheduling rule: wrong
    duration or roster, instructor unavailable, instructor double-booked, or a
    student already attending an overlapping lesson.
    """
    try:
        lesson = await asyncio.to_thread(service.create_lesson, payload, day)
        return LessonResponse.from_lesson(lesson)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("create_lesson", e)


@router.get("", response_model=List[LessonResponse])
async def get_lessons_within_range(
    start: datetime = Query(..., description="Earliest lesson start (inclusive)"),
    end: datetime = Query(..., description="Latest lesson start (inclusive)"),
    service: LessonService = Depends(get_lesson_service),
) -> List[LessonResponse]:
    try:
        lessons = await asyncio.to_thread(service.get_lessons_within_range, start, end)
        return [LessonResponse.from_lesson(lesson) for lesson in lessons]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_lessons_within_range", e)


@router.get("/instructor/{instructor_id}/day", response_model=List[LessonResponse])
async def get_lessons_of_instructor_by_day(
    instructor_id: str,
    day: datetime = Query(..., description="Any datetime on the wanted weekday"),
    service: LessonService = Depends(get_lesson_service),
) -> List[LessonResponse]:
    try:
        lessons = await asyncio.to_thread(
            service.get_instructor_lessons_by_day, instructor_id, day
        )
        return [LessonResponse.from_lesson(lesson) for lesson in lessons]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_lessons_of_instructor_by_day", e)


@router.get("/students/{student_id}", response_model=List[LessonResponse])
async def get_lessons_by_student(
    student_id: str,
    service: LessonService = Depends(get_lesson_service),
) -> List[LessonResponse]:
    try:
        lessons = await asyncio.to_thread(service.get_lessons_by_student, student_id)
        return [LessonResponse.from_lesson(lesson) for lesson in lessons]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_lessons_by_student", e)


@router.delete("/instructor/{instructor_id}", response_model=DeleteCountResponse)
async def delete_lessons_by_instructor(
    instructor_id: str,
    service: LessonService = Depends(get_lesson_service),
) -> DeleteCountResponse:
    try:
        deleted = await asyncio.to_thread(service.delete_lessons_by_instructor, instructor_id)
        return DeleteCountResponse(
            message=f"Lessons of instructor {instructor_id} deleted", deleted_count=deleted
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("delete_lessons_by_instructor", e)


@router.get("/{lesson_id}", response_model=LessonResponse)
async def get_lesson(
    lesson_id: str,
    service: LessonService = Depends(get_lesson_service),
) -> LessonResponse:
    try:
        lesson = await asyncio.to_thread(service.get_lesson, lesson_id)
        return LessonResponse.from_lesson(lesson)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_lesson", e)


@router.put("/{lesson_id}", response_model=LessonResponse)
async def update_lesson(
    lesson_id: str,
    payload: LessonUpdate,
    service: LessonService = Depends(get_lesson_service),
) -> LessonResponse:
    try:
        lesson = await asyncio.to_thread(service.update_lesson, lesson_id, payload)
        return LessonResponse.from_lesson(lesson)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("update_lesson", e)


@router.delete("/{lesson_id}", response_model=MessageResponse)
async def delete_lesson(
    lesson_id: str,
    service: LessonService = Depends(get_lesson_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(service.delete_lesson, lesson_id)
        return MessageResponse(message=f"Lesson {lesson_id} deleted")
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("delete_lesson", e)


@router.delete("", response_model=DeleteCountResponse)
async def delete_all_lessons(
    service: LessonService = Depends(get_lesson_service),
) -> DeleteCountResponse:
    try:
        deleted = await asyncio.to_thread(service.delete_all_lessons)
        return DeleteCountResponse(message="All lessons deleted", deleted_count=deleted)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("delete_all_lessons", e)

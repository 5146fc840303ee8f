# backend/app/routes/v1/instructors.py
"""
Instructor routes - API v1

Versioned instructor endpoints under /api/v1/instructors.
All business logic delegated to InstructorService.

Endpoints:
    POST /                     → Register an instructor
    POST /login                → Verify instructor credentials
    GET /                      → List instructors
    GET /specialties           → Instructors teaching all given styles
    GET /availability          → Instructors free for a daily time range
    GET /{instructor_id}       → Get one instructor
    PUT /{instructor_id}       → Replace an instructor's profile
    DELETE /{instructor_id}    → Delete an instructor and their lessons
    DELETE /                   → Delete all instructors and lessons
"""

import asyncio
from datetime import time
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.enums import Swimming
from ...core.exceptions import DomainException
from ...database import get_db
from ...schemas.common import DeleteCountResponse, LoginRequest, MessageResponse
from ...schemas.instructor import InstructorCreate, InstructorResponse, InstructorUpdate
from ...services.instructor_service import InstructorService
from ._shared import handle_domain_exception, raise_unexpected

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["instructors-v1"])


def get_instructor_service(db: Session = Depends(get_db)) -> InstructorService:
    """Dependency to get instructor service."""
    return InstructorService(db)


@router.post("", response_model=InstructorResponse, status_code=status.HTTP_201_CREATED)
async def create_instructor(
    payload: InstructorCreate,
    service: InstructorService = Depends(get_instructor_service),
) -> InstructorResponse:
    """Register a new instructor with weekly availability."""
    try:
        instructor = await asyncio.to_thread(service.create_instructor, payload)
        return InstructorResponse.from_instructor(instructor)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("create_instructor", e)


@router.post("/login", response_model=InstructorResponse)
async def login_instructor(
    payload: LoginRequest,
    service: InstructorService = Depends(get_instructor_service),
) -> InstructorResponse:
    """Check credentials and return the instructor profile."""
    try:
        instructor = await asyncio.to_thread(service.login, payload.id, payload.password)
        return InstructorResponse.from_instructor(instructor)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("login_instructor", e)


@router.get("", response_model=List[InstructorResponse])
async def get_all_instructors(
    service: InstructorService = Depends(get_instructor_service),
) -> List[InstructorResponse]:
    try:
        instructors = await asyncio.to_thread(service.get_all_instructors)
        return [InstructorResponse.from_instructor(instructor) for instructor in instructors]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_all_instructors", e)


@router.get("/specialties", response_model=List[InstructorResponse])
async def get_instructors_by_specialties(
    specialties: List[Swimming] = Query(
        ..., description="Repeat the parameter for each required style"
    ),
    service: InstructorService = Depends(get_instructor_service),
) -> List[InstructorResponse]:
    """Instructors that teach every requested swimming style."""
    try:
        instructors = await asyncio.to_thread(service.get_instructors_by_specialties, specialties)
        return [InstructorResponse.from_instructor(instructor) for instructor in instructors]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_instructors_by_specialties", e)


@router.get("/availability", response_model=List[InstructorResponse])
async def get_instructors_by_availability(
    day: int = Query(..., description="Day of week, 0 = Sunday ... 6 = Saturday"),
    start_time: time = Query(..., description="Range start, e.g. 09:00"),
    end_time: time = Query(..., description="Range end; 00:00 means end of day"),
    service: InstructorService = Depends(get_instructor_service),
) -> List[InstructorResponse]:
    """Instructors whose window on ``day`` covers the whole requested range."""
    try:
        instructors = await asyncio.to_thread(
            service.get_available_instructors, day, start_time, end_time
        )
        return [InstructorResponse.from_instructor(instructor) for instructor in instructors]
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_instructors_by_availability", e)


@router.get("/{instructor_id}", response_model=InstructorResponse)
async def get_instructor(
    instructor_id: str,
    service: InstructorService = Depends(get_instructor_service),
) -> InstructorResponse:
    try:
        instructor = await asyncio.to_thread(service.get_instructor, instructor_id)
        return InstructorResponse.from_instructor(instructor)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("get_instructor", e)


@router.put("/{instructor_id}", response_model=InstructorResponse)
async def update_instructor(
    instructor_id: str,
    payload: InstructorUpdate,
    service: InstructorService = Depends(get_instructor_service),
) -> InstructorResponse:
    """
    Replace name, specialties and availability.

    Rejected with 400 when an already scheduled lesson would no longer fit.
    """
    try:
        instructor = await asyncio.to_thread(service.update_instructor, instructor_id, payload)
        return InstructorResponse.from_instructor(instructor)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("update_instructor", e)


@router.delete("/{instructor_id}", response_model=MessageResponse)
async def delete_instructor(
    instructor_id: str,
    service: InstructorService = Depends(get_instructor_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(service.delete_instructor, instructor_id)
        return MessageResponse(message=f"Instructor {instructor_id} deleted")
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("delete_instructor", e)


@router.delete("", response_model=DeleteCountResponse)
async def delete_all_instructors(
    service: InstructorService = Depends(get_instructor_service),
) -> DeleteCountResponse:
    try:
        deleted = await asyncio.to_thread(service.delete_all_instructors)
        return DeleteCountResponse(message="All instructors deleted", deleted_count=deleted)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as e:
        raise_unexpected("delete_all_instructors", e)

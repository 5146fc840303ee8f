import asyncio
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.main_responses import ReadinessResponse

router = APIRouter(tags=["internal"])
logger = logging.getLogger(__name__)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(response_obj: Response, db: Session = Depends(get_db)) -> ReadinessResponse:
    """Readiness check: 503 until the database answers."""

    def _ping_db() -> None:
        db.execute(text("SELECT 1"))
        db.rollback()

    try:
        await asyncio.to_thread(_ping_db)
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        response_obj.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="db_not_ready")

    return ReadinessResponse(status="ok")

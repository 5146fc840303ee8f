# backend/app/routes/health.py
"""
Health check endpoints for the application.

/health is the infrastructure check (hidden from the docs); /api/health is
the same payload under the API prefix for clients.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Response

from ..core.config import settings
from ..core.constants import API_VERSION, BRAND_NAME
from ..schemas.main_responses import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


def _apply_health_headers(response: Response) -> None:
    response.headers["Cache-Control"] = "no-store"
    response.headers["X-Site-Mode"] = settings.site_mode or "unset"


def _health_payload() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower()}-api",
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.get("/health", response_model=HealthResponse, include_in_schema=False)
def health_check(response: Response) -> HealthResponse:
    _apply_health_headers(response)
    return _health_payload()


@router.get("/api/health", response_model=HealthResponse)
def api_health(response: Response) -> HealthResponse:
    """Liveness check that never touches the database."""
    _apply_health_headers(response)
    return _health_payload()

# backend/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .core.request_context import attach_request_id_filter
from .database import init_db
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.request_ids import RequestIdMiddlewareASGI
from .middleware.timing_asgi import TimingMiddlewareASGI
from .routes import health, prometheus, ready
from .routes.v1 import instructors as instructors_v1, lessons as lessons_v1, students as students_v1
from .schemas.main_responses import RootResponse

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    # Startup
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(
        f"Environment: {settings.environment} (SITE_MODE={settings.site_mode})"
    )
    if settings.is_test_mode:
        logger.info("Test mode active")

    if settings.auto_create_tables:
        init_db()
    logger.info(f"School timezone: {settings.school_timezone}")

    yield

    # Shutdown
    logger.info(f"{BRAND_NAME} API shutting down...")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)
# Register unified error envelope handlers
register_error_handlers(app)

# Middleware runs in reverse order of registration: request ids are set
# first so every later log line and metric carries them
app.add_middleware(TimingMiddlewareASGI)
app.add_middleware(PrometheusMiddleware)

_ALLOWED_ORIGINS = settings.get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_ALLOWED_ORIGINS,
    # Browsers reject credentials with a wildcard origin
    allow_credentials="*" not in _ALLOWED_ORIGINS,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Instance-ID", "X-Process-Time"],
)
logger.info("CORS allow_origins=%s", _ALLOWED_ORIGINS)

app.add_middleware(RequestIdMiddlewareASGI)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

# Mount v1 routes
# /instructors/availability and /instructors/specialties are declared before
# /instructors/{instructor_id} inside the router to avoid path collisions
api_v1.include_router(instructors_v1.router, prefix="/instructors")
api_v1.include_router(lessons_v1.router, prefix="/lessons")
api_v1.include_router(students_v1.router, prefix="/students")

# Mount API v1 first
app.include_router(api_v1)

# Infrastructure routes (unversioned)
app.include_router(health.router)
app.include_router(ready.router)
app.include_router(prometheus.router)


@app.get("/", response_model=RootResponse)
def read_root() -> RootResponse:
    """Root endpoint - API information"""
    return RootResponse(
        message=f"Welcome to the {BRAND_NAME} API",
        version=API_VERSION,
        docs="/docs",
        environment=settings.environment,
    )

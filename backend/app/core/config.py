# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import List, Optional, Set

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


PROD_SITE_MODES: Set[str] = {"prod", "production", "live"}
TEST_SITE_MODES: Set[str] = {"ci", "test"}


class Settings(BaseSettings):
    site_mode: str = Field(default="local", description="Deployment mode (local|test|stg|prod)")

    # Database
    database_url: str = Field(
        default="sqlite:///./swimschool.db",
        description="SQLAlchemy database URL",
    )
    sql_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    auto_create_tables: bool = Field(
        default=True, description="Create missing tables from ORM metadata at startup"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    # CORS - the mobile client talks to the API from arbitrary origins
    cors_allowed_origins: str = Field(
        default="*", description="Comma separated list of allowed origins"
    )

    # Scheduling
    school_timezone: str = Field(
        default="UTC", description="Timezone lesson times are interpreted in"
    )
    max_students_per_lesson: int = Field(default=30, ge=1)
    group_lesson_minutes: int = Field(default=60, ge=1, description="PUBLIC/MIXED duration")
    private_lesson_minutes: int = Field(default=45, ge=1, description="PRIVATE duration")
    student_overlap_padding_hours: int = Field(
        default=1,
        ge=0,
        description="Hours around a lesson searched for student double-booking",
    )

    # Security
    password_hash_rounds: int = Field(default=12, ge=4, le=31)

    # Unexpected error messages reach clients; defaults to off in production
    expose_error_details: Optional[bool] = None

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("site_mode")
    @classmethod
    def normalize_site_mode(cls, v: str) -> str:
        return (v or "local").strip().lower()

    @field_validator("school_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    @model_validator(mode="after")
    def default_error_details(self) -> "Settings":
        if self.expose_error_details is None:
            self.expose_error_details = not self.is_production
        return self

    @property
    def is_production(self) -> bool:
        return self.site_mode in PROD_SITE_MODES

    @property
    def is_test_mode(self) -> bool:
        return self.site_mode in TEST_SITE_MODES

    @property
    def environment(self) -> str:
        return "production" if self.is_production else "development"

    def get_cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    def get_database_url(self) -> str:
        """Get the database URL for the current context."""
        return self.database_url


settings = Settings()

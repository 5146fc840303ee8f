"""Application-wide constants for the swim school platform."""

from __future__ import annotations

BRAND_NAME = "SwimSchool"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Scheduling backend for swim lessons: instructors, students and lessons."
API_VERSION = "1.0.0"

# Weekly availability has one entry per day, Sunday first
DAYS_IN_WEEK = 7

# Text constraints
MAX_NAME_LENGTH = 100
MAX_STUDENT_ID_LENGTH = 64
MIN_PASSWORD_LENGTH = 4
MAX_PASSWORD_LENGTH = 72  # bcrypt only uses the first 72 bytes

# Paths excluded from request timing/metrics
METRICS_PATH = "/metrics/prometheus"
HEALTH_PATHS = ("/health", "/api/health", "/ready")

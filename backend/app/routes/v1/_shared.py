"""Helpers shared by the v1 routers."""

import logging
from typing import NoReturn

from fastapi import HTTPException, status

from ...core.exceptions import DomainException

logger = logging.getLogger(__name__)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def raise_unexpected(operation: str, exc: Exception) -> NoReturn:
    """Log an unexpected failure and answer with a generic 500."""
    logger.error("Unexpected error in %s: %s", operation, exc, exc_info=True)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"An error occurred during {operation.replace('_', ' ')}",
    )

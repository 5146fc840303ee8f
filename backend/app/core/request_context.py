"""
Request id shared between the ASGI middleware, error responses and log lines.

The id lives in a ContextVar so every log record written while a request is
served carries it, whichever thread pool worker the service code runs on.
"""

from contextvars import ContextVar, Token
import logging
from typing import Optional

NO_REQUEST = "-"

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def bind_request_id(request_id: str) -> Token:
    return _request_id.set(request_id)


def unbind_request_id(token: Token) -> None:
    _request_id.reset(token)


def get_request_id() -> Optional[str]:
    """Id of the request being served, None outside a request."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Fill ``%(request_id)s`` for the log format; startup logs get ``-``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id() or NO_REQUEST
        return True


def attach_request_id_filter(logger: Optional[logging.Logger] = None) -> None:
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())

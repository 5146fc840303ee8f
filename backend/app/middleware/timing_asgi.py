"""
Pure ASGI Timing Middleware

Measures request processing time, logs it and sets X-Process-Time on every
response. Pure ASGI avoids the BaseHTTPMiddleware "No response returned" issue.
"""

import logging
import time

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.constants import HEALTH_PATHS, METRICS_PATH

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 100


class TimingMiddlewareASGI:
    """
    Pure ASGI middleware to measure and log request processing time.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        method = scope.get("method", "")
        # Health checks and scrapes are timed but not logged
        quiet = path in HEALTH_PATHS or path == METRICS_PATH

        if not quiet:
            logger.info(f"[TIMING] Starting request: {method} {path}")
        start_time = time.time()

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                process_time = (time.time() - start_time) * 1000  # ms

                headers = MutableHeaders(scope=message)
                headers["X-Process-Time"] = f"{process_time:.2f}ms"

                if not quiet:
                    logger.info(f"[TIMING] Response for: {path}, duration: {process_time:.2f}ms")
                    if process_time > SLOW_REQUEST_MS:
                        logger.warning(
                            f"[TIMING] Slow request: {method} {path} took {process_time:.2f}ms"
                        )

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            logger.error(f"[TIMING] Error in request {path} after {process_time:.2f}ms: {str(e)}")
            raise

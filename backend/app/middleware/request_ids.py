"""
Pure ASGI middleware tagging every request and response with identifiers.

- X-Request-ID: taken from the client or generated, and exposed to logging
  through the request-id context variable
- X-Instance-ID: random per process, so clients behind a load balancer can
  tell which backend instance answered
"""

import logging
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.request_context import bind_request_id, unbind_request_id

logger = logging.getLogger(__name__)

INSTANCE_ID = uuid.uuid4().hex


class RequestIdMiddlewareASGI:
    def __init__(self, app: ASGIApp, instance_id: str = INSTANCE_ID) -> None:
        self.app = app
        self.instance_id = instance_id

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get("x-request-id") or str(uuid.uuid4())
        token = bind_request_id(request_id)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
                headers["X-Instance-ID"] = self.instance_id
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            unbind_request_id(token)

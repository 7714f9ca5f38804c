"""Correlation ID middleware binding a per-request id into the log context."""
import uuid

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware:
    """Pure ASGI middleware so streamed responses pass through untouched."""

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_HEADER):
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = None
        for key, value in scope.get("headers", []):
            if key.decode("latin-1").lower() == self.header_name.lower():
                incoming = value.decode("latin-1")
                break
        correlation_id = incoming or uuid.uuid4().hex

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[self.header_name] = correlation_id
            await send(message)

        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=scope.get("method"),
            path=scope.get("path"),
        )
        try:
            await self.app(scope, receive, send_with_header)
        finally:
            structlog.contextvars.clear_contextvars()

"""
Request body size limit.

A declared Content-Length over the limit is rejected before the app runs.
Bodies without one (chunked uploads) are counted as they are received and
the request is answered with the same 413 once the count passes the limit.
"""

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from labelprint.config import settings
from labelprint.logger import get_logger
from labelprint.models.common import ErrorResponse

logger = get_logger(__name__)


class RequestBodyTooLarge(Exception):
    """Raised from receive() when a streamed body passes the limit."""

    def __init__(self, received: int):
        self.received = received
        super().__init__(f"Request body exceeded limit after {received} bytes")


class RequestBodyLimitMiddleware:
    """ASGI middleware enforcing settings.max_request_body_bytes."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        max_bytes = settings.max_request_body_bytes
        content_length = self._content_length(scope)
        if content_length is not None and content_length > max_bytes:
            logger.warning("Request body too large", extra={
                "path": scope.get("path"),
                "content_length": content_length,
                "max_bytes": max_bytes
            })
            await self._too_large()(scope, receive, send)
            return

        received = 0
        exceeded = False
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    exceeded = True
                    raise RequestBodyTooLarge(received)
            return message

        async def guarded_send(message: Message):
            nonlocal response_started
            # Whatever the app answers after the limit tripped is replaced by the 413
            if exceeded:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            if not exceeded:
                raise

        if exceeded and not response_started:
            logger.warning("Streamed request body too large", extra={
                "path": scope.get("path"),
                "received_bytes": received,
                "max_bytes": max_bytes
            })
            await self._too_large()(scope, receive, send)

    @staticmethod
    def _content_length(scope: Scope) -> int | None:
        for name, value in scope.get("headers", []):
            if name == b"content-length":
                text = value.decode("latin-1")
                return int(text) if text.isdigit() else None
        return None

    @staticmethod
    def _too_large() -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content=ErrorResponse(
                error_code="PAYLOAD_TOO_LARGE",
                message="Request body too large",
                details=f"Maximum request size is {settings.max_request_body_mb}MB"
            ).model_dump(mode="json")
        )

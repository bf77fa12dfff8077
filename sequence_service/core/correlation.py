"""
Request ID Middleware

Binds a per-request identifier into structlog contextvars so every log line
emitted while serving the request carries it, and echoes it back in the
response headers.
"""

import re
import uuid
from typing import Awaitable, Callable, Optional

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

logger = structlog.get_logger()

REQUEST_ID_HEADER = "x-request-id"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Extract or generate a request ID and bind it for logging.

    An incoming ID is honoured only when it is short and made of safe
    characters; anything else is replaced with a fresh UUID v4.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name.lower()

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = self._extract_or_generate(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            logger.debug(
                "Request started",
                method=request.method,
                path=request.url.path,
            )

            response = await call_next(request)
            response.headers[self.header_name] = request_id

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )

            return response
        finally:
            structlog.contextvars.clear_contextvars()

    def _extract_or_generate(self, request: Request) -> str:
        request_id = self._extract_from_headers(request)
        if request_id and _VALID_REQUEST_ID.match(request_id):
            return request_id

        if request_id:
            logger.warning(
                "Invalid request ID in header, generating new one",
                received_request_id=request_id[:128],
            )

        return str(uuid.uuid4())

    def _extract_from_headers(self, request: Request) -> Optional[str]:
        for header_name in (self.header_name, "x-correlation-id"):
            value = request.headers.get(header_name)
            if value and value.strip():
                return value.strip()
        return None

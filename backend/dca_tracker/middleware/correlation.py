# backend/dca_tracker/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

For each request the middleware picks a correlation ID, stores it in the
request context (so every log line carries it) and echoes it back in the
X-Correlation-ID response header.

Correlation ID sources (in order of precedence):
1. X-Correlation-ID header
2. X-Request-ID header
3. Generated UUID4

Client-supplied IDs longer than MAX_CORRELATION_ID_LENGTH are truncated.

Usage:
    from fastapi import FastAPI
    from dca_tracker.middleware import CorrelationIdMiddleware

    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
"""

import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dca_tracker.utils.context import clear_correlation_id, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
MAX_CORRELATION_ID_LENGTH = 128


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to the request context and the response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = self._get_correlation_id(request)
        set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()

    @staticmethod
    def _get_correlation_id(request: Request) -> str:
        """
        Extract correlation ID from request headers or generate a new one.

        Returns:
            Correlation ID string
        """
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header, "").strip()
            if value:
                return value[:MAX_CORRELATION_ID_LENGTH]

        return str(uuid.uuid4())

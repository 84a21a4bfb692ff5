# backend/dca_tracker/middleware/rate_limit.py
"""
Rate limiting for the analytics API, using slowapi.

Analytics requests carry the whole purchase log and run every calculator,
so each client gets a per-minute budget. Limits are defined in
dca_tracker/services/constants.py. RATE_LIMIT_ENABLED=false turns the
limiter off (the test suite does this).

Key by: Client IP address
Storage: In-memory (single instance)

Usage:
    from dca_tracker.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS

    @router.post("/analytics")
    @limiter.limit(RATE_LIMIT_ANALYTICS)
    def get_report(request: Request, snapshot: PortfolioSnapshot):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from dca_tracker.config import settings
from dca_tracker.schemas.errors import ErrorDetail
from dca_tracker.services.constants import (
    RATE_LIMIT_ANALYTICS,
    RATE_LIMIT_HEALTH,
)

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_ANALYTICS],
    enabled=settings.rate_limit_enabled,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    Return 429 in the standard ErrorDetail format with a Retry-After header.
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(
        f"Rate limit exceeded for {get_remote_address(request)}: {limit_info}"
    )

    return JSONResponse(
        status_code=429,
        content=ErrorDetail(
            error="RateLimitError",
            message=f"Too many requests. {limit_info}",
            details={"retry_after": DEFAULT_RETRY_AFTER_SECONDS},
        ).model_dump(),
        headers={"Retry-After": str(DEFAULT_RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_ANALYTICS",
    "RATE_LIMIT_HEALTH",
]

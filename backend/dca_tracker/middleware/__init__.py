# backend/dca_tracker/middleware/__init__.py
"""
Middleware components for the DCA Tracker API:
- Correlation ID tracking for request tracing
- Rate limiting for API protection

Usage:
    from dca_tracker.middleware import CorrelationIdMiddleware, limiter

    app.add_middleware(CorrelationIdMiddleware)
    app.state.limiter = limiter
"""

from dca_tracker.middleware.correlation import CorrelationIdMiddleware
from dca_tracker.middleware.rate_limit import (
    RATE_LIMIT_ANALYTICS,
    RATE_LIMIT_HEALTH,
    SlowAPIMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_ANALYTICS",
    "RATE_LIMIT_HEALTH",
]

# backend/dca_tracker/services/__init__.py
"""
Service layer for business logic.

Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions (see exceptions.py)
- Are easily testable via dependency injection

Usage:
    from dca_tracker.services import AnalyticsService
    from dca_tracker.services import ValidationError, InvalidPriceError

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Thresholds, solver settings, limits
    └── analytics/                   # Analytics engine
"""

from dca_tracker.services.analytics import AnalyticsCache, AnalyticsService
from dca_tracker.services.exceptions import (
    InvalidAlertError,
    InvalidGoalError,
    InvalidPriceError,
    InvalidProjectionError,
    InvalidPurchaseError,
    ServiceError,
    ValidationError,
)

__all__ = [
    "AnalyticsService",
    "AnalyticsCache",
    "ServiceError",
    "ValidationError",
    "InvalidPurchaseError",
    "InvalidPriceError",
    "InvalidGoalError",
    "InvalidAlertError",
    "InvalidProjectionError",
]

# backend/dca_tracker/dependencies.py
"""
Dependency injection for FastAPI routers.

Services are lazily created singletons so that shared state (the analytics
report cache) is reused across requests.

Usage in routers:
    from dca_tracker.dependencies import get_analytics_service

    @router.post("/analytics")
    def get_report(service: AnalyticsService = Depends(get_analytics_service)):
        ...

Tests can replace the service with app.dependency_overrides.
"""

import logging
from functools import lru_cache

from dca_tracker.services.analytics.service import AnalyticsService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_analytics_service() -> AnalyticsService:
    """Get the singleton AnalyticsService instance."""
    logger.debug("Initializing singleton AnalyticsService")
    return AnalyticsService()

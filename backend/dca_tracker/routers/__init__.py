# backend/dca_tracker/routers/__init__.py
"""
API routers for the DCA Tracker.

- analytics: Stateless analytics over a posted purchase log
"""

from dca_tracker.routers.analytics import router as analytics_router

__all__ = [
    "analytics_router",
]

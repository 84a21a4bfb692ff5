# backend/dca_tracker/utils/__init__.py
"""
Cross-cutting utilities for the DCA Tracker:
- logging: Logging setup with correlation ID support
- context: Request-scoped correlation ID storage

Usage:
    from dca_tracker.utils import setup_logging
    from dca_tracker.utils import get_correlation_id, set_correlation_id
"""

from dca_tracker.utils.context import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from dca_tracker.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]

# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Test environment variables (set BEFORE any dca_tracker import)
- Purchase / goal factories
- A realistic purchase log
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("APP_NAME", "Test App")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import date
from decimal import Decimal
from typing import Callable

import pytest

from dca_tracker.services.analytics import AnalyticsService
from dca_tracker.services.analytics.types import Goal, PurchaseEvent


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def make_purchase() -> Callable[..., PurchaseEvent]:
    """
    Factory for PurchaseEvent.

    quantity defaults to capital / price (no fee).
    """
    def _make(
            occurred_on: date,
            capital: str | Decimal,
            price: str | Decimal,
            quantity: str | Decimal | None = None,
    ) -> PurchaseEvent:
        capital = Decimal(capital)
        price = Decimal(price)
        return PurchaseEvent(
            occurred_on=occurred_on,
            capital_spent=capital,
            unit_price=price,
            quantity_received=Decimal(quantity) if quantity is not None else capital / price,
        )

    return _make


@pytest.fixture
def make_goal() -> Callable[..., Goal]:
    """Factory for Goal."""
    def _make(target: str | Decimal, deadline: date | None = None, name: str = "Goal") -> Goal:
        return Goal(target_quantity=Decimal(target), deadline=deadline, name=name)

    return _make


# =============================================================================
# SAMPLE DATA
# =============================================================================

@pytest.fixture
def dip_and_recovery(make_purchase) -> list[PurchaseEvent]:
    """
    Two purchases: buy at 100, buy again after a 50% dip.

    2024-01-01: 1000 @ 100 -> 10 units
    2024-02-01: 1000 @ 50  -> 20 units
    """
    return [
        make_purchase(date(2024, 1, 1), "1000", "100"),
        make_purchase(date(2024, 2, 1), "1000", "50"),
    ]


@pytest.fixture(autouse=True)
def _clear_shared_analytics_cache():
    """Isolate tests from the process-wide report cache."""
    AnalyticsService.clear_all_cache()
    yield
    AnalyticsService.clear_all_cache()

# backend/dca_tracker/services/analytics/projection.py
"""
Forward projection of a fixed monthly DCA plan.

Formulas:
    total_investment    = monthly_investment * duration_months
    projected_quantity  = total_investment / average_price
    projected_value     = projected_quantity * future_price
    profit_loss         = projected_value - total_investment
    profit_loss_percent = profit_loss / total_investment * 100   (= ROI)
"""

from decimal import Decimal

from dca_tracker.services.analytics.aggregates import percent_of
from dca_tracker.services.analytics.types import DCAProjection, to_decimal
from dca_tracker.services.constants import (
    PROJECTION_MAX_MONTHS,
    PROJECTION_MIN_MONTHS,
    ZERO,
)
from dca_tracker.services.exceptions import InvalidProjectionError


def _positive(name: str, value: Decimal | int | float | str) -> Decimal:
    amount = to_decimal(value)
    if not amount.is_finite() or amount <= ZERO:
        raise InvalidProjectionError(name, f"must be positive, got {value!r}")
    return amount


def project_dca(
        monthly_investment: Decimal,
        duration_months: int,
        average_price: Decimal,
        future_price: Decimal,
) -> DCAProjection:
    """
    Project the outcome of investing a fixed amount every month.

    Args:
        monthly_investment: Amount invested each month (> 0)
        duration_months: Plan length, PROJECTION_MIN_MONTHS..PROJECTION_MAX_MONTHS
        average_price: Expected average purchase price (> 0)
        future_price: Expected price at the end of the plan (> 0)

    Returns:
        DCAProjection

    Raises:
        InvalidProjectionError: If any input is out of range
    """
    monthly = _positive("monthly_investment", monthly_investment)
    average = _positive("average_price", average_price)
    future = _positive("future_price", future_price)

    if isinstance(duration_months, bool) or not isinstance(duration_months, int):
        raise InvalidProjectionError("duration_months", f"must be an integer, got {duration_months!r}")
    if not PROJECTION_MIN_MONTHS <= duration_months <= PROJECTION_MAX_MONTHS:
        raise InvalidProjectionError(
            "duration_months",
            f"must be between {PROJECTION_MIN_MONTHS} and {PROJECTION_MAX_MONTHS}, got {duration_months}",
        )

    total_investment = monthly * duration_months
    projected_quantity = total_investment / average
    projected_value = projected_quantity * future
    profit_loss = projected_value - total_investment

    return DCAProjection(
        monthly_investment=monthly,
        duration_months=duration_months,
        average_price=average,
        future_price=future,
        total_investment=total_investment,
        projected_quantity=projected_quantity,
        projected_value=projected_value,
        profit_loss=profit_loss,
        profit_loss_percent=percent_of(profit_loss, total_investment),
    )

# backend/dca_tracker/services/analytics/series.py
"""
Purchase ordering and cumulative series construction.

Every other metric reads the output of these two functions:

    purchases (any order)
        ↓ sort_purchases()          stable, date ascending
    ordered purchases
        ↓ build_cumulative_series() one point per purchase + trailing "now" point
    list[CumulativePoint]

Each historical point is marked at that purchase's own unit price, not at
the current price. The history therefore reflects the price path actually
paid, which is what drawdown and the Sharpe-like ratio measure. Only the
trailing point uses the current price.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from dca_tracker.services.analytics.types import (
    CumulativePoint,
    PurchaseEvent,
    to_decimal,
)
from dca_tracker.services.constants import ZERO
from dca_tracker.services.exceptions import InvalidPriceError

logger = logging.getLogger(__name__)


def validate_current_price(current_price: Decimal | int | float | str) -> Decimal:
    """
    Normalize the current price to Decimal and reject negative values.

    Zero is legal: it means the price has not been set and values the
    holdings at zero.

    Raises:
        InvalidPriceError: If the price is negative or not finite
    """
    price = to_decimal(current_price)
    if not price.is_finite() or price < ZERO:
        raise InvalidPriceError(current_price)
    return price


def sort_purchases(purchases: Iterable[PurchaseEvent]) -> list[PurchaseEvent]:
    """
    Return purchases sorted ascending by date.

    The sort is stable: purchases on the same day keep their input order,
    so same-day buys always replay in the same sequence.

    Args:
        purchases: Purchase events in any order

    Returns:
        New list, oldest purchase first (empty for empty input)
    """
    return sorted(purchases, key=lambda p: p.occurred_on)


def build_cumulative_series(
        purchases: Sequence[PurchaseEvent],
        current_price: Decimal,
        as_of: date,
) -> list[CumulativePoint]:
    """
    Build running totals for date-ordered purchases.

    Args:
        purchases: Purchases already ordered by sort_purchases()
        current_price: Price used to mark the trailing point (>= 0)
        as_of: Valuation date of the trailing point

    Returns:
        len(purchases) + 1 points, or an empty list when there are no purchases
    """
    price = validate_current_price(current_price)

    if not purchases:
        return []

    series: list[CumulativePoint] = []
    cumulative_quantity = ZERO
    cumulative_capital = ZERO

    for purchase in purchases:
        cumulative_quantity += purchase.quantity_received
        cumulative_capital += purchase.capital_spent
        series.append(
            CumulativePoint(
                as_of=purchase.occurred_on,
                cumulative_quantity=cumulative_quantity,
                cumulative_capital=cumulative_capital,
                mark_price=purchase.unit_price,
                portfolio_value=cumulative_quantity * purchase.unit_price,
            )
        )

    series.append(
        CumulativePoint(
            as_of=as_of,
            cumulative_quantity=cumulative_quantity,
            cumulative_capital=cumulative_capital,
            mark_price=price,
            portfolio_value=cumulative_quantity * price,
            is_current=True,
        )
    )

    logger.debug(f"Built cumulative series: {len(purchases)} purchases + current point")
    return series

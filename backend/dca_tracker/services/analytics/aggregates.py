# backend/dca_tracker/services/analytics/aggregates.py
"""
Snapshot aggregates for the purchase log.

This module contains pure functions over the (unordered) purchase collection:
- calculate_aggregate_stats: totals, cost basis and unrealized P&L
- analyze_purchases: unrealized P&L of each individual purchase

Formulas:
    total_invested       = Σ capital_spent
    total_quantity       = Σ quantity_received
    cost_basis           = total_invested / total_quantity
    portfolio_value      = total_quantity * current_price
    unrealized_pl        = portfolio_value - total_invested
    unrealized_pl_pct    = unrealized_pl / total_invested * 100

Every division is guarded: a zero denominator yields 0, never an error.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal

from dca_tracker.services.analytics.series import validate_current_price
from dca_tracker.services.analytics.types import (
    AggregateStats,
    PurchaseAnalysis,
    PurchaseEvent,
    PurchasePerformance,
)
from dca_tracker.services.constants import HUNDRED, ZERO


def percent_of(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Return numerator / denominator * 100, or 0 when the denominator is 0."""
    if denominator == ZERO:
        return ZERO
    return numerator / denominator * HUNDRED


def calculate_aggregate_stats(
        purchases: Iterable[PurchaseEvent],
        current_price: Decimal,
) -> AggregateStats:
    """
    Calculate snapshot totals for a purchase collection.

    Order does not matter. An empty collection returns all zeros.

    Args:
        purchases: Purchase events in any order
        current_price: Current asset price (>= 0)

    Returns:
        AggregateStats
    """
    price = validate_current_price(current_price)

    items = list(purchases)
    total_invested = sum((p.capital_spent for p in items), ZERO)
    total_quantity = sum((p.quantity_received for p in items), ZERO)

    cost_basis = total_invested / total_quantity if total_quantity != ZERO else ZERO
    portfolio_value = total_quantity * price
    unrealized_pl = portfolio_value - total_invested

    return AggregateStats(
        total_invested=total_invested,
        total_quantity=total_quantity,
        cost_basis=cost_basis,
        portfolio_value=portfolio_value,
        unrealized_pl=unrealized_pl,
        unrealized_pl_percent=percent_of(unrealized_pl, total_invested),
        purchase_count=len(items),
    )


def analyze_purchases(
        purchases: Sequence[PurchaseEvent],
        current_price: Decimal,
) -> PurchaseAnalysis:
    """
    Calculate the unrealized result of every purchase at the current price.

    Details keep input order (index is 1-based). Best and worst are ranked by
    P&L percent; on ties the earliest entry wins best and the latest wins worst.

    Args:
        purchases: Purchase events
        current_price: Current asset price (>= 0)

    Returns:
        PurchaseAnalysis (empty details and zero summary for no purchases)
    """
    price = validate_current_price(current_price)
    result = PurchaseAnalysis()

    for index, purchase in enumerate(purchases, start=1):
        current_value = purchase.quantity_received * price
        unrealized_pl = current_value - purchase.capital_spent
        price_change = price - purchase.unit_price

        result.details.append(
            PurchasePerformance(
                index=index,
                purchase=purchase,
                current_value=current_value,
                unrealized_pl=unrealized_pl,
                unrealized_pl_percent=percent_of(unrealized_pl, purchase.capital_spent),
                price_change=price_change,
                price_change_percent=percent_of(price_change, purchase.unit_price),
            )
        )

    if not result.details:
        return result

    result.total_invested = sum((d.purchase.capital_spent for d in result.details), ZERO)
    result.total_current_value = sum((d.current_value for d in result.details), ZERO)
    result.total_unrealized_pl = result.total_current_value - result.total_invested
    result.profitable_count = sum(1 for d in result.details if d.unrealized_pl > ZERO)
    result.losing_count = sum(1 for d in result.details if d.unrealized_pl < ZERO)

    for detail in result.details:
        if result.best is None or detail.unrealized_pl_percent > result.best.unrealized_pl_percent:
            result.best = detail
        if result.worst is None or detail.unrealized_pl_percent <= result.worst.unrealized_pl_percent:
            result.worst = detail

    return result

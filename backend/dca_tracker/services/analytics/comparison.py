# backend/dca_tracker/services/analytics/comparison.py
"""
Lump-sum comparison for the analytics engine.

Compares the actual recurring-purchase strategy against a counterfactual
that invests the same total capital in one purchase at the price of the
chronologically earliest purchase.

Formulas:
    lump_quantity  = Σ capital_spent / earliest_unit_price
    lump_value     = lump_quantity * current_price
    return_pct     = (value - Σ capital_spent) / Σ capital_spent * 100

    *_difference   = lump_sum - actual

The strategy with the higher current value wins; ties go to the actual
strategy. Fewer than 2 purchases is reported as insufficient data.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from dca_tracker.services.analytics.aggregates import percent_of
from dca_tracker.services.analytics.series import sort_purchases, validate_current_price
from dca_tracker.services.analytics.types import (
    LumpSumComparison,
    PurchaseEvent,
    Strategy,
    StrategySnapshot,
)
from dca_tracker.services.constants import ZERO

logger = logging.getLogger(__name__)

MIN_PURCHASES_FOR_COMPARISON = 2


def _snapshot(total_invested: Decimal, total_quantity: Decimal, price: Decimal) -> StrategySnapshot:
    current_value = total_quantity * price
    return StrategySnapshot(
        total_invested=total_invested,
        total_quantity=total_quantity,
        current_value=current_value,
        return_percent=percent_of(current_value - total_invested, total_invested),
    )


def compare_lump_sum(
        purchases: Sequence[PurchaseEvent],
        current_price: Decimal,
) -> LumpSumComparison:
    """
    Compare the actual strategy against a single up-front purchase.

    Args:
        purchases: Purchase events in any order
        current_price: Current asset price (>= 0)

    Returns:
        LumpSumComparison. has_sufficient_data is False (and every figure
        None) when there are fewer than 2 purchases.
    """
    price = validate_current_price(current_price)
    result = LumpSumComparison()

    if len(purchases) < MIN_PURCHASES_FOR_COMPARISON:
        result.warnings.append(
            f"Lump-sum comparison needs at least {MIN_PURCHASES_FOR_COMPARISON} purchases"
        )
        return result

    earliest = sort_purchases(purchases)[0]
    total_invested = sum((p.capital_spent for p in purchases), ZERO)
    total_quantity = sum((p.quantity_received for p in purchases), ZERO)

    actual = _snapshot(total_invested, total_quantity, price)
    lump_sum = _snapshot(total_invested, total_invested / earliest.unit_price, price)

    result.has_sufficient_data = True
    result.actual = actual
    result.lump_sum = lump_sum
    result.earliest_date = earliest.occurred_on
    result.earliest_price = earliest.unit_price
    result.quantity_difference = lump_sum.total_quantity - actual.total_quantity
    result.value_difference = lump_sum.current_value - actual.current_value
    result.return_difference = lump_sum.return_percent - actual.return_percent
    result.better_strategy = (
        Strategy.LUMP_SUM if lump_sum.current_value > actual.current_value else Strategy.ACTUAL
    )

    logger.debug(
        f"Lump-sum comparison: actual={actual.current_value}, "
        f"lump_sum={lump_sum.current_value}, better={result.better_strategy.value}"
    )

    return result

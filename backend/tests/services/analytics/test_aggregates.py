# backend/tests/services/analytics/test_aggregates.py
"""
Unit tests for snapshot aggregates and per-purchase analysis.

Test Coverage:
- PurchaseEvent validation
- calculate_aggregate_stats: totals, cost basis, P&L, empty input
- analyze_purchases: per-purchase P&L, counts, best/worst with tie-breaks
"""

from datetime import date
from decimal import Decimal

import pytest

from dca_tracker.services.analytics.aggregates import (
    analyze_purchases,
    calculate_aggregate_stats,
    percent_of,
)
from dca_tracker.services.analytics.types import PurchaseEvent
from dca_tracker.services.exceptions import InvalidPriceError, InvalidPurchaseError


# =============================================================================
# PURCHASE EVENT
# =============================================================================

class TestPurchaseEvent:
    """Tests for PurchaseEvent construction."""

    @pytest.mark.parametrize("field", ["capital_spent", "unit_price", "quantity_received"])
    @pytest.mark.parametrize("bad_value", [Decimal("0"), Decimal("-1")])
    def test_non_positive_values_rejected(self, field, bad_value):
        """Every amount must be strictly positive."""
        kwargs = {
            "occurred_on": date(2024, 1, 1),
            "capital_spent": Decimal("100"),
            "unit_price": Decimal("10"),
            "quantity_received": Decimal("10"),
        }
        kwargs[field] = bad_value

        with pytest.raises(InvalidPurchaseError) as exc_info:
            PurchaseEvent(**kwargs)

        assert exc_info.value.field == field

    def test_numbers_coerced_to_decimal(self):
        """Ints, floats and strings become Decimal (floats via str)."""
        purchase = PurchaseEvent(date(2024, 1, 1), 100, 0.1, "1000")

        assert purchase.capital_spent == Decimal("100")
        assert purchase.unit_price == Decimal("0.1")
        assert purchase.quantity_received == Decimal("1000")

    def test_is_hashable(self):
        """Frozen events can be used as cache keys."""
        purchase = PurchaseEvent(date(2024, 1, 1), Decimal("100"), Decimal("10"), Decimal("10"))
        assert hash(purchase) == hash(PurchaseEvent(date(2024, 1, 1), 100, 10, 10))


# =============================================================================
# AGGREGATE STATS
# =============================================================================

class TestAggregateStats:
    """Tests for calculate_aggregate_stats."""

    def test_single_purchase_at_unchanged_price(self, make_purchase):
        """1000 at price 100 for 10 units, current price 100."""
        purchase = make_purchase(date(2024, 1, 1), "1000", "100", quantity="10")

        stats = calculate_aggregate_stats([purchase], Decimal("100"))

        assert stats.total_invested == Decimal("1000")
        assert stats.total_quantity == Decimal("10")
        assert stats.cost_basis == Decimal("100")
        assert stats.portfolio_value == Decimal("1000")
        assert stats.unrealized_pl == Decimal("0")
        assert stats.unrealized_pl_percent == Decimal("0")
        assert stats.purchase_count == 1

    def test_empty_input_is_all_zero(self):
        """No purchases -> zeros, never NaN or division errors."""
        stats = calculate_aggregate_stats([], Decimal("100"))

        assert stats.total_invested == Decimal("0")
        assert stats.total_quantity == Decimal("0")
        assert stats.cost_basis == Decimal("0")
        assert stats.unrealized_pl_percent == Decimal("0")
        assert stats.cost_basis.is_finite()
        assert stats.purchase_count == 0

    def test_total_quantity_is_exact_sum(self, make_purchase):
        """Quantities add without rounding drift."""
        purchases = [
            make_purchase(date(2024, 1, 1), "1000", "1500000", quantity="0.00066445"),
            make_purchase(date(2024, 2, 1), "1000", "2000000", quantity="0.0005"),
            make_purchase(date(2024, 3, 1), "250", "2025000", quantity="0.00012345"),
        ]

        stats = calculate_aggregate_stats(purchases, Decimal("2100000"))

        assert stats.total_quantity == Decimal("0.0012879")

    def test_unrealized_profit(self, dip_and_recovery):
        """30 units bought for 2000, worth 3000 at 100."""
        stats = calculate_aggregate_stats(dip_and_recovery, Decimal("100"))

        assert stats.portfolio_value == Decimal("3000")
        assert stats.unrealized_pl == Decimal("1000")
        assert stats.unrealized_pl_percent == Decimal("50")

    def test_order_does_not_matter(self, dip_and_recovery):
        """Aggregates are the same for any input order."""
        forward = calculate_aggregate_stats(dip_and_recovery, Decimal("80"))
        backward = calculate_aggregate_stats(list(reversed(dip_and_recovery)), Decimal("80"))

        assert forward == backward

    def test_zero_price_loses_everything(self, dip_and_recovery):
        """Unset price values the holdings at zero."""
        stats = calculate_aggregate_stats(dip_and_recovery, Decimal("0"))

        assert stats.portfolio_value == Decimal("0")
        assert stats.unrealized_pl_percent == Decimal("-100")

    def test_negative_price_raises(self, dip_and_recovery):
        """Negative current price is invalid input."""
        with pytest.raises(InvalidPriceError):
            calculate_aggregate_stats(dip_and_recovery, Decimal("-5"))

    def test_percent_of_guards_zero_denominator(self):
        """percent_of returns 0 instead of dividing by zero."""
        assert percent_of(Decimal("5"), Decimal("0")) == Decimal("0")
        assert percent_of(Decimal("5"), Decimal("20")) == Decimal("25")


# =============================================================================
# PURCHASE ANALYSIS
# =============================================================================

class TestAnalyzePurchases:
    """Tests for analyze_purchases."""

    def test_per_purchase_results(self, make_purchase):
        """
        Current price 150:
        #1: 10 units @ 100 -> 1500, +50%
        #2:  5 units @ 200 ->  750, -25%
        #3: ~6.67 units @ 150 -> 1000, 0%
        """
        purchases = [
            make_purchase(date(2024, 1, 1), "1000", "100"),
            make_purchase(date(2024, 2, 1), "1000", "200"),
            make_purchase(date(2024, 3, 1), "1500", "150", quantity="10"),
        ]

        analysis = analyze_purchases(purchases, Decimal("150"))

        first, second, third = analysis.details
        assert [d.index for d in analysis.details] == [1, 2, 3]
        assert first.current_value == Decimal("1500")
        assert first.unrealized_pl_percent == Decimal("50")
        assert first.price_change == Decimal("50")
        assert first.price_change_percent == Decimal("50")
        assert second.unrealized_pl == Decimal("-250")
        assert second.unrealized_pl_percent == Decimal("-25")
        assert second.price_change_percent == Decimal("-25")
        assert third.unrealized_pl == Decimal("0")

        assert analysis.profitable_count == 1
        assert analysis.losing_count == 1
        assert analysis.best is first
        assert analysis.worst is second
        assert analysis.total_invested == Decimal("3500")
        assert analysis.total_current_value == Decimal("3750")
        assert analysis.total_unrealized_pl == Decimal("250")

    def test_ties_first_wins_best_last_wins_worst(self, make_purchase):
        """Identical results: best is the first entry, worst the last."""
        purchases = [
            make_purchase(date(2024, 1, 1), "1000", "100"),
            make_purchase(date(2024, 1, 1), "1000", "100"),
        ]

        analysis = analyze_purchases(purchases, Decimal("120"))

        assert analysis.best.index == 1
        assert analysis.worst.index == 2

    def test_keeps_input_order(self, make_purchase):
        """Details follow input order, not date order."""
        later = make_purchase(date(2024, 5, 1), "100", "10")
        earlier = make_purchase(date(2024, 1, 1), "100", "20")

        analysis = analyze_purchases([later, earlier], Decimal("15"))

        assert analysis.details[0].purchase is later
        assert analysis.details[1].purchase is earlier

    def test_empty_input(self):
        """No purchases -> empty details and no best/worst."""
        analysis = analyze_purchases([], Decimal("100"))

        assert analysis.details == []
        assert analysis.best is None
        assert analysis.worst is None
        assert analysis.total_invested == Decimal("0")

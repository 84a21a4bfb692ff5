# backend/tests/services/analytics/test_returns.py
"""
Unit tests for return calculation functions.

Test Coverage:
- annualize_return: known values, degenerate inputs, overflow
- calculate_twr: every branch of the annualization policy
- calculate_irr: Newton-Raphson convergence, bisection fallback, no root
- calculate_weighted_holding_days
- calculate_mwr: annualized, short period, not converged, no data
- ReturnsCalculator.calculate_all: fallback warnings
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from dca_tracker.services.analytics.returns import (
    ReturnsCalculator,
    annualize_return,
    calculate_irr,
    calculate_mwr,
    calculate_twr,
    calculate_weighted_holding_days,
)
from dca_tracker.services.analytics.types import ReturnBasis, ReturnBranch
from dca_tracker.services.exceptions import InvalidPriceError

START = date(2023, 1, 1)


def _price_for_annual_rate(rate: float, days: int) -> Decimal:
    """Current price that makes a buy at 100 grow at `rate` per year."""
    return Decimal(str(100 * (1 + rate) ** (days / 365)))


# =============================================================================
# ANNUALIZATION
# =============================================================================

class TestAnnualizeReturn:
    """Tests for annualize_return."""

    def test_two_years(self):
        """21% over 730 days is 10% a year."""
        result = annualize_return(Decimal("0.21"), 730)

        assert abs(result - Decimal("0.1")) < Decimal("0.0001")

    def test_zero_days(self):
        """No period -> None."""
        assert annualize_return(Decimal("0.1"), 0) is None

    def test_total_loss(self):
        """-100% has no positive base -> None."""
        assert annualize_return(Decimal("-1"), 365) is None

    def test_overflow(self):
        """1001^365 overflows a float -> None, not an exception."""
        assert annualize_return(Decimal("1000"), 1) is None

    def test_rounded_to_eight_places(self):
        """Results are quantized to 8 decimal places."""
        result = annualize_return(Decimal("0.1"), 200)

        assert result == result.quantize(Decimal("0.00000001"))


# =============================================================================
# TIME-WEIGHTED RETURN
# =============================================================================

class TestTimeWeightedReturn:
    """Tests for calculate_twr."""

    def test_no_purchases(self):
        """Empty input -> NO_DATA with a zero value."""
        result = calculate_twr([], Decimal("100"), START)

        assert result.branch is ReturnBranch.NO_DATA
        assert result.value == Decimal("0")

    def test_short_period_reports_total_return(self, make_purchase):
        """Price doubling inside 90 days is a 100% total return, not annualized."""
        purchases = [
            make_purchase(date(2024, 1, 1), "1000", "100"),
            make_purchase(date(2024, 2, 1), "1000", "200"),
        ]

        result = calculate_twr(purchases, Decimal("200"), date(2024, 3, 1))

        assert result.value == Decimal("100")
        assert result.basis is ReturnBasis.TOTAL
        assert result.branch is ReturnBranch.SHORT_PERIOD
        assert result.holding_days == Decimal("60")

    def test_one_year_annualized(self, make_purchase):
        """+20% over exactly 365 days annualizes to 20%."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_twr(purchases, Decimal("120"), START + timedelta(days=365))

        assert result.branch is ReturnBranch.ANNUALIZED
        assert result.is_annualized
        assert result.value == Decimal("20")
        assert result.total_return == Decimal("20")

    def test_later_purchases_do_not_matter(self, make_purchase):
        """Only the first price and the current price drive TWR."""
        first = make_purchase(START, "1000", "100")
        as_of = START + timedelta(days=400)
        alone = calculate_twr([first], Decimal("130"), as_of)
        with_more = calculate_twr(
            [first, make_purchase(START + timedelta(days=100), "5000", "60")],
            Decimal("130"),
            as_of,
        )

        assert alone == with_more

    def test_large_loss_not_annualized(self, make_purchase):
        """-60% after 200 days is reported as total return."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_twr(purchases, Decimal("40"), START + timedelta(days=200))

        assert result.branch is ReturnBranch.LARGE_LOSS
        assert result.basis is ReturnBasis.TOTAL
        assert result.value == Decimal("-60")

    def test_out_of_range_falls_back_to_total(self, make_purchase):
        """Tripling in 100 days annualizes to ~5400%, beyond the cap."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_twr(purchases, Decimal("300"), START + timedelta(days=100))

        assert result.branch is ReturnBranch.OUT_OF_RANGE
        assert result.basis is ReturnBasis.TOTAL
        assert result.value == Decimal("200")
        assert result.annualized_return is not None
        assert result.annualized_return > Decimal("100")

    def test_zero_price(self, make_purchase):
        """Unset price -> -100%, never annualized."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_twr(purchases, Decimal("0"), START + timedelta(days=365))

        assert result.value == Decimal("-100")
        assert result.branch is ReturnBranch.LARGE_LOSS

    def test_negative_price_raises(self, make_purchase):
        """Negative price is invalid input."""
        with pytest.raises(InvalidPriceError):
            calculate_twr([make_purchase(START, "1000", "100")], Decimal("-1"), START)


# =============================================================================
# IRR SOLVER
# =============================================================================

class TestIRR:
    """Tests for calculate_irr."""

    @pytest.mark.parametrize("days", [36, 365, 1825])
    @pytest.mark.parametrize("rate", [0.15, -0.2])
    def test_recovers_known_rate(self, make_purchase, days, rate):
        """A single purchase compounding at `rate` solves back to `rate`."""
        purchase = make_purchase(START, "1000", "100", quantity="10")
        current_value = _price_for_annual_rate(rate, days) * Decimal("10")

        irr, solver = calculate_irr([purchase], current_value, START + timedelta(days=days))

        assert solver == "newton"
        assert abs(irr - Decimal(str(rate))) < Decimal("0.001")

    def test_multiple_cash_flows(self, make_purchase):
        """
        1000 held 2 years and 1000 held 1 year at 10%:
        1000 * 1.21 + 1000 * 1.1 = 2310
        """
        as_of = date(2024, 1, 1)
        purchases = [
            make_purchase(as_of - timedelta(days=730), "1000", "100"),
            make_purchase(as_of - timedelta(days=365), "1000", "100"),
        ]

        irr, _ = calculate_irr(purchases, Decimal("2310"), as_of)

        assert abs(irr - Decimal("0.1")) < Decimal("0.0001")

    def test_bisection_fallback(self, make_purchase):
        """When Newton-Raphson runs out of iterations, bisection finds the root."""
        purchase = make_purchase(START, "1000", "100")

        irr, solver = calculate_irr(
            [purchase], Decimal("1500"), START + timedelta(days=365), max_iterations=1
        )

        assert solver == "bisection"
        assert abs(irr - Decimal("0.5")) < Decimal("0.001")

    def test_no_root(self, make_purchase):
        """Holdings worth nothing have no IRR inside the clamp range."""
        purchase = make_purchase(START, "1000", "100")

        assert calculate_irr([purchase], Decimal("0"), START + timedelta(days=365)) == (None, None)

    def test_no_purchases(self):
        """Empty input -> no rate."""
        assert calculate_irr([], Decimal("100"), START) == (None, None)

    def test_valued_at_cost_on_purchase_day(self, make_purchase):
        """Every rate solves a same-day break-even log, so none is reported."""
        purchase = make_purchase(START, "1000", "100", quantity="10")

        assert calculate_irr([purchase], Decimal("1000"), START) == (None, None)


class TestWeightedHoldingDays:
    """Tests for calculate_weighted_holding_days."""

    def test_capital_weighted(self, make_purchase):
        """25% of capital held 100 days, 75% held 20 days -> 40 days."""
        as_of = date(2024, 6, 1)
        purchases = [
            make_purchase(as_of - timedelta(days=100), "1000", "100"),
            make_purchase(as_of - timedelta(days=20), "3000", "100"),
        ]

        assert calculate_weighted_holding_days(purchases, as_of) == Decimal("40")

    def test_no_purchases(self):
        """Empty input -> 0."""
        assert calculate_weighted_holding_days([], START) == Decimal("0")


# =============================================================================
# MONEY-WEIGHTED RETURN
# =============================================================================

class TestMoneyWeightedReturn:
    """Tests for calculate_mwr."""

    def test_no_purchases(self):
        """Empty input -> NO_DATA with a zero value."""
        result = calculate_mwr([], Decimal("100"), START)

        assert result.branch is ReturnBranch.NO_DATA
        assert result.value == Decimal("0")

    def test_one_year_annualized(self, make_purchase):
        """+20% held for a year -> IRR 20%."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_mwr(purchases, Decimal("120"), START + timedelta(days=365))

        assert result.branch is ReturnBranch.ANNUALIZED
        assert result.basis is ReturnBasis.ANNUALIZED
        assert abs(result.value - Decimal("20")) < Decimal("0.01")
        assert result.total_return == Decimal("20")
        assert result.solver == "newton"

    def test_short_period_reports_simple_return(self, make_purchase):
        """Weighted holding period under 30 days -> simple total return."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_mwr(purchases, Decimal("105"), START + timedelta(days=10))

        assert result.branch is ReturnBranch.SHORT_PERIOD
        assert result.basis is ReturnBasis.TOTAL
        assert result.value == Decimal("5")
        assert result.annualized_return is not None

    def test_same_day_valuation_not_converged(self, make_purchase):
        """Valued on the purchase day, NPV does not depend on the rate: no root."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_mwr(purchases, Decimal("110"), START)

        assert result.branch is ReturnBranch.NOT_CONVERGED
        assert result.value == Decimal("10")

    def test_same_day_break_even_has_no_rate(self, make_purchase):
        """Valued at cost on the purchase day -> no annualized figure or solver."""
        purchases = [make_purchase(START, "1000", "100", quantity="10")]

        result = calculate_mwr(purchases, Decimal("100"), START)

        assert result.branch is ReturnBranch.NOT_CONVERGED
        assert result.value == Decimal("0")
        assert result.annualized_return is None
        assert result.solver is None

    def test_zero_price_not_converged(self, make_purchase):
        """Worthless holdings -> fall back to -100% simple return."""
        purchases = [make_purchase(START, "1000", "100")]

        result = calculate_mwr(purchases, Decimal("0"), START + timedelta(days=365))

        assert result.branch is ReturnBranch.NOT_CONVERGED
        assert result.value == Decimal("-100")

    def test_uses_recorded_quantity(self, make_purchase):
        """Fees reduce quantity, and with it the money-weighted result."""
        with_fee = make_purchase(START, "1000", "100", quantity="9.9")
        as_of = START + timedelta(days=365)

        result = calculate_mwr([with_fee], Decimal("100"), as_of)

        assert result.total_return == Decimal("-1")
        assert abs(result.value - Decimal("-1")) < Decimal("0.01")


# =============================================================================
# RETURNS CALCULATOR
# =============================================================================

class TestReturnsCalculator:
    """Tests for ReturnsCalculator.calculate_all."""

    def test_clean_run_has_no_warnings(self, make_purchase):
        """Annualized TWR and MWR produce no warnings."""
        purchases = [make_purchase(START, "1000", "100")]

        result = ReturnsCalculator.calculate_all(purchases, Decimal("120"), START + timedelta(days=365))

        assert result.twr.branch is ReturnBranch.ANNUALIZED
        assert result.mwr.branch is ReturnBranch.ANNUALIZED
        assert result.warnings == []

    def test_fallbacks_are_reported(self, make_purchase):
        """Large loss (TWR) and no IRR root (MWR) each add a warning."""
        purchases = [make_purchase(START, "1000", "100")]

        result = ReturnsCalculator.calculate_all(purchases, Decimal("0"), START + timedelta(days=365))

        assert len(result.warnings) == 2
        assert result.warnings[0].startswith("TWR")
        assert result.warnings[1].startswith("MWR")

    def test_short_period_is_not_a_warning(self, make_purchase):
        """Short holding periods are labelled, not warned about."""
        purchases = [make_purchase(START, "1000", "100")]

        result = ReturnsCalculator.calculate_all(purchases, Decimal("110"), START + timedelta(days=20))

        assert result.twr.branch is ReturnBranch.SHORT_PERIOD
        assert result.mwr.branch is ReturnBranch.SHORT_PERIOD
        assert result.warnings == []

# backend/dca_tracker/services/analytics/returns.py
"""
Return calculation functions for the analytics engine.

This module contains pure functions for the two headline return figures:
- Time-Weighted Return (TWR): driven by the asset's price path only
- Money-Weighted Return (MWR): IRR of the purchase cash flows

Each result records whether it is annualized or a total return, and which
branch of the annualization policy was taken (see ReturnBranch).

Formulas:
    TWR total      = (P_now - P_first) / P_first
    Annualized     = (1 + r)^(365 / days) - 1

    IRR solves:    V_now - Σ C_i * (1 + r)^(t_i) = 0
        t_i = years between purchase i and the valuation date
        (future-value form of Σ CF_i / (1 + r)^((d_i - d_0) / 365) = 0)

    Weighted holding days = Σ (C_i / Σ C) * days_i

Annualization policy:
    TWR: annualize only when days >= 90 and r > -50%. An annualized figure
         that is non-finite or beyond ±100% falls back to the total return.
    MWR: report the IRR only when the weighted holding period >= 30 days and
         the IRR is finite and within ±1000%. Otherwise, or when the solver
         finds no root, fall back to the simple total return.

Precision Note (Decimal vs Float):
    Exponentiation with non-integer exponents and the IRR solver run in
    float. Results are converted back to Decimal with 8 decimal places
    (as fractions) before being scaled to percent. Overflow and non-finite
    intermediates are treated as "not computable" and trigger the fallback.
"""

import logging
import math
from collections.abc import Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from dca_tracker.services.analytics.series import validate_current_price
from dca_tracker.services.analytics.types import (
    PerformanceMetrics,
    PurchaseEvent,
    ReturnBasis,
    ReturnBranch,
    ReturnResult,
)
from dca_tracker.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    HUNDRED,
    IRR_BISECTION_MAX_ITERATIONS,
    IRR_DERIVATIVE_STEP,
    IRR_INITIAL_GUESS,
    IRR_MAX_ITERATIONS,
    IRR_MAX_RATE,
    IRR_MIN_RATE,
    IRR_TOLERANCE,
    MWR_ANNUALIZATION_MIN_DAYS,
    MWR_MAX_ANNUALIZED_RETURN,
    TWR_ANNUALIZATION_MIN_DAYS,
    TWR_MAX_ANNUALIZED_RETURN,
    TWR_MIN_ANNUALIZABLE_RETURN,
    ZERO,
)

logger = logging.getLogger(__name__)

_RATE_PRECISION = Decimal("0.00000001")

# (years before valuation date, capital spent)
_Flow = tuple[float, float]


def _float_to_decimal(value: float) -> Decimal:
    """Convert a finite float rate to Decimal with 8 decimal places."""
    return Decimal(str(value)).quantize(_RATE_PRECISION, rounding=ROUND_HALF_UP)


# =============================================================================
# ANNUALIZATION
# =============================================================================

def annualize_return(total_return: Decimal, days: int) -> Decimal | None:
    """
    Annualize a holding period return.

    Formula: (1 + r)^(365/days) - 1

    Args:
        total_return: Return as decimal (e.g., 0.15 = 15%)
        days: Number of calendar days in the period

    Returns:
        Annualized return as decimal, or None if days <= 0, the base is not
        positive, or the result overflows / is not finite
    """
    if days <= 0:
        return None

    base = 1.0 + float(total_return)
    if base <= 0:
        return None

    try:
        annualized = base ** (CALENDAR_DAYS_PER_YEAR / days) - 1.0
    except OverflowError:
        return None

    if not math.isfinite(annualized):
        return None

    return _float_to_decimal(annualized)


# =============================================================================
# TIME-WEIGHTED RETURN (TWR)
# =============================================================================

def calculate_twr(
        purchases: Sequence[PurchaseEvent],
        current_price: Decimal,
        as_of: date,
) -> ReturnResult:
    """
    Calculate the time-weighted return from the asset's price path.

    Only the first purchase price and the current price matter: the
    size and timing of later purchases do not affect TWR.

    Args:
        purchases: Purchases ordered by date (oldest first)
        current_price: Current asset price (>= 0)
        as_of: Valuation date

    Returns:
        ReturnResult in percent. NO_DATA (zero) for no purchases.
    """
    price = validate_current_price(current_price)

    if not purchases:
        return ReturnResult()

    first = purchases[0]
    total_return = (price - first.unit_price) / first.unit_price
    days = (as_of - first.occurred_on).days

    result = ReturnResult(
        value=total_return * HUNDRED,
        basis=ReturnBasis.TOTAL,
        total_return=total_return * HUNDRED,
        holding_days=Decimal(days),
    )

    if days < TWR_ANNUALIZATION_MIN_DAYS:
        result.branch = ReturnBranch.SHORT_PERIOD
        return result

    if total_return <= TWR_MIN_ANNUALIZABLE_RETURN:
        result.branch = ReturnBranch.LARGE_LOSS
        return result

    annualized = annualize_return(total_return, days)
    if annualized is not None:
        result.annualized_return = annualized * HUNDRED

    if annualized is None or abs(annualized) > TWR_MAX_ANNUALIZED_RETURN:
        logger.debug(f"TWR annualization rejected ({annualized}), reporting total return")
        result.branch = ReturnBranch.OUT_OF_RANGE
        return result

    result.value = annualized * HUNDRED
    result.basis = ReturnBasis.ANNUALIZED
    result.branch = ReturnBranch.ANNUALIZED
    return result


# =============================================================================
# INTERNAL RATE OF RETURN (IRR)
# =============================================================================

def _net_future_value(rate: float, flows: list[_Flow], terminal_value: float) -> float:
    """
    NPV of the purchase cash flows, expressed at the valuation date.

    Returns NaN when the compounding overflows.
    """
    try:
        compounded = sum(amount * (1.0 + rate) ** years for years, amount in flows)
    except OverflowError:
        return math.nan
    return terminal_value - compounded


def _bisect_irr(
        flows: list[_Flow],
        terminal_value: float,
        tolerance: float,
) -> float | None:
    """
    Bisection over the clamp range, used when Newton-Raphson fails.

    Returns:
        Root, or None if the range does not bracket a sign change
    """
    lo, hi = IRR_MIN_RATE, IRR_MAX_RATE
    f_lo = _net_future_value(lo, flows, terminal_value)
    f_hi = _net_future_value(hi, flows, terminal_value)

    if not (math.isfinite(f_lo) and math.isfinite(f_hi)) or f_lo * f_hi > 0:
        return None

    for _ in range(IRR_BISECTION_MAX_ITERATIONS):
        mid = (lo + hi) / 2
        f_mid = _net_future_value(mid, flows, terminal_value)

        if not math.isfinite(f_mid):
            return None
        if abs(f_mid) < tolerance:
            return mid

        if f_lo * f_mid <= 0:
            hi = mid
        else:
            lo, f_lo = mid, f_mid

    return (lo + hi) / 2


def calculate_irr(
        purchases: Sequence[PurchaseEvent],
        current_value: Decimal,
        as_of: date,
        max_iterations: int = IRR_MAX_ITERATIONS,
        tolerance: float = IRR_TOLERANCE,
) -> tuple[Decimal | None, str | None]:
    """
    Solve the annual internal rate of return of the purchases.

    Newton-Raphson from IRR_INITIAL_GUESS with a forward-difference
    derivative (step IRR_DERIVATIVE_STEP). The rate is clamped to
    [IRR_MIN_RATE, IRR_MAX_RATE] after every step. When Newton-Raphson does
    not reach |NPV| < tolerance within max_iterations, bisection over the
    clamp range is tried.

    Args:
        purchases: Purchase events (order irrelevant)
        current_value: Value of the holdings at as_of
        as_of: Valuation date

    Returns:
        Tuple of (rate as decimal with 8 places, solver name), or
        (None, None) when no root was found. All purchases on as_of leave
        the NPV independent of the rate, so no rate is defined.
    """
    if not purchases:
        return None, None

    flows: list[_Flow] = [
        ((as_of - p.occurred_on).days / CALENDAR_DAYS_PER_YEAR, float(p.capital_spent))
        for p in purchases
    ]
    if all(years == 0 for years, _ in flows):
        logger.debug("IRR: all purchases on the valuation date, rate undefined")
        return None, None

    terminal_value = float(current_value)

    rate = IRR_INITIAL_GUESS
    for _ in range(max_iterations):
        npv = _net_future_value(rate, flows, terminal_value)
        if not math.isfinite(npv):
            break

        if abs(npv) < tolerance:
            return _float_to_decimal(rate), "newton"

        derivative = (_net_future_value(rate + IRR_DERIVATIVE_STEP, flows, terminal_value) - npv) / IRR_DERIVATIVE_STEP
        if not math.isfinite(derivative) or derivative == 0:
            break

        rate = rate - npv / derivative
        rate = min(max(rate, IRR_MIN_RATE), IRR_MAX_RATE)

    root = _bisect_irr(flows, terminal_value, tolerance)
    if root is not None:
        logger.debug("IRR: Newton-Raphson did not converge, bisection found a root")
        return _float_to_decimal(root), "bisection"

    logger.warning(f"IRR did not converge after {max_iterations} iterations")
    return None, None


def calculate_weighted_holding_days(
        purchases: Sequence[PurchaseEvent],
        as_of: date,
) -> Decimal:
    """
    Capital-weighted average number of days the purchases have been held.

    Returns:
        Σ (C_i / Σ C) * days_i, or 0 for no purchases
    """
    total_invested = sum((p.capital_spent for p in purchases), ZERO)
    if total_invested == ZERO:
        return ZERO

    return sum(
        (p.capital_spent / total_invested * (as_of - p.occurred_on).days for p in purchases),
        ZERO,
    )


# =============================================================================
# MONEY-WEIGHTED RETURN (MWR)
# =============================================================================

def calculate_mwr(
        purchases: Sequence[PurchaseEvent],
        current_price: Decimal,
        as_of: date,
) -> ReturnResult:
    """
    Calculate the money-weighted return (IRR) of the purchase log.

    Args:
        purchases: Purchase events
        current_price: Current asset price (>= 0)
        as_of: Valuation date

    Returns:
        ReturnResult in percent. NO_DATA (zero) for no purchases.
    """
    price = validate_current_price(current_price)

    total_invested = sum((p.capital_spent for p in purchases), ZERO)
    if total_invested == ZERO:
        return ReturnResult()

    current_value = sum((p.quantity_received for p in purchases), ZERO) * price
    simple_return = (current_value - total_invested) / total_invested

    result = ReturnResult(
        value=simple_return * HUNDRED,
        basis=ReturnBasis.TOTAL,
        total_return=simple_return * HUNDRED,
        holding_days=calculate_weighted_holding_days(purchases, as_of),
    )

    irr, solver = calculate_irr(purchases, current_value, as_of)
    if irr is None:
        result.branch = ReturnBranch.NOT_CONVERGED
        return result

    result.solver = solver
    result.annualized_return = irr * HUNDRED

    if result.holding_days < MWR_ANNUALIZATION_MIN_DAYS:
        result.branch = ReturnBranch.SHORT_PERIOD
        return result

    if abs(irr) > MWR_MAX_ANNUALIZED_RETURN:
        result.branch = ReturnBranch.OUT_OF_RANGE
        return result

    result.value = irr * HUNDRED
    result.basis = ReturnBasis.ANNUALIZED
    result.branch = ReturnBranch.ANNUALIZED
    return result


# =============================================================================
# COMBINED PERFORMANCE CALCULATOR
# =============================================================================

_FALLBACK_WARNINGS = {
    ReturnBranch.LARGE_LOSS: "{name}: loss too large to annualize, reporting total return",
    ReturnBranch.OUT_OF_RANGE: "{name}: annualized figure out of range, reporting total return",
    ReturnBranch.NOT_CONVERGED: "{name}: IRR did not converge, reporting total return",
}


class ReturnsCalculator:
    """
    Calculator for all return-based performance metrics.

    This class provides a convenient interface to calculate all
    return metrics at once.
    """

    @staticmethod
    def calculate_all(
            purchases: Sequence[PurchaseEvent],
            current_price: Decimal,
            as_of: date,
    ) -> PerformanceMetrics:
        """
        Calculate TWR and MWR.

        Args:
            purchases: Purchases ordered by date (oldest first)
            current_price: Current asset price (>= 0)
            as_of: Valuation date

        Returns:
            PerformanceMetrics, with a warning for every numerical fallback
        """
        result = PerformanceMetrics(
            twr=calculate_twr(purchases, current_price, as_of),
            mwr=calculate_mwr(purchases, current_price, as_of),
        )

        for name, metric in (("TWR", result.twr), ("MWR", result.mwr)):
            template = _FALLBACK_WARNINGS.get(metric.branch)
            if template:
                result.warnings.append(template.format(name=name))

        return result

# backend/dca_tracker/services/analytics/risk.py
"""
Risk calculation functions for the analytics engine.

This module contains pure functions over the cumulative series:
- Return percentage series: unrealized return of the holdings at each point
- Max Drawdown: Largest peak-to-trough fall of that return series
- Period returns: Per-interval returns with new capital removed
- Sharpe-like ratio: mean / std-dev of the period returns

All functions are stateless and operate on Decimal values.

Formulas:
    return_pct_i   = (V_i - C_i) / C_i * 100
    drawdown_i     = max(return_pct_0..i) - return_pct_i
    max_drawdown   = max(drawdown_i)

    r_i = (V_i - (V_{i-1} + CF_i)) / (V_{i-1} + CF_i)
        where CF_i = C_i - C_{i-1} (capital added between the two points)

    sharpe = mean(r) / σ(r)          (population σ)

Drawdown basis:
    Measured on return percentage, not raw value. Invested capital grows
    with every purchase, so raw portfolio value rises even when the price
    falls; the return series does not.

Limitations of the Sharpe-like ratio:
    Observations are per purchase interval, which are irregular. No
    risk-free rate is subtracted and no annualization factor is applied,
    so the figure is not comparable to a daily or annual Sharpe ratio.
"""

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from dca_tracker.services.analytics.types import CumulativePoint, RiskMetrics
from dca_tracker.services.constants import HUNDRED, ZERO

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def _decimal_mean(values: list[Decimal]) -> Decimal | None:
    """
    Calculate mean of Decimal values using pure Decimal arithmetic.

    Returns:
        Mean as Decimal, or None if empty list
    """
    if not values:
        return None

    total = sum(values, Decimal("0"))
    return total / Decimal(len(values))


def _decimal_population_stdev(values: list[Decimal]) -> Decimal | None:
    """
    Calculate population standard deviation using pure Decimal arithmetic.

    Formula: σ = sqrt(Σ(x - μ)² / n)

    Returns:
        Standard deviation as Decimal, or None if empty list
    """
    mean_val = _decimal_mean(values)
    if mean_val is None:
        return None

    sum_squared_diffs = sum(((x - mean_val) ** 2 for x in values), Decimal("0"))
    variance = sum_squared_diffs / Decimal(len(values))

    return variance.sqrt()


# =============================================================================
# MAX DRAWDOWN
# =============================================================================

def calculate_return_percentages(
        series: Sequence[CumulativePoint],
) -> list[tuple[date, Decimal]]:
    """
    Convert each cumulative point to its unrealized return percentage.

    Points with no invested capital are skipped (cannot occur for validated
    purchases, guarded anyway).

    Returns:
        List of (date, return percent) in series order
    """
    return [
        (
            point.as_of,
            (point.portfolio_value - point.cumulative_capital) / point.cumulative_capital * HUNDRED,
        )
        for point in series
        if point.cumulative_capital > ZERO
    ]


def calculate_max_drawdown(
        series: Sequence[CumulativePoint],
) -> tuple[Decimal, date | None, date | None]:
    """
    Calculate maximum drawdown of the return-percentage series.

    Args:
        series: Cumulative series in date order

    Returns:
        Tuple of:
        - max_drawdown: Largest fall in percentage points (>= 0)
        - peak_date: Date of the peak before the worst fall (None if no fall)
        - trough_date: Date of the worst point (None if no fall)
    """
    points = calculate_return_percentages(series)

    if len(points) <= 1:
        return ZERO, None, None

    peak_date, peak = points[0]
    max_drawdown = ZERO
    worst_peak_date: date | None = None
    worst_trough_date: date | None = None

    for point_date, return_pct in points:
        if return_pct > peak:
            peak = return_pct
            peak_date = point_date

        drawdown = peak - return_pct
        if drawdown > max_drawdown:
            max_drawdown = drawdown
            worst_peak_date = peak_date
            worst_trough_date = point_date

    return max_drawdown, worst_peak_date, worst_trough_date


# =============================================================================
# SHARPE-LIKE RATIO
# =============================================================================

def calculate_period_returns(series: Sequence[CumulativePoint]) -> list[Decimal]:
    """
    Calculate cash-flow adjusted returns between consecutive points.

    The capital added between two points is added to the earlier value to
    form the base, so a new purchase is not counted as performance. Pairs
    whose base is not positive are skipped.

    Returns:
        List of returns as decimals (at most len(series) - 1 items)
    """
    returns: list[Decimal] = []

    for prev, curr in zip(series, series[1:]):
        cash_flow = curr.cumulative_capital - prev.cumulative_capital
        base = prev.portfolio_value + cash_flow

        if base <= ZERO:
            continue

        returns.append((curr.portfolio_value - base) / base)

    return returns


def calculate_sharpe_ratio(period_returns: list[Decimal]) -> Decimal:
    """
    Calculate the Sharpe-like ratio of per-interval returns.

    Formula: mean(r) / σ(r), population σ, risk-free rate assumed zero.

    Returns:
        Ratio as Decimal, or 0 when there are no returns or σ is zero
    """
    mean_return = _decimal_mean(period_returns)
    std_dev = _decimal_population_stdev(period_returns)

    if mean_return is None or std_dev is None or std_dev == ZERO:
        return ZERO

    return mean_return / std_dev


# =============================================================================
# COMBINED RISK CALCULATOR
# =============================================================================

class RiskCalculator:
    """
    Calculator for all risk-related metrics.

    This class provides a convenient interface to calculate all
    risk metrics at once.
    """

    @staticmethod
    def calculate_all(series: Sequence[CumulativePoint]) -> RiskMetrics:
        """
        Calculate all risk metrics from a cumulative series.

        Args:
            series: Output of build_cumulative_series()

        Returns:
            RiskMetrics (all zero for an empty series)
        """
        result = RiskMetrics()

        if not series:
            result.warnings.append("No purchases: risk metrics default to zero")
            return result

        drawdown, peak_date, trough_date = calculate_max_drawdown(series)
        result.max_drawdown = drawdown
        result.max_drawdown_peak_date = peak_date
        result.max_drawdown_trough_date = trough_date

        period_returns = calculate_period_returns(series)
        result.return_observations = len(period_returns)
        result.sharpe_ratio = calculate_sharpe_ratio(period_returns)

        if len(period_returns) < 2:
            result.warnings.append(
                "Fewer than 2 return observations: Sharpe-like ratio is not meaningful"
            )

        logger.debug(
            f"Risk metrics: max_drawdown={drawdown}, sharpe={result.sharpe_ratio}, "
            f"observations={len(period_returns)}"
        )

        return result

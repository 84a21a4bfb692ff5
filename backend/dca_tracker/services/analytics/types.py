# backend/dca_tracker/services/analytics/types.py
"""
Data types for the analytics engine.

This module defines the data structures flowing through the engine. All
money, price and quantity values use Decimal for financial precision.

Architecture:
    Input types (validated on construction, immutable):
        - PurchaseEvent: One recurring buy of the asset
        - Goal: Target quantity with optional deadline
        - PriceAlert: Price threshold to watch

    Derived types (one per engine component):
        - CumulativePoint: Running totals after each purchase (+ "now" point)
        - AggregateStats: Single-snapshot totals and unrealized P&L
        - RiskMetrics: Max drawdown and Sharpe-like ratio
        - ReturnResult / PerformanceMetrics: TWR and MWR with labels
        - LumpSumComparison: Counterfactual single up-front buy
        - GoalProgress: Progress towards a Goal
        - PurchaseAnalysis: Per-purchase unrealized P&L
        - DCAProjection: Forward projection of a DCA plan
        - AlertCheckResult: Alerts fired by the current price
        - AnalyticsReport: Combined result returned by AnalyticsService

Percentages are expressed in percent units (Decimal("12.5") = 12.5%).
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from dca_tracker.services.exceptions import (
    InvalidAlertError,
    InvalidGoalError,
    InvalidPurchaseError,
)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """
    Convert a numeric value to Decimal without binary float artifacts.

    Floats go through str() so that 0.1 becomes Decimal("0.1"), not
    Decimal("0.1000000000000000055511151231257827...").
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


# =============================================================================
# ENUMS
# =============================================================================

class ReturnBasis(str, Enum):
    """Whether a reported return is annualized or a total (holding period) return."""
    ANNUALIZED = "annualized"
    TOTAL = "total"


class ReturnBranch(str, Enum):
    """
    Which branch of the annualization policy produced a ReturnResult.

    Attributes:
        ANNUALIZED: Annualized figure accepted
        NO_DATA: No purchases (or no invested capital), neutral zero result
        SHORT_PERIOD: Holding period below the annualization threshold
        LARGE_LOSS: Raw return too negative to annualize meaningfully
        OUT_OF_RANGE: Annualized figure non-finite or beyond the cap
        NOT_CONVERGED: IRR solver found no root
    """
    ANNUALIZED = "annualized"
    NO_DATA = "no_data"
    SHORT_PERIOD = "short_period"
    LARGE_LOSS = "large_loss"
    OUT_OF_RANGE = "out_of_range"
    NOT_CONVERGED = "not_converged"


class Strategy(str, Enum):
    """Strategies compared by the lump-sum comparator."""
    ACTUAL = "actual"
    LUMP_SUM = "lump-sum"


class AlertDirection(str, Enum):
    """Price alert trigger direction."""
    ABOVE = "above"
    BELOW = "below"


# =============================================================================
# INPUT TYPES
# =============================================================================

@dataclass(frozen=True)
class PurchaseEvent:
    """
    A single recurring purchase of the asset.

    Attributes:
        occurred_on: Calendar date of the purchase
        capital_spent: Amount paid in the pricing currency (> 0)
        unit_price: Asset price per unit at purchase time (> 0)
        quantity_received: Units actually credited (> 0). Authoritative:
            may differ from capital_spent / unit_price because of fees and
            is never recomputed.
    """
    occurred_on: date
    capital_spent: Decimal
    unit_price: Decimal
    quantity_received: Decimal

    def __post_init__(self) -> None:
        for name in ("capital_spent", "unit_price", "quantity_received"):
            value = to_decimal(getattr(self, name))
            if not value.is_finite() or value <= 0:
                raise InvalidPurchaseError(name, getattr(self, name))
            object.__setattr__(self, name, value)


@dataclass(frozen=True)
class Goal:
    """
    An accumulation goal.

    Attributes:
        target_quantity: Units to accumulate (>= 0)
        deadline: Optional calendar date by which the goal should be met
        name: Display name
    """
    target_quantity: Decimal
    deadline: date | None = None
    name: str = ""

    def __post_init__(self) -> None:
        value = to_decimal(self.target_quantity)
        if not value.is_finite() or value < 0:
            raise InvalidGoalError(self.target_quantity)
        object.__setattr__(self, "target_quantity", value)


@dataclass(frozen=True)
class PriceAlert:
    """
    A price threshold to watch.

    Attributes:
        alert_id: Caller-assigned identifier
        target_price: Threshold price (> 0)
        direction: Fire when price rises to/above or falls to/below target
        triggered: Already fired; skipped by evaluation
    """
    alert_id: str
    target_price: Decimal
    direction: AlertDirection = AlertDirection.ABOVE
    triggered: bool = False

    def __post_init__(self) -> None:
        value = to_decimal(self.target_price)
        if not value.is_finite() or value <= 0:
            raise InvalidAlertError(self.alert_id, self.target_price)
        object.__setattr__(self, "target_price", value)
        object.__setattr__(self, "direction", AlertDirection(self.direction))


# =============================================================================
# CUMULATIVE SERIES
# =============================================================================

@dataclass(frozen=True)
class CumulativePoint:
    """
    Running totals after one purchase, or the synthetic trailing "now" point.

    Attributes:
        as_of: Purchase date, or the valuation date for the trailing point
        cumulative_quantity: Running sum of quantity_received
        cumulative_capital: Running sum of capital_spent
        mark_price: Purchase unit_price, or the current price for the trailing point
        portfolio_value: cumulative_quantity * mark_price
        is_current: True only for the synthetic trailing point
    """
    as_of: date
    cumulative_quantity: Decimal
    cumulative_capital: Decimal
    mark_price: Decimal
    portfolio_value: Decimal
    is_current: bool = False


# =============================================================================
# AGGREGATES
# =============================================================================

@dataclass
class AggregateStats:
    """
    Snapshot totals across all purchases.

    Attributes:
        total_invested: Sum of capital_spent
        total_quantity: Sum of quantity_received
        cost_basis: Average price per unit (0 when nothing held)
        portfolio_value: total_quantity * current price
        unrealized_pl: portfolio_value - total_invested
        unrealized_pl_percent: unrealized_pl / total_invested * 100 (0 when nothing invested)
        purchase_count: Number of purchases
    """
    total_invested: Decimal = field(default_factory=lambda: Decimal("0"))
    total_quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    cost_basis: Decimal = field(default_factory=lambda: Decimal("0"))
    portfolio_value: Decimal = field(default_factory=lambda: Decimal("0"))
    unrealized_pl: Decimal = field(default_factory=lambda: Decimal("0"))
    unrealized_pl_percent: Decimal = field(default_factory=lambda: Decimal("0"))
    purchase_count: int = 0


# =============================================================================
# RISK METRICS
# =============================================================================

@dataclass
class RiskMetrics:
    """
    Risk metrics derived from the cumulative series.

    Attributes:
        max_drawdown: Largest peak-to-trough fall of the return-percentage
            series, in percentage points (>= 0)
        max_drawdown_peak_date: Date of the peak preceding the worst drawdown
        max_drawdown_trough_date: Date of the trough of the worst drawdown
        sharpe_ratio: Mean / population std-dev of cash-flow adjusted
            per-interval returns. No risk-free rate, not annualized.
        return_observations: Number of interval returns used for the ratio
    """
    max_drawdown: Decimal = field(default_factory=lambda: Decimal("0"))
    max_drawdown_peak_date: date | None = None
    max_drawdown_trough_date: date | None = None
    sharpe_ratio: Decimal = field(default_factory=lambda: Decimal("0"))
    return_observations: int = 0

    warnings: list[str] = field(default_factory=list)


# =============================================================================
# RETURNS
# =============================================================================

@dataclass
class ReturnResult:
    """
    A return figure plus the annualization branch that produced it.

    Attributes:
        value: Reported return in percent (annualized or total, see basis)
        basis: ANNUALIZED or TOTAL, for display labels
        branch: Exact policy branch taken
        total_return: Un-annualized holding period return in percent
        annualized_return: Candidate annualized figure in percent, None when
            not computed or non-finite
        holding_days: Days used for annualization (capital-weighted for MWR)
        solver: IRR solver that converged ("newton" or "bisection"), MWR only
    """
    value: Decimal = field(default_factory=lambda: Decimal("0"))
    basis: ReturnBasis = ReturnBasis.TOTAL
    branch: ReturnBranch = ReturnBranch.NO_DATA
    total_return: Decimal = field(default_factory=lambda: Decimal("0"))
    annualized_return: Decimal | None = None
    holding_days: Decimal = field(default_factory=lambda: Decimal("0"))
    solver: str | None = None

    @property
    def is_annualized(self) -> bool:
        return self.basis is ReturnBasis.ANNUALIZED


@dataclass
class PerformanceMetrics:
    """
    Return-based performance metrics.

    Attributes:
        twr: Time-weighted return (price path of the asset)
        mwr: Money-weighted return (IRR of the purchase cash flows)
    """
    twr: ReturnResult = field(default_factory=ReturnResult)
    mwr: ReturnResult = field(default_factory=ReturnResult)

    warnings: list[str] = field(default_factory=list)


# =============================================================================
# LUMP-SUM COMPARISON
# =============================================================================

@dataclass
class StrategySnapshot:
    """Totals and current valuation of one strategy."""
    total_invested: Decimal
    total_quantity: Decimal
    current_value: Decimal
    return_percent: Decimal


@dataclass
class LumpSumComparison:
    """
    Actual DCA strategy vs. investing everything at the earliest purchase price.

    Differences are lump-sum minus actual. better_strategy favors ACTUAL on ties.
    """
    has_sufficient_data: bool = False
    actual: StrategySnapshot | None = None
    lump_sum: StrategySnapshot | None = None
    quantity_difference: Decimal | None = None
    value_difference: Decimal | None = None
    return_difference: Decimal | None = None
    better_strategy: Strategy | None = None
    earliest_date: date | None = None
    earliest_price: Decimal | None = None

    warnings: list[str] = field(default_factory=list)


# =============================================================================
# GOALS
# =============================================================================

@dataclass
class GoalProgress:
    """
    Progress towards a Goal.

    Attributes:
        progress_percent: min(100, current / target * 100), 0 for a zero target
        remaining_quantity: max(0, target - current)
        days_remaining: Days until deadline (negative = overdue), None without deadline
    """
    goal: Goal
    current_quantity: Decimal
    progress_percent: Decimal
    remaining_quantity: Decimal
    days_remaining: int | None
    is_complete: bool
    is_overdue: bool


# =============================================================================
# PURCHASE ANALYSIS
# =============================================================================

@dataclass
class PurchasePerformance:
    """Unrealized result of a single purchase at the current price."""
    index: int  # 1-based position in the input
    purchase: PurchaseEvent
    current_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal
    price_change: Decimal
    price_change_percent: Decimal


@dataclass
class PurchaseAnalysis:
    """Per-purchase breakdown plus summary counts."""
    details: list[PurchasePerformance] = field(default_factory=list)
    total_invested: Decimal = field(default_factory=lambda: Decimal("0"))
    total_current_value: Decimal = field(default_factory=lambda: Decimal("0"))
    total_unrealized_pl: Decimal = field(default_factory=lambda: Decimal("0"))
    profitable_count: int = 0
    losing_count: int = 0
    best: PurchasePerformance | None = None
    worst: PurchasePerformance | None = None


# =============================================================================
# DCA PROJECTION
# =============================================================================

@dataclass
class DCAProjection:
    """Projected outcome of a fixed monthly DCA plan."""
    monthly_investment: Decimal
    duration_months: int
    average_price: Decimal
    future_price: Decimal
    total_investment: Decimal
    projected_quantity: Decimal
    projected_value: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal

    @property
    def roi(self) -> Decimal:
        return self.profit_loss_percent


# =============================================================================
# PRICE ALERTS
# =============================================================================

@dataclass
class TriggeredAlert:
    """An alert whose condition is met by the current price."""
    alert: PriceAlert
    current_price: Decimal
    message: str


@dataclass
class AlertCheckResult:
    """Outcome of evaluating a set of alerts against the current price."""
    current_price: Decimal
    triggered: list[TriggeredAlert] = field(default_factory=list)
    pending_count: int = 0

    @property
    def triggered_ids(self) -> list[str]:
        return [t.alert.alert_id for t in self.triggered]


# =============================================================================
# COMBINED RESULT
# =============================================================================

@dataclass
class AnalyticsReport:
    """
    Combined result from all engine components.

    This is the main result type returned by AnalyticsService.
    """
    as_of: date
    current_price: Decimal
    series: list[CumulativePoint]
    aggregates: AggregateStats
    risk: RiskMetrics
    performance: PerformanceMetrics
    lump_sum: LumpSumComparison
    purchase_analysis: PurchaseAnalysis
    goals: list[GoalProgress] = field(default_factory=list)

    warnings: list[str] = field(default_factory=list)

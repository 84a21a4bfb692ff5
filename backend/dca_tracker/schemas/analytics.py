# backend/dca_tracker/schemas/analytics.py
"""
Pydantic schemas for Analytics API responses.

Design decisions:
- All numeric values are serialized as STRINGS to preserve Decimal precision
- Percentages are in percent units ("12.5" = 12.5%)
- Null is returned when a figure cannot be calculated (e.g. lump-sum
  comparison with fewer than 2 purchases)
- Every return figure carries its basis ("annualized" / "total") and the
  policy branch that produced it
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# SERIES & AGGREGATES
# =============================================================================

class CumulativePointResponse(BaseModel):
    """Running totals after one purchase (or the trailing current point)."""

    model_config = ConfigDict(from_attributes=True)

    as_of: date
    cumulative_quantity: str
    cumulative_capital: str
    mark_price: str
    portfolio_value: str
    is_current: bool = Field(False, description="True for the trailing point valued at the current price")


class AggregateStatsResponse(BaseModel):
    """Snapshot totals across all purchases."""

    model_config = ConfigDict(from_attributes=True)

    total_invested: str
    total_quantity: str
    cost_basis: str = Field(..., description="Average price per unit (0 when nothing held)")
    portfolio_value: str
    unrealized_pl: str
    unrealized_pl_percent: str
    purchase_count: int


# =============================================================================
# RISK
# =============================================================================

class RiskMetricsResponse(BaseModel):
    """Max drawdown and Sharpe-like ratio."""

    model_config = ConfigDict(from_attributes=True)

    max_drawdown: str = Field(..., description="Largest fall of the return percentage, in percentage points")
    max_drawdown_peak_date: date | None = None
    max_drawdown_trough_date: date | None = None
    sharpe_ratio: str = Field(
        ...,
        description="Mean / population std-dev of per-purchase-interval returns. "
                    "No risk-free rate, not annualized."
    )
    return_observations: int
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# RETURNS
# =============================================================================

class ReturnResponse(BaseModel):
    """A return figure with its annualization label."""

    model_config = ConfigDict(from_attributes=True)

    value: str = Field(..., description="Reported return in percent")
    basis: str = Field(..., description="'annualized' or 'total'")
    branch: str = Field(
        ...,
        description="Policy branch: annualized, no_data, short_period, large_loss, "
                    "out_of_range, not_converged"
    )
    total_return: str
    annualized_return: str | None = None
    holding_days: str
    solver: str | None = None


class PerformanceResponse(BaseModel):
    """Time-weighted and money-weighted returns."""

    model_config = ConfigDict(from_attributes=True)

    twr: ReturnResponse
    mwr: ReturnResponse
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# LUMP-SUM COMPARISON
# =============================================================================

class StrategySnapshotResponse(BaseModel):
    """Totals and valuation of one strategy."""

    model_config = ConfigDict(from_attributes=True)

    total_invested: str
    total_quantity: str
    current_value: str
    return_percent: str


class LumpSumComparisonResponse(BaseModel):
    """Actual strategy vs. a single purchase at the earliest price."""

    model_config = ConfigDict(from_attributes=True)

    has_sufficient_data: bool
    actual: StrategySnapshotResponse | None = None
    lump_sum: StrategySnapshotResponse | None = None
    quantity_difference: str | None = Field(None, description="lump_sum - actual")
    value_difference: str | None = Field(None, description="lump_sum - actual")
    return_difference: str | None = Field(None, description="lump_sum - actual, percentage points")
    better_strategy: str | None = Field(None, description="'actual' or 'lump-sum'")
    earliest_date: date | None = None
    earliest_price: str | None = None
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# GOALS
# =============================================================================

class GoalProgressResponse(BaseModel):
    """Progress towards one goal."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    target_quantity: str
    deadline: date | None = None
    current_quantity: str
    progress_percent: str
    remaining_quantity: str
    days_remaining: int | None = Field(None, description="Negative when the deadline has passed")
    is_complete: bool
    is_overdue: bool


class GoalProgressListResponse(BaseModel):
    """Progress of every goal in a snapshot."""

    as_of: date
    current_quantity: str
    goals: list[GoalProgressResponse]


# =============================================================================
# PURCHASE ANALYSIS
# =============================================================================

class PurchasePerformanceResponse(BaseModel):
    """Unrealized result of one purchase."""

    model_config = ConfigDict(from_attributes=True)

    index: int
    purchase_date: date
    capital_spent: str
    unit_price: str
    quantity_received: str
    current_value: str
    unrealized_pl: str
    unrealized_pl_percent: str
    price_change: str
    price_change_percent: str


class PurchaseAnalysisResponse(BaseModel):
    """Per-purchase breakdown with summary."""

    model_config = ConfigDict(from_attributes=True)

    details: list[PurchasePerformanceResponse]
    total_invested: str
    total_current_value: str
    total_unrealized_pl: str
    profitable_count: int
    losing_count: int
    best: PurchasePerformanceResponse | None = None
    worst: PurchasePerformanceResponse | None = None


# =============================================================================
# FULL REPORT
# =============================================================================

class AnalyticsReportResponse(BaseModel):
    """Complete analytics response."""

    model_config = ConfigDict(from_attributes=True)

    as_of: date
    current_price: str
    aggregates: AggregateStatsResponse
    series: list[CumulativePointResponse]
    risk: RiskMetricsResponse
    performance: PerformanceResponse
    lump_sum: LumpSumComparisonResponse
    purchase_analysis: PurchaseAnalysisResponse
    goals: list[GoalProgressResponse]
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# PROJECTION & ALERTS
# =============================================================================

class DCAProjectionResponse(BaseModel):
    """Projected outcome of a monthly DCA plan."""

    model_config = ConfigDict(from_attributes=True)

    monthly_investment: str
    duration_months: int
    average_price: str
    future_price: str
    total_investment: str
    projected_quantity: str
    projected_value: str
    profit_loss: str
    profit_loss_percent: str
    roi: str


class TriggeredAlertResponse(BaseModel):
    """An alert fired by the current price."""

    id: str
    target_price: str
    type: str
    message: str


class AlertCheckResponse(BaseModel):
    """Result of evaluating price alerts."""

    current_price: str
    triggered: list[TriggeredAlertResponse]
    triggered_ids: list[str]
    pending_count: int

# backend/dca_tracker/routers/analytics.py
"""
Analytics endpoints.

The API is stateless: every request carries the full purchase log (the same
JSON shape as the export snapshot) and nothing is stored.

- POST /analytics                - Full report
- POST /analytics/lump-sum       - Lump-sum comparison only
- POST /analytics/goals          - Goal progress only
- POST /analytics/projection     - DCA projection calculator
- POST /analytics/alerts/check   - Price alert evaluation

Request bodies are validated by the schemas in dca_tracker/schemas/purchases.py;
invalid records are rejected with 422 before reaching the engine.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Request

from dca_tracker.dependencies import get_analytics_service
from dca_tracker.middleware.rate_limit import RATE_LIMIT_ANALYTICS, limiter
from dca_tracker.schemas.analytics import (
    AggregateStatsResponse,
    AlertCheckResponse,
    AnalyticsReportResponse,
    CumulativePointResponse,
    DCAProjectionResponse,
    GoalProgressListResponse,
    GoalProgressResponse,
    LumpSumComparisonResponse,
    PerformanceResponse,
    PurchaseAnalysisResponse,
    PurchasePerformanceResponse,
    ReturnResponse,
    RiskMetricsResponse,
    StrategySnapshotResponse,
    TriggeredAlertResponse,
)
from dca_tracker.schemas.purchases import (
    AlertCheckRequest,
    PortfolioSnapshot,
    ProjectionRequest,
)
from dca_tracker.services.analytics import (
    AggregateStats,
    AlertCheckResult,
    AnalyticsService,
    CumulativePoint,
    DCAProjection,
    GoalProgress,
    LumpSumComparison,
    PerformanceMetrics,
    PurchaseAnalysis,
    PurchasePerformance,
    ReturnResult,
    RiskMetrics,
    StrategySnapshot,
)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _decimal_to_str(value: Decimal | None) -> str | None:
    """Convert Decimal to string for JSON response, preserving precision."""
    if value is None:
        return None
    if isinstance(value, int):
        value = Decimal(value)
    # normalize() drops trailing zeros; format "f" avoids exponent notation
    return format(value.normalize(), "f")


# =============================================================================
# MAPPER FUNCTIONS (Engine Types -> Pydantic Schemas)
# =============================================================================

def _map_point(point: CumulativePoint) -> CumulativePointResponse:
    return CumulativePointResponse(
        as_of=point.as_of,
        cumulative_quantity=_decimal_to_str(point.cumulative_quantity),
        cumulative_capital=_decimal_to_str(point.cumulative_capital),
        mark_price=_decimal_to_str(point.mark_price),
        portfolio_value=_decimal_to_str(point.portfolio_value),
        is_current=point.is_current,
    )


def _map_aggregates(stats: AggregateStats) -> AggregateStatsResponse:
    return AggregateStatsResponse(
        total_invested=_decimal_to_str(stats.total_invested),
        total_quantity=_decimal_to_str(stats.total_quantity),
        cost_basis=_decimal_to_str(stats.cost_basis),
        portfolio_value=_decimal_to_str(stats.portfolio_value),
        unrealized_pl=_decimal_to_str(stats.unrealized_pl),
        unrealized_pl_percent=_decimal_to_str(stats.unrealized_pl_percent),
        purchase_count=stats.purchase_count,
    )


def _map_risk(risk: RiskMetrics) -> RiskMetricsResponse:
    return RiskMetricsResponse(
        max_drawdown=_decimal_to_str(risk.max_drawdown),
        max_drawdown_peak_date=risk.max_drawdown_peak_date,
        max_drawdown_trough_date=risk.max_drawdown_trough_date,
        sharpe_ratio=_decimal_to_str(risk.sharpe_ratio),
        return_observations=risk.return_observations,
        warnings=risk.warnings,
    )


def _map_return(result: ReturnResult) -> ReturnResponse:
    return ReturnResponse(
        value=_decimal_to_str(result.value),
        basis=result.basis.value,
        branch=result.branch.value,
        total_return=_decimal_to_str(result.total_return),
        annualized_return=_decimal_to_str(result.annualized_return),
        holding_days=_decimal_to_str(result.holding_days),
        solver=result.solver,
    )


def _map_performance(perf: PerformanceMetrics) -> PerformanceResponse:
    return PerformanceResponse(
        twr=_map_return(perf.twr),
        mwr=_map_return(perf.mwr),
        warnings=perf.warnings,
    )


def _map_strategy(snapshot: StrategySnapshot | None) -> StrategySnapshotResponse | None:
    if snapshot is None:
        return None
    return StrategySnapshotResponse(
        total_invested=_decimal_to_str(snapshot.total_invested),
        total_quantity=_decimal_to_str(snapshot.total_quantity),
        current_value=_decimal_to_str(snapshot.current_value),
        return_percent=_decimal_to_str(snapshot.return_percent),
    )


def _map_lump_sum(comparison: LumpSumComparison) -> LumpSumComparisonResponse:
    return LumpSumComparisonResponse(
        has_sufficient_data=comparison.has_sufficient_data,
        actual=_map_strategy(comparison.actual),
        lump_sum=_map_strategy(comparison.lump_sum),
        quantity_difference=_decimal_to_str(comparison.quantity_difference),
        value_difference=_decimal_to_str(comparison.value_difference),
        return_difference=_decimal_to_str(comparison.return_difference),
        better_strategy=comparison.better_strategy.value if comparison.better_strategy else None,
        earliest_date=comparison.earliest_date,
        earliest_price=_decimal_to_str(comparison.earliest_price),
        warnings=comparison.warnings,
    )


def _map_goal(progress: GoalProgress) -> GoalProgressResponse:
    return GoalProgressResponse(
        name=progress.goal.name,
        target_quantity=_decimal_to_str(progress.goal.target_quantity),
        deadline=progress.goal.deadline,
        current_quantity=_decimal_to_str(progress.current_quantity),
        progress_percent=_decimal_to_str(progress.progress_percent),
        remaining_quantity=_decimal_to_str(progress.remaining_quantity),
        days_remaining=progress.days_remaining,
        is_complete=progress.is_complete,
        is_overdue=progress.is_overdue,
    )


def _map_purchase_performance(detail: PurchasePerformance | None) -> PurchasePerformanceResponse | None:
    if detail is None:
        return None
    return PurchasePerformanceResponse(
        index=detail.index,
        purchase_date=detail.purchase.occurred_on,
        capital_spent=_decimal_to_str(detail.purchase.capital_spent),
        unit_price=_decimal_to_str(detail.purchase.unit_price),
        quantity_received=_decimal_to_str(detail.purchase.quantity_received),
        current_value=_decimal_to_str(detail.current_value),
        unrealized_pl=_decimal_to_str(detail.unrealized_pl),
        unrealized_pl_percent=_decimal_to_str(detail.unrealized_pl_percent),
        price_change=_decimal_to_str(detail.price_change),
        price_change_percent=_decimal_to_str(detail.price_change_percent),
    )


def _map_purchase_analysis(analysis: PurchaseAnalysis) -> PurchaseAnalysisResponse:
    return PurchaseAnalysisResponse(
        details=[_map_purchase_performance(d) for d in analysis.details],
        total_invested=_decimal_to_str(analysis.total_invested),
        total_current_value=_decimal_to_str(analysis.total_current_value),
        total_unrealized_pl=_decimal_to_str(analysis.total_unrealized_pl),
        profitable_count=analysis.profitable_count,
        losing_count=analysis.losing_count,
        best=_map_purchase_performance(analysis.best),
        worst=_map_purchase_performance(analysis.worst),
    )


def _map_projection(projection: DCAProjection) -> DCAProjectionResponse:
    return DCAProjectionResponse(
        monthly_investment=_decimal_to_str(projection.monthly_investment),
        duration_months=projection.duration_months,
        average_price=_decimal_to_str(projection.average_price),
        future_price=_decimal_to_str(projection.future_price),
        total_investment=_decimal_to_str(projection.total_investment),
        projected_quantity=_decimal_to_str(projection.projected_quantity),
        projected_value=_decimal_to_str(projection.projected_value),
        profit_loss=_decimal_to_str(projection.profit_loss),
        profit_loss_percent=_decimal_to_str(projection.profit_loss_percent),
        roi=_decimal_to_str(projection.roi),
    )


def _map_alert_check(result: AlertCheckResult) -> AlertCheckResponse:
    return AlertCheckResponse(
        current_price=_decimal_to_str(result.current_price),
        triggered=[
            TriggeredAlertResponse(
                id=t.alert.alert_id,
                target_price=_decimal_to_str(t.alert.target_price),
                type=t.alert.direction.value,
                message=t.message,
            )
            for t in result.triggered
        ],
        triggered_ids=result.triggered_ids,
        pending_count=result.pending_count,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "",
    response_model=AnalyticsReportResponse,
    summary="Get full analytics report",
    response_description="Aggregates, risk, returns, lump-sum comparison, goals and per-purchase analysis",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_analytics_report(
        request: Request,  # Required for rate limiting
        snapshot: PortfolioSnapshot,
        service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsReportResponse:
    """
    Calculate every metric for a purchase log.

    - **Aggregates**: total invested, cost basis, unrealized P&L
    - **Risk**: max drawdown (of return %), Sharpe-like ratio
    - **Performance**: TWR and MWR, each labelled annualized or total
    - **Lump sum**: actual strategy vs. one purchase at the earliest price
    - **Goals**: progress towards each goal in the snapshot

    `asOf` defaults to today. `currentPrice` 0 means "not set".
    """
    report = service.get_report(
        purchases=snapshot.to_events(),
        current_price=snapshot.current_price,
        goals=snapshot.to_goals(),
        as_of=snapshot.as_of,
    )

    return AnalyticsReportResponse(
        as_of=report.as_of,
        current_price=_decimal_to_str(report.current_price),
        aggregates=_map_aggregates(report.aggregates),
        series=[_map_point(p) for p in report.series],
        risk=_map_risk(report.risk),
        performance=_map_performance(report.performance),
        lump_sum=_map_lump_sum(report.lump_sum),
        purchase_analysis=_map_purchase_analysis(report.purchase_analysis),
        goals=[_map_goal(g) for g in report.goals],
        warnings=report.warnings,
    )


@router.post(
    "/lump-sum",
    response_model=LumpSumComparisonResponse,
    summary="Compare against a lump-sum purchase",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_lump_sum_comparison(
        request: Request,  # Required for rate limiting
        snapshot: PortfolioSnapshot,
        service: AnalyticsService = Depends(get_analytics_service),
) -> LumpSumComparisonResponse:
    """
    Compare the actual purchases with investing the same total at the
    earliest purchase price. Fewer than 2 purchases returns
    `has_sufficient_data: false`.
    """
    comparison = service.compare_lump_sum(snapshot.to_events(), snapshot.current_price)
    return _map_lump_sum(comparison)


@router.post(
    "/goals",
    response_model=GoalProgressListResponse,
    summary="Get goal progress",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_goal_progress(
        request: Request,  # Required for rate limiting
        snapshot: PortfolioSnapshot,
        service: AnalyticsService = Depends(get_analytics_service),
) -> GoalProgressListResponse:
    """Progress of each goal against the total quantity held."""
    as_of = snapshot.as_of or date.today()
    events = snapshot.to_events()
    progress = service.get_goal_progress(events, snapshot.to_goals(), as_of)
    current_quantity = sum((e.quantity_received for e in events), Decimal("0"))

    return GoalProgressListResponse(
        as_of=as_of,
        current_quantity=_decimal_to_str(current_quantity),
        goals=[_map_goal(g) for g in progress],
    )


@router.post(
    "/projection",
    response_model=DCAProjectionResponse,
    summary="Project a monthly DCA plan",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_dca_projection(
        request: Request,  # Required for rate limiting
        body: ProjectionRequest,
        service: AnalyticsService = Depends(get_analytics_service),
) -> DCAProjectionResponse:
    """
    Project the outcome of investing a fixed amount every month at an
    expected average price, valued at an expected future price.
    """
    projection = service.project(
        monthly_investment=body.monthly_investment,
        duration_months=body.duration_months,
        average_price=body.average_price,
        future_price=body.future_price,
    )
    return _map_projection(projection)


@router.post(
    "/alerts/check",
    response_model=AlertCheckResponse,
    summary="Evaluate price alerts",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def check_alerts(
        request: Request,  # Required for rate limiting
        body: AlertCheckRequest,
        service: AnalyticsService = Depends(get_analytics_service),
) -> AlertCheckResponse:
    """
    Return the alerts the current price triggers. Alerts already marked
    `triggered` are skipped; delivering notifications is up to the client.
    """
    result = service.check_alerts(body.to_alerts(), body.current_price)
    return _map_alert_check(result)

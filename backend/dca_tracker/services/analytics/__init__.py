# backend/dca_tracker/services/analytics/__init__.py
"""
Analytics engine package.

Turns an unordered purchase log plus the current price into:
- Cumulative series (running quantity, capital and value)
- Aggregates (cost basis, unrealized P&L)
- Risk metrics (max drawdown, Sharpe-like ratio)
- Returns (TWR, MWR via IRR) with annualization labels
- Lump-sum comparison, goal progress, per-purchase analysis
- DCA projection and price alert evaluation

Architecture:
    analytics/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Input types and result data classes
    ├── series.py                # Ordering + cumulative series
    ├── aggregates.py            # Totals, cost basis, per-purchase analysis
    ├── risk.py                  # Max drawdown, Sharpe-like ratio
    ├── returns.py               # TWR, IRR/MWR, annualization policy
    ├── comparison.py            # Lump-sum counterfactual
    ├── goals.py                 # Goal progress
    ├── projection.py            # DCA projection calculator
    ├── alerts.py                # Price alert evaluation
    └── service.py               # AnalyticsService (orchestrator + cache)

Data Flow:
    purchases (any order) + current price + as_of
        ↓
    sort_purchases() → build_cumulative_series()
        ↓
    ┌─────────────────────────────────────────────┐
    │             AnalyticsService                │
    │  Aggregates │ Risk │ Returns │ Lump-sum     │
    │  Purchase analysis │ Goals                  │
    └─────────────────────────────────────────────┘
        ↓
    AnalyticsReport

Usage:
    from dca_tracker.services.analytics import AnalyticsService, PurchaseEvent

    service = AnalyticsService()
    report = service.get_report(purchases, current_price=Decimal("2100000"))

    print(report.aggregates.cost_basis)
    print(report.performance.mwr.value, report.performance.mwr.basis)
"""

from dca_tracker.services.analytics.aggregates import (
    analyze_purchases,
    calculate_aggregate_stats,
)
from dca_tracker.services.analytics.alerts import check_price_alerts
from dca_tracker.services.analytics.comparison import compare_lump_sum
from dca_tracker.services.analytics.goals import calculate_goal_progress, track_goals
from dca_tracker.services.analytics.projection import project_dca
from dca_tracker.services.analytics.returns import (
    ReturnsCalculator,
    annualize_return,
    calculate_irr,
    calculate_mwr,
    calculate_twr,
    calculate_weighted_holding_days,
)
from dca_tracker.services.analytics.risk import (
    RiskCalculator,
    calculate_max_drawdown,
    calculate_period_returns,
    calculate_sharpe_ratio,
)
from dca_tracker.services.analytics.series import (
    build_cumulative_series,
    sort_purchases,
)
from dca_tracker.services.analytics.service import AnalyticsCache, AnalyticsService
from dca_tracker.services.analytics.types import (
    AggregateStats,
    AlertCheckResult,
    AlertDirection,
    AnalyticsReport,
    CumulativePoint,
    DCAProjection,
    Goal,
    GoalProgress,
    LumpSumComparison,
    PerformanceMetrics,
    PriceAlert,
    PurchaseAnalysis,
    PurchaseEvent,
    PurchasePerformance,
    ReturnBasis,
    ReturnBranch,
    ReturnResult,
    RiskMetrics,
    Strategy,
    StrategySnapshot,
    TriggeredAlert,
)

__all__ = [
    # Main service
    "AnalyticsService",
    "AnalyticsCache",

    # Input types
    "PurchaseEvent",
    "Goal",
    "PriceAlert",
    "AlertDirection",

    # Result types
    "CumulativePoint",
    "AggregateStats",
    "RiskMetrics",
    "ReturnBasis",
    "ReturnBranch",
    "ReturnResult",
    "PerformanceMetrics",
    "Strategy",
    "StrategySnapshot",
    "LumpSumComparison",
    "GoalProgress",
    "PurchasePerformance",
    "PurchaseAnalysis",
    "DCAProjection",
    "TriggeredAlert",
    "AlertCheckResult",
    "AnalyticsReport",

    # Calculators
    "ReturnsCalculator",
    "RiskCalculator",

    # Individual functions (for testing)
    "sort_purchases",
    "build_cumulative_series",
    "calculate_aggregate_stats",
    "analyze_purchases",
    "calculate_max_drawdown",
    "calculate_period_returns",
    "calculate_sharpe_ratio",
    "annualize_return",
    "calculate_twr",
    "calculate_irr",
    "calculate_mwr",
    "calculate_weighted_holding_days",
    "compare_lump_sum",
    "calculate_goal_progress",
    "track_goals",
    "project_dca",
    "check_price_alerts",
]

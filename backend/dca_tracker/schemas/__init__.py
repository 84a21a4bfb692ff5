# backend/dca_tracker/schemas/__init__.py
"""
Pydantic schemas for request validation and response serialization.
"""

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
from dca_tracker.schemas.errors import ErrorDetail, ValidationErrorDetail
from dca_tracker.schemas.purchases import (
    AlertCheckRequest,
    GoalRecord,
    PortfolioSnapshot,
    PriceAlertRecord,
    ProjectionRequest,
    PurchaseRecord,
)

__all__ = [
    # Requests
    "PurchaseRecord",
    "GoalRecord",
    "PriceAlertRecord",
    "PortfolioSnapshot",
    "ProjectionRequest",
    "AlertCheckRequest",
    # Responses
    "AggregateStatsResponse",
    "AlertCheckResponse",
    "AnalyticsReportResponse",
    "CumulativePointResponse",
    "DCAProjectionResponse",
    "GoalProgressListResponse",
    "GoalProgressResponse",
    "LumpSumComparisonResponse",
    "PerformanceResponse",
    "PurchaseAnalysisResponse",
    "PurchasePerformanceResponse",
    "ReturnResponse",
    "RiskMetricsResponse",
    "StrategySnapshotResponse",
    "TriggeredAlertResponse",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
]

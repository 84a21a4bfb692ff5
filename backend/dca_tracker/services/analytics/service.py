# backend/dca_tracker/services/analytics/service.py
"""
Analytics Service orchestrator.

This is the main entry point for the analytics engine. It:
1. Orders the purchases (PurchaseSeries)
2. Builds the cumulative series
3. Delegates to the specialized calculators
4. Caches results (keyed by the full input, bounded LRU + TTL)
5. Aggregates results into AnalyticsReport

The calculators themselves are pure functions and know nothing about the
cache. Memoization lives only here.

Architecture:
    AnalyticsService
        ├── uses → sort_purchases / build_cumulative_series
        ├── uses → calculate_aggregate_stats, analyze_purchases
        ├── uses → RiskCalculator (max drawdown, Sharpe-like ratio)
        ├── uses → ReturnsCalculator (TWR, MWR)
        ├── uses → compare_lump_sum
        ├── uses → track_goals
        └── uses → AnalyticsCache

Usage:
    from dca_tracker.services.analytics import AnalyticsService

    service = AnalyticsService()
    report = service.get_report(purchases, current_price=Decimal("95000"))
"""

import copy
import logging
import threading
from collections import OrderedDict
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Hashable

from dca_tracker.config import settings
from dca_tracker.services.analytics.aggregates import analyze_purchases, calculate_aggregate_stats
from dca_tracker.services.analytics.alerts import check_price_alerts
from dca_tracker.services.analytics.comparison import compare_lump_sum
from dca_tracker.services.analytics.goals import track_goals
from dca_tracker.services.analytics.projection import project_dca
from dca_tracker.services.analytics.returns import ReturnsCalculator
from dca_tracker.services.analytics.risk import RiskCalculator
from dca_tracker.services.analytics.series import (
    build_cumulative_series,
    sort_purchases,
    validate_current_price,
)
from dca_tracker.services.analytics.types import (
    AlertCheckResult,
    AnalyticsReport,
    DCAProjection,
    Goal,
    GoalProgress,
    LumpSumComparison,
    PriceAlert,
    PurchaseEvent,
)
from dca_tracker.services.constants import CACHE_MAX_SIZE, CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


# =============================================================================
# CACHE
# =============================================================================

class AnalyticsCache:
    """
    Thread-safe bounded LRU cache with TTL for analytics reports.

    Cache key: (purchases tuple, current price, goals tuple, as_of). All
    engine input types are frozen dataclasses and therefore hashable.

    Memory Safety:
        Bounded to max_size entries. When full, the least recently used
        entry is evicted to make room.

    Isolation:
        Reports are deep-copied on the way in and out. Callers never share
        the stored instance.

    Thread Safety:
        Uses threading.Lock for safe concurrent access in single-worker mode.
    """

    def __init__(
            self,
            ttl_seconds: int = CACHE_TTL_SECONDS,
            max_size: int = CACHE_MAX_SIZE,
    ):
        self._cache: OrderedDict[Hashable, tuple[datetime, Any]] = OrderedDict()
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_size = max_size
        self._lock = threading.Lock()

    @staticmethod
    def make_key(
            purchases: tuple[PurchaseEvent, ...],
            current_price: Decimal,
            goals: tuple[Goal, ...],
            as_of: date,
    ) -> Hashable:
        """Generate cache key."""
        return ("report", purchases, current_price, goals, as_of)

    def get(self, key: Hashable) -> AnalyticsReport | None:
        """
        Get cached report if it exists and has not expired.

        Implements LRU by moving accessed entries to the end.
        """
        with self._lock:
            if key in self._cache:
                timestamp, result = self._cache[key]
                if datetime.now() - timestamp < self._ttl:
                    self._cache.move_to_end(key)
                    logger.debug("Analytics cache hit")
                    return copy.deepcopy(result)

                del self._cache[key]
                logger.debug("Analytics cache entry expired")

        return None

    def set(self, key: Hashable, result: AnalyticsReport) -> None:
        """Store a report, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
            while self._cache and len(self._cache) >= self._max_size:
                self._cache.popitem(last=False)
                logger.debug("Analytics cache evicted oldest entry (LRU)")
            if self._max_size > 0:
                self._cache[key] = (datetime.now(), copy.deepcopy(result))

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.debug(f"Cleared {count} analytics cache entries")

    def size(self) -> int:
        """Return current number of cached entries."""
        with self._lock:
            return len(self._cache)


# =============================================================================
# ANALYTICS SERVICE
# =============================================================================

class AnalyticsService:
    """
    Main orchestrator for DCA portfolio analytics.

    Attributes:
        _cache: AnalyticsCache for report caching, None when disabled
    """

    # Shared cache instance (singleton pattern)
    _shared_cache: AnalyticsCache | None = None

    def __init__(
            self,
            cache: AnalyticsCache | None = None,
            cache_enabled: bool | None = None,
    ):
        """
        Initialize the Analytics Service.

        Args:
            cache: AnalyticsCache instance. If None, uses the shared cache
                   sized from settings.
            cache_enabled: Override ANALYTICS_CACHE_ENABLED from settings.
        """
        if cache_enabled is None:
            cache_enabled = settings.analytics_cache_enabled

        if not cache_enabled:
            self._cache = None
        elif cache is not None:
            self._cache = cache
        else:
            if AnalyticsService._shared_cache is None:
                AnalyticsService._shared_cache = AnalyticsCache(
                    ttl_seconds=settings.analytics_cache_ttl_seconds,
                    max_size=settings.analytics_cache_max_size,
                )
            self._cache = AnalyticsService._shared_cache

        logger.info(f"AnalyticsService initialized (cache={'on' if self._cache else 'off'})")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_report(
            self,
            purchases: Iterable[PurchaseEvent],
            current_price: Decimal,
            goals: Iterable[Goal] = (),
            as_of: date | None = None,
    ) -> AnalyticsReport:
        """
        Calculate every metric for a purchase log.

        Args:
            purchases: Purchase events in any order
            current_price: Current asset price (>= 0, 0 = not set)
            goals: Accumulation goals to evaluate
            as_of: Valuation date (defaults to today)

        Returns:
            AnalyticsReport

        Raises:
            InvalidPriceError: If current_price is negative
        """
        purchases = tuple(purchases)
        goals = tuple(goals)
        price = validate_current_price(current_price)
        as_of = as_of or date.today()

        key = AnalyticsCache.make_key(purchases, price, goals, as_of)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        logger.info(f"Calculating analytics for {len(purchases)} purchases as of {as_of}")

        ordered = sort_purchases(purchases)
        series = build_cumulative_series(ordered, price, as_of)
        aggregates = calculate_aggregate_stats(ordered, price)
        risk = RiskCalculator.calculate_all(series)
        performance = ReturnsCalculator.calculate_all(ordered, price, as_of)
        lump_sum = compare_lump_sum(ordered, price)

        report = AnalyticsReport(
            as_of=as_of,
            current_price=price,
            series=series,
            aggregates=aggregates,
            risk=risk,
            performance=performance,
            lump_sum=lump_sum,
            purchase_analysis=analyze_purchases(purchases, price),
            goals=track_goals(goals, aggregates.total_quantity, as_of),
        )

        if price == 0 and purchases:
            report.warnings.append("Current price is not set: holdings are valued at zero")
        report.warnings.extend(risk.warnings)
        report.warnings.extend(performance.warnings)
        report.warnings.extend(lump_sum.warnings)

        if self._cache is not None:
            self._cache.set(key, report)
        return report

    def compare_lump_sum(
            self,
            purchases: Iterable[PurchaseEvent],
            current_price: Decimal,
    ) -> LumpSumComparison:
        """Lump-sum comparison only."""
        return compare_lump_sum(tuple(purchases), current_price)

    def get_goal_progress(
            self,
            purchases: Iterable[PurchaseEvent],
            goals: Iterable[Goal],
            as_of: date | None = None,
    ) -> list[GoalProgress]:
        """Progress of each goal against the total quantity held."""
        current_quantity = calculate_aggregate_stats(purchases, Decimal("0")).total_quantity
        return track_goals(goals, current_quantity, as_of or date.today())

    def project(
            self,
            monthly_investment: Decimal,
            duration_months: int,
            average_price: Decimal,
            future_price: Decimal,
    ) -> DCAProjection:
        """Project a fixed monthly DCA plan."""
        return project_dca(monthly_investment, duration_months, average_price, future_price)

    def check_alerts(
            self,
            alerts: Iterable[PriceAlert],
            current_price: Decimal,
    ) -> AlertCheckResult:
        """Evaluate price alerts against the current price."""
        return check_price_alerts(alerts, current_price)

    def clear_cache(self) -> None:
        """Clear this service's cache."""
        if self._cache is not None:
            self._cache.clear()

    @classmethod
    def clear_all_cache(cls) -> None:
        """Clear the shared cache."""
        if cls._shared_cache is not None:
            cls._shared_cache.clear()

# backend/dca_tracker/services/constants.py
"""
Centralized constants for the DCA tracker services.

This module is the single source of truth for the thresholds and solver
parameters used by the analytics engine. They are deliberately not
environment-driven: changing any of them changes reported numbers.

Usage:
    from dca_tracker.services.constants import (
        CALENDAR_DAYS_PER_YEAR,
        TWR_ANNUALIZATION_MIN_DAYS,
        IRR_MAX_ITERATIONS,
    )
"""

from decimal import Decimal


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Used for annualizing returns (TWR, MWR) and converting days to years
CALENDAR_DAYS_PER_YEAR: int = 365


# =============================================================================
# TIME-WEIGHTED RETURN SETTINGS
# =============================================================================

# Holding periods shorter than this are always reported as total return
TWR_ANNUALIZATION_MIN_DAYS: int = 90

# Raw returns at or below -50% are never annualized
TWR_MIN_ANNUALIZABLE_RETURN: Decimal = Decimal("-0.5")

# Annualized TWR beyond ±100% falls back to total return
TWR_MAX_ANNUALIZED_RETURN: Decimal = Decimal("1")


# =============================================================================
# MONEY-WEIGHTED RETURN SETTINGS
# =============================================================================

# Capital-weighted average holding period required before annualizing
MWR_ANNUALIZATION_MIN_DAYS: int = 30

# Annualized IRR beyond ±1000% falls back to total return
MWR_MAX_ANNUALIZED_RETURN: Decimal = Decimal("10")


# =============================================================================
# IRR SOLVER SETTINGS (Newton-Raphson with bisection fallback)
# =============================================================================

# Initial guess for IRR iteration (10% annual return)
IRR_INITIAL_GUESS: float = 0.10

# Forward-difference step for the numerical NPV derivative
IRR_DERIVATIVE_STEP: float = 1e-4

# Convergence tolerance on |NPV| in currency units
IRR_TOLERANCE: float = 1e-4

# Maximum Newton-Raphson iterations
IRR_MAX_ITERATIONS: int = 100

# Rate is clamped to this range after every step
IRR_MIN_RATE: float = -0.99
IRR_MAX_RATE: float = 10.0

# Maximum bisection iterations when Newton-Raphson fails to converge
IRR_BISECTION_MAX_ITERATIONS: int = 200


# =============================================================================
# DCA PROJECTION LIMITS
# =============================================================================

# 1 month to 50 years of monthly purchases
PROJECTION_MIN_MONTHS: int = 1
PROJECTION_MAX_MONTHS: int = 600


# =============================================================================
# REQUEST LIMITS
# =============================================================================

# Upper bounds on list sizes accepted by the API
MAX_PURCHASES_PER_REQUEST: int = 10_000
MAX_GOALS_PER_REQUEST: int = 100
MAX_ALERTS_PER_REQUEST: int = 100


# =============================================================================
# CACHE SETTINGS
# =============================================================================

# Defaults for the analytics report cache (overridable via settings)
CACHE_TTL_SECONDS: int = 3600
CACHE_MAX_SIZE: int = 256


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Analytics endpoints recompute the whole report per request
RATE_LIMIT_ANALYTICS: str = "60/minute"

# Health checks are polled by monitoring tools
RATE_LIMIT_HEALTH: str = "300/minute"


# =============================================================================
# UTILITY CONSTANTS
# =============================================================================

# Type-safe zero and hundred for Decimal arithmetic
ZERO: Decimal = Decimal("0")
HUNDRED: Decimal = Decimal("100")

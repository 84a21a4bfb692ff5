# backend/dca_tracker/services/analytics/alerts.py
"""
Price alert evaluation.

An ABOVE alert fires when the current price is at or above its target, a
BELOW alert when the price is at or below it. Alerts already triggered are
skipped, and a current price of zero ("not set") fires nothing.

Delivery of the resulting messages is up to the caller.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from dca_tracker.services.analytics.series import validate_current_price
from dca_tracker.services.analytics.types import (
    AlertCheckResult,
    AlertDirection,
    PriceAlert,
    TriggeredAlert,
)
from dca_tracker.services.constants import ZERO

logger = logging.getLogger(__name__)


def is_alert_triggered(alert: PriceAlert, current_price: Decimal) -> bool:
    """Check a single alert condition (ignores the triggered flag)."""
    if alert.direction is AlertDirection.ABOVE:
        return current_price >= alert.target_price
    return current_price <= alert.target_price


def format_alert_message(alert: PriceAlert, current_price: Decimal) -> str:
    """Human-readable notification text for a fired alert."""
    relation = "reached or rose above" if alert.direction is AlertDirection.ABOVE else "fell to or below"
    return f"Current price {current_price:,.2f} {relation} target {alert.target_price:,.2f}"


def check_price_alerts(
        alerts: Iterable[PriceAlert],
        current_price: Decimal,
) -> AlertCheckResult:
    """
    Evaluate alerts against the current price.

    Args:
        alerts: Alerts to evaluate, in display order
        current_price: Current asset price (>= 0, 0 = not set)

    Returns:
        AlertCheckResult listing fired alerts in input order and the number
        of alerts still pending
    """
    price = validate_current_price(current_price)
    result = AlertCheckResult(current_price=price)

    for alert in alerts:
        if alert.triggered:
            continue

        if price > ZERO and is_alert_triggered(alert, price):
            result.triggered.append(
                TriggeredAlert(
                    alert=alert,
                    current_price=price,
                    message=format_alert_message(alert, price),
                )
            )
        else:
            result.pending_count += 1

    if result.triggered:
        logger.info(f"Price alerts triggered: {result.triggered_ids}")

    return result

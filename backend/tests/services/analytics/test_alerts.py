# backend/tests/services/analytics/test_alerts.py
"""
Unit tests for price alert evaluation.

Test Coverage:
- ABOVE / BELOW trigger conditions, including equality
- Already-triggered alerts are skipped
- Zero price fires nothing
- Message formatting
- Alert validation
"""

from decimal import Decimal

import pytest

from dca_tracker.services.analytics.alerts import (
    check_price_alerts,
    format_alert_message,
    is_alert_triggered,
)
from dca_tracker.services.analytics.types import AlertDirection, PriceAlert
from dca_tracker.services.exceptions import InvalidAlertError


def _alert(alert_id: str, target: str, direction: str = "above", triggered: bool = False) -> PriceAlert:
    return PriceAlert(alert_id=alert_id, target_price=Decimal(target), direction=direction, triggered=triggered)


class TestIsAlertTriggered:
    """Tests for is_alert_triggered."""

    @pytest.mark.parametrize(
        "direction, price, expected",
        [
            ("above", "99.99", False),
            ("above", "100", True),
            ("above", "150", True),
            ("below", "100.01", False),
            ("below", "100", True),
            ("below", "50", True),
        ],
    )
    def test_conditions(self, direction, price, expected):
        """Thresholds are inclusive in both directions."""
        assert is_alert_triggered(_alert("a", "100", direction), Decimal(price)) is expected


class TestCheckPriceAlerts:
    """Tests for check_price_alerts."""

    def test_fired_and_pending(self):
        """Fired alerts are listed in input order; the rest count as pending."""
        alerts = [
            _alert("1", "90", "above"),
            _alert("2", "200", "above"),
            _alert("3", "110", "below"),
        ]

        result = check_price_alerts(alerts, Decimal("100"))

        assert result.triggered_ids == ["1", "3"]
        assert result.pending_count == 1
        assert result.current_price == Decimal("100")

    def test_already_triggered_skipped(self):
        """Alerts that already fired are neither fired again nor pending."""
        alerts = [_alert("1", "90", triggered=True), _alert("2", "95")]

        result = check_price_alerts(alerts, Decimal("100"))

        assert result.triggered_ids == ["2"]
        assert result.pending_count == 0

    def test_zero_price_fires_nothing(self):
        """An unset price does not satisfy BELOW alerts."""
        alerts = [_alert("1", "50", "below"), _alert("2", "10", "above")]

        result = check_price_alerts(alerts, Decimal("0"))

        assert result.triggered == []
        assert result.pending_count == 2

    def test_no_alerts(self):
        """Empty input -> nothing fired, nothing pending."""
        result = check_price_alerts([], Decimal("100"))

        assert result.triggered == []
        assert result.pending_count == 0


class TestAlertMessages:
    """Tests for format_alert_message."""

    def test_above_message(self):
        message = format_alert_message(_alert("1", "1500000"), Decimal("1523456.789"))

        assert message == "Current price 1,523,456.79 reached or rose above target 1,500,000.00"

    def test_below_message(self):
        message = format_alert_message(_alert("1", "100", "below"), Decimal("99.5"))

        assert message == "Current price 99.50 fell to or below target 100.00"


class TestPriceAlertValidation:
    """Tests for PriceAlert construction."""

    def test_direction_coerced_from_string(self):
        assert _alert("1", "100", "below").direction is AlertDirection.BELOW

    @pytest.mark.parametrize("target", ["0", "-5"])
    def test_non_positive_target_rejected(self, target):
        with pytest.raises(InvalidAlertError) as exc_info:
            _alert("x", target)

        assert exc_info.value.alert_id == "x"

    def test_unknown_direction_rejected(self):
        with pytest.raises(ValueError):
            _alert("1", "100", "sideways")

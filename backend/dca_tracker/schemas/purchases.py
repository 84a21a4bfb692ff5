# backend/dca_tracker/schemas/purchases.py
"""
Pydantic schemas for the request payloads of the analytics API.

These schemas are the validation boundary: a record that passes them can be
converted to an engine type without raising. The JSON shape follows the
purchase log export format:

    {
      "purchases": [
        {"date": "2024-01-15", "investmentAmount": 1000,
         "btcPrice": 1500000, "btcReceived": 0.00066445}
      ],
      "currentPrice": 2100000,
      "goals": [{"name": "First coin", "targetBTC": 1, "deadline": "2030-01-01"}]
    }

Snake-case field names (investment_amount, btc_price, ...) are accepted too.

IMPORTANT: All financial values use Decimal for precision.
JSON numbers are converted through their string form, so 0.1 stays 0.1.
"""

from datetime import date
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from dca_tracker.services.analytics.types import (
    AlertDirection,
    Goal,
    PriceAlert,
    PurchaseEvent,
)
from dca_tracker.services.constants import (
    MAX_ALERTS_PER_REQUEST,
    MAX_GOALS_PER_REQUEST,
    MAX_PURCHASES_PER_REQUEST,
    PROJECTION_MAX_MONTHS,
    PROJECTION_MIN_MONTHS,
)


# =============================================================================
# PURCHASES
# =============================================================================

class PurchaseRecord(BaseModel):
    """One purchase from the log. All amounts must be positive."""

    model_config = ConfigDict(populate_by_name=True)

    occurred_on: date = Field(
        ...,
        validation_alias=AliasChoices("date", "occurred_on"),
        description="Purchase date (ISO-8601)",
        examples=["2024-01-15"],
    )
    capital_spent: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("investmentAmount", "investment_amount", "capital_spent"),
        description="Amount paid in the pricing currency",
        examples=["1000"],
    )
    unit_price: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("btcPrice", "btc_price", "unit_price"),
        description="Asset price per unit at purchase time",
        examples=["1500000"],
    )
    quantity_received: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("btcReceived", "btc_received", "quantity_received"),
        description="Units credited (after fees)",
        examples=["0.00066445"],
    )

    def to_event(self) -> PurchaseEvent:
        return PurchaseEvent(
            occurred_on=self.occurred_on,
            capital_spent=self.capital_spent,
            unit_price=self.unit_price,
            quantity_received=self.quantity_received,
        )


# =============================================================================
# GOALS
# =============================================================================

class GoalRecord(BaseModel):
    """Accumulation goal. An empty deadline string means no deadline."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", max_length=200)
    target_quantity: Decimal = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("targetBTC", "targetQuantity", "target_quantity"),
        description="Units to accumulate",
        examples=["0.1"],
    )
    deadline: date | None = Field(
        default=None,
        description="Optional target date (ISO-8601)",
    )

    @field_validator("deadline", mode="before")
    @classmethod
    def blank_deadline_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_goal(self) -> Goal:
        return Goal(
            target_quantity=self.target_quantity,
            deadline=self.deadline,
            name=self.name,
        )


# =============================================================================
# PRICE ALERTS
# =============================================================================

class PriceAlertRecord(BaseModel):
    """Price alert. 'type' is the trigger direction."""

    model_config = ConfigDict(populate_by_name=True)

    alert_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("id", "alert_id"),
    )
    target_price: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("targetPrice", "target_price"),
    )
    direction: AlertDirection = Field(
        default=AlertDirection.ABOVE,
        validation_alias=AliasChoices("type", "direction"),
    )
    triggered: bool = False

    @field_validator("alert_id", mode="before")
    @classmethod
    def numeric_id_to_str(cls, value):
        # Exported alerts use millisecond timestamps as ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_alert(self) -> PriceAlert:
        return PriceAlert(
            alert_id=self.alert_id,
            target_price=self.target_price,
            direction=self.direction,
            triggered=self.triggered,
        )


# =============================================================================
# REQUEST BODIES
# =============================================================================

class PortfolioSnapshot(BaseModel):
    """
    Full purchase log plus current price.

    current_price 0 means "not set" and values the holdings at zero.
    as_of defaults to today on the server.
    """

    model_config = ConfigDict(populate_by_name=True)

    purchases: list[PurchaseRecord] = Field(
        default_factory=list,
        max_length=MAX_PURCHASES_PER_REQUEST,
    )
    current_price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("currentPrice", "current_price"),
    )
    goals: list[GoalRecord] = Field(
        default_factory=list,
        max_length=MAX_GOALS_PER_REQUEST,
    )
    as_of: date | None = Field(
        default=None,
        validation_alias=AliasChoices("asOf", "as_of"),
        description="Valuation date (default: today)",
    )

    def to_events(self) -> list[PurchaseEvent]:
        return [record.to_event() for record in self.purchases]

    def to_goals(self) -> list[Goal]:
        return [record.to_goal() for record in self.goals]


class ProjectionRequest(BaseModel):
    """Inputs of the DCA projection calculator."""

    model_config = ConfigDict(populate_by_name=True)

    monthly_investment: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("monthlyInvestment", "monthly_investment"),
    )
    duration_months: int = Field(
        ...,
        ge=PROJECTION_MIN_MONTHS,
        le=PROJECTION_MAX_MONTHS,
        validation_alias=AliasChoices("durationMonths", "duration_months"),
    )
    average_price: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("averageBTCPrice", "averagePrice", "average_price"),
    )
    future_price: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("futureBTCPrice", "futurePrice", "future_price"),
    )


class AlertCheckRequest(BaseModel):
    """Alerts to evaluate against the current price."""

    model_config = ConfigDict(populate_by_name=True)

    alerts: list[PriceAlertRecord] = Field(default_factory=list, max_length=MAX_ALERTS_PER_REQUEST)
    current_price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("currentPrice", "current_price"),
    )

    def to_alerts(self) -> list[PriceAlert]:
        return [record.to_alert() for record in self.alerts]

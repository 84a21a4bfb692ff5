# tests/routers/test_error_handling.py
"""
Integration tests for error handling across the API.

These tests verify:
- Consistent error response format (ErrorDetail schema)
- Correct HTTP status codes for different error types
- Validation error details
- Global exception handler behavior
- Rate limit response format
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from dca_tracker.dependencies import get_analytics_service
from dca_tracker.main import app
from dca_tracker.middleware.rate_limit import rate_limit_exceeded_handler
from dca_tracker.services.exceptions import InvalidProjectionError, ServiceError


class FailingService:
    """Stand-in service whose calculators raise service errors."""

    def project(self, *args, **kwargs):
        raise InvalidProjectionError("duration_months", "rejected by engine")

    def check_alerts(self, *args, **kwargs):
        raise ServiceError("Alert evaluation failed")


@pytest.fixture(scope="function")
def client() -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def failing_client() -> TestClient:
    app.dependency_overrides[get_analytics_service] = FailingService

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


PROJECTION = {"monthlyInvestment": 1000, "durationMonths": 12, "averagePrice": 100, "futurePrice": 150}


# =============================================================================
# REQUEST VALIDATION (422)
# =============================================================================

class TestRequestValidation:
    """Schema failures are reported as 422 ValidationErrorDetail."""

    def test_invalid_purchase(self, client):
        response = client.post(
            "/analytics",
            json={"purchases": [{"date": "2024-01-01", "investmentAmount": 1000, "btcPrice": 0, "btcReceived": 1}]},
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "ValidationError"
        assert data["message"] == "Request validation failed"
        assert len(data["details"]) == 1
        assert data["details"][0]["field"].startswith("body.purchases.0")
        assert set(data["details"][0]) == {"field", "message", "type"}

    def test_negative_current_price(self, client):
        response = client.post("/analytics", json={"currentPrice": -1})

        assert response.status_code == 422
        assert response.json()["details"][0]["field"].startswith("body.")

    def test_malformed_date(self, client):
        response = client.post(
            "/analytics/lump-sum",
            json={"purchases": [{"date": "yesterday", "investmentAmount": 1, "btcPrice": 1, "btcReceived": 1}]},
        )

        assert response.status_code == 422

    def test_missing_required_fields(self, client):
        response = client.post("/analytics/projection", json={})

        assert response.status_code == 422
        assert len(response.json()["details"]) == 4


# =============================================================================
# SERVICE ERRORS (400 / 500)
# =============================================================================

class TestServiceErrors:
    """Engine exceptions are mapped by the global handlers."""

    def test_validation_error_is_400(self, failing_client):
        response = failing_client.post("/analytics/projection", json=PROJECTION)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "InvalidProjectionError"
        assert "rejected by engine" in data["message"]
        assert data["details"] == {"field": "duration_months"}

    def test_service_error_is_500(self, failing_client):
        response = failing_client.post("/analytics/alerts/check", json={"currentPrice": 1})

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "ServiceError"
        assert data["message"] == "Alert evaluation failed"


# =============================================================================
# ROUTING ERRORS (404 / 405)
# =============================================================================

class TestRoutingErrors:
    """Router-level HTTP errors use the ErrorDetail format."""

    def test_unknown_route_is_404(self, client):
        response = client.get("/analytics/unknown")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "NotFoundError"
        assert data["message"] == "Not Found"
        assert data["details"] is None

    def test_wrong_method_is_405(self, client):
        response = client.get("/analytics")

        assert response.status_code == 405
        data = response.json()
        assert data["error"] == "MethodNotAllowedError"
        assert "POST" in response.headers["allow"]


# =============================================================================
# RATE LIMITING (429)
# =============================================================================

class TestRateLimitHandler:
    """Tests for the 429 response format."""

    def test_rate_limit_response(self):
        class _Limit:
            error_message = None
            limit = "60 per 1 minute"

        request = Request({"type": "http", "method": "POST", "path": "/analytics", "headers": [], "client": ("1.2.3.4", 1234)})

        response = asyncio.run(rate_limit_exceeded_handler(request, RateLimitExceeded(_Limit())))

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert b"RateLimitError" in response.body


# =============================================================================
# HEALTH
# =============================================================================

class TestHealth:
    """Global endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

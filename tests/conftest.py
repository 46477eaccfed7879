"""Shared test fixtures.

Provides:
- make_settings: Settings with every vendor credential blank unless overridden,
  isolated from the developer's environment and .env file
- Zero-latency stub instances for each capability
"""

from __future__ import annotations

from typing import Any

import pytest

from src.integrations.analytics.stub import StubAnalyticsProvider
from src.integrations.config import Settings
from src.integrations.crm.stub import StubCRMConnector
from src.integrations.fulfillment.stub import StubPrintfulConnector
from src.integrations.payments.stub import StubPaymentGateway

BLANK_CREDENTIALS: dict[str, Any] = {
    "STRIPE_SECRET_KEY": "",
    "STRIPE_WEBHOOK_SECRET": "",
    "SALESFORCE_USERNAME": "",
    "SALESFORCE_PASSWORD": "",
    "SALESFORCE_SECURITY_TOKEN": "",
    "SALESFORCE_LOGIN_URL": "https://login.salesforce.com",
    "PRINTFUL_API_KEY": "",
    "PRINTFUL_WEBHOOK_SECRET": "",
    "GA4_MEASUREMENT_ID": "",
    "GA4_API_SECRET": "",
    "GA4_PROPERTY_ID": "",
    "GOOGLE_SERVICE_ACCOUNT_FILE": "",
    "GOOGLE_SERVICE_ACCOUNT_JSON_B64": "",
    "STUB_LATENCY_ENABLED": False,
}


@pytest.fixture
def make_settings():
    """Factory for Settings built only from explicit values."""

    def _make(**overrides: Any) -> Settings:
        values = {**BLANK_CREDENTIALS, **overrides}
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def stub_payments() -> StubPaymentGateway:
    return StubPaymentGateway(min_latency_ms=0, max_latency_ms=0)


@pytest.fixture
def stub_crm() -> StubCRMConnector:
    return StubCRMConnector()


@pytest.fixture
def stub_fulfillment() -> StubPrintfulConnector:
    return StubPrintfulConnector(min_latency_ms=0, max_latency_ms=0)


@pytest.fixture
def stub_analytics() -> StubAnalyticsProvider:
    return StubAnalyticsProvider()

"""Analytics capability -- event submission and dashboard reporting.

- AnalyticsProvider: ABC for event tracking and the dashboard aggregate
- GoogleAnalyticsProvider: GA4 Measurement Protocol + Data API
- StubAnalyticsProvider: Fixed dataset for local development
- GA4AuthManager: Service account credentials and cached Data API service
"""

from src.integrations.analytics.adapter import AnalyticsProvider
from src.integrations.analytics.auth import GA4AuthManager
from src.integrations.analytics.google_analytics import GoogleAnalyticsProvider
from src.integrations.analytics.schemas import (
    AnalyticsDashboardData,
    AnalyticsEvent,
    DateRange,
    EcommerceFunnel,
    ProductRevenue,
    RevenueSummary,
    TopPage,
    TrafficSource,
)
from src.integrations.analytics.stub import StubAnalyticsProvider

__all__ = [
    "AnalyticsProvider",
    "GoogleAnalyticsProvider",
    "StubAnalyticsProvider",
    "GA4AuthManager",
    "AnalyticsEvent",
    "AnalyticsDashboardData",
    "DateRange",
    "EcommerceFunnel",
    "ProductRevenue",
    "RevenueSummary",
    "TopPage",
    "TrafficSource",
]

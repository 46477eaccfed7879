"""Network-free AnalyticsProvider with a fixed dashboard dataset.

The dataset ignores the requested date range; callers must not expect the
stub's numbers to vary with input.
"""

from __future__ import annotations

import structlog

from src.integrations.analytics.adapter import AnalyticsProvider
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
from src.integrations.core.latency import simulate_latency

logger = structlog.get_logger(__name__).bind(stub=True)

STUB_DASHBOARD = AnalyticsDashboardData(
    active_users=1_247,
    top_pages=[
        TopPage(path="/", views=15_832),
        TopPage(path="/products", views=8_456),
        TopPage(path="/products/featured-widget", views=3_291),
        TopPage(path="/about", views=2_104),
        TopPage(path="/blog", views=1_876),
        TopPage(path="/contact", views=1_234),
        TopPage(path="/cart", views=987),
        TopPage(path="/checkout", views=654),
    ],
    traffic_sources=[
        TrafficSource(source="google", sessions=6_543),
        TrafficSource(source="direct", sessions=4_321),
        TrafficSource(source="facebook", sessions=1_987),
        TrafficSource(source="email", sessions=1_234),
        TrafficSource(source="twitter", sessions=567),
        TrafficSource(source="referral", sessions=432),
    ],
    ecommerce_funnel=EcommerceFunnel(
        views=8_456,
        add_to_cart=2_134,
        begin_checkout=876,
        purchases=312,
    ),
    revenue=RevenueSummary(
        total=4_785_600,  # $47,856.00
        by_product=[
            ProductRevenue(product_id="prod_001", revenue=1_523_400),
            ProductRevenue(product_id="prod_002", revenue=1_256_700),
            ProductRevenue(product_id="prod_003", revenue=894_500),
            ProductRevenue(product_id="prod_004", revenue=621_000),
            ProductRevenue(product_id="prod_005", revenue=490_000),
        ],
    ),
)


class StubAnalyticsProvider(AnalyticsProvider):
    """Logs events and returns STUB_DASHBOARD."""

    def __init__(self, min_latency_ms: int = 0, max_latency_ms: int = 0) -> None:
        self._min_latency_ms = min_latency_ms
        self._max_latency_ms = max_latency_ms

    async def track_event(self, event: AnalyticsEvent) -> None:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)
        logger.info("ga4.event_tracked", event_name=event.name, params=event.params)

    async def track_server_event(self, client_id: str, events: list[AnalyticsEvent]) -> None:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)
        logger.info(
            "ga4.server_events_tracked",
            client_id=client_id,
            count=len(events),
            event_names=[e.name for e in events],
        )

    async def get_dashboard_data(self, date_range: DateRange) -> AnalyticsDashboardData:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)
        logger.info(
            "ga4.dashboard_fetched",
            start_date=date_range.start_date,
            end_date=date_range.end_date,
        )
        return STUB_DASHBOARD.model_copy(deep=True)

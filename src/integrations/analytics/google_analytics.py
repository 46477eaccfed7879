"""Google Analytics 4 implementation of AnalyticsProvider.

- Event submission goes through the Measurement Protocol collect endpoint
  (httpx).
- Dashboard data comes from the GA4 Data API ``properties.runReport``
  (google-api-python-client, synchronous, run in ``asyncio.to_thread``).

The five dashboard reports run concurrently and the aggregate fails as a whole
if any report fails.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import structlog

from src.integrations.analytics.adapter import AnalyticsProvider
from src.integrations.analytics.auth import GA4AuthManager
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
from src.integrations.core.monitoring import track_vendor_call
from src.integrations.core.money import parse_minor_units
from src.integrations.errors import AnalyticsDeliveryError

logger = structlog.get_logger(__name__)

MEASUREMENT_PROTOCOL_URL = "https://www.google-analytics.com/mp/collect"

TOP_PAGES_LIMIT = 10
TRAFFIC_SOURCES_LIMIT = 10
PRODUCT_REVENUE_LIMIT = 20


# ── Report Row Helpers ──────────────────────────────────────────────────────


def _rows(report: dict[str, Any] | None) -> list[dict[str, Any]]:
    return (report or {}).get("rows") or []


def _dimension(row: dict[str, Any], index: int = 0) -> str:
    values = row.get("dimensionValues") or []
    if index >= len(values):
        return ""
    return values[index].get("value") or ""


def _metric(row: dict[str, Any], index: int = 0) -> str | None:
    values = row.get("metricValues") or []
    if index >= len(values):
        return None
    return values[index].get("value")


def parse_count(value: str | None) -> int:
    """Parse a GA count metric. Missing or malformed values count as 0."""
    if value is None or value == "":
        return 0
    try:
        number = Decimal(value)
    except InvalidOperation:
        return 0
    if not number.is_finite():
        return 0
    return int(number)


def _first_row_metric(report: dict[str, Any], index: int = 0) -> str | None:
    rows = _rows(report)
    if not rows:
        return None
    return _metric(rows[0], index)


class GoogleAnalyticsProvider(AnalyticsProvider):
    """AnalyticsProvider backed by GA4.

    Args:
        measurement_id: GA4 web stream measurement ID (G-XXXXXXXXXX).
        api_secret: Measurement Protocol API secret for the stream.
        property_id: Numeric GA4 property ID for the Data API.
        auth_manager: Service account auth for the Data API.
    """

    TIMEOUT_COLLECT = 10.0

    def __init__(
        self,
        measurement_id: str,
        api_secret: str,
        property_id: str,
        auth_manager: GA4AuthManager,
    ) -> None:
        self._measurement_id = measurement_id
        self._api_secret = api_secret
        self._property = f"properties/{property_id}"
        self._auth = auth_manager
        logger.info("ga4.provider_initialized", property=self._property)

    # ── Event Tracking ────────────────────────────────────────────────────

    async def track_event(self, event: AnalyticsEvent) -> None:
        # Browser events go straight to GA4; nothing to send from here
        logger.warning(
            "ga4.track_event_server_side",
            event_name=event.name,
            hint="use track_server_event for server-to-server tracking",
        )

    async def track_server_event(self, client_id: str, events: list[AnalyticsEvent]) -> None:
        payload = {
            "client_id": client_id,
            "events": [{"name": e.name, "params": e.params} for e in events],
        }
        try:
            async with track_vendor_call("ga4", "collect"):
                async with httpx.AsyncClient(timeout=self.TIMEOUT_COLLECT) as client:
                    response = await client.post(
                        MEASUREMENT_PROTOCOL_URL,
                        params={
                            "measurement_id": self._measurement_id,
                            "api_secret": self._api_secret,
                        },
                        json=payload,
                    )
                if not response.is_success:
                    raise AnalyticsDeliveryError(response.status_code, response.reason_phrase)
        except Exception as exc:
            logger.error("ga4.track_server_event_failed", client_id=client_id, error=str(exc))
            raise

        logger.info("ga4.server_events_tracked", client_id=client_id, count=len(events))

    # ── Dashboard ─────────────────────────────────────────────────────────

    async def get_dashboard_data(self, date_range: DateRange) -> AnalyticsDashboardData:
        try:
            # Build the cached service once before fanning out
            await asyncio.to_thread(self._auth.get_data_service)
            (
                active_users,
                top_pages,
                traffic_sources,
                funnel,
                revenue,
            ) = await asyncio.gather(
                self._active_users(date_range),
                self._top_pages(date_range),
                self._traffic_sources(date_range),
                self._ecommerce_funnel(date_range),
                self._revenue(date_range),
            )
        except Exception as exc:
            logger.error(
                "ga4.dashboard_fetch_failed",
                start_date=date_range.start_date,
                end_date=date_range.end_date,
                error=str(exc),
            )
            raise

        logger.info(
            "ga4.dashboard_fetched",
            start_date=date_range.start_date,
            end_date=date_range.end_date,
        )

        return AnalyticsDashboardData(
            active_users=active_users,
            top_pages=top_pages,
            traffic_sources=traffic_sources,
            ecommerce_funnel=funnel,
            revenue=revenue,
        )

    async def _run_report(self, report: str, body: dict[str, Any]) -> dict[str, Any]:
        """Execute one runReport call in a worker thread."""

        def _execute() -> dict[str, Any]:
            service = self._auth.get_data_service()
            request = service.properties().runReport(property=self._property, body=body)
            return request.execute(http=self._auth.authorized_http())

        async with track_vendor_call("ga4", report):
            return await asyncio.to_thread(_execute) or {}

    @staticmethod
    def _date_ranges(date_range: DateRange) -> list[dict[str, str]]:
        return [{"startDate": date_range.start_date, "endDate": date_range.end_date}]

    async def _active_users(self, date_range: DateRange) -> int:
        report = await self._run_report(
            "active_users",
            {
                "dateRanges": self._date_ranges(date_range),
                "metrics": [{"name": "activeUsers"}],
            },
        )
        return parse_count(_first_row_metric(report))

    async def _top_pages(self, date_range: DateRange) -> list[TopPage]:
        report = await self._run_report(
            "top_pages",
            {
                "dateRanges": self._date_ranges(date_range),
                "dimensions": [{"name": "pagePath"}],
                "metrics": [{"name": "screenPageViews"}],
                "orderBys": [{"metric": {"metricName": "screenPageViews"}, "desc": True}],
                "limit": TOP_PAGES_LIMIT,
            },
        )
        return [
            TopPage(path=_dimension(row), views=parse_count(_metric(row)))
            for row in _rows(report)
        ]

    async def _traffic_sources(self, date_range: DateRange) -> list[TrafficSource]:
        report = await self._run_report(
            "traffic_sources",
            {
                "dateRanges": self._date_ranges(date_range),
                "dimensions": [{"name": "sessionSource"}],
                "metrics": [{"name": "sessions"}],
                "orderBys": [{"metric": {"metricName": "sessions"}, "desc": True}],
                "limit": TRAFFIC_SOURCES_LIMIT,
            },
        )
        return [
            TrafficSource(source=_dimension(row), sessions=parse_count(_metric(row)))
            for row in _rows(report)
        ]

    async def _ecommerce_funnel(self, date_range: DateRange) -> EcommerceFunnel:
        report = await self._run_report(
            "ecommerce_funnel",
            {
                "dateRanges": self._date_ranges(date_range),
                "metrics": [
                    {"name": "itemViews"},
                    {"name": "addToCarts"},
                    {"name": "checkouts"},
                    {"name": "transactions"},
                ],
            },
        )
        return EcommerceFunnel(
            views=parse_count(_first_row_metric(report, 0)),
            add_to_cart=parse_count(_first_row_metric(report, 1)),
            begin_checkout=parse_count(_first_row_metric(report, 2)),
            purchases=parse_count(_first_row_metric(report, 3)),
        )

    async def _revenue(self, date_range: DateRange) -> RevenueSummary:
        total_report = await self._run_report(
            "revenue_total",
            {
                "dateRanges": self._date_ranges(date_range),
                "metrics": [{"name": "totalRevenue"}],
            },
        )
        product_report = await self._run_report(
            "revenue_by_product",
            {
                "dateRanges": self._date_ranges(date_range),
                "dimensions": [{"name": "itemId"}],
                "metrics": [{"name": "itemRevenue"}],
                "orderBys": [{"metric": {"metricName": "itemRevenue"}, "desc": True}],
                "limit": PRODUCT_REVENUE_LIMIT,
            },
        )
        return RevenueSummary(
            total=parse_minor_units(_first_row_metric(total_report)),
            by_product=[
                ProductRevenue(
                    product_id=_dimension(row),
                    revenue=parse_minor_units(_metric(row)),
                )
                for row in _rows(product_report)
            ],
        )

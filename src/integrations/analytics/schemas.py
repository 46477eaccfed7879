"""Canonical analytics DTOs.

AnalyticsDashboardData is a read model rebuilt on every query. Every numeric
field defaults to 0 and every list to [] so a sparse vendor report never
leaves a hole. Revenue is in minor units.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from src.integrations.core.schemas import CanonicalModel


class AnalyticsEvent(CanonicalModel):
    name: str
    params: dict[str, Any] = Field(default_factory=dict)


class DateRange(CanonicalModel):
    """Report window. ISO dates or GA relative dates (``7daysAgo``, ``today``)."""

    start_date: str
    end_date: str


class TopPage(CanonicalModel):
    path: str = ""
    views: int = 0


class TrafficSource(CanonicalModel):
    source: str = ""
    sessions: int = 0


class EcommerceFunnel(CanonicalModel):
    views: int = 0
    add_to_cart: int = 0
    begin_checkout: int = 0
    purchases: int = 0


class ProductRevenue(CanonicalModel):
    product_id: str = ""
    revenue: int = 0  # minor units


class RevenueSummary(CanonicalModel):
    total: int = 0  # minor units
    by_product: list[ProductRevenue] = Field(default_factory=list)


class AnalyticsDashboardData(CanonicalModel):
    active_users: int = 0
    top_pages: list[TopPage] = Field(default_factory=list)
    traffic_sources: list[TrafficSource] = Field(default_factory=list)
    ecommerce_funnel: EcommerceFunnel = Field(default_factory=EcommerceFunnel)
    revenue: RevenueSummary = Field(default_factory=RevenueSummary)

"""Analytics provider abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.integrations.analytics.schemas import (
    AnalyticsDashboardData,
    AnalyticsEvent,
    DateRange,
)


class AnalyticsProvider(ABC):
    """Abstract interface for web analytics.

    Methods:
        track_event: Client-side event hook. Server-side implementations only log.
        track_server_event: Submit events server-to-server for a client ID.
        get_dashboard_data: Build the dashboard aggregate for a date range.
    """

    @abstractmethod
    async def track_event(self, event: AnalyticsEvent) -> None:
        ...

    @abstractmethod
    async def track_server_event(self, client_id: str, events: list[AnalyticsEvent]) -> None:
        ...

    @abstractmethod
    async def get_dashboard_data(self, date_range: DateRange) -> AnalyticsDashboardData:
        ...

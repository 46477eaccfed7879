"""Prometheus metrics and Sentry integration.

Provides:
- MetricsMiddleware: ASGI middleware for HTTP request metrics
- track_vendor_call(): Context manager for outbound vendor call metrics
- record_webhook(): Counter for inbound webhook outcomes
- init_sentry(): Initialize Sentry when a DSN is configured
- get_metrics_response(): Prometheus exposition for the /metrics route
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Vendor Metrics ───────────────────────────────────────────────────────────

vendor_requests_total = Counter(
    "vendor_requests_total",
    "Total outbound vendor API calls",
    ["provider", "operation", "status"],
)

vendor_request_duration_seconds = Histogram(
    "vendor_request_duration_seconds",
    "Outbound vendor API call duration in seconds",
    ["provider", "operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# ── Webhook Metrics ──────────────────────────────────────────────────────────

webhooks_received_total = Counter(
    "webhooks_received_total",
    "Inbound webhooks by provider and outcome",
    ["provider", "outcome"],
)


# ── Metrics Middleware ───────────────────────────────────────────────────────


class MetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records Prometheus metrics for every HTTP request.

    Skips the /metrics endpoint itself to avoid self-referential counting.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        endpoint = request.url.path

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=str(response.status_code),
        ).inc()

        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


# ── Vendor Call Helper ───────────────────────────────────────────────────────


@asynccontextmanager
async def track_vendor_call(provider: str, operation: str) -> AsyncGenerator[None, None]:
    """Context manager that records count and duration of a vendor call.

    Usage:
        async with track_vendor_call("printful", "get_order"):
            response = await client.get(...)

    The call is counted as an error when the body raises; the exception
    propagates unchanged.
    """
    start_time = time.perf_counter()
    status = "success"

    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.perf_counter() - start_time
        vendor_requests_total.labels(
            provider=provider,
            operation=operation,
            status=status,
        ).inc()
        vendor_request_duration_seconds.labels(
            provider=provider,
            operation=operation,
        ).observe(duration)


def record_webhook(provider: str, outcome: str) -> None:
    """Count an inbound webhook (outcome: missing_signature, rejected, processed)."""
    webhooks_received_total.labels(provider=provider, outcome=outcome).inc()


# ── Sentry Integration ───────────────────────────────────────────────────────


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK.

    Args:
        dsn: Sentry DSN string.
        environment: Deployment environment (development, staging, production).
    """
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration

    traces_sample_rate = 0.1 if environment == "production" else 1.0

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
        ],
        # Webhook bodies carry customer data
        send_default_pii=False,
    )


# ── Metrics Endpoint ─────────────────────────────────────────────────────────


def get_metrics_response() -> Response:
    """Generate Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )

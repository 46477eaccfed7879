"""Tests for metrics, request logging middleware and webhook dispatch."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from src.integrations.api.middleware.logging import LoggingMiddleware
from src.integrations.core.monitoring import (
    MetricsMiddleware,
    get_metrics_response,
    record_webhook,
    track_vendor_call,
)
from src.integrations.fulfillment.schemas import (
    PrintfulWebhookData,
    PrintfulWebhookEvent,
    PrintfulWebhookShipment,
)
from src.integrations.payments.schemas import WebhookEvent
from src.integrations.webhooks.dispatcher import (
    DownstreamEvent,
    dispatch_fulfillment_event,
    dispatch_payment_event,
)


def _vendor_count(provider: str, operation: str, status: str) -> float:
    value = REGISTRY.get_sample_value(
        "vendor_requests_total",
        {"provider": provider, "operation": operation, "status": status},
    )
    return value or 0.0


class TestTrackVendorCall:
    async def test_counts_success(self):
        before = _vendor_count("testvendor", "ok_op", "success")

        async with track_vendor_call("testvendor", "ok_op"):
            pass

        assert _vendor_count("testvendor", "ok_op", "success") == before + 1

    async def test_counts_error_and_reraises(self):
        before = _vendor_count("testvendor", "bad_op", "error")

        with pytest.raises(RuntimeError):
            async with track_vendor_call("testvendor", "bad_op"):
                raise RuntimeError("boom")

        assert _vendor_count("testvendor", "bad_op", "error") == before + 1
        assert _vendor_count("testvendor", "bad_op", "success") == 0


class TestRecordWebhook:
    def test_increments_outcome(self):
        labels = {"provider": "testvendor", "outcome": "processed"}
        before = REGISTRY.get_sample_value("webhooks_received_total", labels) or 0.0

        record_webhook("testvendor", "processed")

        assert REGISTRY.get_sample_value("webhooks_received_total", labels) == before + 1

    def test_exposition_contains_metric(self):
        record_webhook("testvendor", "rejected")
        body = get_metrics_response().body.decode()
        assert "webhooks_received_total" in body


class TestMiddleware:
    async def test_request_id_header_and_http_metrics(self):
        app = FastAPI()
        app.add_middleware(LoggingMiddleware)
        app.add_middleware(MetricsMiddleware)

        @app.get("/ping")
        async def ping():
            return {"pong": True}

        labels = {"method": "GET", "endpoint": "/ping", "status_code": "200"}
        before = REGISTRY.get_sample_value("http_requests_total", labels) or 0.0

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            first = await ac.get("/ping")
            second = await ac.get("/ping")

        assert first.headers["X-Request-ID"]
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]
        assert REGISTRY.get_sample_value("http_requests_total", labels) == before + 2


class TestDispatcher:
    @pytest.mark.parametrize(
        ("event_type", "downstream"),
        [
            ("payment_intent.succeeded", DownstreamEvent.ORDER_CONFIRMED),
            ("payment_intent.payment_failed", DownstreamEvent.PAYMENT_FAILED),
            ("charge.refunded", DownstreamEvent.ORDER_REFUNDED),
            ("customer.created", None),
        ],
    )
    def test_payment_events(self, event_type, downstream):
        event = WebhookEvent(id="evt_1", type=event_type, data={})
        assert dispatch_payment_event(event) == downstream

    @pytest.mark.parametrize(
        ("event_type", "downstream"),
        [
            ("package_shipped", DownstreamEvent.ORDER_SHIPPED),
            ("package_returned", DownstreamEvent.ORDER_RETURNED),
            ("order_failed", DownstreamEvent.FULFILLMENT_FAILED),
            ("order_canceled", DownstreamEvent.FULFILLMENT_CANCELED),
            ("product_synced", DownstreamEvent.PRODUCT_SYNCED),
            ("stock_updated", DownstreamEvent.STOCK_UPDATED),
            ("order_put_hold", None),
        ],
    )
    def test_fulfillment_events(self, event_type, downstream):
        event = PrintfulWebhookEvent(
            type=event_type,
            data=PrintfulWebhookData(shipment=PrintfulWebhookShipment(id=1, tracking_number="9400")),
        )
        assert dispatch_fulfillment_event(event) == downstream

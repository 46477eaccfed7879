"""Webhook event dispatcher -- maps verified vendor events to downstream platform events.

Dispatch is a table lookup per provider. The downstream event name is logged
and returned; publishing it to the event bus is the caller's concern.
Event types missing from the tables are logged as unhandled and return None,
and the webhook is still acknowledged so the vendor does not keep retrying.
"""

from __future__ import annotations

from enum import Enum

import structlog

from src.integrations.fulfillment.schemas import PrintfulWebhookEvent
from src.integrations.payments.schemas import WebhookEvent

logger = structlog.get_logger(__name__)


class DownstreamEvent(str, Enum):
    """Platform events raised in response to vendor webhooks."""

    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    ORDER_REFUNDED = "ORDER_REFUNDED"
    ORDER_SHIPPED = "ORDER_SHIPPED"
    ORDER_RETURNED = "ORDER_RETURNED"
    FULFILLMENT_FAILED = "FULFILLMENT_FAILED"
    FULFILLMENT_CANCELED = "FULFILLMENT_CANCELED"
    PRODUCT_SYNCED = "PRODUCT_SYNCED"
    STOCK_UPDATED = "STOCK_UPDATED"


# Stripe event type -> downstream event
STRIPE_EVENT_MAP: dict[str, DownstreamEvent] = {
    "payment_intent.succeeded": DownstreamEvent.ORDER_CONFIRMED,
    "payment_intent.payment_failed": DownstreamEvent.PAYMENT_FAILED,
    "charge.refunded": DownstreamEvent.ORDER_REFUNDED,
}

# Printful event type -> downstream event
PRINTFUL_EVENT_MAP: dict[str, DownstreamEvent] = {
    "package_shipped": DownstreamEvent.ORDER_SHIPPED,
    "package_returned": DownstreamEvent.ORDER_RETURNED,
    "order_failed": DownstreamEvent.FULFILLMENT_FAILED,
    "order_canceled": DownstreamEvent.FULFILLMENT_CANCELED,
    "product_synced": DownstreamEvent.PRODUCT_SYNCED,
    "stock_updated": DownstreamEvent.STOCK_UPDATED,
}

# Downstream events that indicate something went wrong for the customer
_ALERT_EVENTS = frozenset(
    {
        DownstreamEvent.PAYMENT_FAILED,
        DownstreamEvent.ORDER_RETURNED,
        DownstreamEvent.FULFILLMENT_FAILED,
    }
)


def _emit(provider: str, event_type: str, downstream: DownstreamEvent, **context: object) -> None:
    log = logger.warning if downstream in _ALERT_EVENTS else logger.info
    log(
        "webhook.dispatched",
        provider=provider,
        event_type=event_type,
        downstream_event=downstream.value,
        **context,
    )


def dispatch_payment_event(event: WebhookEvent) -> DownstreamEvent | None:
    """Dispatch a verified Stripe event. Returns the downstream event, if any."""
    downstream = STRIPE_EVENT_MAP.get(event.type)
    if downstream is None:
        logger.info("webhook.unhandled_event", provider="stripe", event_type=event.type)
        return None

    _emit("stripe", event.type, downstream, event_id=event.id, data=event.data)
    return downstream


def dispatch_fulfillment_event(event: PrintfulWebhookEvent) -> DownstreamEvent | None:
    """Dispatch a verified Printful event. Returns the downstream event, if any."""
    downstream = PRINTFUL_EVENT_MAP.get(event.type)
    if downstream is None:
        logger.info("webhook.unhandled_event", provider="printful", event_type=event.type)
        return None

    data = event.data
    _emit(
        "printful",
        event.type,
        downstream,
        order_id=data.order.id if data.order else None,
        tracking_number=data.shipment.tracking_number if data.shipment else None,
        reason=data.reason,
    )
    return downstream

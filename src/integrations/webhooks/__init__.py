"""Webhook dispatch -- vendor event type -> downstream platform event tables."""

from src.integrations.webhooks.dispatcher import (
    PRINTFUL_EVENT_MAP,
    STRIPE_EVENT_MAP,
    DownstreamEvent,
    dispatch_fulfillment_event,
    dispatch_payment_event,
)

__all__ = [
    "DownstreamEvent",
    "STRIPE_EVENT_MAP",
    "PRINTFUL_EVENT_MAP",
    "dispatch_payment_event",
    "dispatch_fulfillment_event",
]

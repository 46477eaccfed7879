"""Fulfillment capability -- Printful print-on-demand connector.

- FulfillmentConnector: ABC for product sync, orders, shipping and webhooks
- PrintfulConnector: Live Printful REST API over httpx
- StubPrintfulConnector: Synthetic orders, shipments and shipping tiers
"""

from src.integrations.fulfillment.adapter import FulfillmentConnector
from src.integrations.fulfillment.printful import PrintfulConnector, compute_printful_signature
from src.integrations.fulfillment.schemas import (
    PrintfulCancelResult,
    PrintfulCarrier,
    PrintfulListParams,
    PrintfulOrderData,
    PrintfulOrderResponse,
    PrintfulProductData,
    PrintfulShippingParams,
    PrintfulShippingRate,
    PrintfulSyncProductResponse,
    PrintfulSyncResult,
    PrintfulWebhookEvent,
)
from src.integrations.fulfillment.stub import StubPrintfulConnector

__all__ = [
    "FulfillmentConnector",
    "PrintfulConnector",
    "StubPrintfulConnector",
    "compute_printful_signature",
    "PrintfulProductData",
    "PrintfulSyncResult",
    "PrintfulSyncProductResponse",
    "PrintfulListParams",
    "PrintfulOrderData",
    "PrintfulOrderResponse",
    "PrintfulCancelResult",
    "PrintfulShippingParams",
    "PrintfulShippingRate",
    "PrintfulCarrier",
    "PrintfulWebhookEvent",
]

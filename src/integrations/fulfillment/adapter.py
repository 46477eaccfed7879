"""Fulfillment connector abstract base class -- Printful-shaped print-on-demand contract.

Error channels:
- sync_product and cancel_order return a result with success=False on vendor error.
- Every other operation raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

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


class FulfillmentConnector(ABC):
    """Abstract interface for print-on-demand fulfillment.

    Methods:
        sync_product: Push a product and its variants to the fulfiller.
        update_product_stock: Set stock for one sync variant.
        get_sync_product: Fetch a sync product with variant details.
        list_sync_products: List sync product summaries.
        create_order: Create a draft order.
        get_order: Fetch an order with shipments and costs.
        confirm_order: Submit a draft order for fulfillment.
        cancel_order: Cancel an order, reporting the outcome as a result.
        calculate_shipping_rates: Quote shipping for a recipient and items.
        get_shipping_carriers: List available carriers.
        handle_webhook: Verify and parse an inbound webhook body.
    """

    # ── Product Sync ──────────────────────────────────────────────────────

    @abstractmethod
    async def sync_product(self, product_data: PrintfulProductData) -> PrintfulSyncResult:
        ...

    @abstractmethod
    async def update_product_stock(
        self, sync_product_id: str, variant_id: str, quantity: int
    ) -> None:
        ...

    @abstractmethod
    async def get_sync_product(self, sync_product_id: str) -> PrintfulSyncProductResponse:
        ...

    @abstractmethod
    async def list_sync_products(
        self, params: PrintfulListParams | None = None
    ) -> list[PrintfulSyncProductResponse]:
        ...

    # ── Orders ────────────────────────────────────────────────────────────

    @abstractmethod
    async def create_order(self, order_data: PrintfulOrderData) -> PrintfulOrderResponse:
        ...

    @abstractmethod
    async def get_order(self, order_id: str) -> PrintfulOrderResponse:
        ...

    @abstractmethod
    async def confirm_order(self, order_id: str) -> PrintfulOrderResponse:
        ...

    @abstractmethod
    async def cancel_order(self, order_id: str) -> PrintfulCancelResult:
        ...

    # ── Shipping ──────────────────────────────────────────────────────────

    @abstractmethod
    async def calculate_shipping_rates(
        self, params: PrintfulShippingParams
    ) -> list[PrintfulShippingRate]:
        ...

    @abstractmethod
    async def get_shipping_carriers(self) -> list[PrintfulCarrier]:
        ...

    # ── Webhooks ──────────────────────────────────────────────────────────

    @abstractmethod
    async def handle_webhook(self, payload: bytes, signature: str) -> PrintfulWebhookEvent:
        ...

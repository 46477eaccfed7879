"""Network-free FulfillmentConnector returning internally consistent Printful data."""

from __future__ import annotations

import random
import time
from datetime import datetime, timedelta, timezone

import structlog

from src.integrations.core.latency import simulate_latency
from src.integrations.fulfillment.adapter import FulfillmentConnector
from src.integrations.fulfillment.schemas import (
    PrintfulCancelResult,
    PrintfulCarrier,
    PrintfulFile,
    PrintfulListParams,
    PrintfulOrderCosts,
    PrintfulOrderData,
    PrintfulOrderResponse,
    PrintfulProductData,
    PrintfulShipment,
    PrintfulShippingParams,
    PrintfulShippingRate,
    PrintfulSyncedVariant,
    PrintfulSyncProductResponse,
    PrintfulSyncResult,
    PrintfulSyncVariant,
    PrintfulWebhookData,
    PrintfulWebhookEvent,
    PrintfulWebhookOrder,
    PrintfulWebhookShipment,
)

logger = structlog.get_logger(__name__).bind(stub=True)

DAY_SECONDS = 86400

STUB_TRACKING_NUMBER = "9400100000000000000001"
STUB_TRACKING_URL = (
    f"https://tools.usps.com/go/TrackConfirmAction?tLabels={STUB_TRACKING_NUMBER}"
)

STUB_COSTS = PrintfulOrderCosts(
    currency="USD",
    subtotal="20.00",
    discount="0.00",
    shipping="4.99",
    digitization="0.00",
    additional_fee="0.00",
    fulfillment_fee="5.00",
    retail_delivery_costs="9.99",
    tax="0.00",
    vat="0.00",
    total="29.99",
)

# (id, name, rate, min days, max days)
STUB_SHIPPING_TIERS: list[tuple[str, str, str, int, int]] = [
    ("STANDARD", "Standard Shipping", "4.99", 5, 10),
    ("EXPRESS", "Express Shipping", "14.99", 2, 4),
    ("OVERNIGHT", "Overnight Shipping", "29.99", 1, 1),
]

STUB_CARRIERS: list[PrintfulCarrier] = [
    PrintfulCarrier(code="USPS", name="United States Postal Service"),
    PrintfulCarrier(code="FEDEX", name="FedEx"),
    PrintfulCarrier(code="UPS", name="United Parcel Service"),
]


def _now() -> int:
    return int(time.time())


def _date_offset(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).date().isoformat()


def _numeric_id(value: str, fallback: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


class StubPrintfulConnector(FulfillmentConnector):
    """Synthetic Printful backend for local development and tests.

    get_order always includes one tracked USPS shipment, and shipping quotes
    are always the STANDARD, EXPRESS and OVERNIGHT tiers.
    """

    def __init__(self, min_latency_ms: int = 200, max_latency_ms: int = 500) -> None:
        self._min_latency_ms = min_latency_ms
        self._max_latency_ms = max_latency_ms

    async def _delay(self) -> None:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)

    # ── Product Sync ──────────────────────────────────────────────────────

    async def sync_product(self, product_data: PrintfulProductData) -> PrintfulSyncResult:
        await self._delay()
        sync_product_id = str(random.randint(100000, 1099998))

        logger.info(
            "printful.product_synced",
            sync_product_id=sync_product_id,
            variant_count=len(product_data.sync_variants),
        )

        return PrintfulSyncResult(
            success=True,
            sync_product_id=sync_product_id,
            sync_variants=[
                PrintfulSyncedVariant(
                    id=1000000 + idx,
                    external_id=v.external_id,
                    variant_id=v.variant_id,
                )
                for idx, v in enumerate(product_data.sync_variants)
            ],
        )

    async def update_product_stock(
        self, sync_product_id: str, variant_id: str, quantity: int
    ) -> None:
        await self._delay()
        logger.info(
            "printful.stock_updated",
            sync_product_id=sync_product_id,
            variant_id=variant_id,
            quantity=quantity,
        )

    async def get_sync_product(self, sync_product_id: str) -> PrintfulSyncProductResponse:
        await self._delay()
        product_id = _numeric_id(sync_product_id)
        logger.info("printful.sync_product_fetched", sync_product_id=sync_product_id)

        return PrintfulSyncProductResponse(
            id=product_id,
            external_id=f"product_{sync_product_id}",
            name="Stub T-Shirt",
            variants=[
                PrintfulSyncVariant(
                    id=1000001,
                    external_id="variant_1",
                    sync_product_id=product_id,
                    variant_id=4012,
                    product_id=71,
                    retail_price="24.99",
                    currency="USD",
                    files=[
                        PrintfulFile(
                            id=500001,
                            url="https://files.printful.com/files/stub/mockup.png",
                            type="mockup",
                        )
                    ],
                )
            ],
        )

    async def list_sync_products(
        self, params: PrintfulListParams | None = None
    ) -> list[PrintfulSyncProductResponse]:
        await self._delay()
        limit = (params.limit if params else None) or 20
        logger.info("printful.sync_products_listed", limit=limit)

        return [
            PrintfulSyncProductResponse(id=123456, external_id="product_123", name="Stub T-Shirt 1"),
            PrintfulSyncProductResponse(id=123457, external_id="product_124", name="Stub Hoodie"),
        ]

    # ── Orders ────────────────────────────────────────────────────────────

    async def create_order(self, order_data: PrintfulOrderData) -> PrintfulOrderResponse:
        await self._delay()
        order_id = random.randint(100000, 1099998)
        now = _now()

        logger.info(
            "printful.order_created",
            order_id=order_id,
            external_id=order_data.external_id,
            item_count=len(order_data.items),
        )

        return PrintfulOrderResponse(
            id=order_id,
            external_id=order_data.external_id,
            status="draft",
            shipping=order_data.shipping or "STANDARD",
            created=now,
            updated=now,
            costs=STUB_COSTS.model_copy(),
        )

    async def get_order(self, order_id: str) -> PrintfulOrderResponse:
        await self._delay()
        now = _now()
        logger.info("printful.order_fetched", order_id=order_id)

        return PrintfulOrderResponse(
            id=_numeric_id(order_id),
            external_id=f"order_{order_id}",
            status="fulfilled",
            shipping="STANDARD",
            created=now - DAY_SECONDS * 5,
            updated=now - DAY_SECONDS,
            shipments=[
                PrintfulShipment(
                    id=50001,
                    carrier="USPS",
                    service="USPS First Class",
                    tracking_number=STUB_TRACKING_NUMBER,
                    tracking_url=STUB_TRACKING_URL,
                    created=now - DAY_SECONDS * 3,
                    ship_date=_date_offset(-3),
                    estimated_delivery=_date_offset(2),
                )
            ],
            costs=STUB_COSTS.model_copy(),
        )

    async def confirm_order(self, order_id: str) -> PrintfulOrderResponse:
        await self._delay()
        now = _now()
        logger.info("printful.order_confirmed", order_id=order_id, status="pending")

        return PrintfulOrderResponse(
            id=_numeric_id(order_id),
            external_id=f"order_{order_id}",
            status="pending",
            shipping="STANDARD",
            created=now,
            updated=now,
        )

    async def cancel_order(self, order_id: str) -> PrintfulCancelResult:
        await self._delay()
        logger.info("printful.order_canceled", order_id=order_id)
        return PrintfulCancelResult(success=True, order_id=order_id)

    # ── Shipping ──────────────────────────────────────────────────────────

    async def calculate_shipping_rates(
        self, params: PrintfulShippingParams
    ) -> list[PrintfulShippingRate]:
        await self._delay()
        logger.info(
            "printful.shipping_rates_calculated",
            country_code=params.recipient.country_code,
            item_count=len(params.items),
        )

        return [
            PrintfulShippingRate(
                id=tier_id,
                name=name,
                rate=rate,
                currency=params.currency,
                min_delivery_days=min_days,
                max_delivery_days=max_days,
            )
            for tier_id, name, rate, min_days, max_days in STUB_SHIPPING_TIERS
        ]

    async def get_shipping_carriers(self) -> list[PrintfulCarrier]:
        await self._delay()
        return [c.model_copy() for c in STUB_CARRIERS]

    # ── Webhooks ──────────────────────────────────────────────────────────

    async def handle_webhook(self, payload: bytes, signature: str) -> PrintfulWebhookEvent:
        """Always yields a canned package_shipped event."""
        await self._delay()
        logger.info("printful.webhook_received", signature_prefix=signature[:20])

        return PrintfulWebhookEvent(
            type="package_shipped",
            data=PrintfulWebhookData(
                order=PrintfulWebhookOrder(id=123456, external_id="order_123", status="fulfilled"),
                shipment=PrintfulWebhookShipment(
                    id=50001,
                    carrier="USPS",
                    service="USPS First Class",
                    tracking_number=STUB_TRACKING_NUMBER,
                    tracking_url=STUB_TRACKING_URL,
                ),
            ),
        )

"""Canonical Printful DTOs.

Money on the way in (variant and order item retail prices) is in minor units.
Money on the way out (costs, rates, sync variant prices) stays a decimal
string exactly as Printful reports it; it is never converted to float.
"""

from __future__ import annotations

from pydantic import Field

from src.integrations.core.schemas import CanonicalModel


# ── Product Sync ────────────────────────────────────────────────────────────


class PrintfulFile(CanonicalModel):
    """Print or mockup file attached to a sync variant."""

    id: int | None = None
    url: str
    type: str | None = None


class PrintfulSyncVariantInput(CanonicalModel):
    external_id: str
    variant_id: int
    retail_price: int  # minor units
    files: list[PrintfulFile] = Field(default_factory=list)


class PrintfulProductData(CanonicalModel):
    external_id: str | None = None
    name: str | None = None
    thumbnail: str | None = None
    sync_variants: list[PrintfulSyncVariantInput] = Field(default_factory=list)


class PrintfulSyncedVariant(CanonicalModel):
    id: int
    external_id: str | None = None
    variant_id: int


class PrintfulSyncResult(CanonicalModel):
    success: bool
    sync_product_id: str = ""
    sync_variants: list[PrintfulSyncedVariant] = Field(default_factory=list)
    error: str | None = None


class PrintfulSyncVariant(CanonicalModel):
    id: int
    external_id: str | None = None
    sync_product_id: int | None = None
    variant_id: int | None = None
    product_id: int | None = None
    retail_price: str | None = None
    currency: str | None = None
    files: list[PrintfulFile] = Field(default_factory=list)


class PrintfulSyncProductResponse(CanonicalModel):
    id: int
    external_id: str | None = None
    name: str | None = None
    variants: list[PrintfulSyncVariant] = Field(default_factory=list)


class PrintfulListParams(CanonicalModel):
    status: str | None = None
    limit: int | None = None
    offset: int | None = None


# ── Orders ──────────────────────────────────────────────────────────────────


class PrintfulRecipient(CanonicalModel):
    name: str
    address1: str
    address2: str | None = None
    city: str
    state_code: str | None = None
    country_code: str
    zip: str
    phone: str | None = None
    email: str | None = None


class PrintfulOrderItemInput(CanonicalModel):
    sync_variant_id: int
    quantity: int
    retail_price: int  # minor units


class PrintfulOrderData(CanonicalModel):
    external_id: str
    recipient: PrintfulRecipient
    items: list[PrintfulOrderItemInput]
    shipping: str | None = None


class PrintfulShipment(CanonicalModel):
    id: int
    carrier: str | None = None
    service: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    created: int | None = None
    ship_date: str | None = None
    estimated_delivery: str | None = None


class PrintfulOrderCosts(CanonicalModel):
    """Order cost breakdown as Printful reports it (decimal strings)."""

    currency: str | None = None
    subtotal: str | None = None
    discount: str | None = None
    shipping: str | None = None
    digitization: str | None = None
    additional_fee: str | None = None
    fulfillment_fee: str | None = None
    retail_delivery_costs: str | None = None
    tax: str | None = None
    vat: str | None = None
    total: str | None = None


class PrintfulOrderResponse(CanonicalModel):
    id: int
    external_id: str | None = None
    status: str
    shipping: str | None = None
    created: int | None = None
    updated: int | None = None
    shipments: list[PrintfulShipment] | None = None
    costs: PrintfulOrderCosts | None = None


class PrintfulCancelResult(CanonicalModel):
    success: bool
    order_id: str
    error: str | None = None


# ── Shipping ────────────────────────────────────────────────────────────────


class PrintfulShippingRecipient(CanonicalModel):
    address1: str | None = None
    city: str | None = None
    state_code: str | None = None
    country_code: str
    zip: str | None = None


class PrintfulShippingItem(CanonicalModel):
    variant_id: int
    quantity: int


class PrintfulShippingParams(CanonicalModel):
    recipient: PrintfulShippingRecipient
    items: list[PrintfulShippingItem]
    currency: str = "USD"
    locale: str = "en_US"


class PrintfulShippingRate(CanonicalModel):
    id: str
    name: str
    rate: str
    currency: str
    min_delivery_days: int | None = None
    max_delivery_days: int | None = None


class PrintfulCarrier(CanonicalModel):
    code: str
    name: str


# ── Webhooks ────────────────────────────────────────────────────────────────


class PrintfulWebhookOrder(CanonicalModel):
    id: int
    external_id: str | None = None
    status: str | None = None


class PrintfulWebhookShipment(CanonicalModel):
    id: int
    carrier: str | None = None
    service: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None


class PrintfulWebhookData(CanonicalModel):
    order: PrintfulWebhookOrder | None = None
    shipment: PrintfulWebhookShipment | None = None
    reason: str | None = None


class PrintfulWebhookEvent(CanonicalModel):
    """Printful event (package_shipped, order_failed, ...) with mapped payload."""

    type: str
    data: PrintfulWebhookData = Field(default_factory=PrintfulWebhookData)

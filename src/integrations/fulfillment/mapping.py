"""Printful wire format <-> canonical DTO conversion.

Printful speaks snake_case JSON; canonical DTOs serialize to camelCase. All
translation between the two happens here so the connector only moves data.

Retail prices leave as decimal strings built from minor units
(format_decimal_amount). Decimal strings Printful returns are passed through
untouched.
"""

from __future__ import annotations

from typing import Any

from src.integrations.core.money import format_decimal_amount
from src.integrations.fulfillment.schemas import (
    PrintfulCarrier,
    PrintfulFile,
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


def _without_none(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


# ── Requests (canonical -> Printful) ───────────────────────────────────────


def to_printful_product(product: PrintfulProductData) -> dict[str, Any]:
    """Build the POST /store/products body."""
    body: dict[str, Any] = {
        "sync_variants": [
            {
                "external_id": v.external_id,
                "variant_id": v.variant_id,
                "retail_price": format_decimal_amount(v.retail_price),
                "files": [f.model_dump(exclude_none=True) for f in v.files],
            }
            for v in product.sync_variants
        ],
    }
    sync_product = _without_none(
        {
            "external_id": product.external_id,
            "name": product.name,
            "thumbnail": product.thumbnail,
        }
    )
    if sync_product:
        body["sync_product"] = sync_product
    return body


def to_printful_order(order: PrintfulOrderData) -> dict[str, Any]:
    """Build the POST /orders body."""
    body: dict[str, Any] = {
        "external_id": order.external_id,
        "recipient": order.recipient.model_dump(exclude_none=True),
        "items": [
            {
                "sync_variant_id": item.sync_variant_id,
                "quantity": item.quantity,
                "retail_price": format_decimal_amount(item.retail_price),
            }
            for item in order.items
        ],
    }
    if order.shipping:
        body["shipping"] = order.shipping
    return body


def to_printful_shipping_request(params: PrintfulShippingParams) -> dict[str, Any]:
    """Build the POST /shipping/rates body."""
    return {
        "recipient": params.recipient.model_dump(exclude_none=True),
        "items": [{"variant_id": i.variant_id, "quantity": i.quantity} for i in params.items],
        "currency": params.currency,
        "locale": params.locale,
    }


# ── Responses (Printful -> canonical) ──────────────────────────────────────


def _file(data: dict[str, Any]) -> PrintfulFile:
    return PrintfulFile(id=data.get("id"), url=data.get("url", ""), type=data.get("type"))


def from_printful_sync_result(data: dict[str, Any]) -> PrintfulSyncResult:
    return PrintfulSyncResult(
        success=True,
        sync_product_id=str(data["id"]),
        sync_variants=[
            PrintfulSyncedVariant(
                id=v["id"],
                external_id=v.get("external_id"),
                variant_id=v.get("variant_id"),
            )
            for v in data.get("sync_variants") or []
        ],
    )


def from_printful_sync_product(data: dict[str, Any]) -> PrintfulSyncProductResponse:
    """Map GET /store/products/{id}. The result nests product and variants."""
    product = data.get("sync_product") or data
    variants = data.get("sync_variants") or []
    return PrintfulSyncProductResponse(
        id=product["id"],
        external_id=product.get("external_id"),
        name=product.get("name"),
        variants=[
            PrintfulSyncVariant(
                id=v["id"],
                external_id=v.get("external_id"),
                sync_product_id=v.get("sync_product_id"),
                variant_id=v.get("variant_id"),
                product_id=(v.get("product") or {}).get("product_id"),
                retail_price=v.get("retail_price"),
                currency=v.get("currency"),
                files=[_file(f) for f in v.get("files") or []],
            )
            for v in variants
        ],
    )


def from_printful_product_summary(data: dict[str, Any]) -> PrintfulSyncProductResponse:
    """Map one entry of GET /store/products. Summaries carry no variants."""
    return PrintfulSyncProductResponse(
        id=data["id"],
        external_id=data.get("external_id"),
        name=data.get("name"),
        variants=[],
    )


def from_printful_shipment(data: dict[str, Any]) -> PrintfulShipment:
    return PrintfulShipment(
        id=data["id"],
        carrier=data.get("carrier"),
        service=data.get("service"),
        tracking_number=_as_str(data.get("tracking_number")),
        tracking_url=data.get("tracking_url"),
        created=data.get("created"),
        ship_date=data.get("ship_date"),
        estimated_delivery=data.get("estimated_delivery"),
    )


def from_printful_costs(data: dict[str, Any]) -> PrintfulOrderCosts:
    return PrintfulOrderCosts(
        currency=data.get("currency"),
        subtotal=_as_str(data.get("subtotal")),
        discount=_as_str(data.get("discount")),
        shipping=_as_str(data.get("shipping")),
        digitization=_as_str(data.get("digitization")),
        additional_fee=_as_str(data.get("additional_fee")),
        fulfillment_fee=_as_str(data.get("fulfillment_fee")),
        retail_delivery_costs=_as_str(data.get("retail_delivery_costs")),
        tax=_as_str(data.get("tax")),
        vat=_as_str(data.get("vat")),
        total=_as_str(data.get("total")),
    )


def from_printful_order(data: dict[str, Any]) -> PrintfulOrderResponse:
    shipments = data.get("shipments")
    costs = data.get("costs")
    return PrintfulOrderResponse(
        id=data["id"],
        external_id=data.get("external_id"),
        status=data.get("status", ""),
        shipping=data.get("shipping"),
        created=data.get("created"),
        updated=data.get("updated"),
        shipments=[from_printful_shipment(s) for s in shipments] if shipments is not None else None,
        costs=from_printful_costs(costs) if costs else None,
    )


def from_printful_shipping_rate(data: dict[str, Any]) -> PrintfulShippingRate:
    # The rates endpoint already answers in camelCase for delivery days
    return PrintfulShippingRate(
        id=data["id"],
        name=data.get("name", ""),
        rate=_as_str(data.get("rate")) or "0.00",
        currency=data.get("currency", ""),
        min_delivery_days=data.get("minDeliveryDays"),
        max_delivery_days=data.get("maxDeliveryDays"),
    )


def from_printful_carrier(data: dict[str, Any]) -> PrintfulCarrier:
    return PrintfulCarrier(code=data["code"], name=data.get("name", ""))


def from_printful_webhook(body: dict[str, Any]) -> PrintfulWebhookEvent:
    """Map a raw Printful webhook document into a PrintfulWebhookEvent."""
    if not isinstance(body, dict) or "type" not in body:
        raise ValueError("Printful webhook body has no event type")

    data = body.get("data") or {}
    order = data.get("order")
    shipment = data.get("shipment")

    return PrintfulWebhookEvent(
        type=body["type"],
        data=PrintfulWebhookData(
            order=(
                PrintfulWebhookOrder(
                    id=order["id"],
                    external_id=order.get("external_id"),
                    status=order.get("status"),
                )
                if order
                else None
            ),
            shipment=(
                PrintfulWebhookShipment(
                    id=shipment["id"],
                    carrier=shipment.get("carrier"),
                    service=shipment.get("service"),
                    tracking_number=_as_str(shipment.get("tracking_number")),
                    tracking_url=shipment.get("tracking_url"),
                )
                if shipment
                else None
            ),
            reason=data.get("reason"),
        ),
    )


def _as_str(value: Any) -> str | None:
    """Printful sometimes sends numbers where it documents strings."""
    if value is None:
        return None
    return str(value)

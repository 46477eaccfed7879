"""Inbound vendor webhooks.

Each request goes received -> signature present -> connector.handle_webhook
-> dispatch. A missing signature is rejected before the connector is touched.
Anything the connector raises (bad signature, malformed body, missing secret)
is logged in full and answered with a fixed 400 body so verification details
never reach the caller. Unknown event types are still acknowledged with 200.

NOTE: These endpoints carry no platform auth -- vendors call them directly
and authenticity comes from the signature header.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request, status

from src.integrations.core.monitoring import record_webhook
from src.integrations.webhooks.dispatcher import (
    dispatch_fulfillment_event,
    dispatch_payment_event,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])

STRIPE_SIGNATURE_HEADER = "stripe-signature"
PRINTFUL_SIGNATURE_HEADER = "x-printful-signature"

PROCESSING_FAILED = "Webhook processing failed"


def _get_provider(request: Request, capability: str) -> Any:
    """Retrieve a capability implementation from app.state, 503 if not available."""
    providers = getattr(request.app.state, "providers", None)
    if providers is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Providers not initialized",
        )
    return getattr(providers, capability)


def _require_signature(request: Request, header: str, provider: str) -> str:
    signature = request.headers.get(header, "")
    if not signature:
        record_webhook(provider, "missing_signature")
        logger.warning("webhook.missing_signature", provider=provider, header=header)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {header} header",
        )
    return signature


@router.post("/stripe")
async def stripe_webhook(request: Request) -> dict:
    """Stripe webhook receiver (payment_intent.*, charge.refunded, ...)."""
    signature = _require_signature(request, STRIPE_SIGNATURE_HEADER, "stripe")
    gateway = _get_provider(request, "payments")
    payload = await request.body()

    try:
        event = await gateway.handle_webhook(payload, signature)
    except Exception as exc:
        record_webhook("stripe", "rejected")
        logger.error(
            "webhook.processing_failed",
            provider="stripe",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=PROCESSING_FAILED,
        )

    logger.info("webhook.received", provider="stripe", event_id=event.id, event_type=event.type)
    dispatch_payment_event(event)
    record_webhook("stripe", "processed")

    return {"received": True, "eventId": event.id}


@router.post("/printful")
async def printful_webhook(request: Request) -> dict:
    """Printful webhook receiver (package_shipped, order_failed, ...)."""
    signature = _require_signature(request, PRINTFUL_SIGNATURE_HEADER, "printful")
    connector = _get_provider(request, "fulfillment")
    payload = await request.body()

    try:
        event = await connector.handle_webhook(payload, signature)
    except Exception as exc:
        record_webhook("printful", "rejected")
        logger.error(
            "webhook.processing_failed",
            provider="printful",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=PROCESSING_FAILED,
        )

    logger.info("webhook.received", provider="printful", event_type=event.type)
    dispatch_fulfillment_event(event)
    record_webhook("printful", "processed")

    return {"received": True, "eventType": event.type}

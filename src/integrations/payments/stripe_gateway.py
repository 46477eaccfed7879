"""Stripe implementation of PaymentGateway.

Uses the ``stripe`` SDK's module-level resources with a per-call ``api_key`` so
several gateways with different keys can coexist in one process. The SDK is
synchronous; every call runs in ``asyncio.to_thread`` to keep the event loop
free, the same way the Google API clients are driven elsewhere in this service.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import stripe
import structlog

from src.integrations.core.monitoring import track_vendor_call
from src.integrations.errors import WebhookSecretNotConfiguredError
from src.integrations.payments.adapter import PaymentGateway
from src.integrations.payments.schemas import (
    PaymentCustomer,
    PaymentIntent,
    PaymentResult,
    PaymentStatus,
    RefundResult,
    RefundStatus,
    WebhookEvent,
)

logger = structlog.get_logger(__name__)


# ── Status Mapping ──────────────────────────────────────────────────────────
# Vendor intent status -> canonical status. Anything unlisted is FAILED.

STRIPE_STATUS_MAP: dict[str, PaymentStatus] = {
    "requires_confirmation": PaymentStatus.REQUIRES_CONFIRMATION,
    "requires_action": PaymentStatus.REQUIRES_ACTION,
    "requires_payment_method": PaymentStatus.REQUIRES_ACTION,
    "processing": PaymentStatus.REQUIRES_ACTION,
    "succeeded": PaymentStatus.SUCCEEDED,
    "canceled": PaymentStatus.FAILED,
    "requires_capture": PaymentStatus.FAILED,
}

REFUND_STATUS_MAP: dict[str, RefundStatus] = {
    "succeeded": RefundStatus.SUCCEEDED,
    "pending": RefundStatus.PENDING,
}


def map_stripe_status(status: str | None) -> PaymentStatus:
    """Map a Stripe PaymentIntent status to the canonical 4-state enum."""
    return STRIPE_STATUS_MAP.get(status or "", PaymentStatus.FAILED)


def map_refund_status(status: str | None) -> RefundStatus:
    """Map a Stripe Refund status; anything but succeeded/pending is FAILED."""
    return REFUND_STATUS_MAP.get(status or "", RefundStatus.FAILED)


class StripePaymentGateway(PaymentGateway):
    """PaymentGateway backed by the Stripe API.

    Args:
        secret_key: Stripe secret API key.
        webhook_secret: Signing secret for webhook verification. Optional;
            without it handle_webhook raises WebhookSecretNotConfiguredError.
    """

    def __init__(self, secret_key: str, webhook_secret: str | None = None) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret or None
        logger.info("stripe.gateway_initialized", webhook_verification=bool(self._webhook_secret))

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        customer_id: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntent:
        params: dict[str, Any] = {
            "amount": amount,
            "currency": currency.lower(),
            "automatic_payment_methods": {"enabled": True},
        }
        if customer_id:
            params["customer"] = customer_id
        if metadata:
            params["metadata"] = metadata

        try:
            async with track_vendor_call("stripe", "create_payment_intent"):
                intent = await asyncio.to_thread(
                    stripe.PaymentIntent.create,
                    api_key=self._secret_key,
                    **params,
                )
        except Exception as exc:
            logger.error(
                "stripe.payment_intent_create_failed",
                amount=amount,
                currency=currency,
                error=str(exc),
            )
            raise

        logger.info(
            "stripe.payment_intent_created",
            payment_intent_id=intent.id,
            amount=amount,
            currency=currency,
        )

        return PaymentIntent(
            id=intent.id,
            client_secret=intent.client_secret,
            amount=intent.amount,
            currency=intent.currency.upper(),
            status=map_stripe_status(intent.status),
        )

    async def confirm_payment(self, payment_intent_id: str) -> PaymentResult:
        try:
            async with track_vendor_call("stripe", "confirm_payment"):
                intent = await asyncio.to_thread(
                    stripe.PaymentIntent.confirm,
                    payment_intent_id,
                    api_key=self._secret_key,
                )
        except Exception as exc:
            # A declined card is a business outcome, reported not raised
            logger.warning(
                "stripe.payment_confirm_failed",
                payment_intent_id=payment_intent_id,
                error=str(exc),
            )
            return PaymentResult(
                success=False,
                payment_intent_id=payment_intent_id,
                status="failed",
                error=str(exc),
            )

        last_error = getattr(intent, "last_payment_error", None)
        logger.info(
            "stripe.payment_confirmed",
            payment_intent_id=intent.id,
            status=intent.status,
        )

        return PaymentResult(
            success=intent.status == "succeeded",
            payment_intent_id=intent.id,
            status=intent.status,
            error=getattr(last_error, "message", None) if last_error else None,
        )

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None = None,
        reason: str | None = None,
    ) -> RefundResult:
        params: dict[str, Any] = {"payment_intent": payment_intent_id}
        if amount is not None:
            params["amount"] = amount
        if reason:
            params["reason"] = reason

        try:
            async with track_vendor_call("stripe", "create_refund"):
                refund = await asyncio.to_thread(
                    stripe.Refund.create,
                    api_key=self._secret_key,
                    **params,
                )
        except Exception as exc:
            logger.error(
                "stripe.refund_create_failed",
                payment_intent_id=payment_intent_id,
                error=str(exc),
            )
            raise

        logger.info(
            "stripe.refund_created",
            refund_id=refund.id,
            payment_intent_id=payment_intent_id,
            partial=amount is not None,
            amount=refund.amount,
        )

        return RefundResult(
            id=refund.id,
            amount=refund.amount,
            status=map_refund_status(refund.status),
        )

    async def create_customer(
        self,
        email: str,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> PaymentCustomer:
        params: dict[str, Any] = {"email": email, "name": name}
        if metadata:
            params["metadata"] = metadata

        try:
            async with track_vendor_call("stripe", "create_customer"):
                customer = await asyncio.to_thread(
                    stripe.Customer.create,
                    api_key=self._secret_key,
                    **params,
                )
        except Exception as exc:
            logger.error("stripe.customer_create_failed", email=email, error=str(exc))
            raise

        logger.info("stripe.customer_created", customer_id=customer.id, email=email)

        return PaymentCustomer(
            id=customer.id,
            email=customer.email or email,
            name=customer.name or name,
        )

    async def handle_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify the Stripe-Signature header and return the event.

        Raises:
            WebhookSecretNotConfiguredError: No signing secret configured.
            stripe.SignatureVerificationError: Signature mismatch or stale timestamp.
            ValueError: Body is not valid JSON.
        """
        if not self._webhook_secret:
            raise WebhookSecretNotConfiguredError("Stripe")

        body = payload.decode("utf-8")
        try:
            stripe.WebhookSignature.verify_header(
                body,
                signature,
                self._webhook_secret,
                stripe.Webhook.DEFAULT_TOLERANCE,
            )
            event = json.loads(body)
        except Exception as exc:
            logger.error("stripe.webhook_verification_failed", error=str(exc))
            raise

        logger.info("stripe.webhook_received", event_id=event.get("id"), event_type=event.get("type"))

        data = event.get("data") or {}
        return WebhookEvent(
            id=event["id"],
            type=event["type"],
            data=data.get("object") or {},
        )

"""Network-free PaymentGateway for local development and tests."""

from __future__ import annotations

import uuid
from typing import Any

import structlog

from src.integrations.core.latency import simulate_latency
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

logger = structlog.get_logger(__name__).bind(stub=True)


def _hex(length: int) -> str:
    return uuid.uuid4().hex[:length]


class StubPaymentGateway(PaymentGateway):
    """Returns synthetic Stripe-shaped objects after a short random delay.

    IDs carry a ``_stub_`` marker (``pi_stub_``, ``re_stub_``, ``cus_stub_``,
    ``evt_stub_``) so they are never mistaken for live vendor IDs.
    """

    def __init__(self, min_latency_ms: int = 100, max_latency_ms: int = 300) -> None:
        self._min_latency_ms = min_latency_ms
        self._max_latency_ms = max_latency_ms

    async def _delay(self) -> None:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        customer_id: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntent:
        await self._delay()
        intent_id = f"pi_stub_{_hex(24)}"
        client_secret = f"{intent_id}_secret_{_hex(16)}"

        logger.info(
            "stripe.payment_intent_created",
            payment_intent_id=intent_id,
            amount=amount,
            currency=currency,
        )

        return PaymentIntent(
            id=intent_id,
            client_secret=client_secret,
            amount=amount,
            currency=currency,
            status=PaymentStatus.REQUIRES_CONFIRMATION,
        )

    async def confirm_payment(self, payment_intent_id: str) -> PaymentResult:
        await self._delay()
        logger.info("stripe.payment_confirmed", payment_intent_id=payment_intent_id)
        return PaymentResult(
            success=True,
            payment_intent_id=payment_intent_id,
            status="succeeded",
        )

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None = None,
        reason: str | None = None,
    ) -> RefundResult:
        await self._delay()
        refund_id = f"re_stub_{_hex(24)}"

        logger.info(
            "stripe.refund_created",
            refund_id=refund_id,
            payment_intent_id=payment_intent_id,
            partial=amount is not None,
        )

        return RefundResult(
            id=refund_id,
            amount=amount if amount is not None else 0,
            status=RefundStatus.SUCCEEDED,
        )

    async def create_customer(
        self,
        email: str,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> PaymentCustomer:
        await self._delay()
        customer_id = f"cus_stub_{_hex(14)}"
        logger.info("stripe.customer_created", customer_id=customer_id, email=email)
        return PaymentCustomer(id=customer_id, email=email, name=name)

    async def handle_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        """Always yields a canned payment_intent.succeeded event."""
        await self._delay()
        logger.info("stripe.webhook_received", signature_prefix=signature[:20])

        return WebhookEvent(
            id=f"evt_stub_{_hex(24)}",
            type="payment_intent.succeeded",
            data={
                "object": {
                    "id": f"pi_stub_{_hex(24)}",
                    "amount": 5000,
                    "currency": "usd",
                    "status": "succeeded",
                },
            },
        )

"""Payment gateway abstract base class -- the contract every payment backend implements.

Error channels differ per operation and callers rely on them:
- confirm_payment never raises; a declined or failed confirmation is a
  PaymentResult with success=False.
- create_payment_intent, create_refund, create_customer and handle_webhook
  raise on vendor error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.integrations.payments.schemas import (
    PaymentCustomer,
    PaymentIntent,
    PaymentResult,
    RefundResult,
    WebhookEvent,
)


class PaymentGateway(ABC):
    """Abstract interface for payment processing.

    Methods:
        create_payment_intent: Create an intent for an amount in minor units.
        confirm_payment: Confirm an intent, reporting the outcome as a result.
        create_refund: Refund a payment in full (amount=None) or in part.
        create_customer: Register a customer with the processor.
        handle_webhook: Verify a signed webhook body and return the event.
    """

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        customer_id: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntent:
        """Create a payment intent for ``amount`` minor units."""
        ...

    @abstractmethod
    async def confirm_payment(self, payment_intent_id: str) -> PaymentResult:
        """Confirm a payment intent. Never raises."""
        ...

    @abstractmethod
    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None = None,
        reason: str | None = None,
    ) -> RefundResult:
        """Refund a payment. ``amount=None`` refunds the full charge."""
        ...

    @abstractmethod
    async def create_customer(
        self,
        email: str,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> PaymentCustomer:
        """Create a customer record."""
        ...

    @abstractmethod
    async def handle_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify and parse a raw webhook body."""
        ...

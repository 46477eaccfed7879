"""Canonical payment DTOs.

All amounts are integers in the currency's minor unit (cents for USD).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from src.integrations.core.schemas import CanonicalModel


class PaymentStatus(str, Enum):
    """Four-state reduction of the vendor's payment-intent state machine."""

    REQUIRES_CONFIRMATION = "requires_confirmation"
    REQUIRES_ACTION = "requires_action"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RefundStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PaymentIntent(CanonicalModel):
    """A freshly created payment intent. Never mutated after return."""

    id: str
    client_secret: str
    amount: int
    currency: str
    status: PaymentStatus


class PaymentResult(CanonicalModel):
    """Outcome of confirming a payment intent.

    ``status`` carries the vendor's own status string, not PaymentStatus.
    """

    success: bool
    payment_intent_id: str
    status: str
    error: str | None = None


class RefundResult(CanonicalModel):
    id: str
    amount: int
    status: RefundStatus


class PaymentCustomer(CanonicalModel):
    id: str
    email: str
    name: str


class WebhookEvent(CanonicalModel):
    """Vendor webhook reduced to an opaque data bag; ``type`` drives dispatch."""

    id: str
    type: str
    data: dict[str, Any] = Field(default_factory=dict)

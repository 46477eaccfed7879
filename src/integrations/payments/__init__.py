"""Payments capability -- PaymentGateway contract with Stripe and stub backends.

- PaymentGateway: ABC every payment backend implements
- StripePaymentGateway: Live Stripe API via the stripe SDK
- StubPaymentGateway: Synthetic pi_stub_/re_stub_/cus_stub_ objects for dev and tests
"""

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
from src.integrations.payments.stripe_gateway import StripePaymentGateway, map_stripe_status
from src.integrations.payments.stub import StubPaymentGateway

__all__ = [
    "PaymentGateway",
    "StripePaymentGateway",
    "StubPaymentGateway",
    "PaymentIntent",
    "PaymentResult",
    "PaymentStatus",
    "RefundResult",
    "RefundStatus",
    "PaymentCustomer",
    "WebhookEvent",
    "map_stripe_status",
]

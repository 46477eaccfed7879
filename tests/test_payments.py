"""Tests for the payments capability.

Covers the stub gateway's synthetic objects, the Stripe status tables, and
StripePaymentGateway against a mocked stripe SDK (no network). Webhook
verification uses real Stripe-Signature headers signed with a test secret.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import re
import time
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe
from hypothesis import given
from hypothesis import strategies as st

from src.integrations.errors import WebhookSecretNotConfiguredError
from src.integrations.payments.adapter import PaymentGateway
from src.integrations.payments.schemas import PaymentStatus, RefundStatus
from src.integrations.payments.stripe_gateway import (
    STRIPE_STATUS_MAP,
    StripePaymentGateway,
    map_refund_status,
    map_stripe_status,
)

WEBHOOK_SECRET = "whsec_test_secret"


def _stripe_signature(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    ts = timestamp if timestamp is not None else int(time.time())
    digest = hmac.new(
        secret.encode("utf-8"),
        f"{ts}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={ts},v1={digest}"


@pytest.fixture
def gateway() -> StripePaymentGateway:
    return StripePaymentGateway(secret_key="sk_test_123", webhook_secret=WEBHOOK_SECRET)


# ── Contract ─────────────────────────────────────────────────────────────────


class TestPaymentGatewayABC:
    def test_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            PaymentGateway()  # type: ignore[abstract]


# ── Stub ─────────────────────────────────────────────────────────────────────


class TestStubPaymentGateway:
    async def test_create_payment_intent_scenario(self, stub_payments):
        intent = await stub_payments.create_payment_intent(amount=5000, currency="USD")

        assert re.match(r"^pi_stub_[0-9a-f]{24}$", intent.id)
        assert "_secret_" in intent.client_secret
        assert intent.client_secret.startswith(intent.id)
        assert intent.amount == 5000
        assert intent.currency == "USD"
        assert intent.status == PaymentStatus.REQUIRES_CONFIRMATION

    async def test_intent_serializes_to_camel_case(self, stub_payments):
        intent = await stub_payments.create_payment_intent(amount=5000, currency="USD")
        dumped = intent.model_dump(by_alias=True, mode="json")

        assert set(dumped) == {"id", "clientSecret", "amount", "currency", "status"}
        assert dumped["status"] == "requires_confirmation"

    async def test_each_intent_is_new(self, stub_payments):
        first = await stub_payments.create_payment_intent(amount=100, currency="USD")
        second = await stub_payments.create_payment_intent(amount=100, currency="USD")
        assert first.id != second.id

    async def test_confirm_always_succeeds(self, stub_payments):
        result = await stub_payments.confirm_payment("pi_stub_abc")
        assert result.success is True
        assert result.payment_intent_id == "pi_stub_abc"
        assert result.status == "succeeded"

    async def test_full_refund_reports_zero_amount(self, stub_payments):
        refund = await stub_payments.create_refund("pi_stub_abc")
        assert re.match(r"^re_stub_[0-9a-f]{24}$", refund.id)
        assert refund.amount == 0
        assert refund.status == RefundStatus.SUCCEEDED

    async def test_partial_refund_echoes_amount(self, stub_payments):
        refund = await stub_payments.create_refund("pi_stub_abc", amount=1500, reason="requested_by_customer")
        assert refund.amount == 1500

    async def test_create_customer(self, stub_payments):
        customer = await stub_payments.create_customer("ada@example.com", "Ada Lovelace")
        assert re.match(r"^cus_stub_[0-9a-f]{14}$", customer.id)
        assert customer.email == "ada@example.com"
        assert customer.name == "Ada Lovelace"

    async def test_webhook_is_canned_success(self, stub_payments):
        event = await stub_payments.handle_webhook(b"{}", "t=1,v1=whatever")
        assert event.id.startswith("evt_stub_")
        assert event.type == "payment_intent.succeeded"
        assert event.data["object"]["amount"] == 5000
        assert event.data["object"]["id"].startswith("pi_stub_")


# ── Status Mapping ───────────────────────────────────────────────────────────


class TestStripeStatusMapping:
    @pytest.mark.parametrize(
        ("vendor", "canonical"),
        [
            ("requires_confirmation", PaymentStatus.REQUIRES_CONFIRMATION),
            ("requires_action", PaymentStatus.REQUIRES_ACTION),
            ("requires_payment_method", PaymentStatus.REQUIRES_ACTION),
            ("processing", PaymentStatus.REQUIRES_ACTION),
            ("succeeded", PaymentStatus.SUCCEEDED),
            ("canceled", PaymentStatus.FAILED),
            ("requires_capture", PaymentStatus.FAILED),
        ],
    )
    def test_known_statuses(self, vendor, canonical):
        assert map_stripe_status(vendor) == canonical

    @given(st.one_of(st.none(), st.text()))
    def test_mapping_is_total(self, vendor):
        result = map_stripe_status(vendor)
        assert result in set(PaymentStatus)
        if vendor not in STRIPE_STATUS_MAP:
            assert result == PaymentStatus.FAILED

    @pytest.mark.parametrize(
        ("vendor", "canonical"),
        [
            ("succeeded", RefundStatus.SUCCEEDED),
            ("pending", RefundStatus.PENDING),
            ("failed", RefundStatus.FAILED),
            ("canceled", RefundStatus.FAILED),
            ("requires_action", RefundStatus.FAILED),
            (None, RefundStatus.FAILED),
        ],
    )
    def test_refund_statuses(self, vendor, canonical):
        assert map_refund_status(vendor) == canonical


# ── StripePaymentGateway ─────────────────────────────────────────────────────


class TestStripePaymentGateway:
    async def test_create_payment_intent_maps_response(self, gateway):
        vendor_intent = SimpleNamespace(
            id="pi_123",
            client_secret="pi_123_secret_abc",
            amount=5000,
            currency="usd",
            status="requires_payment_method",
        )
        with patch("stripe.PaymentIntent.create", return_value=vendor_intent) as mock_create:
            intent = await gateway.create_payment_intent(5000, "USD", customer_id="cus_1")

        mock_create.assert_called_once()
        kwargs = mock_create.call_args.kwargs
        assert kwargs["api_key"] == "sk_test_123"
        assert kwargs["amount"] == 5000
        assert kwargs["currency"] == "usd"
        assert kwargs["customer"] == "cus_1"
        assert kwargs["automatic_payment_methods"] == {"enabled": True}
        assert "metadata" not in kwargs

        assert intent.id == "pi_123"
        assert intent.client_secret == "pi_123_secret_abc"
        assert intent.currency == "USD"
        assert intent.status == PaymentStatus.REQUIRES_ACTION

    async def test_create_payment_intent_propagates_vendor_error(self, gateway):
        with patch("stripe.PaymentIntent.create", side_effect=RuntimeError("card network down")):
            with pytest.raises(RuntimeError, match="card network down"):
                await gateway.create_payment_intent(5000, "USD")

    async def test_confirm_payment_success(self, gateway):
        vendor_intent = SimpleNamespace(id="pi_123", status="succeeded", last_payment_error=None)
        with patch("stripe.PaymentIntent.confirm", return_value=vendor_intent) as mock_confirm:
            result = await gateway.confirm_payment("pi_123")

        mock_confirm.assert_called_once_with("pi_123", api_key="sk_test_123")
        assert result.success is True
        assert result.status == "succeeded"
        assert result.error is None

    async def test_confirm_payment_reports_last_payment_error(self, gateway):
        vendor_intent = SimpleNamespace(
            id="pi_123",
            status="requires_payment_method",
            last_payment_error=SimpleNamespace(message="Your card was declined."),
        )
        with patch("stripe.PaymentIntent.confirm", return_value=vendor_intent):
            result = await gateway.confirm_payment("pi_123")

        assert result.success is False
        assert result.status == "requires_payment_method"
        assert result.error == "Your card was declined."

    async def test_confirm_payment_never_raises(self, gateway):
        with patch("stripe.PaymentIntent.confirm", side_effect=RuntimeError("declined")):
            result = await gateway.confirm_payment("pi_123")

        assert result.success is False
        assert result.payment_intent_id == "pi_123"
        assert result.status == "failed"
        assert result.error == "declined"

    async def test_full_refund_omits_amount(self, gateway):
        vendor_refund = SimpleNamespace(id="re_1", amount=5000, status="succeeded")
        with patch("stripe.Refund.create", return_value=vendor_refund) as mock_refund:
            refund = await gateway.create_refund("pi_123")

        kwargs = mock_refund.call_args.kwargs
        assert kwargs["payment_intent"] == "pi_123"
        assert "amount" not in kwargs
        assert refund.amount == 5000
        assert refund.status == RefundStatus.SUCCEEDED

    async def test_partial_refund_passes_amount_and_reason(self, gateway):
        vendor_refund = SimpleNamespace(id="re_2", amount=1000, status="pending")
        with patch("stripe.Refund.create", return_value=vendor_refund) as mock_refund:
            refund = await gateway.create_refund("pi_123", amount=1000, reason="duplicate")

        kwargs = mock_refund.call_args.kwargs
        assert kwargs["amount"] == 1000
        assert kwargs["reason"] == "duplicate"
        assert refund.status == RefundStatus.PENDING

    async def test_refund_propagates_vendor_error(self, gateway):
        with patch("stripe.Refund.create", side_effect=RuntimeError("charge already refunded")):
            with pytest.raises(RuntimeError):
                await gateway.create_refund("pi_123")

    async def test_create_customer(self, gateway):
        vendor_customer = SimpleNamespace(id="cus_9", email="ada@example.com", name="Ada")
        with patch("stripe.Customer.create", return_value=vendor_customer) as mock_create:
            customer = await gateway.create_customer("ada@example.com", "Ada", metadata={"cms_user_id": "u1"})

        kwargs = mock_create.call_args.kwargs
        assert kwargs["metadata"] == {"cms_user_id": "u1"}
        assert customer.id == "cus_9"


class TestStripeWebhook:
    async def test_missing_secret_fails_before_verification(self):
        gateway = StripePaymentGateway(secret_key="sk_test_123")
        with patch("stripe.WebhookSignature.verify_header") as mock_verify:
            with pytest.raises(WebhookSecretNotConfiguredError):
                await gateway.handle_webhook(b"{}", "t=1,v1=abc")
        mock_verify.assert_not_called()

    async def test_valid_signature_returns_event(self, gateway):
        body = json.dumps(
            {
                "id": "evt_1",
                "type": "payment_intent.succeeded",
                "data": {"object": {"id": "pi_123", "amount": 5000}},
            }
        )
        event = await gateway.handle_webhook(body.encode(), _stripe_signature(body))

        assert event.id == "evt_1"
        assert event.type == "payment_intent.succeeded"
        assert event.data == {"id": "pi_123", "amount": 5000}

    async def test_wrong_secret_is_rejected(self, gateway):
        body = json.dumps({"id": "evt_1", "type": "charge.refunded", "data": {"object": {}}})
        with pytest.raises(stripe.SignatureVerificationError):
            await gateway.handle_webhook(body.encode(), _stripe_signature(body, secret="whsec_other"))

    async def test_stale_timestamp_is_rejected(self, gateway):
        body = json.dumps({"id": "evt_1", "type": "charge.refunded", "data": {"object": {}}})
        stale = int(time.time()) - 3600
        with pytest.raises(stripe.SignatureVerificationError):
            await gateway.handle_webhook(body.encode(), _stripe_signature(body, timestamp=stale))

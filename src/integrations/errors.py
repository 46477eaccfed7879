"""Exception taxonomy for the provider layer.

Business outcomes (declined payments, CRM validation failures, failed product
syncs) are reported through result objects, not exceptions. The classes here
cover configuration faults and the vendor faults that this layer raises itself;
SDK and HTTP client errors otherwise propagate unchanged.
"""

from __future__ import annotations


class IntegrationError(Exception):
    """Base class for errors raised by the provider layer."""


class ProviderConfigurationError(IntegrationError):
    """A provider was used in a way its configuration does not support."""


class WebhookSecretNotConfiguredError(ProviderConfigurationError):
    """Webhook verification was requested but no shared secret is configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"{provider} webhook secret not configured")
        self.provider = provider


class WebhookSignatureError(IntegrationError):
    """The webhook signature does not match the payload."""


class CRMVendorError(IntegrationError):
    """The CRM answered a write with a structured failure response."""

    def __init__(self, message: str, errors: object = None) -> None:
        super().__init__(message)
        self.errors = errors


class CRMNotConnectedError(IntegrationError):
    """A CRM operation ran before the connector finished authenticating."""


class AnalyticsDeliveryError(IntegrationError):
    """The analytics collection endpoint rejected an event submission."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"GA4 Measurement Protocol failed: {status_code} {reason}")
        self.status_code = status_code
        self.reason = reason

"""Provider selection -- the one place that branches on configuration.

Each factory returns the real implementation only when every credential it
needs is present and non-blank; otherwise it returns the stub. A partial
credential set never produces a half-configured live connector.

build_providers() assembles all four capabilities and awaits Salesforce
authentication so the CRM is logged in before the app takes traffic.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from src.integrations.analytics.adapter import AnalyticsProvider
from src.integrations.analytics.auth import GA4AuthManager
from src.integrations.analytics.google_analytics import GoogleAnalyticsProvider
from src.integrations.analytics.stub import StubAnalyticsProvider
from src.integrations.config import Settings
from src.integrations.crm.adapter import CRMConnector
from src.integrations.crm.salesforce import SalesforceConnector
from src.integrations.crm.stub import StubCRMConnector
from src.integrations.fulfillment.adapter import FulfillmentConnector
from src.integrations.fulfillment.printful import PrintfulConnector
from src.integrations.fulfillment.stub import StubPrintfulConnector
from src.integrations.payments.adapter import PaymentGateway
from src.integrations.payments.stripe_gateway import StripePaymentGateway
from src.integrations.payments.stub import StubPaymentGateway

logger = structlog.get_logger(__name__)


def _all_present(*values: str | None) -> bool:
    """Strict AND: every value set and not just whitespace."""
    return all(v is not None and v.strip() for v in values)


def _stub_latency(settings: Settings, min_ms: int, max_ms: int) -> dict[str, int]:
    if not settings.STUB_LATENCY_ENABLED:
        return {"min_latency_ms": 0, "max_latency_ms": 0}
    return {"min_latency_ms": min_ms, "max_latency_ms": max_ms}


def _log_selection(capability: str, implementation: object) -> None:
    logger.info(
        "providers.selected",
        capability=capability,
        implementation=type(implementation).__name__,
    )


def create_payment_gateway(settings: Settings) -> PaymentGateway:
    gateway: PaymentGateway
    if _all_present(settings.STRIPE_SECRET_KEY):
        gateway = StripePaymentGateway(
            secret_key=settings.STRIPE_SECRET_KEY.strip(),
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET.strip() or None,
        )
    else:
        gateway = StubPaymentGateway(**_stub_latency(settings, 100, 300))
    _log_selection("payments", gateway)
    return gateway


def create_crm_connector(settings: Settings) -> CRMConnector:
    """Salesforce needs username, password, security token and login URL.

    The returned SalesforceConnector is not yet authenticated; await
    ``connect()`` (build_providers does) before use.
    """
    connector: CRMConnector
    if _all_present(
        settings.SALESFORCE_USERNAME,
        settings.SALESFORCE_PASSWORD,
        settings.SALESFORCE_SECURITY_TOKEN,
        settings.SALESFORCE_LOGIN_URL,
    ):
        connector = SalesforceConnector(
            username=settings.SALESFORCE_USERNAME.strip(),
            password=settings.SALESFORCE_PASSWORD,
            security_token=settings.SALESFORCE_SECURITY_TOKEN.strip(),
            login_url=settings.SALESFORCE_LOGIN_URL.strip(),
        )
    else:
        connector = StubCRMConnector()
    _log_selection("crm", connector)
    return connector


def create_fulfillment_connector(settings: Settings) -> FulfillmentConnector:
    connector: FulfillmentConnector
    if _all_present(settings.PRINTFUL_API_KEY):
        connector = PrintfulConnector(
            api_key=settings.PRINTFUL_API_KEY.strip(),
            webhook_secret=settings.PRINTFUL_WEBHOOK_SECRET.strip() or None,
        )
    else:
        connector = StubPrintfulConnector(**_stub_latency(settings, 200, 500))
    _log_selection("fulfillment", connector)
    return connector


def create_analytics_provider(settings: Settings) -> AnalyticsProvider:
    """GA4 needs measurement ID, API secret, property ID and service account credentials."""
    provider: AnalyticsProvider
    credentials_path = settings.get_service_account_path()
    if _all_present(
        settings.GA4_MEASUREMENT_ID,
        settings.GA4_API_SECRET,
        settings.GA4_PROPERTY_ID,
        credentials_path,
    ):
        provider = GoogleAnalyticsProvider(
            measurement_id=settings.GA4_MEASUREMENT_ID.strip(),
            api_secret=settings.GA4_API_SECRET.strip(),
            property_id=settings.GA4_PROPERTY_ID.strip(),
            auth_manager=GA4AuthManager(credentials_path),
        )
    else:
        provider = StubAnalyticsProvider()
    _log_selection("analytics", provider)
    return provider


# ── Registry ────────────────────────────────────────────────────────────────

_STUB_TYPES = (
    StubPaymentGateway,
    StubCRMConnector,
    StubPrintfulConnector,
    StubAnalyticsProvider,
)


@dataclass
class ProviderRegistry:
    """One resolved implementation per capability."""

    payments: PaymentGateway
    crm: CRMConnector
    fulfillment: FulfillmentConnector
    analytics: AnalyticsProvider

    def status(self) -> dict[str, str]:
        """Report whether each capability runs on a real or stub backend."""
        return {
            name: "stub" if isinstance(impl, _STUB_TYPES) else "real"
            for name, impl in (
                ("payments", self.payments),
                ("crm", self.crm),
                ("fulfillment", self.fulfillment),
                ("analytics", self.analytics),
            )
        }


async def build_providers(settings: Settings) -> ProviderRegistry:
    """Resolve every capability and authenticate the CRM if it is live.

    Raises whatever the Salesforce login raises; a configured CRM that cannot
    log in is a startup failure, not a silent fallback.
    """
    registry = ProviderRegistry(
        payments=create_payment_gateway(settings),
        crm=create_crm_connector(settings),
        fulfillment=create_fulfillment_connector(settings),
        analytics=create_analytics_provider(settings),
    )
    if isinstance(registry.crm, SalesforceConnector):
        await registry.crm.connect()
    return registry

"""Async HTTP client for the Printful REST API implementing FulfillmentConnector.

One httpx.AsyncClient per call with a timeout chosen by operation type.
Printful wraps every payload in ``{"code": ..., "result": ...}``; the
``result`` member is unwrapped before mapping. There is no retry here;
callers that want one wrap the connector.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any

import httpx
import structlog

from src.integrations.core.monitoring import track_vendor_call
from src.integrations.errors import WebhookSecretNotConfiguredError, WebhookSignatureError
from src.integrations.fulfillment.adapter import FulfillmentConnector
from src.integrations.fulfillment.mapping import (
    from_printful_carrier,
    from_printful_order,
    from_printful_product_summary,
    from_printful_shipping_rate,
    from_printful_sync_product,
    from_printful_sync_result,
    from_printful_webhook,
    to_printful_order,
    to_printful_product,
    to_printful_shipping_request,
)
from src.integrations.fulfillment.schemas import (
    PrintfulCancelResult,
    PrintfulCarrier,
    PrintfulListParams,
    PrintfulOrderData,
    PrintfulOrderResponse,
    PrintfulProductData,
    PrintfulShippingParams,
    PrintfulShippingRate,
    PrintfulSyncProductResponse,
    PrintfulSyncResult,
    PrintfulWebhookEvent,
)

logger = structlog.get_logger(__name__)

PRINTFUL_BASE_URL = "https://api.printful.com"


def compute_printful_signature(secret: str, payload: bytes) -> str:
    """Hex HMAC-SHA256 of the raw webhook body."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


class PrintfulConnector(FulfillmentConnector):
    """FulfillmentConnector backed by the Printful API.

    Args:
        api_key: Printful private token.
        webhook_secret: Shared secret for webhook HMAC verification. Optional;
            without it handle_webhook raises WebhookSecretNotConfiguredError.
        base_url: API root, overridable for tests.
    """

    TIMEOUT_MUTATE = 30.0  # create/confirm/cancel/sync operations
    TIMEOUT_READ = 10.0  # get/list operations

    def __init__(
        self,
        api_key: str,
        webhook_secret: str | None = None,
        base_url: str = PRINTFUL_BASE_URL,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._webhook_secret = webhook_secret or None
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        logger.info("printful.connector_initialized", webhook_verification=bool(self._webhook_secret))

    def _client(self, timeout: float) -> httpx.AsyncClient:
        """Create a new httpx client with specified timeout."""
        return httpx.AsyncClient(headers=self._headers, timeout=timeout)

    @staticmethod
    def _result(response: httpx.Response) -> Any:
        response.raise_for_status()
        return response.json().get("result")

    # ── Product Sync ──────────────────────────────────────────────────────

    async def sync_product(self, product_data: PrintfulProductData) -> PrintfulSyncResult:
        try:
            async with track_vendor_call("printful", "sync_product"):
                async with self._client(self.TIMEOUT_MUTATE) as client:
                    response = await client.post(
                        f"{self._base_url}/store/products",
                        json=to_printful_product(product_data),
                    )
                    data = self._result(response)
            result = from_printful_sync_result(data)
        except Exception as exc:
            logger.error("printful.product_sync_failed", error=str(exc))
            return PrintfulSyncResult(
                success=False,
                sync_product_id="",
                sync_variants=[],
                error=str(exc),
            )

        logger.info(
            "printful.product_synced",
            sync_product_id=result.sync_product_id,
            variant_count=len(result.sync_variants),
        )
        return result

    async def update_product_stock(
        self, sync_product_id: str, variant_id: str, quantity: int
    ) -> None:
        try:
            async with track_vendor_call("printful", "update_product_stock"):
                async with self._client(self.TIMEOUT_MUTATE) as client:
                    response = await client.put(
                        f"{self._base_url}/store/products/{sync_product_id}/variants/{variant_id}",
                        json={"quantity": quantity},
                    )
                    response.raise_for_status()
        except Exception as exc:
            logger.error(
                "printful.stock_update_failed",
                sync_product_id=sync_product_id,
                variant_id=variant_id,
                error=str(exc),
            )
            raise

        logger.info(
            "printful.stock_updated",
            sync_product_id=sync_product_id,
            variant_id=variant_id,
            quantity=quantity,
        )

    async def get_sync_product(self, sync_product_id: str) -> PrintfulSyncProductResponse:
        try:
            async with track_vendor_call("printful", "get_sync_product"):
                async with self._client(self.TIMEOUT_READ) as client:
                    response = await client.get(
                        f"{self._base_url}/store/products/{sync_product_id}",
                    )
                    data = self._result(response)
        except Exception as exc:
            logger.error(
                "printful.sync_product_fetch_failed",
                sync_product_id=sync_product_id,
                error=str(exc),
            )
            raise

        logger.debug("printful.sync_product_fetched", sync_product_id=sync_product_id)
        return from_printful_sync_product(data)

    async def list_sync_products(
        self, params: PrintfulListParams | None = None
    ) -> list[PrintfulSyncProductResponse]:
        query: dict[str, Any] = {}
        if params:
            query = params.model_dump(exclude_none=True)

        try:
            async with track_vendor_call("printful", "list_sync_products"):
                async with self._client(self.TIMEOUT_READ) as client:
                    response = await client.get(
                        f"{self._base_url}/store/products",
                        params=query,
                    )
                    data = self._result(response) or []
        except Exception as exc:
            logger.error("printful.sync_product_list_failed", error=str(exc))
            raise

        logger.debug("printful.sync_products_listed", count=len(data))
        return [from_printful_product_summary(item) for item in data]

    # ── Orders ────────────────────────────────────────────────────────────

    async def create_order(self, order_data: PrintfulOrderData) -> PrintfulOrderResponse:
        try:
            async with track_vendor_call("printful", "create_order"):
                async with self._client(self.TIMEOUT_MUTATE) as client:
                    response = await client.post(
                        f"{self._base_url}/orders",
                        json=to_printful_order(order_data),
                    )
                    data = self._result(response)
        except Exception as exc:
            logger.error(
                "printful.order_create_failed",
                external_id=order_data.external_id,
                error=str(exc),
            )
            raise

        logger.info(
            "printful.order_created",
            order_id=data.get("id"),
            external_id=order_data.external_id,
            item_count=len(order_data.items),
        )
        return from_printful_order(data)

    async def get_order(self, order_id: str) -> PrintfulOrderResponse:
        try:
            async with track_vendor_call("printful", "get_order"):
                async with self._client(self.TIMEOUT_READ) as client:
                    response = await client.get(f"{self._base_url}/orders/{order_id}")
                    data = self._result(response)
        except Exception as exc:
            logger.error("printful.order_fetch_failed", order_id=order_id, error=str(exc))
            raise

        logger.debug("printful.order_fetched", order_id=order_id, status=data.get("status"))
        return from_printful_order(data)

    async def confirm_order(self, order_id: str) -> PrintfulOrderResponse:
        try:
            async with track_vendor_call("printful", "confirm_order"):
                async with self._client(self.TIMEOUT_MUTATE) as client:
                    response = await client.post(f"{self._base_url}/orders/{order_id}/confirm")
                    data = self._result(response)
        except Exception as exc:
            logger.error("printful.order_confirm_failed", order_id=order_id, error=str(exc))
            raise

        logger.info("printful.order_confirmed", order_id=order_id, status=data.get("status"))
        return from_printful_order(data)

    async def cancel_order(self, order_id: str) -> PrintfulCancelResult:
        try:
            async with track_vendor_call("printful", "cancel_order"):
                async with self._client(self.TIMEOUT_MUTATE) as client:
                    response = await client.delete(f"{self._base_url}/orders/{order_id}")
                    response.raise_for_status()
        except Exception as exc:
            logger.error("printful.order_cancel_failed", order_id=order_id, error=str(exc))
            return PrintfulCancelResult(success=False, order_id=order_id, error=str(exc))

        logger.info("printful.order_canceled", order_id=order_id)
        return PrintfulCancelResult(success=True, order_id=order_id)

    # ── Shipping ──────────────────────────────────────────────────────────

    async def calculate_shipping_rates(
        self, params: PrintfulShippingParams
    ) -> list[PrintfulShippingRate]:
        try:
            async with track_vendor_call("printful", "calculate_shipping_rates"):
                async with self._client(self.TIMEOUT_MUTATE) as client:
                    response = await client.post(
                        f"{self._base_url}/shipping/rates",
                        json=to_printful_shipping_request(params),
                    )
                    data = self._result(response) or []
        except Exception as exc:
            logger.error(
                "printful.shipping_rates_failed",
                country_code=params.recipient.country_code,
                error=str(exc),
            )
            raise

        logger.debug(
            "printful.shipping_rates_calculated",
            country_code=params.recipient.country_code,
            count=len(data),
        )
        return [from_printful_shipping_rate(rate) for rate in data]

    async def get_shipping_carriers(self) -> list[PrintfulCarrier]:
        try:
            async with track_vendor_call("printful", "get_shipping_carriers"):
                async with self._client(self.TIMEOUT_READ) as client:
                    response = await client.get(f"{self._base_url}/shipping/carriers")
                    data = self._result(response) or []
        except Exception as exc:
            logger.error("printful.shipping_carriers_failed", error=str(exc))
            raise

        return [from_printful_carrier(carrier) for carrier in data]

    # ── Webhooks ──────────────────────────────────────────────────────────

    async def handle_webhook(self, payload: bytes, signature: str) -> PrintfulWebhookEvent:
        """Verify the HMAC signature of a Printful webhook and map its body.

        Raises:
            WebhookSecretNotConfiguredError: No shared secret configured.
            WebhookSignatureError: Signature does not match the body.
            ValueError: Body is not a Printful event document.
        """
        if not self._webhook_secret:
            raise WebhookSecretNotConfiguredError("Printful")

        expected = compute_printful_signature(self._webhook_secret, payload)
        if not hmac.compare_digest(expected, signature.strip().lower()):
            logger.warning("printful.webhook_signature_mismatch")
            raise WebhookSignatureError("Invalid Printful webhook signature")

        body = json.loads(payload.decode("utf-8"))
        event = from_printful_webhook(body)

        logger.info("printful.webhook_received", event_type=event.type)
        return event

"""Network-free CRMConnector that logs syncs and returns Salesforce-shaped IDs."""

from __future__ import annotations

import secrets
import string

import structlog

from src.integrations.core.latency import simulate_latency
from src.integrations.core.money import format_decimal_amount
from src.integrations.crm.adapter import CRMConnector
from src.integrations.crm.field_mapping import (
    DEFAULT_FIELD_MAPPINGS,
    FieldMappingStore,
    InMemoryFieldMappingStore,
)
from src.integrations.crm.schemas import (
    CRMContactData,
    CRMFieldMapping,
    CRMLeadData,
    CRMOpportunityData,
    CRMSyncResult,
)

logger = structlog.get_logger(__name__).bind(stub=True)

SALESFORCE_ID_LENGTH = 18
_ID_ALPHABET = string.ascii_letters + string.digits

# Salesforce key prefixes identify the object type
CONTACT_PREFIX = "003"
LEAD_PREFIX = "00Q"
OPPORTUNITY_PREFIX = "006"


def generate_salesforce_id(prefix: str) -> str:
    """Random 18-character alphanumeric ID starting with ``prefix``."""
    body = "".join(
        secrets.choice(_ID_ALPHABET) for _ in range(SALESFORCE_ID_LENGTH - len(prefix))
    )
    return prefix + body


class StubCRMConnector(CRMConnector):
    """Always reports success. Field mappings start from DEFAULT_FIELD_MAPPINGS."""

    def __init__(
        self,
        field_mapping_store: FieldMappingStore | None = None,
        min_latency_ms: int = 0,
        max_latency_ms: int = 0,
    ) -> None:
        self._store = field_mapping_store or InMemoryFieldMappingStore(DEFAULT_FIELD_MAPPINGS)
        self._min_latency_ms = min_latency_ms
        self._max_latency_ms = max_latency_ms

    async def sync_contact(self, data: CRMContactData) -> CRMSyncResult:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)
        external_id = generate_salesforce_id(CONTACT_PREFIX)
        logger.info(
            "salesforce.contact_created",
            contact_id=external_id,
            cms_user_id=data.cms_user_id,
            email=data.email,
        )
        return CRMSyncResult(success=True, external_id=external_id)

    async def sync_lead(self, data: CRMLeadData) -> CRMSyncResult:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)
        external_id = generate_salesforce_id(LEAD_PREFIX)
        logger.info(
            "salesforce.lead_created",
            lead_id=external_id,
            source=data.source,
            email=data.email,
        )
        return CRMSyncResult(success=True, external_id=external_id)

    async def sync_opportunity(self, data: CRMOpportunityData) -> CRMSyncResult:
        await simulate_latency(self._min_latency_ms, self._max_latency_ms)
        external_id = generate_salesforce_id(OPPORTUNITY_PREFIX)
        logger.info(
            "salesforce.opportunity_created",
            opportunity_id=external_id,
            order_id=data.order_id,
            contact_id=data.contact_id,
            amount=format_decimal_amount(data.amount),
            status=data.status.value,
            product_count=len(data.products),
        )
        return CRMSyncResult(success=True, external_id=external_id)

    async def get_field_mappings(self) -> list[CRMFieldMapping]:
        mappings = self._store.get()
        logger.debug("salesforce.field_mappings_read", count=len(mappings))
        return mappings

    async def update_field_mappings(self, mappings: list[CRMFieldMapping]) -> None:
        self._store.replace(mappings)
        logger.info("salesforce.field_mappings_updated", count=len(mappings))

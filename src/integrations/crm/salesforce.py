"""Salesforce implementation of CRMConnector via simple-salesforce.

simple-salesforce is synchronous and session based. Authentication happens in
an explicit ``await connect()`` step (the provider factory awaits it at
startup); every sync called before a successful connect reports a failed
CRMSyncResult instead of reaching the network.

Contacts and opportunities are upserted on custom external-key fields:
- Contact.CMS_User_ID__c holds the platform user ID
- Opportunity.CMS_Order_ID__c holds the platform order ID
"""

from __future__ import annotations

import asyncio
import json
from datetime import date, timedelta
from typing import Any
from urllib.parse import urlparse

import structlog
from simple_salesforce import Salesforce, format_soql

from src.integrations.core.monitoring import track_vendor_call
from src.integrations.core.money import format_decimal_amount, to_major_units
from src.integrations.crm.adapter import CRMConnector
from src.integrations.crm.field_mapping import (
    FieldMappingStore,
    InMemoryFieldMappingStore,
    map_order_status_to_stage,
)
from src.integrations.crm.schemas import (
    CRMContactData,
    CRMFieldMapping,
    CRMLeadData,
    CRMOpportunityData,
    CRMSyncResult,
)
from src.integrations.errors import (
    CRMNotConnectedError,
    CRMVendorError,
    ProviderConfigurationError,
)

logger = structlog.get_logger(__name__)

CONTACT_KEY_FIELD = "CMS_User_ID__c"
OPPORTUNITY_KEY_FIELD = "CMS_Order_ID__c"
OPPORTUNITY_CLOSE_DAYS = 30

_SALESFORCE_SUFFIX = ".salesforce.com"


def login_url_to_domain(login_url: str) -> str:
    """Translate a login URL into simple-salesforce's ``domain`` argument.

    https://login.salesforce.com -> "login", https://test.salesforce.com ->
    "test", https://acme.my.salesforce.com -> "acme.my".
    """
    host = urlparse(login_url.strip()).hostname or login_url.strip()
    if not host.endswith(_SALESFORCE_SUFFIX):
        raise ProviderConfigurationError(f"Unsupported Salesforce login URL: {login_url}")
    return host[: -len(_SALESFORCE_SUFFIX)]


def _compact(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop unset values so optional fields don't blank existing CRM data."""
    return {k: v for k, v in fields.items() if v is not None}


class SalesforceConnector(CRMConnector):
    """CRMConnector backed by the Salesforce REST API.

    Args:
        username: Salesforce API user.
        password: Password for the API user.
        security_token: Security token appended to the password at login.
        login_url: Login endpoint; production or sandbox or My Domain.
        field_mapping_store: Storage for the mapping table. Defaults to an
            empty in-memory store.
    """

    def __init__(
        self,
        username: str,
        password: str,
        security_token: str,
        login_url: str = "https://login.salesforce.com",
        field_mapping_store: FieldMappingStore | None = None,
    ) -> None:
        self._username = username
        self._password = password
        self._security_token = security_token
        self._domain = login_url_to_domain(login_url)
        self._store = field_mapping_store or InMemoryFieldMappingStore()
        self._sf: Salesforce | None = None

    @property
    def connected(self) -> bool:
        return self._sf is not None

    async def connect(self) -> None:
        """Log in and keep the session. Raises on authentication failure."""
        try:
            async with track_vendor_call("salesforce", "login"):
                self._sf = await asyncio.to_thread(
                    Salesforce,
                    username=self._username,
                    password=self._password,
                    security_token=self._security_token,
                    domain=self._domain,
                )
        except Exception as exc:
            logger.error(
                "salesforce.login_failed",
                username=self._username,
                domain=self._domain,
                error=str(exc),
            )
            raise
        logger.info("salesforce.connected", username=self._username, domain=self._domain)

    # ── Internal helpers ──────────────────────────────────────────────────

    def _client(self) -> Salesforce:
        if self._sf is None:
            raise CRMNotConnectedError("Salesforce connector used before connect()")
        return self._sf

    async def _find_id(self, sobject: str, key_field: str, key: str) -> str | None:
        """Return the Id of the first record whose key field equals ``key``."""
        sf = self._client()
        soql = format_soql(
            f"SELECT Id FROM {sobject} WHERE {key_field} = {{}} LIMIT 1",
            key,
        )
        async with track_vendor_call("salesforce", f"query_{sobject.lower()}"):
            result = await asyncio.to_thread(sf.query, soql)
        for record in result.get("records", []):
            if record.get("Id"):
                return record["Id"]
        return None

    async def _create(self, sobject: str, fields: dict[str, Any]) -> str:
        sf = self._client()
        async with track_vendor_call("salesforce", f"create_{sobject.lower()}"):
            result = await asyncio.to_thread(getattr(sf, sobject).create, fields)
        if not result.get("success"):
            errors = result.get("errors")
            raise CRMVendorError(
                f"Salesforce {sobject} creation failed: {json.dumps(errors)}",
                errors=errors,
            )
        return result["id"]

    async def _update(self, sobject: str, record_id: str, fields: dict[str, Any]) -> None:
        sf = self._client()
        async with track_vendor_call("salesforce", f"update_{sobject.lower()}"):
            await asyncio.to_thread(getattr(sf, sobject).update, record_id, fields)

    # ── CRMConnector ──────────────────────────────────────────────────────

    async def sync_contact(self, data: CRMContactData) -> CRMSyncResult:
        fields = _compact(
            {
                "FirstName": data.first_name,
                "LastName": data.last_name,
                "Email": data.email,
                "Phone": data.phone,
                CONTACT_KEY_FIELD: data.cms_user_id,
            }
        )
        try:
            contact_id = await self._find_id("Contact", CONTACT_KEY_FIELD, data.cms_user_id)
            if contact_id:
                await self._update("Contact", contact_id, fields)
                logger.info(
                    "salesforce.contact_updated",
                    contact_id=contact_id,
                    cms_user_id=data.cms_user_id,
                )
            else:
                contact_id = await self._create("Contact", fields)
                logger.info(
                    "salesforce.contact_created",
                    contact_id=contact_id,
                    cms_user_id=data.cms_user_id,
                )
        except Exception as exc:
            logger.error(
                "salesforce.contact_sync_failed",
                cms_user_id=data.cms_user_id,
                error=str(exc),
            )
            return CRMSyncResult(success=False, external_id=None, error=str(exc))

        return CRMSyncResult(success=True, external_id=contact_id)

    async def sync_lead(self, data: CRMLeadData) -> CRMSyncResult:
        fields = _compact(
            {
                "FirstName": data.first_name,
                "LastName": data.last_name,
                "Email": data.email,
                "LeadSource": data.source,
                "Description": (
                    f"Submitted via CMS form: {data.cms_form_id}" if data.cms_form_id else None
                ),
            }
        )
        try:
            lead_id = await self._create("Lead", fields)
        except Exception as exc:
            logger.error("salesforce.lead_sync_failed", source=data.source, error=str(exc))
            return CRMSyncResult(success=False, external_id=None, error=str(exc))

        logger.info("salesforce.lead_created", lead_id=lead_id, source=data.source)
        return CRMSyncResult(success=True, external_id=lead_id)

    async def sync_opportunity(self, data: CRMOpportunityData) -> CRMSyncResult:
        stage = map_order_status_to_stage(data.status)
        amount = to_major_units(data.amount)

        try:
            opportunity_id = await self._find_id(
                "Opportunity", OPPORTUNITY_KEY_FIELD, data.order_id
            )
            if opportunity_id:
                await self._update(
                    "Opportunity",
                    opportunity_id,
                    {
                        "Amount": amount,
                        "StageName": stage,
                        OPPORTUNITY_KEY_FIELD: data.order_id,
                    },
                )
                logger.info(
                    "salesforce.opportunity_updated",
                    opportunity_id=opportunity_id,
                    order_id=data.order_id,
                    stage=stage,
                )
            else:
                close_date = date.today() + timedelta(days=OPPORTUNITY_CLOSE_DAYS)
                product_lines = "\n".join(
                    f"- {p.name} x{p.quantity}: ${format_decimal_amount(p.amount)}"
                    for p in data.products
                )
                opportunity_id = await self._create(
                    "Opportunity",
                    {
                        "Name": f"CMS Order {data.order_id}",
                        "ContactId": data.contact_id,
                        "Amount": amount,
                        "StageName": stage,
                        "CloseDate": close_date.isoformat(),
                        OPPORTUNITY_KEY_FIELD: data.order_id,
                        "Description": f"Products:\n{product_lines}",
                    },
                )
                logger.info(
                    "salesforce.opportunity_created",
                    opportunity_id=opportunity_id,
                    order_id=data.order_id,
                    stage=stage,
                )
        except Exception as exc:
            logger.error(
                "salesforce.opportunity_sync_failed",
                order_id=data.order_id,
                error=str(exc),
            )
            return CRMSyncResult(success=False, external_id=None, error=str(exc))

        return CRMSyncResult(success=True, external_id=opportunity_id)

    async def get_field_mappings(self) -> list[CRMFieldMapping]:
        return self._store.get()

    async def update_field_mappings(self, mappings: list[CRMFieldMapping]) -> None:
        self._store.replace(mappings)
        logger.info("salesforce.field_mappings_updated", count=len(mappings))

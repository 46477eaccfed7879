"""Tests for the CRM capability.

SalesforceConnector runs against an in-memory fake of the simple-salesforce
client that answers SOQL lookups on the external-key fields, so the upsert
paths are exercised without a network.
"""

from __future__ import annotations

import json
import re
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio
from hypothesis import given
from hypothesis import strategies as st

from src.integrations.crm.field_mapping import (
    DEFAULT_FIELD_MAPPINGS,
    ORDER_STATUS_STAGE_MAP,
    InMemoryFieldMappingStore,
    map_order_status_to_stage,
)
from src.integrations.crm.salesforce import SalesforceConnector, login_url_to_domain
from src.integrations.crm.schemas import (
    CRMContactData,
    CRMFieldMapping,
    CRMLeadData,
    CRMOpportunityData,
    CRMOpportunityProduct,
    OrderStatus,
)
from src.integrations.crm.stub import generate_salesforce_id
from src.integrations.errors import ProviderConfigurationError

# ── Fake simple-salesforce client ────────────────────────────────────────────


class FakeSObject:
    def __init__(self, name: str, prefix: str) -> None:
        self.name = name
        self.prefix = prefix
        self.records: dict[str, dict] = {}
        self.creates: list[dict] = []
        self.updates: list[tuple[str, dict]] = []
        self.fail_with: list[dict] | None = None

    def create(self, fields: dict) -> dict:
        self.creates.append(dict(fields))
        if self.fail_with is not None:
            return {"id": None, "success": False, "errors": self.fail_with}
        record_id = f"{self.prefix}{len(self.records):015d}"
        self.records[record_id] = dict(fields)
        return {"id": record_id, "success": True, "errors": []}

    def update(self, record_id: str, fields: dict) -> int:
        self.updates.append((record_id, dict(fields)))
        self.records[record_id].update(fields)
        return 204


class FakeSalesforce:
    def __init__(self) -> None:
        self.Contact = FakeSObject("Contact", "003")
        self.Lead = FakeSObject("Lead", "00Q")
        self.Opportunity = FakeSObject("Opportunity", "006")
        self.queries: list[str] = []

    def query(self, soql: str) -> dict:
        self.queries.append(soql)
        sobject = re.search(r"FROM (\w+)", soql).group(1)
        field = re.search(r"WHERE (\w+) =", soql).group(1)
        value = re.search(r"= '([^']*)'", soql).group(1)
        table: FakeSObject = getattr(self, sobject)
        records = [
            {"Id": record_id}
            for record_id, fields in table.records.items()
            if fields.get(field) == value
        ]
        return {"totalSize": len(records), "done": True, "records": records[:1]}


@pytest.fixture
def fake_sf() -> FakeSalesforce:
    return FakeSalesforce()


@pytest_asyncio.fixture
async def connector(fake_sf) -> SalesforceConnector:
    conn = SalesforceConnector(
        username="api@example.com",
        password="secret",
        security_token="token",
    )
    with patch("src.integrations.crm.salesforce.Salesforce", return_value=fake_sf) as mock_cls:
        await conn.connect()
    mock_cls.assert_called_once_with(
        username="api@example.com",
        password="secret",
        security_token="token",
        domain="login",
    )
    return conn


def _contact(**overrides) -> CRMContactData:
    values = {
        "email": "ada@example.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "cms_user_id": "user_1",
    }
    values.update(overrides)
    return CRMContactData(**values)


def _opportunity(**overrides) -> CRMOpportunityData:
    values = {
        "contact_id": "003X",
        "order_id": "order_abc",
        "amount": 5000,
        "status": OrderStatus.CLOSED_WON,
        "products": [CRMOpportunityProduct(name="Widget", quantity=2, amount=2500)],
    }
    values.update(overrides)
    return CRMOpportunityData(**values)


# ── Stage Mapping ────────────────────────────────────────────────────────────


class TestStageMapping:
    @pytest.mark.parametrize(
        ("status", "stage"),
        [
            (OrderStatus.OPEN, "Prospecting"),
            (OrderStatus.CLOSED_WON, "Closed Won"),
            (OrderStatus.CLOSED_LOST, "Closed Lost"),
            ("closed_won", "Closed Won"),
        ],
    )
    def test_known_statuses(self, status, stage):
        assert map_order_status_to_stage(status) == stage

    @given(st.text().filter(lambda s: s not in ORDER_STATUS_STAGE_MAP))
    def test_unknown_status_is_prospecting(self, status):
        assert map_order_status_to_stage(status) == "Prospecting"


# ── Field Mappings ───────────────────────────────────────────────────────────


class TestFieldMappingStore:
    def test_get_returns_copies(self):
        store = InMemoryFieldMappingStore(DEFAULT_FIELD_MAPPINGS)
        first = store.get()
        second = store.get()

        assert first == second
        assert first is not second
        assert first[0] is not second[0]

    def test_mutating_result_does_not_change_store(self):
        store = InMemoryFieldMappingStore(DEFAULT_FIELD_MAPPINGS)
        mappings = store.get()
        mappings[0].crm_field = "Changed"
        mappings.pop()

        assert store.get() == DEFAULT_FIELD_MAPPINGS

    def test_replace_copies_input(self):
        store = InMemoryFieldMappingStore()
        incoming = [CRMFieldMapping(cms_field="company", crm_field="Company", crm_object="Lead")]
        store.replace(incoming)
        incoming[0].crm_field = "Account"

        assert store.get()[0].crm_field == "Company"

    def test_serializes_to_camel_case(self):
        dumped = DEFAULT_FIELD_MAPPINGS[0].model_dump(by_alias=True)
        assert dumped == {
            "cmsField": "email",
            "crmField": "Email",
            "crmObject": "Contact",
            "transformation": None,
        }


# ── Stub ─────────────────────────────────────────────────────────────────────


class TestStubCRMConnector:
    @pytest.mark.parametrize("prefix", ["003", "00Q", "006"])
    def test_generated_ids(self, prefix):
        generated = generate_salesforce_id(prefix)
        assert len(generated) == 18
        assert generated.startswith(prefix)
        assert generated.isalnum()

    async def test_sync_prefixes(self, stub_crm):
        contact = await stub_crm.sync_contact(_contact())
        lead = await stub_crm.sync_lead(
            CRMLeadData(email="a@b.c", first_name="A", last_name="B", source="web")
        )
        opportunity = await stub_crm.sync_opportunity(_opportunity())

        assert contact.success and contact.external_id.startswith("003")
        assert lead.success and lead.external_id.startswith("00Q")
        assert opportunity.success and opportunity.external_id.startswith("006")

    async def test_default_mappings(self, stub_crm):
        mappings = await stub_crm.get_field_mappings()
        assert len(mappings) == 6
        assert {m.crm_object for m in mappings} == {"Contact", "Lead"}

    async def test_update_then_get(self, stub_crm):
        new = [CRMFieldMapping(cms_field="company", crm_field="Company", crm_object="Lead")]
        await stub_crm.update_field_mappings(new)
        assert await stub_crm.get_field_mappings() == new


# ── SalesforceConnector ──────────────────────────────────────────────────────


class TestLoginUrlToDomain:
    @pytest.mark.parametrize(
        ("url", "domain"),
        [
            ("https://login.salesforce.com", "login"),
            ("https://test.salesforce.com", "test"),
            ("https://acme.my.salesforce.com/", "acme.my"),
        ],
    )
    def test_salesforce_hosts(self, url, domain):
        assert login_url_to_domain(url) == domain

    def test_foreign_host_rejected(self):
        with pytest.raises(ProviderConfigurationError):
            login_url_to_domain("https://login.example.com")


class TestSalesforceConnector:
    async def test_contact_upsert_is_idempotent(self, connector, fake_sf):
        first = await connector.sync_contact(_contact())
        second = await connector.sync_contact(_contact(phone="555-0100"))

        assert first.success and second.success
        assert first.external_id == second.external_id
        assert len(fake_sf.Contact.creates) == 1
        assert len(fake_sf.Contact.updates) == 1
        assert fake_sf.Contact.updates[0][1]["Phone"] == "555-0100"

    async def test_contact_create_fields(self, connector, fake_sf):
        await connector.sync_contact(_contact())

        created = fake_sf.Contact.creates[0]
        assert created == {
            "FirstName": "Ada",
            "LastName": "Lovelace",
            "Email": "ada@example.com",
            "CMS_User_ID__c": "user_1",
        }
        assert "CMS_User_ID__c = 'user_1'" in fake_sf.queries[0]

    async def test_lookup_value_is_escaped(self, connector, fake_sf):
        await connector.sync_contact(_contact(cms_user_id="o'brien"))
        assert "o\\'brien" in fake_sf.queries[0]

    async def test_lead_always_creates(self, connector, fake_sf):
        lead = CRMLeadData(
            email="lead@example.com",
            first_name="Grace",
            last_name="Hopper",
            source="Website",
            cms_form_id="form_42",
        )
        first = await connector.sync_lead(lead)
        second = await connector.sync_lead(lead)

        assert first.external_id != second.external_id
        assert len(fake_sf.Lead.creates) == 2
        assert fake_sf.Lead.creates[0]["Description"] == "Submitted via CMS form: form_42"
        assert fake_sf.Lead.creates[0]["LeadSource"] == "Website"
        assert fake_sf.queries == []

    async def test_lead_without_form_has_no_description(self, connector, fake_sf):
        await connector.sync_lead(
            CRMLeadData(email="l@example.com", first_name="G", last_name="H", source="Ads")
        )
        assert "Description" not in fake_sf.Lead.creates[0]

    async def test_opportunity_create(self, connector, fake_sf):
        result = await connector.sync_opportunity(_opportunity())

        assert result.success is True
        assert result.external_id.startswith("006")
        created = fake_sf.Opportunity.creates[0]
        assert created["Name"] == "CMS Order order_abc"
        assert created["ContactId"] == "003X"
        assert created["Amount"] == 50
        assert created["StageName"] == "Closed Won"
        assert created["CMS_Order_ID__c"] == "order_abc"
        assert created["CloseDate"] == (date.today() + timedelta(days=30)).isoformat()
        assert created["Description"] == "Products:\n- Widget x2: $25.00"

    async def test_opportunity_update_changes_amount_and_stage(self, connector, fake_sf):
        first = await connector.sync_opportunity(_opportunity(status=OrderStatus.OPEN))
        second = await connector.sync_opportunity(_opportunity(amount=7500))

        assert first.external_id == second.external_id
        assert len(fake_sf.Opportunity.creates) == 1
        record_id, fields = fake_sf.Opportunity.updates[0]
        assert record_id == first.external_id
        assert fields == {
            "Amount": 75,
            "StageName": "Closed Won",
            "CMS_Order_ID__c": "order_abc",
        }

    async def test_vendor_failure_becomes_result(self, connector, fake_sf):
        errors = [{"statusCode": "REQUIRED_FIELD_MISSING", "message": "LastName"}]
        fake_sf.Contact.fail_with = errors

        result = await connector.sync_contact(_contact())

        assert result.success is False
        assert result.external_id is None
        assert json.dumps(errors) in result.error

    async def test_query_exception_becomes_result(self, connector, fake_sf):
        fake_sf.query = MagicMock(side_effect=RuntimeError("INVALID_SESSION_ID"))

        result = await connector.sync_opportunity(_opportunity())

        assert result.success is False
        assert "INVALID_SESSION_ID" in result.error

    async def test_sync_before_connect_fails(self):
        conn = SalesforceConnector(username="u", password="p", security_token="t")

        assert conn.connected is False
        result = await conn.sync_contact(_contact())
        assert result.success is False
        assert result.error

    async def test_connect_failure_raises(self):
        conn = SalesforceConnector(username="u", password="p", security_token="t")
        with patch(
            "src.integrations.crm.salesforce.Salesforce",
            side_effect=RuntimeError("INVALID_LOGIN"),
        ):
            with pytest.raises(RuntimeError, match="INVALID_LOGIN"):
                await conn.connect()
        assert conn.connected is False

    async def test_field_mappings_start_empty(self, connector):
        assert await connector.get_field_mappings() == []
        new = [CRMFieldMapping(cms_field="email", crm_field="Email", crm_object="Contact")]
        await connector.update_field_mappings(new)
        assert await connector.get_field_mappings() == new

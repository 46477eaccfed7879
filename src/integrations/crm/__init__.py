"""CRM capability -- pluggable connector pattern for pushing platform records to a CRM.

Provides the abstract CRMConnector interface with concrete implementations:
- SalesforceConnector: Live Salesforce org via simple-salesforce (explicit connect())
- StubCRMConnector: Synthetic 18-character record IDs, always successful
- FieldMappingStore / InMemoryFieldMappingStore: Injected storage for the mapping table
"""

from src.integrations.crm.adapter import CRMConnector
from src.integrations.crm.field_mapping import (
    DEFAULT_FIELD_MAPPINGS,
    ORDER_STATUS_STAGE_MAP,
    FieldMappingStore,
    InMemoryFieldMappingStore,
    map_order_status_to_stage,
)
from src.integrations.crm.salesforce import SalesforceConnector
from src.integrations.crm.schemas import (
    CRMContactData,
    CRMFieldMapping,
    CRMLeadData,
    CRMOpportunityData,
    CRMOpportunityProduct,
    CRMSyncResult,
    OrderStatus,
)
from src.integrations.crm.stub import StubCRMConnector

__all__ = [
    "CRMConnector",
    "SalesforceConnector",
    "StubCRMConnector",
    "FieldMappingStore",
    "InMemoryFieldMappingStore",
    "DEFAULT_FIELD_MAPPINGS",
    "ORDER_STATUS_STAGE_MAP",
    "map_order_status_to_stage",
    "CRMContactData",
    "CRMLeadData",
    "CRMOpportunityData",
    "CRMOpportunityProduct",
    "CRMSyncResult",
    "CRMFieldMapping",
    "OrderStatus",
]

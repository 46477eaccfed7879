"""CRM connector abstract base class -- the contract every CRM backend implements.

Sync operations report vendor failures through CRMSyncResult(success=False)
rather than raising, so callers branch on the result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.integrations.crm.schemas import (
    CRMContactData,
    CRMFieldMapping,
    CRMLeadData,
    CRMOpportunityData,
    CRMSyncResult,
)


class CRMConnector(ABC):
    """Abstract interface for pushing platform records into a CRM.

    Methods:
        sync_contact: Upsert a contact keyed by cms_user_id.
        sync_lead: Create a lead. Never deduplicated.
        sync_opportunity: Upsert an opportunity keyed by order_id.
        get_field_mappings: Copy of the current field mapping table.
        update_field_mappings: Replace the field mapping table wholesale.
    """

    @abstractmethod
    async def sync_contact(self, data: CRMContactData) -> CRMSyncResult:
        """Upsert a contact, return the CRM record ID in the result."""
        ...

    @abstractmethod
    async def sync_lead(self, data: CRMLeadData) -> CRMSyncResult:
        """Create a new lead."""
        ...

    @abstractmethod
    async def sync_opportunity(self, data: CRMOpportunityData) -> CRMSyncResult:
        """Upsert an opportunity for an order."""
        ...

    @abstractmethod
    async def get_field_mappings(self) -> list[CRMFieldMapping]:
        """Return the field mapping table."""
        ...

    @abstractmethod
    async def update_field_mappings(self, mappings: list[CRMFieldMapping]) -> None:
        """Replace the field mapping table."""
        ...

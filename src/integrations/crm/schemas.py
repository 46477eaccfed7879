"""Canonical CRM sync payloads and results.

Dedupe keys: contacts by ``cms_user_id``, opportunities by ``order_id``.
Leads have no dedupe key and every sync creates a new record.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from src.integrations.core.schemas import CanonicalModel


class OrderStatus(str, Enum):
    """Platform order status as seen by the CRM."""

    OPEN = "open"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


class CRMContactData(CanonicalModel):
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    cms_user_id: str


class CRMLeadData(CanonicalModel):
    email: str
    first_name: str
    last_name: str
    source: str
    cms_form_id: str | None = None


class CRMOpportunityProduct(CanonicalModel):
    name: str
    quantity: int
    amount: int  # minor units


class CRMOpportunityData(CanonicalModel):
    contact_id: str
    order_id: str
    amount: int  # minor units
    status: OrderStatus
    products: list[CRMOpportunityProduct] = Field(default_factory=list)


class CRMSyncResult(CanonicalModel):
    """Outcome of a sync. Vendor failures land here, never as exceptions."""

    success: bool
    external_id: str | None = None
    error: str | None = None


class CRMFieldMapping(CanonicalModel):
    """One row of the platform-field -> CRM-field projection table."""

    cms_field: str
    crm_field: str
    crm_object: str
    transformation: str | None = None

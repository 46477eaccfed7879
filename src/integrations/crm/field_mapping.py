"""Field mapping storage and CRM vocabulary tables.

Defines:
- FieldMappingStore: get()/replace() interface for the mapping table, so a
  datastore-backed store can replace the in-memory one without touching
  connector code.
- InMemoryFieldMappingStore: Process-local store. Not shared across worker
  processes or instances; each holds its own table.
- DEFAULT_FIELD_MAPPINGS: Contact and Lead mappings the stub CRM starts with.
- ORDER_STATUS_STAGE_MAP / map_order_status_to_stage(): Order status -> Salesforce
  Opportunity StageName.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.integrations.crm.schemas import CRMFieldMapping, OrderStatus


class FieldMappingStore(ABC):
    """Holds the CRM field mapping table.

    Implementations must copy on both read and write: callers get a list
    they may mutate freely without affecting the stored table, and mutating
    the list passed to replace() later has no effect either.
    """

    @abstractmethod
    def get(self) -> list[CRMFieldMapping]:
        """Return a copy of the current mapping table."""
        ...

    @abstractmethod
    def replace(self, mappings: list[CRMFieldMapping]) -> None:
        """Replace the whole table with a copy of ``mappings``."""
        ...


class InMemoryFieldMappingStore(FieldMappingStore):
    """FieldMappingStore backed by an instance attribute.

    Reads and writes are unlocked; a replace() racing a get() sees either the
    old or the new table.
    """

    def __init__(self, initial: list[CRMFieldMapping] | None = None) -> None:
        self._mappings: list[CRMFieldMapping] = _copy(initial or [])

    def get(self) -> list[CRMFieldMapping]:
        return _copy(self._mappings)

    def replace(self, mappings: list[CRMFieldMapping]) -> None:
        self._mappings = _copy(mappings)


def _copy(mappings: list[CRMFieldMapping]) -> list[CRMFieldMapping]:
    return [m.model_copy(deep=True) for m in mappings]


# ── Default Mappings ───────────────────────────────────────────────────────

DEFAULT_FIELD_MAPPINGS: list[CRMFieldMapping] = [
    CRMFieldMapping(cms_field="email", crm_field="Email", crm_object="Contact"),
    CRMFieldMapping(cms_field="firstName", crm_field="FirstName", crm_object="Contact"),
    CRMFieldMapping(cms_field="lastName", crm_field="LastName", crm_object="Contact"),
    CRMFieldMapping(cms_field="phone", crm_field="Phone", crm_object="Contact"),
    CRMFieldMapping(cms_field="email", crm_field="Email", crm_object="Lead"),
    CRMFieldMapping(cms_field="source", crm_field="LeadSource", crm_object="Lead"),
]


# ── Opportunity Stage Mapping ──────────────────────────────────────────────

DEFAULT_STAGE = "Prospecting"

ORDER_STATUS_STAGE_MAP: dict[str, str] = {
    OrderStatus.OPEN.value: "Prospecting",
    OrderStatus.CLOSED_WON.value: "Closed Won",
    OrderStatus.CLOSED_LOST.value: "Closed Lost",
}


def map_order_status_to_stage(status: str | OrderStatus) -> str:
    """Map an order status to a Salesforce StageName; unknown -> Prospecting."""
    key = status.value if isinstance(status, OrderStatus) else status
    return ORDER_STATUS_STAGE_MAP.get(key, DEFAULT_STAGE)

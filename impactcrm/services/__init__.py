"""Services for the ImpactCRM application."""

from impactcrm.services.record_store import InMemoryRecordStore, MongoRecordStore, RecordStore
from impactcrm.services.tenancy import TenantContext, resolve_tenant

__all__ = [
    "InMemoryRecordStore",
    "MongoRecordStore",
    "RecordStore",
    "TenantContext",
    "resolve_tenant",
]

"""MongoDB document models for ImpactCRM."""

from impactcrm.models.organization import MemberRole, Membership, Organization
from impactcrm.models.records import (
    TABLE_MODELS,
    ClosedClientFile,
    DisbursedAward,
    DonorTrackerEntry,
    NetworkingContact,
    TenantScopedDocument,
)

__all__ = [
    # Tenancy
    "Organization",
    "Membership",
    "MemberRole",
    # CRM records
    "TenantScopedDocument",
    "ClosedClientFile",
    "DonorTrackerEntry",
    "NetworkingContact",
    "DisbursedAward",
    "TABLE_MODELS",
]

"""Tenant-scoped CRM record documents, one collection per importable table.

Field names match the storage keys of the import schemas so that records
produced by the import pipeline can be handed to these models unchanged.
Dates are kept as ``YYYY-MM-DD`` strings, the shape the pipeline emits.
"""

from datetime import datetime, timezone
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field


class TenantScopedDocument(Document):
    """Common tenant and audit fields. Not registered as a collection itself."""

    organization_id: Indexed(str)
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ClosedClientFile(TenantScopedDocument):
    """A closed client case file, bucketed by reporting year."""

    client_name: str
    life_coach: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    area_office: Optional[str] = None
    race_eth: Optional[str] = None
    sex: Optional[str] = None
    case_code: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    hometown: Optional[str] = None
    model: Optional[str] = None
    notes: Optional[str] = None
    year: Indexed(int)

    class Settings:
        name = "closed_client_files"


class DonorTrackerEntry(TenantScopedDocument):
    """A grant opportunity or donor relationship being tracked."""

    donor_name: str
    date_opened: Optional[str] = None
    date_due: Optional[str] = None
    program: Optional[str] = None
    value: Optional[float] = None
    region: Optional[str] = None
    contact: Optional[str] = None
    review_url: Optional[str] = None
    notes: Optional[str] = None
    date_submission: Optional[str] = None
    report_due: Optional[str] = None
    status: Optional[str] = None

    class Settings:
        name = "donor_tracker"


class NetworkingContact(TenantScopedDocument):
    """A networking contact; ``organization`` is the contact's employer."""

    name: str
    organization: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    donor: Optional[str] = None
    award_ceremony: Optional[str] = None

    class Settings:
        name = "networking_contacts"


class DisbursedAward(TenantScopedDocument):
    """An award paid out to a grantee."""

    donor_name: str
    award_name: Optional[str] = None
    amount: Optional[float] = None
    date_disbursed: Optional[str] = None
    notes: Optional[str] = None

    class Settings:
        name = "disbursed_awards"


# Import schema table name -> document model
TABLE_MODELS: dict[str, type[TenantScopedDocument]] = {
    model.Settings.name: model
    for model in (ClosedClientFile, DonorTrackerEntry, NetworkingContact, DisbursedAward)
}

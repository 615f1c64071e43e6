"""Tests for single-record create, edit and delete."""

import pytest

from impactcrm.exceptions import RecordValidationError
from impactcrm.models import MemberRole
from impactcrm.services import record_editor
from impactcrm.services.import_service import CLIENT_FILES, DISBURSED_AWARDS, DONOR_TRACKER
from impactcrm.services.record_store import InMemoryRecordStore
from impactcrm.services.tenancy import TenantContext


# =============================================================================
# Normalization
# =============================================================================


def test_new_record_uses_import_normalizers() -> None:
    record = record_editor.normalize_new_record(
        DONOR_TRACKER,
        {"donor_name": "  Acme Fund ", "value": "$12,000", "date_opened": "3/5/24"},
    )
    assert record["donor_name"] == "Acme Fund"
    assert record["value"] == 12000
    assert record["date_opened"] == "2024-03-05"
    assert record["notes"] is None


def test_new_record_accepts_json_numbers() -> None:
    record = record_editor.normalize_new_record(
        CLIENT_FILES, {"client_name": "Jane", "age": 34, "year": 2023}
    )
    assert record["age"] == 34
    assert record["year"] == 2023


def test_new_record_collects_every_error() -> None:
    with pytest.raises(RecordValidationError) as exc_info:
        record_editor.normalize_new_record(
            CLIENT_FILES, {"client_name": "", "age": "old", "year": 2023}
        )
    assert exc_info.value.errors == [
        "Client Name is required",
        "Age must be a non-negative integer",
    ]


def test_new_record_rejects_unknown_fields() -> None:
    with pytest.raises(RecordValidationError) as exc_info:
        record_editor.normalize_new_record(
            DISBURSED_AWARDS, {"donor_name": "Acme", "organization_id": "org-2"}
        )
    assert exc_info.value.errors == ["Unknown field 'organization_id'"]


def test_changes_only_cover_submitted_fields() -> None:
    changes = record_editor.normalize_changes(
        DISBURSED_AWARDS, {"amount": "$1,200.50", "notes": ""}
    )
    assert changes == {"amount": 1200.5, "notes": None}


@pytest.mark.parametrize(
    "changes, message",
    [
        ({}, "No fields to update"),
        ({"client_name": "  "}, "Client Name is required"),
        ({"year": ""}, "Year is missing or not a number"),
        ({"year": "1999"}, "Year must be between 2000 and 2100"),
        ({"age": "1e5"}, "Age must be a non-negative integer"),
        ({"client_id": "x"}, "Unknown field 'client_id'"),
    ],
)
def test_invalid_changes(changes, message) -> None:
    with pytest.raises(RecordValidationError) as exc_info:
        record_editor.normalize_changes(CLIENT_FILES, changes)
    assert exc_info.value.errors == [message]


def test_amount_in_exponent_form_is_rejected() -> None:
    with pytest.raises(RecordValidationError) as exc_info:
        record_editor.normalize_changes(DISBURSED_AWARDS, {"amount": "1e999999999"})
    assert exc_info.value.errors == ["Amount is not a valid amount"]


# =============================================================================
# Store operations
# =============================================================================


@pytest.mark.asyncio
async def test_create_stamps_tenant(store: InMemoryRecordStore, tenant: TenantContext) -> None:
    created = await record_editor.create_record(
        DONOR_TRACKER, tenant, store, {"donor_name": "Acme"}
    )
    assert created["organization_id"] == "org-1"
    assert created["user_id"] == "user-1"
    assert await store.count("donor_tracker", {"organization_id": "org-1"}) == 1


@pytest.mark.asyncio
async def test_create_client_file_has_no_creator(
    store: InMemoryRecordStore, tenant: TenantContext
) -> None:
    created = await record_editor.create_record(
        CLIENT_FILES, tenant, store, {"client_name": "Jane", "year": "2024"}
    )
    assert created["organization_id"] == "org-1"
    assert "user_id" not in created


@pytest.mark.asyncio
async def test_invalid_create_writes_nothing(
    store: InMemoryRecordStore, tenant: TenantContext
) -> None:
    with pytest.raises(RecordValidationError):
        await record_editor.create_record(CLIENT_FILES, tenant, store, {"client_name": "Jane"})
    assert await store.count("closed_client_files") == 0


@pytest.mark.asyncio
async def test_update_and_delete(store: InMemoryRecordStore, tenant: TenantContext) -> None:
    created = await record_editor.create_record(
        DISBURSED_AWARDS, tenant, store, {"donor_name": "Acme", "amount": "500"}
    )

    updated = await record_editor.update_record(
        DISBURSED_AWARDS, tenant, store, created["id"], {"amount": "$1,200"}
    )
    assert updated is not None
    assert updated["amount"] == 1200
    assert updated["donor_name"] == "Acme"

    assert await record_editor.delete_record(DISBURSED_AWARDS, tenant, store, created["id"])
    assert await store.count("disbursed_awards") == 0
    assert not await record_editor.delete_record(DISBURSED_AWARDS, tenant, store, created["id"])


@pytest.mark.asyncio
async def test_other_tenant_cannot_edit(store: InMemoryRecordStore, tenant: TenantContext) -> None:
    created = await record_editor.create_record(
        DONOR_TRACKER, tenant, store, {"donor_name": "Acme"}
    )
    outsider = TenantContext(organization_id="org-2", user_id="user-2", role=MemberRole.MEMBER)

    assert (
        await record_editor.update_record(
            DONOR_TRACKER, outsider, store, created["id"], {"notes": "mine now"}
        )
        is None
    )
    assert not await record_editor.delete_record(DONOR_TRACKER, outsider, store, created["id"])

    [row] = await store.select("donor_tracker")
    assert row["notes"] is None

"""Tenant-scoped record listing and maintenance endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from impactcrm.exceptions import RecordStoreError, RecordValidationError
from impactcrm.routers.import_router import schema_or_404
from impactcrm.schemas.dashboard import YearCount
from impactcrm.schemas.records import RecordListResponse, RecordTypeInfo
from impactcrm.services import dashboard, record_editor
from impactcrm.services.auth import RequireTenant, RequireWriter
from impactcrm.services.import_service import RECORD_SCHEMAS, RecordSchema
from impactcrm.services.record_store import RecordStore, get_record_store
from impactcrm.services.tenancy import TenantContext

router = APIRouter()

StoreDep = Annotated[RecordStore, Depends(get_record_store)]


async def load_records(
    store: RecordStore,
    schema: RecordSchema,
    tenant: TenantContext,
    year: int | None = None,
) -> list[dict[str, Any]]:
    """Fetch the tenant's records of one type, ordered by the identity field.

    Raises:
        HTTPException: 400 if ``year`` is given for an unpartitioned type,
            502 if the store fails.
    """
    filters: dict[str, Any] = {"organization_id": tenant.organization_id}
    if year is not None:
        if schema.partition_field is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{schema.title} records are not grouped by year",
            )
        filters[schema.partition_field.name] = year

    try:
        return await store.select(schema.table, filters, order=[schema.identity_field.name])
    except RecordStoreError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Records could not be loaded",
        ) from None


@router.get("/types", response_model=list[RecordTypeInfo])
async def list_record_types(tenant: RequireTenant) -> list[RecordTypeInfo]:
    """Describe every importable record type and its accepted headers."""
    return [
        RecordTypeInfo(
            record_type=schema.record_type,
            title=schema.title,
            table=schema.table,
            headers=schema.export_headers,
            required=[spec.primary_alias for spec in schema.fields if spec.required],
            partitioned_by_year=schema.partition_field is not None,
        )
        for schema in RECORD_SCHEMAS.values()
    ]


@router.get("/client_files/years", response_model=list[YearCount])
async def client_file_years(tenant: RequireTenant, store: StoreDep) -> list[YearCount]:
    """Closed client file counts per reporting year."""
    return await dashboard.year_counts(store, tenant)


@router.get("/{record_type}", response_model=RecordListResponse)
async def list_records(
    record_type: str,
    tenant: RequireTenant,
    store: StoreDep,
    year: int | None = Query(default=None, description="Reporting year filter"),
) -> RecordListResponse:
    """List the caller's organization records of one type."""
    schema = schema_or_404(record_type)
    records = await load_records(store, schema, tenant, year)
    return RecordListResponse(
        record_type=schema.record_type,
        table=schema.table,
        total=len(records),
        year=year,
        records=records,
    )


RecordValues = Annotated[
    dict[str, record_editor.SubmittedValue],
    Body(description="Field values keyed by storage name, e.g. {\"client_name\": \"Jane\"}"),
]


def _invalid(e: RecordValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": "Record is invalid", "errors": e.errors},
    )


def _store_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Record could not be saved",
    )


def _not_found(schema: RecordSchema, record_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{schema.title} record {record_id} not found",
    )


@router.post("/{record_type}", status_code=status.HTTP_201_CREATED)
async def create_record(
    record_type: str,
    tenant: RequireWriter,
    store: StoreDep,
    values: RecordValues,
) -> dict[str, Any]:
    """Add one record, validated exactly like an imported row."""
    schema = schema_or_404(record_type)
    try:
        return await record_editor.create_record(schema, tenant, store, values)
    except RecordValidationError as e:
        raise _invalid(e) from None
    except RecordStoreError:
        raise _store_failed() from None


@router.patch("/{record_type}/{record_id}")
async def update_record(
    record_type: str,
    record_id: str,
    tenant: RequireWriter,
    store: StoreDep,
    changes: RecordValues,
) -> dict[str, Any]:
    """Update only the submitted fields of one record."""
    schema = schema_or_404(record_type)
    try:
        updated = await record_editor.update_record(schema, tenant, store, record_id, changes)
    except RecordValidationError as e:
        raise _invalid(e) from None
    except RecordStoreError:
        raise _store_failed() from None
    if updated is None:
        raise _not_found(schema, record_id)
    return updated


@router.delete("/{record_type}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    record_type: str,
    record_id: str,
    tenant: RequireWriter,
    store: StoreDep,
) -> None:
    """Delete one record of the caller's organization."""
    schema = schema_or_404(record_type)
    try:
        deleted = await record_editor.delete_record(schema, tenant, store, record_id)
    except RecordStoreError:
        raise _store_failed() from None
    if not deleted:
        raise _not_found(schema, record_id)

"""Create, edit and delete single tenant records.

Submitted values go through the same field normalizers as CSV imports, so a
record entered by hand is stored in exactly the shape an import produces.
"""

import logging
from typing import Any

from impactcrm.exceptions import RecordValidationError
from impactcrm.services.import_service import (
    YEAR_MAX,
    YEAR_MIN,
    FieldError,
    FieldKind,
    NormalizedValue,
    RecordSchema,
    normalize_cell,
    normalize_year,
    to_storage_dict,
    validate_row,
)
from impactcrm.services.record_store import RecordStore
from impactcrm.services.tenancy import TenantContext

logger = logging.getLogger(__name__)

# Submitted values arrive as JSON scalars
SubmittedValue = str | int | float | None


def _as_cell(value: SubmittedValue) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _unknown_fields(schema: RecordSchema, values: dict[str, SubmittedValue]) -> list[str]:
    known = {spec.name for spec in schema.fields}
    return [f"Unknown field '{name}'" for name in values if name not in known]


def normalize_new_record(
    schema: RecordSchema, values: dict[str, SubmittedValue]
) -> dict[str, Any]:
    """Validate a complete record keyed by field name, as one import row would be.

    Raises:
        RecordValidationError: With every problem found.
    """
    errors = _unknown_fields(schema, values)
    if errors:
        raise RecordValidationError(errors)

    names = [spec.name for spec in schema.fields]
    cells = [_as_cell(values.get(name)) for name in names]
    header_index = {name: position for position, name in enumerate(names)}

    result = validate_row(cells, header_index, schema, row_number=1)
    if not result.ok:
        raise RecordValidationError([error.message for error in result.errors])
    return to_storage_dict(result.record)


def normalize_changes(
    schema: RecordSchema, changes: dict[str, SubmittedValue]
) -> dict[str, Any]:
    """Validate a partial update; only the submitted fields are checked.

    Raises:
        RecordValidationError: With every problem found.
    """
    if not changes:
        raise RecordValidationError(["No fields to update"])

    errors = _unknown_fields(schema, changes)
    normalized: dict[str, NormalizedValue] = {}

    for name, value in changes.items():
        try:
            spec = schema.get_field(name)
        except KeyError:
            continue
        raw = _as_cell(value)

        if spec.kind is FieldKind.YEAR:
            result = normalize_year(
                raw,
                spec.min_value if spec.min_value is not None else YEAR_MIN,
                spec.max_value if spec.max_value is not None else YEAR_MAX,
            )
        elif spec.required and not raw:
            result = FieldError(f"{spec.label} is required")
        else:
            result = normalize_cell(spec, raw)

        if isinstance(result, FieldError):
            errors.append(result.message)
        else:
            normalized[name] = result

    if errors:
        raise RecordValidationError(errors)
    return to_storage_dict(normalized)


async def create_record(
    schema: RecordSchema,
    tenant: TenantContext,
    store: RecordStore,
    values: dict[str, SubmittedValue],
) -> dict[str, Any]:
    """Validate, stamp and store one new record.

    Raises:
        RecordValidationError: If the values are invalid.
        RecordStoreError: If the store rejects the insert.
    """
    record = tenant.stamp(
        normalize_new_record(schema, values), include_creator=schema.stamp_creator
    )
    created = await store.create(schema.table, record)
    logger.info(
        "Record created: org=%s type=%s id=%s",
        tenant.organization_id,
        schema.record_type,
        created["id"],
    )
    return created


async def update_record(
    schema: RecordSchema,
    tenant: TenantContext,
    store: RecordStore,
    record_id: str,
    changes: dict[str, SubmittedValue],
) -> dict[str, Any] | None:
    """Apply validated changes to one of the tenant's records.

    Returns:
        The updated record, or None if the tenant has no record with that id.
    """
    updated = await store.update(
        schema.table,
        record_id,
        normalize_changes(schema, changes),
        filters={"organization_id": tenant.organization_id},
    )
    if updated is not None:
        logger.info(
            "Record updated: org=%s type=%s id=%s fields=%s",
            tenant.organization_id,
            schema.record_type,
            record_id,
            ",".join(sorted(changes)),
        )
    return updated


async def delete_record(
    schema: RecordSchema, tenant: TenantContext, store: RecordStore, record_id: str
) -> bool:
    """Delete one of the tenant's records; False if it does not exist."""
    deleted = await store.delete(
        schema.table, record_id, filters={"organization_id": tenant.organization_id}
    )
    if deleted:
        logger.info(
            "Record deleted: org=%s type=%s id=%s",
            tenant.organization_id,
            schema.record_type,
            record_id,
        )
    return deleted

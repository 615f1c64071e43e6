"""End-to-end CSV import: parse, validate, gate, and bulk insert."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from impactcrm.services.record_store import RecordStore
from impactcrm.services.tenancy import TenantContext

from .constants import DEFAULT_DISPLAYED_ERRORS, MAX_ROWS
from .field_specs import RecordSchema
from .headers import NOT_FOUND, missing_required, resolve_headers
from .partition import (
    YEAR_MAX,
    YEAR_MIN,
    YEAR_UNRESOLVABLE,
    in_range,
    year_from_filename,
)
from .splitter import decode_upload, iter_lines, split_csv_line
from .validator import RowError, validate_row
from .values import NormalizedValue, to_storage_dict

logger = logging.getLogger(__name__)


class ImportStatus(str, Enum):
    """Final state of one import request."""

    ACCEPTED = "accepted"
    BLOCKED = "blocked"
    EMPTY = "empty"


@dataclass
class ImportBatch:
    """Everything learned from one uploaded file before anything is persisted."""

    schema: RecordSchema
    records: list[dict[str, NormalizedValue]] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    file_error: str | None = None
    data_rows: int = 0
    blank_rows: int = 0
    year: int | None = None

    @property
    def blocked(self) -> bool:
        return self.file_error is not None or bool(self.errors)


@dataclass
class ImportOutcome:
    """Result reported to the caller of ``import_csv``."""

    status: ImportStatus
    record_type: str
    inserted: int = 0
    errors: list[str] = field(default_factory=list)
    file_error: str | None = None
    records: list[dict[str, Any]] = field(default_factory=list)
    year: int | None = None

    @property
    def error_count(self) -> int:
        return len(self.errors) + (1 if self.file_error else 0)

    def display_errors(self, limit: int = DEFAULT_DISPLAYED_ERRORS) -> tuple[list[str], int]:
        """Errors to show a user, capped at ``limit``, and how many were hidden."""
        messages = ([self.file_error] if self.file_error else []) + self.errors
        return messages[:limit], max(0, len(messages) - limit)


def _year_bounds(schema: RecordSchema) -> tuple[int, int]:
    spec = schema.partition_field
    minimum = spec.min_value if spec and spec.min_value is not None else YEAR_MIN
    maximum = spec.max_value if spec and spec.max_value is not None else YEAR_MAX
    return minimum, maximum


def prepare_batch(
    content: bytes | str,
    schema: RecordSchema,
    *,
    year_override: int | None = None,
    filename: str | None = None,
    max_rows: int = MAX_ROWS,
) -> ImportBatch:
    """Parse and validate an uploaded file without touching storage.

    File-level problems stop processing before any row is evaluated; row
    problems are accumulated for the whole file.
    """
    batch = ImportBatch(schema=schema)

    lines = iter_lines(decode_upload(content))
    if not lines:
        batch.file_error = "CSV is empty"
        return batch

    _, header_line = lines[0]
    data_lines = lines[1:]
    header_index = resolve_headers(
        split_csv_line(header_line), schema.fields, schema.header_match
    )

    missing = missing_required(header_index, schema.fields)
    if missing:
        batch.file_error = "Missing required header: " + ", ".join(
            spec.primary_alias for spec in missing
        )
        return batch

    filename_year = None
    partition = schema.partition_field
    if partition is not None:
        minimum, maximum = _year_bounds(schema)
        filename_year = year_from_filename(filename)
        if year_override is not None and not in_range(year_override, minimum, maximum):
            batch.file_error = f"Year must be between {minimum} and {maximum}"
            return batch
        if (
            header_index[partition.name] == NOT_FOUND
            and year_override is None
            and filename_year is None
        ):
            batch.file_error = YEAR_UNRESOLVABLE
            return batch

    if not data_lines:
        batch.file_error = "CSV has no data rows"
        return batch

    if len(data_lines) > max_rows:
        batch.file_error = (
            f"CSV has {len(data_lines)} data rows; at most {max_rows} can be imported at once"
        )
        return batch

    for line_number, line in data_lines:
        fields = split_csv_line(line)
        if not any(value.strip() for value in fields):
            batch.blank_rows += 1
            continue

        batch.data_rows += 1
        result = validate_row(
            fields,
            header_index,
            schema,
            line_number,
            year_override=year_override,
            filename_year=filename_year,
        )
        if result.ok:
            batch.records.append(result.record)
        else:
            batch.errors.extend(result.errors)

    if partition is not None:
        years = {record[partition.name].value for record in batch.records}
        if len(years) == 1:
            batch.year = years.pop()

    return batch


async def import_csv(
    content: bytes | str,
    schema: RecordSchema,
    tenant: TenantContext,
    store: RecordStore,
    *,
    year_override: int | None = None,
    filename: str | None = None,
    max_rows: int = MAX_ROWS,
) -> ImportOutcome:
    """Import one CSV file for a tenant under the all-or-nothing policy.

    Any file-level or row-level error blocks the whole file and nothing is
    written. Otherwise every valid record is stamped with the tenant's
    organization id (and the uploading user where the record type tracks a
    creator) and written in a single ``store.insert`` call.

    Args:
        content: Raw file bytes or already-decoded text.
        schema: Record schema of the target table.
        tenant: Identity of the importing session.
        store: Destination record store.
        year_override: Reporting year applied to every row, if given.
        filename: Uploaded filename, used to infer a reporting year.
        max_rows: Largest number of data lines accepted.

    Returns:
        The import outcome; its ``errors`` list is never truncated.

    Raises:
        RecordStoreError: If the store rejects the insert.
    """
    batch = prepare_batch(
        content,
        schema,
        year_override=year_override,
        filename=filename,
        max_rows=max_rows,
    )

    if batch.blocked:
        outcome = ImportOutcome(
            status=ImportStatus.BLOCKED,
            record_type=schema.record_type,
            errors=[str(error) for error in batch.errors],
            file_error=batch.file_error,
            year=batch.year,
        )
        logger.info(
            "Import blocked: org=%s type=%s file=%s rows=%d errors=%d",
            tenant.organization_id,
            schema.record_type,
            filename or "-",
            batch.data_rows,
            outcome.error_count,
        )
        return outcome

    if not batch.records:
        logger.warning(
            "Import found no data rows: org=%s type=%s file=%s blank_lines=%d",
            tenant.organization_id,
            schema.record_type,
            filename or "-",
            batch.blank_rows,
        )
        return ImportOutcome(status=ImportStatus.EMPTY, record_type=schema.record_type)

    records = [
        tenant.stamp(to_storage_dict(record), include_creator=schema.stamp_creator)
        for record in batch.records
    ]

    try:
        inserted = await store.insert(schema.table, records)
    except Exception:
        logger.exception(
            "Import insert failed: org=%s type=%s rows=%d",
            tenant.organization_id,
            schema.record_type,
            len(records),
        )
        raise

    logger.info(
        "Import accepted: org=%s type=%s file=%s inserted=%d blank_lines=%d",
        tenant.organization_id,
        schema.record_type,
        filename or "-",
        inserted,
        batch.blank_rows,
    )
    return ImportOutcome(
        status=ImportStatus.ACCEPTED,
        record_type=schema.record_type,
        inserted=inserted,
        records=records,
        year=batch.year,
    )

"""Import endpoint for tenant CSV uploads."""

import logging
from pathlib import PurePath
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from impactcrm.config import settings
from impactcrm.exceptions import RecordStoreError, UnknownRecordTypeError
from impactcrm.schemas.import_schemas import ImportResultResponse
from impactcrm.services.auth import RequireWriter
from impactcrm.services.import_service import (
    ALLOWED_EXTENSIONS,
    ImportOutcome,
    ImportStatus,
    RecordSchema,
    get_schema,
    import_csv,
)
from impactcrm.services.record_store import RecordStore, get_record_store

logger = logging.getLogger(__name__)

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)

CHUNK_SIZE = 64 * 1024


def _get_file_extension(filename: str | None) -> str:
    """Extract the lowercase extension (with dot) from a filename."""
    if not filename:
        return ""
    return PurePath(filename).suffix.lower()


def schema_or_404(record_type: str) -> RecordSchema:
    """Look up a record schema, mapping unknown types to HTTP 404."""
    try:
        return get_schema(record_type)
    except UnknownRecordTypeError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None


async def _read_limited(file: UploadFile, max_bytes: int) -> bytes:
    # Read in chunks to avoid unbounded memory for oversized files
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File exceeds maximum size of {settings.max_upload_size_mb} MB",
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _summary(outcome: ImportOutcome, schema: RecordSchema) -> str:
    if outcome.status is ImportStatus.ACCEPTED:
        return f"Imported {outcome.inserted} {schema.title} records"
    if outcome.status is ImportStatus.EMPTY:
        return "No data rows found; nothing was imported"
    return (
        f"Import blocked by {outcome.error_count} error(s); "
        "nothing was imported. Fix the file and upload it again."
    )


def to_response(outcome: ImportOutcome, schema: RecordSchema) -> ImportResultResponse:
    """Build the API response, capping the displayed error list."""
    shown, hidden = outcome.display_errors(settings.import_max_displayed_errors)
    return ImportResultResponse(
        status=outcome.status.value,
        record_type=outcome.record_type,
        inserted=outcome.inserted,
        year=outcome.year,
        error_count=outcome.error_count,
        errors=shown,
        hidden_error_count=hidden,
        message=_summary(outcome, schema),
    )


@router.post(
    "/{record_type}",
    response_model=ImportResultResponse,
    responses={status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ImportResultResponse}},
)
@limiter.limit(lambda: f"{settings.rate_limit_per_minute}/minute")
async def import_records(
    request: Request,  # Required for rate limiting
    record_type: str,
    tenant: RequireWriter,
    store: Annotated[RecordStore, Depends(get_record_store)],
    file: UploadFile = File(..., description="CSV file with a header row"),
    year: int | None = Form(default=None, description="Reporting year applied to every row"),
) -> ImportResultResponse | JSONResponse:
    """Validate a CSV file and insert its records for the caller's organization.

    The whole file is rejected (HTTP 422, nothing written) if any row fails
    validation; otherwise every row is inserted in one batch.
    """
    schema = schema_or_404(record_type)

    ext = _get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{ext or file.filename}'. Allowed: CSV",
        )

    content = await _read_limited(file, settings.max_upload_size_bytes)

    try:
        outcome = await import_csv(
            content,
            schema,
            tenant,
            store,
            year_override=year,
            filename=file.filename,
            max_rows=settings.import_max_rows,
        )
    except RecordStoreError as e:
        logger.error("Import of %s for org %s failed: %s", record_type, tenant.organization_id, e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Records could not be saved; nothing was imported",
        ) from None

    response = to_response(outcome, schema)
    if outcome.status is ImportStatus.BLOCKED:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=response.model_dump(mode="json"),
        )
    return response

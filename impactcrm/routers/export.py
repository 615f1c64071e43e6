"""Export endpoints for downloading tenant records."""

from typing import Any

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response

from impactcrm.routers.import_router import schema_or_404
from impactcrm.routers.records import StoreDep, load_records
from impactcrm.schemas.export import ExportFormat
from impactcrm.services import export_service
from impactcrm.services.auth import RequireTenant

router = APIRouter()


@router.get("/{record_type}")
async def export_records(
    record_type: str,
    tenant: RequireTenant,
    store: StoreDep,
    format: ExportFormat = Query(default=ExportFormat.CSV, description="Export format"),
    year: int | None = Query(default=None, description="Reporting year filter"),
) -> Response:
    """Export the caller's records of one type.

    CSV and XLSX downloads use the import headers and can be uploaded again.
    """
    schema = schema_or_404(record_type)
    records = await load_records(store, schema, tenant, year)

    filters_applied: dict[str, Any] = {}
    if year is not None:
        filters_applied["year"] = year

    headers = {
        "Content-Disposition": (
            f"attachment; filename={export_service.export_filename(schema, format, year)}"
        )
    }

    if format == ExportFormat.JSON:
        return JSONResponse(
            content=export_service.export_to_json(schema, records, filters_applied),
            headers=headers,
        )

    if format == ExportFormat.CSV:
        content = export_service.export_to_csv(schema, records)
    elif format == ExportFormat.XLSX:
        content = export_service.export_to_xlsx(schema, records)
    else:
        content = export_service.export_to_yaml(schema, records, filters_applied)

    return Response(
        content=content,
        media_type=export_service.get_content_type(format),
        headers=headers,
    )

"""Export service for writing tenant records back out as files.

CSV and XLSX exports use the primary import header of every field, so an
exported file can be re-imported unchanged. YAML and JSON exports keep the
storage field names and carry export metadata.
"""

import csv
import io
from typing import Any

import yaml
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from impactcrm.schemas.export import ExportFormat, ExportMetadata
from impactcrm.services.import_service import RecordSchema

# Record keys that are internal bookkeeping rather than importable fields
_INTERNAL_KEYS = ("id", "organization_id", "user_id", "created_at")


def export_filename(schema: RecordSchema, export_format: ExportFormat, year: int | None = None) -> str:
    """Download filename, e.g. ``closed_client_files_FY2024.csv``."""
    suffix = f"_FY{year}" if year is not None else ""
    return f"{schema.table}{suffix}.{export_format.value}"


def _cell(value: Any) -> Any:
    return "" if value is None else value


def record_to_row(schema: RecordSchema, record: dict[str, Any]) -> list[Any]:
    """Flatten a stored record into export columns, in field order."""
    return [_cell(record.get(spec.name)) for spec in schema.fields]


def strip_internal(record: dict[str, Any]) -> dict[str, Any]:
    """Drop tenant and audit keys, keeping only importable fields."""
    return {key: value for key, value in record.items() if key not in _INTERNAL_KEYS}


def export_to_csv(schema: RecordSchema, records: list[dict[str, Any]]) -> bytes:
    """Export records to CSV.

    Values containing commas, quotes or line breaks are quoted with embedded
    quotes doubled, which the import splitter reads back verbatim.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(schema.export_headers)
    for record in records:
        writer.writerow(record_to_row(schema, record))
    return output.getvalue().encode("utf-8")


def export_to_xlsx(schema: RecordSchema, records: list[dict[str, Any]]) -> bytes:
    """Export records to an Excel workbook with a styled, frozen header row."""
    wb = Workbook()
    ws = wb.active
    # Sheet titles are limited to 31 characters
    ws.title = schema.title[:31]

    headers = schema.export_headers
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_alignment = Alignment(horizontal="center")

    for col_idx, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_idx, value=header.strip())
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment

    for row_idx, record in enumerate(records, 2):
        for col_idx, value in enumerate(record_to_row(schema, record), 1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    for col_idx, header in enumerate(headers, 1):
        max_length = len(header)
        for row_idx in range(2, len(records) + 2):
            value = ws.cell(row=row_idx, column=col_idx).value
            if value:
                max_length = max(max_length, len(str(value)))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 2, 50)

    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def _document(
    schema: RecordSchema,
    records: list[dict[str, Any]],
    export_format: ExportFormat,
    filters_applied: dict[str, Any],
) -> dict[str, Any]:
    return {
        schema.record_type: [strip_internal(record) for record in records],
        "export_info": ExportMetadata(
            record_type=schema.record_type,
            total_count=len(records),
            format=export_format.value,
            filters_applied=filters_applied,
        ).model_dump(mode="json"),
    }


def export_to_yaml(
    schema: RecordSchema,
    records: list[dict[str, Any]],
    filters_applied: dict[str, Any] | None = None,
) -> bytes:
    """Export records to YAML with metadata."""
    data = _document(schema, records, ExportFormat.YAML, filters_applied or {})
    return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False).encode("utf-8")


def export_to_json(
    schema: RecordSchema,
    records: list[dict[str, Any]],
    filters_applied: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Export records to a JSON-serializable dictionary with metadata."""
    return _document(schema, records, ExportFormat.JSON, filters_applied or {})


def get_content_type(export_format: ExportFormat) -> str:
    """Get the MIME type for an export format."""
    content_types = {
        ExportFormat.CSV: "text/csv",
        ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ExportFormat.YAML: "application/x-yaml",
        ExportFormat.JSON: "application/json",
    }
    return content_types[export_format]

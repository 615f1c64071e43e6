"""Pydantic request/response schemas for the ImpactCRM API."""

from impactcrm.schemas.dashboard import ClientFileStats, CountBucket, TableSummary, YearCount
from impactcrm.schemas.export import ExportFormat, ExportMetadata
from impactcrm.schemas.import_schemas import ImportResultResponse
from impactcrm.schemas.records import RecordListResponse, RecordTypeInfo

__all__ = [
    "ClientFileStats",
    "CountBucket",
    "ExportFormat",
    "ExportMetadata",
    "ImportResultResponse",
    "RecordListResponse",
    "RecordTypeInfo",
    "TableSummary",
    "YearCount",
]

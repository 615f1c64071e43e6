"""Pydantic schemas for record listings."""

from typing import Any

from pydantic import BaseModel


class RecordListResponse(BaseModel):
    """Tenant records of one type."""

    record_type: str
    table: str
    total: int
    year: int | None = None
    records: list[dict[str, Any]]


class RecordTypeInfo(BaseModel):
    """Description of one importable record type."""

    record_type: str
    title: str
    table: str
    headers: list[str]
    required: list[str]
    partitioned_by_year: bool

"""Pydantic schemas for data export functionality."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    XLSX = "xlsx"
    YAML = "yaml"
    JSON = "json"


class ExportMetadata(BaseModel):
    """Metadata attached to YAML and JSON exports."""

    exported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    record_type: str
    total_count: int
    format: str
    filters_applied: dict[str, Any] = Field(default_factory=dict)

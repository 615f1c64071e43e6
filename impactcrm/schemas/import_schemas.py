"""Pydantic schemas for CSV import functionality."""

from pydantic import BaseModel, Field


class ImportResultResponse(BaseModel):
    """Response after importing a CSV file."""

    status: str = Field(..., description="accepted, blocked or empty")
    record_type: str
    inserted: int = 0
    year: int | None = None
    error_count: int = 0
    errors: list[str] = Field(
        default_factory=list,
        description="Errors to show, capped; file-level error first",
    )
    hidden_error_count: int = Field(0, description="Errors beyond the displayed ones")
    message: str

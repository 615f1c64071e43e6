"""Pydantic schemas for dashboard summaries."""

from pydantic import BaseModel


class CountBucket(BaseModel):
    """One bar or slice of a distribution chart."""

    name: str
    count: int


class ClientFileStats(BaseModel):
    """Demographic summary of closed client files."""

    total: int
    age_groups: list[CountBucket]
    race_eth: list[CountBucket]
    sex: list[CountBucket]
    area_office: list[CountBucket]
    life_coach: list[CountBucket]
    hometown: list[CountBucket]
    average_age: int | None = None
    median_age: int | None = None
    unique_coaches: int
    unique_areas: int


class YearCount(BaseModel):
    """Number of closed client files in one reporting year."""

    year: int
    count: int


class TableSummary(BaseModel):
    """Record counts per importable table for the current organization."""

    organization_id: str
    counts: dict[str, int]

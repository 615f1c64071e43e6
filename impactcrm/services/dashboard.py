"""Dashboard aggregations over tenant records."""

import math
from collections import Counter
from collections.abc import Iterable
from typing import Any

from impactcrm.schemas.dashboard import ClientFileStats, CountBucket, TableSummary, YearCount
from impactcrm.services.import_service import CLIENT_FILES, RECORD_SCHEMAS
from impactcrm.services.record_store import RecordStore
from impactcrm.services.tenancy import TenantContext

# Reporting years offered by the client files year picker, newest first
FIXED_YEARS = tuple(range(2026, 2019, -1))

UNKNOWN = "Unknown"

# (upper bound inclusive, label); ages above the last bound fall in "65+"
AGE_GROUPS = (
    (18, "0-18"),
    (25, "19-25"),
    (35, "26-35"),
    (50, "36-50"),
    (65, "51-65"),
)
OLDEST_AGE_GROUP = "65+"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def age_group(age: int) -> str:
    for upper, label in AGE_GROUPS:
        if age <= upper:
            return label
    return OLDEST_AGE_GROUP


def _distribution(records: Iterable[dict[str, Any]], key: str) -> Counter:
    return Counter(record.get(key) or UNKNOWN for record in records)


def _top(counter: Counter, limit: int) -> list[CountBucket]:
    # Counter.most_common keeps first-seen order among equal counts
    return [CountBucket(name=name, count=count) for name, count in counter.most_common(limit)]


def median(values: list[int]) -> int | None:
    """Median of integer values; an even count averages the middle pair, rounded."""
    if not values:
        return None
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    return _round_half_up((ordered[middle - 1] + ordered[middle]) / 2)


def client_file_stats(records: list[dict[str, Any]]) -> ClientFileStats:
    """Summarize closed client files for the demographics dashboard.

    Blank categorical values are counted as "Unknown". Records without an
    age (or with age 0) are left out of the age groups; every recorded age
    counts toward the average and median.
    """
    groups = Counter(age_group(r["age"]) for r in records if r.get("age"))
    ordered_labels = [label for _, label in AGE_GROUPS] + [OLDEST_AGE_GROUP]
    ages = [r["age"] for r in records if isinstance(r.get("age"), int)]

    coaches = _distribution(records, "life_coach")
    areas = _distribution(records, "area_office")

    return ClientFileStats(
        total=len(records),
        age_groups=[
            CountBucket(name=label, count=groups[label])
            for label in ordered_labels
            if groups[label]
        ],
        race_eth=_top(_distribution(records, "race_eth"), 5),
        sex=_top(_distribution(records, "sex"), 3),
        area_office=_top(areas, 10),
        life_coach=_top(coaches, 10),
        hometown=_top(_distribution(records, "hometown"), 10),
        average_age=_round_half_up(sum(ages) / len(ages)) if ages else None,
        median_age=median(ages),
        unique_coaches=len(coaches),
        unique_areas=len(areas),
    )


async def client_file_dashboard(
    store: RecordStore,
    tenant: TenantContext,
    year: int | None = None,
) -> ClientFileStats:
    """Load a tenant's closed client files (optionally one year) and summarize them."""
    filters: dict[str, Any] = {"organization_id": tenant.organization_id}
    if year is not None:
        filters["year"] = year
    records = await store.select(CLIENT_FILES.table, filters)
    return client_file_stats(records)


async def year_counts(store: RecordStore, tenant: TenantContext) -> list[YearCount]:
    """Closed client file counts for each offered reporting year."""
    return [
        YearCount(
            year=year,
            count=await store.count(
                CLIENT_FILES.table,
                {"organization_id": tenant.organization_id, "year": year},
            ),
        )
        for year in FIXED_YEARS
    ]


async def table_summary(store: RecordStore, tenant: TenantContext) -> TableSummary:
    """Record counts for every importable table, keyed by record type."""
    counts = {}
    for record_type, schema in RECORD_SCHEMAS.items():
        counts[record_type] = await store.count(
            schema.table, {"organization_id": tenant.organization_id}
        )
    return TableSummary(organization_id=tenant.organization_id, counts=counts)

"""Reporting-year resolution for year-partitioned record types."""

import re
from dataclasses import dataclass
from enum import Enum

from .normalizers import parse_integer
from .values import FieldError, Integer

YEAR_MIN = 2000
YEAR_MAX = 2100

_FILENAME_YEAR = re.compile(r"20\d{2}")

YEAR_MISSING = "Year is missing or not a number"
YEAR_OUT_OF_RANGE = f"Year must be between {YEAR_MIN} and {YEAR_MAX}"
YEAR_UNRESOLVABLE = (
    "Provide a Year: add a Year column, set a year override, "
    "or include a 4-digit year in the filename"
)


class YearSource(str, Enum):
    OVERRIDE = "override"
    COLUMN = "column"
    FILENAME = "filename"


@dataclass(frozen=True)
class YearResolution:
    """Outcome of resolving one row's year: either ``year`` or ``error`` is set."""

    year: int | None = None
    source: YearSource | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def year_from_filename(filename: str | None) -> int | None:
    """Return the first ``20xx`` token in a filename such as ``closed_FY2024.csv``."""
    if not filename:
        return None
    match = _FILENAME_YEAR.search(filename)
    return int(match.group(0)) if match else None


def in_range(year: int, minimum: int = YEAR_MIN, maximum: int = YEAR_MAX) -> bool:
    return minimum <= year <= maximum


def normalize_year(
    raw: str, minimum: int = YEAR_MIN, maximum: int = YEAR_MAX
) -> Integer | FieldError:
    """Normalize a Year cell to an integer within ``[minimum, maximum]``."""
    year = parse_integer(raw) if raw else None
    if year is None:
        return FieldError(YEAR_MISSING)
    if not in_range(year, minimum, maximum):
        return FieldError(f"Year must be between {minimum} and {maximum}")
    return Integer(year)


def resolve_year(
    override: int | None,
    row_value: str,
    filename_year: int | None,
    minimum: int = YEAR_MIN,
    maximum: int = YEAR_MAX,
) -> YearResolution:
    """Resolve the effective year of a row.

    Precedence: explicit override, then the row's own Year cell, then a year
    found in the uploaded filename. Whichever source wins is range checked.

    Args:
        override: Year supplied with the import request, if any.
        row_value: Trimmed text of the row's Year cell ("" when absent).
        filename_year: Year parsed from the filename, if any.
        minimum: Inclusive lower bound.
        maximum: Inclusive upper bound.
    """
    if override is not None:
        year, source = override, YearSource.OVERRIDE
    elif row_value:
        value = normalize_year(row_value, minimum, maximum)
        if isinstance(value, FieldError):
            return YearResolution(error=value.message)
        return YearResolution(year=value.value, source=YearSource.COLUMN)
    elif filename_year is not None:
        year, source = filename_year, YearSource.FILENAME
    else:
        return YearResolution(error=YEAR_MISSING)

    if not in_range(year, minimum, maximum):
        return YearResolution(error=f"Year must be between {minimum} and {maximum}")
    return YearResolution(year=year, source=source)

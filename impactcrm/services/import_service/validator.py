"""Per-row validation for CSV imports."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from .field_specs import FieldKind, FieldSpec, RecordSchema
from .headers import HeaderIndex, cell
from .normalizers import (
    normalize_currency,
    normalize_date,
    normalize_non_negative_int,
    normalize_text,
)
from .partition import YEAR_MAX, YEAR_MIN, resolve_year
from .values import FieldError, Integer, NormalizedValue


@dataclass(frozen=True)
class RowError:
    """A validation problem on one data line."""

    row: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass
class RowResult:
    """Either a normalized record or the errors that rejected the row."""

    row: int
    record: dict[str, NormalizedValue] | None = None
    errors: list[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def normalize_cell(spec: FieldSpec, raw: str) -> NormalizedValue | FieldError:
    """Normalize one cell according to its field kind (year excluded)."""
    if spec.kind is FieldKind.DATE:
        return normalize_date(raw, spec.label)
    if spec.kind is FieldKind.CURRENCY:
        return normalize_currency(raw, spec.label)
    if spec.kind is FieldKind.INTEGER:
        value = normalize_non_negative_int(raw, spec.label)
        if (
            isinstance(value, Integer)
            and spec.max_value is not None
            and value.value > spec.max_value
        ):
            return FieldError(f"{spec.label} must be at most {spec.max_value}")
        return value
    return normalize_text(raw)


def validate_row(
    fields: Sequence[str],
    header_index: HeaderIndex,
    schema: RecordSchema,
    row_number: int,
    year_override: int | None = None,
    filename_year: int | None = None,
) -> RowResult:
    """Validate and normalize one data line.

    Every field is checked so that a single pass reports all problems in the
    row. A row with any error yields no record.

    Args:
        fields: The data line already split into cells.
        header_index: Column positions from ``resolve_headers``.
        schema: Record schema of the import.
        row_number: 1-based line number in the source file.
        year_override: Year supplied with the import request, if any.
        filename_year: Year inferred from the uploaded filename, if any.
    """
    result = RowResult(row=row_number)
    record: dict[str, NormalizedValue] = {}

    for spec in schema.fields:
        raw = cell(fields, header_index.get(spec.name, -1))

        if spec.kind is FieldKind.YEAR:
            resolution = resolve_year(
                year_override,
                raw,
                filename_year,
                minimum=spec.min_value if spec.min_value is not None else YEAR_MIN,
                maximum=spec.max_value if spec.max_value is not None else YEAR_MAX,
            )
            if resolution.ok:
                record[spec.name] = Integer(resolution.year)
            else:
                result.errors.append(RowError(row_number, resolution.error))
            continue

        if spec.required and not raw:
            result.errors.append(RowError(row_number, f"{spec.label} is required"))
            continue

        value = normalize_cell(spec, raw)
        if isinstance(value, FieldError):
            result.errors.append(RowError(row_number, value.message))
        else:
            record[spec.name] = value

    if result.ok:
        result.record = record
    return result

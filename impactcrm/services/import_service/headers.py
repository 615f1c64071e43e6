"""Resolve free-form spreadsheet headers to canonical import fields."""

from collections.abc import Iterable, Sequence

from .field_specs import FieldSpec, HeaderMatch, normalize_header
from .splitter import BOM

NOT_FOUND = -1

# canonical field name -> zero-based column index, or NOT_FOUND
HeaderIndex = dict[str, int]


def resolve_headers(
    header_fields: Sequence[str],
    field_specs: Iterable[FieldSpec],
    mode: HeaderMatch = HeaderMatch.EXACT,
) -> HeaderIndex:
    """Map each canonical field to the column holding it.

    Matching ignores case and surrounding whitespace. The primary alias is
    tried against every column first, then each alternate alias in declared
    order; within one alias the leftmost matching column wins.

    Args:
        header_fields: The header line already split into cells.
        field_specs: Fields to resolve.
        mode: Header comparison mode of the record schema.

    Returns:
        Dict mapping field name -> column index (NOT_FOUND when absent).
    """
    cells = [normalize_header(cell.lstrip(BOM), mode) for cell in header_fields]

    index: HeaderIndex = {}
    for spec in field_specs:
        index[spec.name] = NOT_FOUND
        for alias in spec.aliases:
            wanted = normalize_header(alias, mode)
            if wanted in cells:
                index[spec.name] = cells.index(wanted)
                break
    return index


def missing_required(index: HeaderIndex, field_specs: Iterable[FieldSpec]) -> list[FieldSpec]:
    """List required fields whose header could not be found."""
    return [
        spec for spec in field_specs
        if spec.required and index.get(spec.name, NOT_FOUND) == NOT_FOUND
    ]


def cell(fields: Sequence[str], column: int) -> str:
    """Trimmed cell text; short rows and unresolved columns read as blank."""
    if column == NOT_FOUND or column >= len(fields):
        return ""
    return fields[column].strip()

"""Import service package for validating CSV uploads and creating CRM records."""

from .constants import ALLOWED_EXTENSIONS, DEFAULT_DISPLAYED_ERRORS, MAX_ROWS
from .field_specs import (
    CLIENT_FILES,
    DISBURSED_AWARDS,
    DONOR_TRACKER,
    NETWORKING,
    RECORD_SCHEMAS,
    FieldKind,
    FieldSpec,
    HeaderMatch,
    RecordSchema,
    get_schema,
    normalize_header,
)
from .headers import NOT_FOUND, HeaderIndex, cell, missing_required, resolve_headers
from .normalizers import (
    normalize_currency,
    normalize_date,
    normalize_non_negative_int,
    normalize_text,
    parse_amount,
    parse_date,
    parse_integer,
)
from .orchestrator import (
    ImportBatch,
    ImportOutcome,
    ImportStatus,
    import_csv,
    prepare_batch,
)
from .partition import (
    YEAR_MAX,
    YEAR_MIN,
    YEAR_MISSING,
    YEAR_OUT_OF_RANGE,
    YEAR_UNRESOLVABLE,
    YearResolution,
    YearSource,
    normalize_year,
    resolve_year,
    year_from_filename,
)
from .splitter import decode_upload, iter_lines, split_csv_line
from .validator import RowError, RowResult, normalize_cell, validate_row
from .values import (
    ABSENT,
    Absent,
    Currency,
    Date,
    FieldError,
    Integer,
    NormalizedValue,
    Text,
    to_storage_dict,
)

__all__ = [
    # Constants
    "ALLOWED_EXTENSIONS",
    "DEFAULT_DISPLAYED_ERRORS",
    "MAX_ROWS",
    # Schemas
    "CLIENT_FILES",
    "DISBURSED_AWARDS",
    "DONOR_TRACKER",
    "NETWORKING",
    "RECORD_SCHEMAS",
    "FieldKind",
    "FieldSpec",
    "HeaderMatch",
    "RecordSchema",
    "get_schema",
    "normalize_header",
    # Parsing
    "decode_upload",
    "iter_lines",
    "split_csv_line",
    # Headers
    "NOT_FOUND",
    "HeaderIndex",
    "cell",
    "missing_required",
    "resolve_headers",
    # Normalizers
    "normalize_currency",
    "normalize_date",
    "normalize_non_negative_int",
    "normalize_text",
    "parse_amount",
    "parse_date",
    "parse_integer",
    # Year partitioning
    "YEAR_MAX",
    "YEAR_MIN",
    "YEAR_MISSING",
    "YEAR_OUT_OF_RANGE",
    "YEAR_UNRESOLVABLE",
    "YearResolution",
    "YearSource",
    "normalize_year",
    "resolve_year",
    "year_from_filename",
    # Values
    "ABSENT",
    "Absent",
    "Currency",
    "Date",
    "FieldError",
    "Integer",
    "NormalizedValue",
    "Text",
    "to_storage_dict",
    # Validation
    "RowError",
    "RowResult",
    "normalize_cell",
    "validate_row",
    # Orchestration
    "ImportBatch",
    "ImportOutcome",
    "ImportStatus",
    "import_csv",
    "prepare_batch",
]

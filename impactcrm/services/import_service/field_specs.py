"""Declarative field tables for every importable record type.

Each record type is a ``RecordSchema``: the target table, the ordered
``FieldSpec`` list, which field identifies a row, and whether records are
partitioned by reporting year. The import pipeline is generic over these.
"""

import re
from dataclasses import dataclass
from enum import Enum

from impactcrm.exceptions import UnknownRecordTypeError


class FieldKind(str, Enum):
    """Target type of an importable field."""

    TEXT = "text"
    INTEGER = "integer"
    DATE = "date"
    CURRENCY = "currency"
    YEAR = "year"


class HeaderMatch(str, Enum):
    """How header cells are compared against aliases."""

    # Case-insensitive, surrounding whitespace trimmed
    EXACT = "exact"
    # As EXACT, and runs of spaces/hyphens compare equal to "_"
    UNDERSCORED = "underscored"


@dataclass(frozen=True)
class FieldSpec:
    """One importable column.

    Attributes:
        name: Storage key of the field.
        label: Human-readable name used in error messages.
        aliases: Accepted header spellings, primary alias first.
        kind: Target value type.
        required: Whether a non-blank value is mandatory.
        min_value: Inclusive lower bound for integer/year fields.
        max_value: Inclusive upper bound for integer/year fields.
    """

    name: str
    label: str
    aliases: tuple[str, ...]
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    min_value: int | None = None
    max_value: int | None = None

    @property
    def primary_alias(self) -> str:
        return self.aliases[0]


@dataclass(frozen=True)
class RecordSchema:
    """Import schema for one record type."""

    record_type: str
    table: str
    title: str
    fields: tuple[FieldSpec, ...]
    header_match: HeaderMatch = HeaderMatch.EXACT
    stamp_creator: bool = True

    @property
    def identity_field(self) -> FieldSpec:
        """The required field that identifies a row (client, donor, contact)."""
        for spec in self.fields:
            if spec.required:
                return spec
        raise ValueError(f"Schema '{self.record_type}' has no required field")

    @property
    def partition_field(self) -> FieldSpec | None:
        """The reporting-year field, if this record type is partitioned."""
        for spec in self.fields:
            if spec.kind is FieldKind.YEAR:
                return spec
        return None

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    @property
    def export_headers(self) -> list[str]:
        """Header row written on export; re-importable as-is."""
        return [spec.primary_alias for spec in self.fields]


def _f(name: str, label: str, *aliases: str, **kwargs) -> FieldSpec:
    return FieldSpec(name=name, label=label, aliases=aliases or (label,), **kwargs)


CLIENT_FILES = RecordSchema(
    record_type="client_files",
    table="closed_client_files",
    title="Closed Client Files",
    stamp_creator=False,
    fields=(
        _f("client_name", "Client Name", required=True),
        _f("life_coach", "Life Coach"),
        _f("start_date", "Start Date", kind=FieldKind.DATE),
        _f("end_date", "End Date", kind=FieldKind.DATE),
        _f("area_office", "Area Office"),
        _f("race_eth", "Race/Eth"),
        _f("sex", "Sex"),
        # Exported spreadsheets carry the header as "Case " or "case"
        _f("case_code", "Case", "Case", "Case ", "case"),
        _f("age", "Age", kind=FieldKind.INTEGER, min_value=0, max_value=130),
        _f("hometown", "HOMETOWN"),
        _f("model", "Model"),
        _f("notes", "Notes"),
        _f("year", "Year", kind=FieldKind.YEAR, min_value=2000, max_value=2100),
    ),
)

DONOR_TRACKER = RecordSchema(
    record_type="donor_tracker",
    table="donor_tracker",
    title="Donor Tracker",
    fields=(
        _f("donor_name", "donor_name", required=True),
        _f("date_opened", "date_opened", kind=FieldKind.DATE),
        _f("date_due", "date_due", kind=FieldKind.DATE),
        _f("program", "program"),
        _f("value", "value", kind=FieldKind.CURRENCY),
        _f("region", "region"),
        _f("contact", "contact"),
        _f("review_url", "review_url"),
        _f("notes", "notes"),
        _f("date_submission", "date_submission", kind=FieldKind.DATE),
        _f("report_due", "report_due", kind=FieldKind.DATE),
        _f("status", "status"),
    ),
)

NETWORKING = RecordSchema(
    record_type="networking",
    table="networking_contacts",
    title="Networking Contacts",
    header_match=HeaderMatch.UNDERSCORED,
    fields=(
        _f("name", "name", required=True),
        # The contact's employer, unrelated to the tenant organization
        _f("organization", "organization"),
        _f("title", "title"),
        _f("email", "email"),
        _f("phone", "phone"),
        _f("donor", "donor"),
        _f("award_ceremony", "award_ceremony"),
    ),
)

DISBURSED_AWARDS = RecordSchema(
    record_type="disbursed_awards",
    table="disbursed_awards",
    title="Disbursed Awards",
    fields=(
        _f("donor_name", "Donor Name", required=True),
        _f("award_name", "Award Name"),
        _f("amount", "Amount", kind=FieldKind.CURRENCY),
        _f("date_disbursed", "Date Disbursed", kind=FieldKind.DATE),
        _f("notes", "Notes"),
    ),
)

RECORD_SCHEMAS: dict[str, RecordSchema] = {
    schema.record_type: schema
    for schema in (CLIENT_FILES, DONOR_TRACKER, NETWORKING, DISBURSED_AWARDS)
}


def get_schema(record_type: str) -> RecordSchema:
    """Look up a record schema by its key.

    Raises:
        UnknownRecordTypeError: If no schema is registered for ``record_type``.
    """
    try:
        return RECORD_SCHEMAS[record_type]
    except KeyError:
        raise UnknownRecordTypeError(record_type) from None


_SEPARATORS = re.compile(r"[\s-]+")


def normalize_header(header: str, mode: HeaderMatch = HeaderMatch.EXACT) -> str:
    """Canonical comparison form of a header cell or alias."""
    normalized = header.strip().lower()
    if mode is HeaderMatch.UNDERSCORED:
        normalized = _SEPARATORS.sub("_", normalized)
    return normalized

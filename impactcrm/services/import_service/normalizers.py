"""Cell normalizers for the CSV import pipeline.

Normalizers never raise on bad input. Each returns a ``NormalizedValue``
variant on success or a ``FieldError`` describing why the cell was rejected.
"""

import re
from datetime import date
from decimal import Decimal

from .values import ABSENT, Currency, Date, FieldError, Integer, NormalizedValue, Text

# YYYY-MM-DD, optionally followed by an HH:MM:SS time that is discarded
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:\s+\d{2}:\d{2}:\d{2})?$")
# M/D/YYYY, MM/DD/YYYY, M/D/YY, MM/DD/YY
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")
# At most 18 digits, so every accepted value fits a signed 64-bit BSON int
_INTEGER = re.compile(r"^[+-]?\d{1,18}(?:\.0+)?$")
_CURRENCY_STRIP = re.compile(r"[$,]")
# Plain decimal notation only; exponents such as 1e999999 are rejected
_AMOUNT = re.compile(r"^[+-]?(?:\d{1,15}(?:\.\d{0,15})?|\.\d{1,15})$")


def parse_date(raw: str) -> date | None:
    """Parse one of the accepted date shapes, or return None.

    Two-digit years always map to 2000 + YY. The calendar date must exist,
    so ``2/30/2024`` is rejected rather than rolled over.
    """
    text = raw.strip()

    match = _ISO_DATE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
    else:
        match = _US_DATE.match(text)
        if not match:
            return None
        month, day, year = (int(part) for part in match.groups())
        if len(match.group(3)) == 2:
            year += 2000

    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalize_date(raw: str, label: str = "Date") -> NormalizedValue | FieldError:
    """Normalize a date cell to a ``Date`` variant.

    Blank input is ``Absent``. Any other unparseable value is an error.
    """
    if not raw or not raw.strip():
        return ABSENT
    parsed = parse_date(raw)
    if parsed is None:
        return FieldError(f"{label} has invalid format")
    return Date(parsed)


def parse_amount(raw: str) -> Decimal | None:
    """Parse a money amount after removing ``$`` and thousands separators."""
    cleaned = _CURRENCY_STRIP.sub("", raw).strip()
    if not _AMOUNT.match(cleaned):
        return None
    return Decimal(cleaned)


def normalize_currency(raw: str, label: str = "Amount") -> NormalizedValue | FieldError:
    """Normalize a currency cell such as ``$12,000`` or ``1500.50``."""
    if not raw or not raw.strip():
        return ABSENT
    amount = parse_amount(raw)
    if amount is None:
        return FieldError(f"{label} is not a valid amount")
    return Currency(amount)


def parse_integer(raw: str) -> int | None:
    """Parse an integer, accepting a ``.0`` suffix left by spreadsheet exports."""
    text = raw.strip()
    if not _INTEGER.match(text):
        return None
    return int(Decimal(text))


def normalize_non_negative_int(raw: str, label: str = "Value") -> NormalizedValue | FieldError:
    """Normalize a cell that must hold an integer >= 0 (e.g. age)."""
    if not raw or not raw.strip():
        return ABSENT
    number = parse_integer(raw)
    if number is None or number < 0:
        return FieldError(f"{label} must be a non-negative integer")
    return Integer(number)


def normalize_text(raw: str) -> NormalizedValue:
    """Trim free text; blank becomes ``Absent`` rather than an empty string."""
    text = raw.strip() if raw else ""
    return Text(text) if text else ABSENT

"""Tests for cell normalizers and value variants."""

from datetime import date
from decimal import Decimal

import pytest

from impactcrm.services.import_service import (
    ABSENT,
    Currency,
    Date,
    FieldError,
    Integer,
    Text,
    normalize_currency,
    normalize_date,
    normalize_non_negative_int,
    normalize_text,
    parse_date,
    to_storage_dict,
)


# =============================================================================
# Dates
# =============================================================================


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-03-05", date(2024, 3, 5)),
        ("2024-03-05 14:30:00", date(2024, 3, 5)),
        ("3/5/2024", date(2024, 3, 5)),
        ("03/05/2024", date(2024, 3, 5)),
        ("3/5/24", date(2024, 3, 5)),
        ("12/31/99", date(2099, 12, 31)),
    ],
)
def test_parse_date_accepted_shapes(raw: str, expected: date) -> None:
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", ["2/30/2024", "2024-13-01", "March 5, 2024", "5.3.2024", "2024/03/05"])
def test_parse_date_rejects(raw: str) -> None:
    assert parse_date(raw) is None


def test_normalize_date() -> None:
    assert normalize_date("1/15/2023", "Start Date") == Date(date(2023, 1, 15))
    assert normalize_date("  ", "Start Date") is ABSENT
    assert normalize_date("soon", "Start Date") == FieldError("Start Date has invalid format")


# =============================================================================
# Currency
# =============================================================================


def test_normalize_currency_strips_symbols() -> None:
    assert normalize_currency("$12,000", "value") == Currency(Decimal("12000"))
    assert normalize_currency("1,500.50", "Amount") == Currency(Decimal("1500.50"))


def test_normalize_currency_invalid() -> None:
    assert normalize_currency("twelve", "Amount") == FieldError("Amount is not a valid amount")
    assert normalize_currency("NaN", "Amount") == FieldError("Amount is not a valid amount")
    assert normalize_currency("$", "Amount") == FieldError("Amount is not a valid amount")
    assert normalize_currency("", "Amount") is ABSENT


@pytest.mark.parametrize("raw", ["1e5", "1e999999999", "1E3", "12e-2", "Infinity", "1 000", "1234567890123456"])
def test_normalize_currency_rejects_non_decimal_notation(raw: str) -> None:
    assert normalize_currency(raw, "value") == FieldError("value is not a valid amount")


def test_normalize_currency_plain_decimal_forms() -> None:
    assert normalize_currency("-250", "Amount") == Currency(Decimal("-250"))
    assert normalize_currency(".75", "Amount") == Currency(Decimal(".75"))
    assert normalize_currency("$999,999,999,999,999", "Amount") == Currency(
        Decimal("999999999999999")
    )


def test_currency_storage_shape() -> None:
    assert Currency(Decimal("12000")).to_storage() == 12000
    assert isinstance(Currency(Decimal("12000.00")).to_storage(), int)
    assert Currency(Decimal("1500.50")).to_storage() == 1500.5


# =============================================================================
# Integers and text
# =============================================================================


def test_normalize_non_negative_int() -> None:
    assert normalize_non_negative_int("34", "Age") == Integer(34)
    assert normalize_non_negative_int("34.0", "Age") == Integer(34)
    assert normalize_non_negative_int("0", "Age") == Integer(0)
    assert normalize_non_negative_int("", "Age") is ABSENT


@pytest.mark.parametrize("raw", ["-1", "3.5", "thirty", "1e3", "99999999999999999999"])
def test_normalize_non_negative_int_rejects(raw: str) -> None:
    assert normalize_non_negative_int(raw, "Age") == FieldError("Age must be a non-negative integer")


def test_normalize_text() -> None:
    assert normalize_text("  Jane Doe ") == Text("Jane Doe")
    assert normalize_text("   ") is ABSENT


def test_to_storage_dict() -> None:
    record = {
        "client_name": Text("Jane"),
        "age": Integer(34),
        "start_date": Date(date(2023, 1, 15)),
        "notes": ABSENT,
    }
    assert to_storage_dict(record) == {
        "client_name": "Jane",
        "age": 34,
        "start_date": "2023-01-15",
        "notes": None,
    }

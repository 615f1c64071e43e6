"""Tests for reporting-year resolution."""

from impactcrm.services.import_service import (
    YEAR_MISSING,
    YEAR_OUT_OF_RANGE,
    FieldError,
    Integer,
    YearSource,
    normalize_year,
    resolve_year,
    year_from_filename,
)


def test_year_from_filename() -> None:
    assert year_from_filename("closed_client_files_FY2024.csv") == 2024
    assert year_from_filename("clients-2023-final.csv") == 2023
    assert year_from_filename("clients.csv") is None
    assert year_from_filename(None) is None


def test_override_wins_over_row_and_filename() -> None:
    resolution = resolve_year(2022, "2023", 2024)
    assert resolution.year == 2022
    assert resolution.source is YearSource.OVERRIDE


def test_row_value_wins_over_filename() -> None:
    resolution = resolve_year(None, "2023", 2024)
    assert resolution.year == 2023
    assert resolution.source is YearSource.COLUMN


def test_filename_is_last_resort() -> None:
    resolution = resolve_year(None, "", 2024)
    assert resolution.year == 2024
    assert resolution.source is YearSource.FILENAME


def test_unresolved_year() -> None:
    assert resolve_year(None, "", None).error == YEAR_MISSING


def test_non_numeric_row_value() -> None:
    resolution = resolve_year(None, "FY23", 2024)
    assert not resolution.ok
    assert resolution.error == YEAR_MISSING


def test_out_of_range() -> None:
    assert resolve_year(None, "1999", None).error == YEAR_OUT_OF_RANGE
    assert resolve_year(2101, "", None).error == YEAR_OUT_OF_RANGE
    assert resolve_year(None, "2100", None).year == 2100
    assert resolve_year(None, "2000", None).year == 2000


def test_normalize_year() -> None:
    assert normalize_year("2024") == Integer(2024)
    assert normalize_year("2024.0") == Integer(2024)
    assert normalize_year("") == FieldError(YEAR_MISSING)
    assert normalize_year("twenty") == FieldError(YEAR_MISSING)
    assert normalize_year("2150") == FieldError(YEAR_OUT_OF_RANGE)

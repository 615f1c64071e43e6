"""Tests for header resolution against record schemas."""

from impactcrm.services.import_service import (
    CLIENT_FILES,
    NETWORKING,
    NOT_FOUND,
    HeaderMatch,
    cell,
    missing_required,
    resolve_headers,
)


def test_resolve_is_case_and_whitespace_insensitive() -> None:
    index = resolve_headers(["  CLIENT NAME ", "age", "Year"], CLIENT_FILES.fields)
    assert index["client_name"] == 0
    assert index["age"] == 1
    assert index["year"] == 2
    assert index["life_coach"] == NOT_FOUND


def test_resolve_strips_bom_from_first_header() -> None:
    index = resolve_headers(["\ufeffClient Name", "Year"], CLIENT_FILES.fields)
    assert index["client_name"] == 0


def test_resolve_case_code_aliases() -> None:
    assert resolve_headers(["Client Name", "Case "], CLIENT_FILES.fields)["case_code"] == 1
    assert resolve_headers(["Client Name", "case"], CLIENT_FILES.fields)["case_code"] == 1


def test_resolve_leftmost_column_wins() -> None:
    index = resolve_headers(["Notes", "Client Name", "notes"], CLIENT_FILES.fields)
    assert index["notes"] == 0


def test_underscored_matching_for_networking() -> None:
    headers = ["Name", "Award Ceremony", "award-ceremony", "E-mail"]
    index = resolve_headers(headers, NETWORKING.fields, HeaderMatch.UNDERSCORED)
    assert index["name"] == 0
    assert index["award_ceremony"] == 1
    # "E-mail" becomes "e_mail", which is not the "email" alias
    assert index["email"] == NOT_FOUND


def test_exact_matching_does_not_underscore() -> None:
    index = resolve_headers(["Name", "Award Ceremony"], NETWORKING.fields, HeaderMatch.EXACT)
    assert index["award_ceremony"] == NOT_FOUND


def test_missing_required() -> None:
    index = resolve_headers(["Age", "Year"], CLIENT_FILES.fields)
    missing = missing_required(index, CLIENT_FILES.fields)
    assert [spec.name for spec in missing] == ["client_name"]


def test_cell_reads_short_rows_as_blank() -> None:
    fields = ["  Jane  ", "34"]
    assert cell(fields, 0) == "Jane"
    assert cell(fields, 5) == ""
    assert cell(fields, NOT_FOUND) == ""

"""Tests for line splitting, decoding and line numbering."""

from impactcrm.services.import_service import decode_upload, iter_lines, split_csv_line


# =============================================================================
# split_csv_line
# =============================================================================


def test_split_plain_fields() -> None:
    assert split_csv_line("Jane Doe,34,2023") == ["Jane Doe", "34", "2023"]


def test_split_quoted_comma() -> None:
    assert split_csv_line('Acme Fund,"$12,000"') == ["Acme Fund", "$12,000"]


def test_split_escaped_quote() -> None:
    assert split_csv_line('"She said ""hi""",x') == ['She said "hi"', "x"]


def test_split_escaped_quote_beside_comma_in_one_field() -> None:
    assert split_csv_line('"a,b""c"') == ['a,b"c']


def test_split_unquoted_thousands_separator() -> None:
    """An unquoted $12,000 is two fields, as any CSV reader splits it."""
    assert split_csv_line("Acme Fund,$12,000") == ["Acme Fund", "$12", "000"]


def test_split_empty_and_trailing_fields() -> None:
    assert split_csv_line(",a,") == ["", "a", ""]
    assert split_csv_line("") == [""]


def test_split_unterminated_quote_consumes_rest() -> None:
    assert split_csv_line('a,"b,c') == ["a", "b,c"]


def test_split_keeps_surrounding_whitespace() -> None:
    """Trimming is left to the cell reader."""
    assert split_csv_line(" a , b ") == [" a ", " b "]


# =============================================================================
# decode_upload / iter_lines
# =============================================================================


def test_decode_strips_bom() -> None:
    assert decode_upload("\ufeffClient Name".encode("utf-8")) == "Client Name"
    assert decode_upload("\ufeffClient Name") == "Client Name"


def test_decode_latin1_fallback() -> None:
    assert decode_upload("José,Médoc".encode("latin-1")) == "José,Médoc"


def test_iter_lines_skips_blank_lines_and_keeps_positions() -> None:
    text = "Client Name,Year\r\n\r\nJane,2023\n   \nJohn,2024\n"
    assert iter_lines(text) == [
        (1, "Client Name,Year"),
        (3, "Jane,2023"),
        (5, "John,2024"),
    ]


def test_iter_lines_empty_text() -> None:
    assert iter_lines("") == []
    assert iter_lines("\n\n") == []

import textwrap

import pytest

from statement_ingest.errors import ParseFailure
from statement_ingest.tabular import parse_statement, preview_rows


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


def test_parses_rfc4180_quoting():
    table = parse_statement(
        _dedent(
            '''
            Posting Date,Description,Amount
            01/15/2024,"COFFEE SHOP, DOWNTOWN",-4.50
            01/16/2024,"He said ""hi""",12.00
            01/17/2024,"MULTI
            LINE",1.00
            '''
        )
    )
    assert table.headers == ("Posting Date", "Description", "Amount")
    assert [r["Description"] for r in table.rows] == [
        "COFFEE SHOP, DOWNTOWN",
        'He said "hi"',
        "MULTI\nLINE",
    ]
    assert table.warnings == ()


def test_accepts_bytes_with_bom():
    table = parse_statement("\ufeffDate,Description,Amount\n01/02/2024,Rent,-100\n".encode())
    assert table.headers[0] == "Date"
    assert table.rows[0]["Amount"] == "-100"


def test_skips_blank_lines():
    table = parse_statement("Date,Description,Amount\n\n01/02/2024,Rent,-100\n,,\n\n")
    assert len(table.rows) == 1


def test_sanitizes_headers_and_values():
    table = parse_statement("Date,=Evil,Amount\n01/02/2024,=HYPERLINK(1),-4.50\n")
    assert table.headers == ("Date", "'=Evil", "Amount")
    row = table.rows[0]
    assert row["'=Evil"] == "'=HYPERLINK(1)"
    assert row["Amount"] == "-4.50"


def test_ragged_rows_are_warnings_not_failures():
    table = parse_statement(
        "Date,Description,Amount\n01/02/2024,Rent\n01/03/2024,Gym,-50,EXTRA\n01/04/2024,Tea,-3\n"
    )
    assert len(table.rows) == 3
    assert table.rows[0] == {"Date": "01/02/2024", "Description": "Rent", "Amount": ""}
    assert table.rows[1] == {"Date": "01/03/2024", "Description": "Gym", "Amount": "-50"}
    assert len(table.warnings) == 2
    assert table.warnings == (
        "Row 1: expected 3 fields, found 2",
        "Row 2: expected 3 fields, found 4",
    )


@pytest.mark.parametrize(
    "text",
    [
        "",
        "\n\n",
        "Date,Description,Amount\n",
        "Date,Description,Amount\n\n,,\n",
    ],
)
def test_empty_or_header_only_is_parse_failure(text):
    with pytest.raises(ParseFailure):
        parse_statement(text)


def test_malformed_quoting_is_parse_failure():
    with pytest.raises(ParseFailure):
        parse_statement('Date,Description,Amount\n01/02/2024,"Rent"x,-100\n')


def test_cp1252_export_is_decoded_with_a_warning():
    data = "Date,Description,Amount\n01/02/2024,CAF\u00c9 PARIS,-4.50\n".encode("cp1252")
    assert b"CAF\xc9" in data

    table = parse_statement(data)

    assert table.rows[0]["Description"] == "CAF\u00c9 PARIS"
    assert table.rows[0]["Amount"] == "-4.50"
    assert table.warnings == ("File is not valid UTF-8; decoded as cp1252",)


def test_bytes_outside_cp1252_are_replaced():
    table = parse_statement(b"Date,Description,Amount\n01/02/2024,BAD \x81 BYTE,-1\n")
    assert table.rows[0]["Description"] == "BAD \ufffd BYTE"
    assert "undecodable bytes were replaced" in table.warnings[0]


def test_preview_rows_limits_count():
    table = parse_statement("A,B\n" + "".join(f"{i},x\n" for i in range(8)))
    assert [r["A"] for r in preview_rows(table.rows)] == ["0", "1", "2", "3", "4"]
    assert len(preview_rows(table.rows, 2)) == 2
    assert preview_rows(table.rows, 0) == []

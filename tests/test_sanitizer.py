import pytest

from statement_ingest.sanitizer import has_dangerous_prefix, sanitize, sanitize_row


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("=SUM(A1:A9)", "'=SUM(A1:A9)"),
        ("-42.50", "-42.50"),
        ("-HACK", "'-HACK"),
        ("+12", "+12"),
        ("+CMD|' /C calc'!A0", "'+CMD|' /C calc'!A0"),
        ("@SUM(1+1)", "'@SUM(1+1)"),
        ("-$1,234.56", "-$1,234.56"),
        ("  Coffee Shop  ", "Coffee Shop"),
        ("\t=1+1", "'=1+1"),
        ("-", "'-"),
        ("-Infinity", "'-Infinity"),
        ("(500.00)", "(500.00)"),
        ("", ""),
    ],
)
def test_sanitize_examples(raw, expected):
    assert sanitize(raw) == expected


def test_sanitize_none_is_empty_string():
    assert sanitize(None) == ""


def test_sanitize_is_idempotent():
    for raw in ("=SUM(A1:A9)", "-HACK", "-42.50", "plain text", "@x"):
        once = sanitize(raw)
        assert sanitize(once) == once


def test_has_dangerous_prefix_matches_sanitize():
    assert has_dangerous_prefix("=1+1")
    assert has_dangerous_prefix("  @cmd")
    assert not has_dangerous_prefix("-4.50")
    assert not has_dangerous_prefix("'=1+1")
    assert not has_dangerous_prefix("")
    assert not has_dangerous_prefix(None)


def test_sanitize_row_cleans_keys_and_string_values():
    row = {" Amount ": "-4.50", "=Evil": "=cmd", "Count": 3}
    assert sanitize_row(row) == {"Amount": "-4.50", "'=Evil": "'=cmd", "Count": 3}

from decimal import Decimal

import pytest

from statement_ingest.amounts import (
    amount_direction,
    format_cents,
    normalize_amount,
    parse_amount,
    to_cents,
)
from statement_ingest.errors import InvalidAmount
from statement_ingest.profiles import lookup_profile

CHASE = lookup_profile("chase")
AMEX = lookup_profile("amex")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("-4.50", Decimal("-4.50")),
        ("$1,234.56", Decimal("1234.56")),
        ("(500.00)", Decimal("-500.00")),
        ("$(1,234.56)", Decimal("-1234.56")),
        ("-($1,234.56)", Decimal("-1234.56")),
        ("-$4.50", Decimal("-4.50")),
        ("+12", Decimal("12")),
        (" 7 ", Decimal("7")),
        ("€3.10", Decimal("3.10")),
    ],
)
def test_parse_amount_variants(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [None, "", "  ", "abc", "$", "()", "NaN", "Infinity", "1.2.3", "--5", "+-5", "-(-5)", "1_000"],
)
def test_parse_amount_rejects_garbage(raw):
    with pytest.raises(InvalidAmount):
        parse_amount(raw)


def test_debits_negative_profile_keeps_sign():
    assert normalize_amount("-4.50", CHASE) == -450
    assert normalize_amount("(500.00)", CHASE) == -50000
    assert normalize_amount("1,000.00", CHASE) == 100000


def test_debits_positive_profile_is_negated():
    assert normalize_amount("$1,234.56", AMEX) == -123456
    assert normalize_amount("-25.00", AMEX) == 2500


@pytest.mark.parametrize(
    ("raw", "cents"),
    [("0.005", 1), ("-0.005", -1), ("1.005", 101), ("1.015", 102), ("19.99", 1999)],
)
def test_rounding_is_half_away_from_zero(raw, cents):
    assert normalize_amount(raw, CHASE) == cents


def test_result_is_exact_int():
    cents = normalize_amount("0.10", CHASE) + normalize_amount("0.20", CHASE)
    assert cents == 30
    assert type(cents) is int
    assert to_cents(Decimal("0.1")) == 10


def test_out_of_precision_amount_is_invalid():
    with pytest.raises(InvalidAmount):
        normalize_amount("1e40", CHASE)


def test_formatted_cents_round_trip_through_normalize():
    for cents in (-123456, -450, 0, 5, 100000):
        assert normalize_amount(format_cents(cents), CHASE) == cents
        assert normalize_amount(format_cents(cents), AMEX) == -cents


def test_format_cents():
    assert format_cents(-123456) == "-$1,234.56"
    assert format_cents(5) == "$0.05"
    assert format_cents(0) == "$0.00"


def test_amount_direction():
    assert amount_direction(-1) == "expense"
    assert amount_direction(0) == "income"
    assert amount_direction(2500) == "income"

import pytest

from statement_ingest.columns import (
    ColumnMapping,
    detect_columns,
    ensure_mapping,
    has_required_mappings,
    looks_like_amount,
    looks_like_date,
    missing_required_fields,
)
from statement_ingest.errors import MissingRequiredMapping
from statement_ingest.profiles import lookup_profile

CHASE_HEADERS = (
    "Details",
    "Posting Date",
    "Description",
    "Amount",
    "Type",
    "Balance",
    "Check or Slip #",
)
CHASE_SAMPLE = {
    "Details": "DEBIT",
    "Posting Date": "01/15/2024",
    "Description": "COFFEE SHOP",
    "Amount": "-4.50",
    "Type": "DEBIT_CARD",
    "Balance": "1,000.00",
    "Check or Slip #": "",
}


def test_detects_chase_export():
    mapping = detect_columns(CHASE_HEADERS, CHASE_SAMPLE, lookup_profile("chase"))
    assert mapping.date == "Posting Date"
    assert mapping.description == "Description"
    assert mapping.amount == "Amount"
    assert mapping.memo == "Details"
    assert has_required_mappings(mapping)


def test_generic_synonyms_without_profile():
    headers = ("Transaction Date", "Payee", "Debit", "Notes")
    sample = {"Transaction Date": "2024-01-05", "Payee": "Gym", "Debit": "40.00", "Notes": ""}
    assert detect_columns(headers, sample) == ColumnMapping(
        date="Transaction Date", description="Payee", amount="Debit", memo="Notes"
    )


def test_content_check_prefers_a_later_valid_header():
    headers = ("Date Range", "Transaction Date", "Description", "Amount Type", "Amount")
    sample = {
        "Date Range": "Q1 2024",
        "Transaction Date": "01/05/2024",
        "Description": "Rent",
        "Amount Type": "Debit",
        "Amount": "-1,200.00",
    }
    mapping = detect_columns(headers, sample)
    assert mapping.date == "Transaction Date"
    assert mapping.amount == "Amount"


def test_first_match_is_kept_when_nothing_validates():
    headers = ("Date", "Description", "Amount")
    sample = {"Date": "n/a", "Description": "Rent", "Amount": "pending"}
    mapping = detect_columns(headers, sample, lookup_profile("wellsfargo"))
    assert mapping == ColumnMapping(date="Date", description="Description", amount="Amount")


def test_unmatched_headers_stay_unmapped():
    headers = ("When", "What", "Amount")
    sample = {"When": "x", "What": "y", "Amount": "1"}
    mapping = detect_columns(headers, sample, lookup_profile("chase"))
    assert mapping.date is None
    assert mapping.description is None
    assert mapping.memo is None
    assert not has_required_mappings(mapping)
    assert missing_required_fields(mapping) == ["Date", "Description"]


def test_content_probes():
    assert looks_like_date("01/15/2024")
    assert not looks_like_date("Q1 2024")
    assert not looks_like_date("")
    assert looks_like_amount("$(1,234.56)")
    assert not looks_like_amount("Debit")
    assert not looks_like_amount("")


def test_ensure_mapping_checks_headers_exist():
    headers = ("Date", "Description", "Amount")
    ok = ColumnMapping(date="Date", description="Description", amount="Amount")
    assert ensure_mapping(ok, headers) is ok

    with pytest.raises(MissingRequiredMapping) as ei:
        ensure_mapping(ColumnMapping(date="Date", description="Description"), headers)
    assert ei.value.missing == ["Amount"]

    stale = ColumnMapping(date="Date", description="Description", amount="Amt", memo="Memo")
    assert missing_required_fields(stale, headers) == ["Amount", "Memo"]

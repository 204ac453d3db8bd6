import dataclasses

import pytest

from statement_ingest.errors import UnknownInstitution
from statement_ingest.profiles import (
    PROFILES,
    SignConvention,
    account_kind_options,
    institution_options,
    lookup_profile,
)


def test_registry_contains_the_supported_institutions():
    assert set(PROFILES) == {"chase", "bankofamerica", "wellsfargo", "capitalone", "amex"}


@pytest.mark.parametrize(
    ("key", "convention"),
    [
        ("chase", SignConvention.DEBITS_NEGATIVE),
        ("wellsfargo", SignConvention.DEBITS_NEGATIVE),
        ("bankofamerica", SignConvention.DEBITS_POSITIVE),
        ("capitalone", SignConvention.DEBITS_POSITIVE),
        ("amex", SignConvention.DEBITS_POSITIVE),
    ],
)
def test_sign_conventions(key, convention):
    assert lookup_profile(key).sign_convention is convention


def test_lookup_ignores_case_and_whitespace():
    assert lookup_profile("  Chase ").key == "chase"
    assert lookup_profile("Bank Of America").key == "bankofamerica"


def test_unknown_institution():
    with pytest.raises(UnknownInstitution) as ei:
        lookup_profile("first-national")
    assert ei.value.key == "first-national"
    assert isinstance(ei.value, LookupError)


def test_profiles_are_immutable():
    with pytest.raises(TypeError):
        PROFILES["newbank"] = PROFILES["chase"]  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        PROFILES["chase"].name = "Other"  # type: ignore[misc]


def test_every_profile_declares_date_formats():
    for profile in PROFILES.values():
        assert profile.date_formats
        assert profile.patterns.date.search("Date")


def test_picker_options():
    assert institution_options()[0] == ("chase", "Chase")
    assert ("amex", "American Express") in institution_options()
    assert account_kind_options() == [
        ("checking", "Checking Account"),
        ("credit", "Credit Card"),
    ]

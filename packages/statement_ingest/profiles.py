"""Institution profile registry.

Per-institution differences (sign convention, preferred date formats, header
naming) are plain data. Supporting a new bank means adding one
:class:`InstitutionProfile` entry to ``_PROFILES``; parsing code never
branches on the institution key.

Date formats are ``datetime.strptime`` patterns listed most specific first.
They are matched strictly, so declaring an issuer's locale order here is what
resolves ambiguous values such as ``03/04/2024``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from .errors import UnknownInstitution
from .models import AccountKind


class SignConvention(StrEnum):
    # Money out is reported as a negative number (already canonical).
    DEBITS_NEGATIVE = "debits_negative"
    # Money out is reported as a positive number; values are negated on import.
    DEBITS_POSITIVE = "debits_positive"


@dataclass(frozen=True, slots=True)
class ColumnPatterns:
    """Case-insensitive header matchers for each logical field."""

    date: re.Pattern[str]
    description: re.Pattern[str]
    amount: re.Pattern[str]
    memo: re.Pattern[str] | None = None


@dataclass(frozen=True, slots=True)
class InstitutionProfile:
    key: str
    name: str
    sign_convention: SignConvention
    date_formats: tuple[str, ...]
    patterns: ColumnPatterns


def _rx(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


# Broader synonyms used when the caller does not name an institution.
GENERIC_PATTERNS = ColumnPatterns(
    date=_rx(r"date|posted|trans"),
    description=_rx(r"desc|merchant|vendor|payee|name"),
    amount=_rx(r"amount|debit|credit"),
    memo=_rx(r"memo|note|comment|detail|reference"),
)

_US_DATES: tuple[str, ...] = ("%m/%d/%Y", "%m/%d/%y")

_PROFILES: dict[str, InstitutionProfile] = {
    "chase": InstitutionProfile(
        key="chase",
        name="Chase",
        sign_convention=SignConvention.DEBITS_NEGATIVE,
        date_formats=_US_DATES,
        patterns=ColumnPatterns(
            date=_rx(r"posting\s*date|trans.*date|date"),
            description=_rx(r"description"),
            amount=_rx(r"amount"),
            memo=_rx(r"memo|detail"),
        ),
    ),
    "bankofamerica": InstitutionProfile(
        key="bankofamerica",
        name="Bank of America",
        sign_convention=SignConvention.DEBITS_POSITIVE,
        date_formats=_US_DATES,
        patterns=ColumnPatterns(
            date=_rx(r"date|posted"),
            description=_rx(r"description|payee"),
            amount=_rx(r"amount"),
            memo=_rx(r"memo|reference"),
        ),
    ),
    "wellsfargo": InstitutionProfile(
        key="wellsfargo",
        name="Wells Fargo",
        sign_convention=SignConvention.DEBITS_NEGATIVE,
        date_formats=_US_DATES,
        patterns=ColumnPatterns(
            date=_rx(r"date"),
            description=_rx(r"description"),
            amount=_rx(r"amount"),
            memo=_rx(r"memo"),
        ),
    ),
    "capitalone": InstitutionProfile(
        key="capitalone",
        name="Capital One",
        sign_convention=SignConvention.DEBITS_POSITIVE,
        date_formats=("%Y-%m-%d", "%m/%d/%Y"),
        patterns=ColumnPatterns(
            date=_rx(r"transaction\s*date|posted\s*date|date"),
            description=_rx(r"description|merchant"),
            amount=_rx(r"amount|debit|credit"),
            memo=_rx(r"category|memo"),
        ),
    ),
    "amex": InstitutionProfile(
        key="amex",
        name="American Express",
        sign_convention=SignConvention.DEBITS_POSITIVE,
        date_formats=_US_DATES,
        patterns=ColumnPatterns(
            date=_rx(r"date"),
            description=_rx(r"description"),
            amount=_rx(r"amount"),
            memo=_rx(r"extended\s*details|memo"),
        ),
    ),
}

PROFILES: Mapping[str, InstitutionProfile] = MappingProxyType(_PROFILES)

_ACCOUNT_KIND_LABELS: dict[AccountKind, str] = {
    AccountKind.CHECKING: "Checking Account",
    AccountKind.CREDIT: "Credit Card",
}


def _normalize_key(key: str) -> str:
    return "".join(key.split()).lower()


def lookup_profile(key: str) -> InstitutionProfile:
    """Return the profile registered under ``key`` (case/space-insensitive)."""

    try:
        return PROFILES[_normalize_key(key)]
    except KeyError:
        raise UnknownInstitution(key) from None


def institution_options() -> list[tuple[str, str]]:
    """``(key, display name)`` pairs in registry order, for pickers."""

    return [(p.key, p.name) for p in PROFILES.values()]


def account_kind_options() -> list[tuple[str, str]]:
    return [(kind.value, label) for kind, label in _ACCOUNT_KIND_LABELS.items()]


__all__ = [
    "GENERIC_PATTERNS",
    "PROFILES",
    "ColumnPatterns",
    "InstitutionProfile",
    "SignConvention",
    "account_kind_options",
    "institution_options",
    "lookup_profile",
]

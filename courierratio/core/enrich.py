# file: courierratio/core/enrich.py
"""
Offline enrichment for canonical Bangladeshi numbers.

Uses the metadata bundled with `phonenumbers` (libphonenumber); no network I/O.
Operator names come from prefix tables and can be empty for ported numbers.
"""

from __future__ import annotations

from dataclasses import dataclass

import phonenumbers
from phonenumbers import carrier
from phonenumbers.phonenumberutil import PhoneNumberFormat, PhoneNumberType, number_type

from courierratio.core.phone import BdPhoneNumber, to_e164

_TYPE_LABELS: dict[int, str] = {
    PhoneNumberType.MOBILE: "mobile",
    PhoneNumberType.FIXED_LINE: "fixed_line",
    PhoneNumberType.FIXED_LINE_OR_MOBILE: "fixed_line_or_mobile",
    PhoneNumberType.VOIP: "voip",
}


def number_type_label(nt: int) -> str:
    return _TYPE_LABELS.get(nt, "unknown")


@dataclass(frozen=True, slots=True)
class Enrichment:
    e164: str
    international: str
    operator: str
    number_type: str

    def to_dict(self) -> dict[str, str]:
        return {
            "e164": self.e164,
            "international": self.international,
            "operator": self.operator,
            "number_type": self.number_type,
        }


def enrich_phone(phone: BdPhoneNumber, *, locale: str = "en") -> Enrichment:
    """Describe a canonical number using libphonenumber metadata."""

    e164 = to_e164(phone)
    parsed = phonenumbers.parse(e164, None)
    return Enrichment(
        e164=e164,
        international=phonenumbers.format_number(parsed, PhoneNumberFormat.INTERNATIONAL),
        operator=carrier.name_for_number(parsed, locale) or "",
        number_type=number_type_label(int(number_type(parsed))),
    )

# file: courierratio/core/phone.py
"""
Bangladeshi mobile number normalization.

Accepted shapes (separators are ignored):
- local with leading zero: 01730285500, 01730-285500
- local without leading zero: 1730285500
- with country code: +8801730285500, 8801730285500

Everything else is rejected with `None`. Rejection is a plain negative result,
never an exception, so the same function can back a client-side live preview
and the server-side check before calling upstream.
"""

from __future__ import annotations

import re
from typing import NewType

BdPhoneNumber = NewType("BdPhoneNumber", str)

COUNTRY_CODE = "880"

INVALID_PHONE_MESSAGE = (
    "Enter a valid BD number (11 digits, e.g. 01730285500 or +8801730285500)"
)

BD_PHONE_PATTERN = re.compile(r"^01[3-9][0-9]{8}$")
_LOCAL_WITHOUT_ZERO = re.compile(r"^1[3-9][0-9]{8}$")

# ASCII only: `\D` would keep Bengali and other Unicode digits.
_NON_DIGIT = re.compile(r"[^0-9]+")


def digits_only(raw: str) -> str:
    """Drop every character that is not an ASCII digit."""

    return _NON_DIGIT.sub("", raw)


def normalize_bd_phone(raw: str) -> BdPhoneNumber | None:
    """
    Normalize free-text input into the canonical 11-digit local form.

    Returns:
        The canonical number (e.g. "01730285500") or None if the input does
        not describe a Bangladeshi mobile number.
    """

    if not isinstance(raw, str):
        return None

    digits = digits_only(raw)

    if len(digits) == 11 and BD_PHONE_PATTERN.match(digits):
        return BdPhoneNumber(digits)

    if len(digits) == 10 and _LOCAL_WITHOUT_ZERO.match(digits):
        return BdPhoneNumber("0" + digits)

    if len(digits) == 13 and digits.startswith(COUNTRY_CODE):
        rest = digits[len(COUNTRY_CODE) :]
        if _LOCAL_WITHOUT_ZERO.match(rest):
            return BdPhoneNumber("0" + rest)

    return None


def preview_normalized(raw: str, *, min_length: int = 4) -> str:
    """
    Live-preview helper: canonical number, or "" while input is short/invalid.
    """

    if not isinstance(raw, str) or len(raw) < min_length:
        return ""
    return normalize_bd_phone(raw) or ""


def to_e164(phone: BdPhoneNumber) -> str:
    """Return the E.164 form of a canonical number (+8801XXXXXXXXX)."""

    return f"+{COUNTRY_CODE}{phone[1:]}"

"""Brazilian phone number helpers.

Phones are stored as 11 digits (area code + 9-digit mobile). Input may carry
any punctuation; only digits count.
"""

import re

PHONE_DIGITS = 11

_NON_DIGITS = re.compile(r"\D")


def unmask_phone(value: str) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", value or "")


def is_valid_phone(value: str) -> bool:
    """Return True when the value has exactly 11 digits after stripping."""
    return len(unmask_phone(value)) == PHONE_DIGITS


def mask_phone(value: str) -> str:
    """Format digits progressively as (XX) XXXXX-XXXX.

    Extra digits beyond 11 are dropped; partial input is formatted as far as
    it goes, e.g. '119' -> '(11) 9'.
    """
    digits = unmask_phone(value)[:PHONE_DIGITS]
    if not digits:
        return ""
    if len(digits) <= 2:
        return f"({digits}"
    if len(digits) <= 7:
        return f"({digits[:2]}) {digits[2:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"

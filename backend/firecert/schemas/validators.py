"""Reusable field patterns shared by the wizards and the request schemas.

Patterns:
- Email shape (anything@anything.tld)
- Philippine mobile numbers: 09 + 9 digits
- Landlines written as (XXX) XXX-XXXX
- Registry numbers (DTI, FSEC, occupancy permit): 6 to 9 digits
- Personal / contractor names: letters, spaces, dots, hyphens
"""

import re

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MOBILE_REGEX = re.compile(r"^09\d{9}$")
LANDLINE_REGEX = re.compile(r"^\(\d{3}\) \d{3}-\d{4}$")
REGISTRY_CODE_REGEX = re.compile(r"^\d{6,9}$")
DTI_NUMBER_REGEX = re.compile(r"^\d{6}$")
LETTERS_ONLY_REGEX = re.compile(r"^[A-Za-zÑñ .'-]+$")


def normalize_mobile(value: str) -> str:
    """Keep digits only, capped at 11 (09XXXXXXXXX)."""
    return re.sub(r"\D", "", value)[:11]


def normalize_landline(value: str) -> str:
    """Format up to ten digits as (XXX) XXX-XXXX while typing.

    Partial input is formatted as far as it goes, so "02812" becomes
    "(028) 12".
    """
    digits = re.sub(r"\D", "", value)[:10]
    if not digits:
        return ""
    if len(digits) <= 3:
        return f"({digits}"
    if len(digits) <= 6:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def validate_dti_number(value: str) -> str:
    """Pydantic-style validator: 6-digit DTI registration number."""
    value = value.strip()
    if not DTI_NUMBER_REGEX.match(value):
        raise ValueError("DTI number must be exactly 6 digits")
    return value

"""Phone number normalisation for SMS recipients."""

import re

LOCAL_PHONE_PATTERN = re.compile(r"^09\d{9}$")
COUNTRY_PREFIX = "+63"


def normalize_phone(raw: object) -> str | None:
    """Convert a local ``09XXXXXXXXX`` number to ``+639XXXXXXXXX``.

    Anything that is not exactly 11 digits starting with ``09`` returns None.
    """
    if not isinstance(raw, str):
        return None
    phone = raw.strip()
    if not LOCAL_PHONE_PATTERN.match(phone):
        return None
    return f"{COUNTRY_PREFIX}{phone[1:]}"


def normalize_phones(raw_numbers: list[str]) -> list[str]:
    """Normalise a roster, dropping invalid entries and duplicates (order kept)."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in raw_numbers:
        phone = normalize_phone(raw)
        if phone is not None and phone not in seen:
            seen.add(phone)
            result.append(phone)
    return result

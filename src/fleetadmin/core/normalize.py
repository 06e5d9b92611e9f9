"""Normalization helpers for directory lookup keys."""

import re

GUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def normalize_key(value: str | None) -> str | None:
    """Normalize a lookup key (UPN, email, device name) for comparison.

    Args:
        value: Raw identifier or attribute value

    Returns:
        Stripped, lower-cased value, or None if empty
    """
    if not value:
        return None
    normalized = value.strip().lower()
    return normalized or None


def is_guid(value: str | None) -> bool:
    """Check if a string looks like a directory object ID."""
    if not value:
        return False
    return bool(GUID_PATTERN.match(value.strip()))


def escape_odata(value: str) -> str:
    """Escape a string literal for use inside an OData $filter expression."""
    return value.replace("'", "''")

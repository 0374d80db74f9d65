"""Identifier helpers."""

from uuid import UUID


def is_valid_uuid(value: str | None) -> bool:
    """True if `value` parses as a UUID (ids are UUID strings in every table)."""
    if not value:
        return False
    try:
        UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True

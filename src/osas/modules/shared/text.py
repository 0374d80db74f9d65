"""Normalisation and format rules for free-text account and scholarship fields."""

import re

PHONE_NUMBER_PATTERN = re.compile(r"^(09|\+639)\d{9}$")

PHONE_NUMBER_MESSAGE = (
    "Phone number must be a valid Philippine mobile number (09XXXXXXXXX or +639XXXXXXXXX)"
)


def title_case(value: str) -> str:
    """Normalise a name or title: 'jUAN  dela cruz' -> 'Juan Dela Cruz'."""
    return " ".join(word.capitalize() for word in value.split())

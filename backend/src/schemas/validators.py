"""
Shared validation functions for Pydantic schemas.

This module contains validators used across board, column, and card schemas.
"""
import re

# Hex colour, e.g. '#E8EAF6' or '#fff'
COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

MAX_TITLE_LENGTH = 255
MAX_LABEL_LENGTH = 255


def reject_null(value: object, field_name: str) -> object:
    """
    Reject an explicit null for a field that may be omitted but not cleared.

    Update schemas make such fields optional so they can be left out; sending
    ``null`` would otherwise be indistinguishable from clearing them.
    """
    if value is None:
        raise ValueError(f"{field_name} may not be null")
    return value


def validate_color(value: str | None) -> str | None:
    """Validate a hex colour string."""
    if value is None:
        return None
    value = value.strip()
    if not COLOR_PATTERN.match(value):
        raise ValueError(f"Invalid color: '{value}'. Use a hex value such as '#E8EAF6'.")
    return value


def normalize_labels(labels: list[str] | None) -> list[str] | None:
    """
    Trim and validate label text. Order and duplicates are preserved.

    Raises:
        ValueError: If a label is empty after trimming or too long.
    """
    if labels is None:
        return None
    normalized = []
    for label in labels:
        text = label.strip()
        if not text:
            raise ValueError("Label cannot be empty")
        if len(text) > MAX_LABEL_LENGTH:
            raise ValueError(f"Label exceeds {MAX_LABEL_LENGTH} characters")
        normalized.append(text)
    return normalized

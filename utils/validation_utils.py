"""
utils/validation_utils.py

Purpose: Input validation

- Required-field presence checks
- Whitespace and length normalization for display names
"""

from typing import Optional, Dict, List


def is_blank(value: Optional[str]) -> bool:
    """
    True for None, empty, or whitespace-only strings.
    """
    return value is None or not str(value).strip()


def missing_fields(fields: Dict[str, Optional[str]]) -> List[str]:
    """
    Returns the names of fields that are blank.

    Args:
        fields: Mapping of field name to submitted value

    Returns:
        List of blank field names (empty if all present)
    """
    return [name for name, value in fields.items() if is_blank(value)]


def sanitize_input(text: str, max_length: int = 200) -> str:
    """
    Trims free text such as display names to a single-spaced line.
    Markup is left alone; templates escape it on output.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Normalize whitespace
    text = " ".join(text.split())

    return text[:max_length].strip()

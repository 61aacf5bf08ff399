"""
Value conversion utilities.
Single responsibility: turn cell values into their comparable text form.
"""

import math
from typing import Any, Optional


def to_text(val: Any) -> str:
    """
    Convert a cell value to the text used for matching and export.

    Args:
        val: Cell value (string, int, float, bool or None)

    Returns:
        Text form of the value

    Examples:
        >>> to_text(100.0)
        '100'
        >>> to_text(None)
        ''
        >>> to_text(True)
        'true'
    """
    if val is None:
        return ""

    if isinstance(val, str):
        return val

    # bool is an int subclass, check it first
    if isinstance(val, bool):
        return "true" if val else "false"

    if isinstance(val, float):
        if math.isnan(val):
            return "NaN"
        if math.isinf(val):
            return "Infinity" if val > 0 else "-Infinity"
        if val.is_integer():
            return str(int(val))

    return str(val)


def normalize_value(val: Any, case_insensitive: bool = False) -> Optional[str]:
    """
    Normalize a value for set membership or key lookup.

    Args:
        val: Cell value
        case_insensitive: Lowercase the text form

    Returns:
        Normalized text, or None for null values
    """
    if val is None:
        return None

    text = to_text(val)
    return text.lower() if case_insensitive else text


def is_blank(val: Any) -> bool:
    """
    Check whether a value counts as empty.

    Numeric zero is not blank.

    Args:
        val: Cell value

    Returns:
        True for None or whitespace-only text
    """
    if val is None:
        return True
    return to_text(val).strip() == ""

"""
Input Validators and Sanitizers

This module provides parsing helpers for user-supplied query parameters.
Admin log queries come straight from the URL, so nothing here may raise:
malformed input always degrades to a safe default.

Security Considerations:
- Pagination values are bound as SQL parameters, never interpolated
- Negative values are rejected (SQLite treats LIMIT -1 as "no limit")
- Limits are capped to keep a single query bounded
"""

import re
from typing import Optional

# Leading optional sign and digits, the way a lenient integer parser reads "10abc"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)", re.ASCII)

# Largest value a signed 64-bit SQL INTEGER/BIGINT parameter can hold
MAX_SQL_INTEGER = 2**63 - 1


def parse_int_param(raw: Optional[str]) -> Optional[int]:
    """
    Parse the leading integer of a query parameter value.

    Args:
        raw: Raw query parameter value (may be None)

    Returns:
        Parsed integer, or None if the value does not start with a number

    Example:
        parse_int_param("25") -> 25
        parse_int_param("10abc") -> 10
        parse_int_param("abc") -> None
    """
    if not raw:
        return None

    match = _LEADING_INT.match(raw)
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # Longer than the interpreter's int string conversion limit
        return None


def parse_pagination_param(
    raw: Optional[str],
    default: int,
    maximum: Optional[int] = None
) -> int:
    """
    Parse a limit/offset query parameter with a fallback.

    Args:
        raw: Raw query parameter value
        default: Value used when the input is missing, non-numeric, negative
                 or too large to bind as an SQL integer
        maximum: Optional upper bound applied to valid values

    Returns:
        A non-negative integer
    """
    value = parse_int_param(raw)
    if value is None or value < 0 or value > MAX_SQL_INTEGER:
        return default
    if maximum is not None and value > maximum:
        return maximum
    return value

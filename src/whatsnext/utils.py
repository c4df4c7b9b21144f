"""Shared utility functions for What's Next.

Numeric helpers used by both the graph store and the render policy.
"""

import re
from typing import Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into the closed interval [lower, upper]."""
    return min(max(value, lower), upper)


def parse_leading_int(value: Any) -> Optional[int]:
    """Parse an integer the lenient way form inputs expect.

    Args:
        value: An int, a float (truncated toward zero) or a string whose
            leading characters form an integer ("3", " 4 stars").

    Returns:
        The parsed integer, or None when nothing numeric can be read.
        Booleans are rejected rather than treated as 0/1.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return None


def parse_leading_float(value: str) -> Optional[float]:
    """Read the number at the start of ``value`` ("6", "6px", " 2.5e1").

    Returns None when the string does not start with a number.
    """
    match = _LEADING_FLOAT.match(value)
    if match:
        return float(match.group(1))
    return None

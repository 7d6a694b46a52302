"""
Validation Helpers
==================

Shared checks for MW quantities passed across the scheduler boundary.
"""

import math


def is_number(value) -> bool:
    """True for int/float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value) -> bool:
    """True for finite int/float values; NaN and infinities are rejected."""
    return is_number(value) and math.isfinite(value)

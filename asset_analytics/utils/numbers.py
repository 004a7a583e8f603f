# asset_analytics/utils/numbers.py
"""Rounding shared by every dashboard percentage and average."""

import math


def round_half_up(value: float) -> int:
    """Nearest integer with halves going up (2.5 -> 3, -2.5 -> -2), unlike round()'s half-to-even."""
    return math.floor(value + 0.5)

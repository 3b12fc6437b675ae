"""Rounding helpers shared by the percentage and average calculations.

Python's built-in round() rounds halves to even. Published figures round
halves upward (towards positive infinity), so 12.25 becomes 12.3 and
-2.5 becomes -2.
"""

import math

from src.core.config import Constants


def round_half_up(value: float, places: int = 0) -> float:
    """Round to the given number of decimal places, halves rounding upward."""
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def round_percent(value: float) -> float:
    """Round a percentage to the published number of decimal places."""
    return round_half_up(value, Constants.PERCENT_DECIMAL_PLACES)


def round_to_int(value: float) -> int:
    """Round to the nearest integer, halves rounding upward."""
    return int(round_half_up(value))

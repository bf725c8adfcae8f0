"""
Small numeric helpers shared by the analytics services.
"""
import math


def round_half_up(value: float) -> int:
    """Round .5 up, matching how percentages are shown to users."""
    return int(math.floor(value + 0.5))


def percent(numerator: float, denominator: float, cap: bool = True) -> float:
    """
    ``numerator / denominator`` as a percentage.

    A zero (or negative) denominator yields 100: nothing was expected, so
    nothing is missing.
    """
    if denominator <= 0:
        return 100.0
    value = numerator / denominator * 100
    return min(100.0, value) if cap else value

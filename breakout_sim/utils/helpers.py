"""
Common numeric helpers used across the simulator.
"""

import math

from ..config.constants import PRICE_DECIMALS

_CENT_SCALE = 10.0 ** PRICE_DECIMALS


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp x into [lo, hi]."""
    return max(lo, min(hi, x))


def round_cents(price: float) -> float:
    """
    Round a price to cent precision, halves rounding up.

    Examples:
        >>> round_cents(100.017)
        100.02
        >>> round_cents(99.994)
        99.99
    """
    return math.floor(price * _CENT_SCALE + 0.5) / _CENT_SCALE


# File: utils/math_utils.py
"""Math and calculation utilities for Nomor.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_coins: Consistent rounding for fractional coin amounts
    - calculate_percentage: Whole-number percentage with half-up rounding
"""

from __future__ import annotations

import math

# Default float precision for coin rounding
DATA_FLOAT_PRECISION = 2


def round_coins(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a coin value to the configured precision.

    Keeps repeated 0.2 credits from drifting (0.6000000000000001 → 0.6).

    Examples:
        round_coins(10.456) → 10.46
        round_coins(0.1 + 0.2) → 0.3
    """
    return round(value, precision)


def calculate_percentage(current: float, target: float) -> int:
    """Calculate a whole-number percentage, rounding halves up.

    Args:
        current: Achieved count
        target: Total count

    Returns:
        Percentage in 0..100 for current <= target, 0 if target is not positive.

    Examples:
        calculate_percentage(9, 15) → 60
        calculate_percentage(1, 8) → 13
        calculate_percentage(3, 0) → 0
    """
    if target <= 0:
        return 0
    return math.floor(current / target * 100 + 0.5)

# File: utils/__init__.py
"""Pure Python utilities for Nomor.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Local calendar dates, day-boundary checks, reset countdown
    - math_utils: Coin rounding and percentage calculations

Usage:
    from . import dt_utils
    from .math_utils import round_coins
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]

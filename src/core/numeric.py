"""Rounding and clamping helpers shared by the readiness components."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))

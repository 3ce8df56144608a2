"""
Score arithmetic shared by the compliance evaluator and the report aggregator.
"""

import math
from typing import Iterable


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 rounding away from zero for positives."""
    return int(math.floor(value + 0.5))


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for an empty input."""
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def percentage(part: int, whole: int) -> int:
    """part/whole as a rounded percentage, 0 when whole is 0."""
    return round_half_up(part / whole * 100) if whole else 0

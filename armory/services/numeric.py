"""Scalar helpers shared by the metric pipeline.

Every helper treats None (and non-finite floats) as "no value" and returns
None instead of raising, so missing data propagates through derived metrics.
"""

import math
from typing import Iterable, List, Optional, Tuple

import numpy as np


def safe_num(value) -> Optional[float]:
    """Coerce a cell value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def positive(value) -> Optional[float]:
    """Return the value if it is a number greater than zero."""
    return value if is_number(value) and value > 0 else None


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def normalize(value: Optional[float], lo: Optional[float], hi: Optional[float]) -> Optional[float]:
    """Rescale value into [0, 1] against the range [lo, hi].

    Returns None when the value or either bound is missing and the neutral
    midpoint 0.5 when the range has no spread.
    """
    if not is_number(value) or not is_number(lo) or not is_number(hi):
        return None
    if hi == lo:
        return 0.5
    return clamp((value - lo) / (hi - lo), 0.0, 1.0)


def invert01(x: Optional[float]) -> Optional[float]:
    if not is_number(x):
        return None
    return 1.0 - x


def weighted_average(parts: Iterable[Tuple[float, Optional[float]]]) -> Optional[float]:
    """Average (weight, value) pairs, skipping pairs whose value is missing."""
    weight_sum = 0.0
    value_sum = 0.0
    for weight, value in parts:
        if not is_number(value):
            continue
        weight_sum += weight
        value_sum += weight * value
    return value_sum / weight_sum if weight_sum > 0 else None


def mean(values: Iterable[Optional[float]]) -> Optional[float]:
    nums = finite_values(values)
    return sum(nums) / len(nums) if nums else None


def stddev(values: Iterable[Optional[float]]) -> Optional[float]:
    """Sample standard deviation (n - 1 denominator); None under two values."""
    nums = finite_values(values)
    if len(nums) < 2:
        return None
    return float(np.std(np.asarray(nums, dtype=float), ddof=1))


def percentile(values: Iterable[Optional[float]], pct: Optional[float]) -> Optional[float]:
    """Percentile with linear interpolation between order statistics."""
    nums = finite_values(values)
    if not nums or pct is None:
        return None
    return float(np.percentile(np.asarray(nums, dtype=float), pct))


def finite_values(values: Iterable[Optional[float]]) -> List[float]:
    return [float(v) for v in values if is_number(v)]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet does (halves away from zero for positives)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def to_score100(value01: Optional[float]) -> Optional[float]:
    """Map a [0, 1] value to a 0-100 score with one decimal place."""
    if not is_number(value01):
        return None
    return round_half_up(value01 * 100, 1)

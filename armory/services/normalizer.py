"""Normalize raw metrics to [0, 1] where 1.0 is always favorable."""

from typing import Dict, Optional

from .metrics import METRIC_REGISTRY, Direction, RawMetrics
from .numeric import clamp, invert01, is_number
from .population_stats import PopulationStats

NormalizedMetrics = Dict[str, Optional[float]]


def compute_normalized(raw: RawMetrics, stats: PopulationStats) -> NormalizedMetrics:
    normalized: NormalizedMetrics = {}
    for metric in METRIC_REGISTRY:
        value = metric.normalize(raw, stats.ranges)
        if metric.direction is Direction.LOWER_BETTER:
            value = invert01(value)
        normalized[metric.key] = clamp(value, 0.0, 1.0) if is_number(value) else None

    # Volatility is already inverted, so low spread reads as high consistency
    normalized["Consistency"] = normalized.get("Volatility")
    return normalized

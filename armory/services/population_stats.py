"""Population statistics over the current working set.

Min/max ranges feed normalization; they are rebuilt from scratch for every
update so they always describe exactly the weapons being compared.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .metrics import METRIC_REGISTRY, RawMetrics
from .numeric import finite_values, mean, percentile, stddev

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricRange:
    """Observed range of one metric; bounds are None when no samples exist."""
    min: Optional[float] = None
    max: Optional[float] = None
    count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    @property
    def is_flat(self) -> bool:
        return self.count > 0 and self.min == self.max


@dataclass
class PopulationStats:
    ranges: Dict[str, MetricRange] = field(default_factory=dict)
    head_dep_p75: Optional[float] = None

    def get(self, key: str) -> Optional[MetricRange]:
        return self.ranges.get(key)

    def is_high_head_dependency(self, value: Optional[float]) -> bool:
        if value is None or self.head_dep_p75 is None:
            return False
        return value > self.head_dep_p75


@dataclass(frozen=True)
class CategorySummary:
    """Score distribution of one category."""
    count: int
    mean: Optional[float]
    stddev: Optional[float]


def summarize(values: Iterable[Optional[float]]) -> MetricRange:
    nums = finite_values(values)
    if not nums:
        return MetricRange()
    return MetricRange(min=min(nums), max=max(nums), count=len(nums))


def compute_population_stats(
    raw_list: Sequence[RawMetrics],
    head_dep_percentile: float = 75.0,
) -> PopulationStats:
    """Min/max of every ranged metric plus the headshot-dependency percentile."""
    ranges = {}
    for metric in METRIC_REGISTRY:
        if not metric.ranged:
            continue
        ranges[metric.key] = summarize(raw.get(metric.key) for raw in raw_list)

    empty = [key for key, rng in ranges.items() if rng.is_empty]
    if raw_list and empty:
        logger.debug(f"No samples for metrics: {', '.join(empty)}")

    return PopulationStats(
        ranges=ranges,
        head_dep_p75=percentile((raw.get("HeadDep") for raw in raw_list), head_dep_percentile),
    )


def summarize_by_category(pairs: Iterable[Tuple[str, Optional[float]]]) -> Dict[str, CategorySummary]:
    """Group (category, value) pairs and report count/mean/sample stddev."""
    grouped: Dict[str, List[Optional[float]]] = defaultdict(list)
    for category, value in pairs:
        grouped[category].append(value)
    return {
        category: CategorySummary(
            count=len(finite_values(values)),
            mean=mean(values),
            stddev=stddev(values),
        )
        for category, values in grouped.items()
    }

"""Health summary for one pipeline run.

Reports how many normalized values landed in range, which metrics are
missing for too many weapons, inverted stat ranges and unusable weights.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence

from .numeric import is_number
from .population_stats import PopulationStats
from .scoring import ScoringWeights

WEIGHTS_ZERO_MESSAGE = "Weights sum to 0"


@dataclass
class ValidationSummary:
    ok_metrics: int = 0
    total_metrics: int = 0
    warnings: List[str] = field(default_factory=list)
    weights_valid: bool = True

    @property
    def ok_text(self) -> str:
        return f"Metrics OK: {self.ok_metrics}/{max(self.total_metrics, 1)}"

    @property
    def missing_text(self) -> str:
        return " | ".join(self.warnings) or "All metrics nominal"


def validate_metrics(
    rows: Sequence,
    stats: PopulationStats,
    weights: ScoringWeights,
    missing_warn_ratio: float = 0.3,
) -> ValidationSummary:
    summary = ValidationSummary()
    missing: Counter = Counter()

    for row in rows:
        for key, value in row.normalized.items():
            if not is_number(value):
                missing[key] += 1
                continue
            summary.total_metrics += 1
            if 0 <= value <= 1:
                summary.ok_metrics += 1

    if rows:
        for key, count in missing.items():
            share = count / len(rows)
            if share > missing_warn_ratio:
                summary.warnings.append(f"Metric {key} missing {share * 100:.1f}%")

    for key, rng in stats.ranges.items():
        if rng.min is not None and rng.max is not None and rng.max < rng.min:
            summary.warnings.append(f"Stat range invalid for {key}")

    if not weights.is_valid:
        summary.weights_valid = False
        summary.warnings.append(WEIGHTS_ZERO_MESSAGE)

    return summary

"""Secondary rankings computed over an already scored population.

Role dominance, outlier index, counter score/rank, distance-band suitability
and the skill floor/ceiling composites. Functions take parallel sequences and
return results aligned with their input order.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from .constants import DISTANCE_BANDS, OUTLIER_SIGMA_THRESHOLD, TOP_DECILE, DistanceBand
from .numeric import clamp, invert01, is_number, mean, stddev, to_score100

# Spreads below this are float noise from identical scores
ZERO_SPREAD = 1e-12


@dataclass(frozen=True)
class RankResult:
    """Percentile rank (100 = best) and top-decile flag."""
    index: Optional[float] = None
    top10: bool = False


@dataclass(frozen=True)
class OutlierResult:
    index: Optional[float] = None
    warning: bool = False


@dataclass(frozen=True)
class CompositeScore:
    score01: Optional[float] = None
    score: Optional[float] = None


def _composite(parts: Sequence[Optional[float]]) -> CompositeScore:
    present = [p for p in parts if is_number(p)]
    if not present:
        return CompositeScore()
    score01 = sum(present) / len(present)
    return CompositeScore(score01=score01, score=to_score100(score01))


def percentile_ranks(values: Sequence[Optional[float]]) -> List[RankResult]:
    """Rank values descending; ties keep input order, missing values are unranked."""
    results = [RankResult() for _ in values]
    ranked = sorted(
        (i for i, value in enumerate(values) if is_number(value)),
        key=lambda i: -values[i],
    )
    n = len(ranked)
    if n == 0:
        return results

    top_count = max(1, math.ceil(n * TOP_DECILE))
    for idx, i in enumerate(ranked):
        index = (1 - idx / (n - 1)) * 100 if n > 1 else 100.0
        results[i] = RankResult(index=index, top10=idx < top_count)
    return results


def role_dominance(categories: Sequence[str], scores01: Sequence[Optional[float]]) -> List[RankResult]:
    """Percentile rank of each weapon's score within its own category.

    Unscored weapons get no rank, and the percentile denominator counts only
    the scored weapons of the category.
    """
    results = [RankResult() for _ in categories]
    groups: Dict[str, List[int]] = defaultdict(list)
    for i, category in enumerate(categories):
        groups[category].append(i)

    for members in groups.values():
        ranks = percentile_ranks([scores01[i] for i in members])
        for i, rank in zip(members, ranks):
            results[i] = rank
    return results


def outlier_indices(
    categories: Sequence[str],
    scores: Sequence[Optional[float]],
    threshold: float = OUTLIER_SIGMA_THRESHOLD,
) -> List[OutlierResult]:
    """Z-score of each score against its category mean and sample stddev."""
    groups: Dict[str, List[Optional[float]]] = defaultdict(list)
    for category, score in zip(categories, scores):
        groups[category].append(score)
    moments = {category: (mean(values), stddev(values)) for category, values in groups.items()}

    results = []
    for category, score in zip(categories, scores):
        avg, sd = moments[category]
        if not is_number(score) or avg is None or sd is None or sd <= ZERO_SPREAD:
            results.append(OutlierResult())
            continue
        z = (score - avg) / sd
        results.append(OutlierResult(index=z, warning=z > threshold))
    return results


def counter_score(
    head_dep_norm: Optional[float],
    armor_norm: Optional[float],
    reload_norm: Optional[float],
    kills_per_mag_norm: Optional[float],
) -> CompositeScore:
    """Forgiving-counter composite: mean of whichever components are present.

    head_dep_norm and reload_norm are expected already inverted (1.0 means
    low dependency / low reload penalty).
    """
    return _composite([head_dep_norm, armor_norm, reload_norm, kills_per_mag_norm])


def counter_ranks(counter_scores01: Sequence[Optional[float]]) -> List[RankResult]:
    """Global (not per-category) ranking of counter scores."""
    return percentile_ranks(counter_scores01)


@dataclass(frozen=True)
class BandScore:
    score01: Optional[float] = None
    score: Optional[float] = None


def band_coverage(range_meters: Optional[float], band: DistanceBand) -> float:
    """How well a weapon's effective range covers a band, in [0, 1]."""
    if not is_number(range_meters):
        return 1.0
    if range_meters < band.min:
        return clamp(range_meters / max(band.min, 0.0001), 0.0, 1.0)
    if math.isfinite(band.max) and range_meters > band.max:
        excess = range_meters - band.max
        span = max(band.max - band.min, 1.0)
        return clamp(1 - excess / span, 0.0, 1.0)
    return 1.0


def distance_band_scores(
    range_meters: Optional[float],
    range_score: Optional[float],
    score01: Optional[float],
    bands: Sequence[DistanceBand] = DISTANCE_BANDS,
) -> Dict[str, BandScore]:
    if not is_number(score01) or not is_number(range_score):
        return {band.key: BandScore() for band in bands}

    meta = clamp(score01, 0.0, 1.0)
    rng = clamp(range_score, 0.0, 1.0)
    scores = {}
    for band in bands:
        value = clamp(meta * rng * band_coverage(range_meters, band), 0.0, 1.0)
        scores[band.key] = BandScore(score01=value, score=to_score100(value))
    return scores


def skill_floor(normalized: Mapping[str, Optional[float]]) -> CompositeScore:
    """How forgiving a weapon is: low headshot reliance, steady TTK, many kills per mag."""
    return _composite([
        normalized.get("HeadDep"),
        normalized.get("Consistency"),
        normalized.get("KillsPerMag"),
    ])


def skill_ceiling(normalized: Mapping[str, Optional[float]]) -> CompositeScore:
    """Upside for a skilled player: crit payoff, handling and headshot reliance."""
    # HeadDep is stored inverted; the ceiling rewards dependency itself
    return _composite([
        normalized.get("CritLeverage"),
        normalized.get("Handling"),
        invert01(normalized.get("HeadDep")),
    ])

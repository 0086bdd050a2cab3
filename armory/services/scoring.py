"""Composite score from the six weighted dimensions."""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .constants import CUSTOM_PRESET, PRESET_WEIGHTS, WEIGHT_KEYS
from .numeric import clamp, is_number, safe_num, to_score100

logger = logging.getLogger(__name__)

# Scoring dimension -> normalized metric key
WEIGHT_METRIC_MAP: Dict[str, str] = {
    "ttk": "TTK",
    "sustain": "Sustain",
    "handling": "Handling",
    "range": "RangeScore",
    "reload": "ReloadPenalty",
    "armor": "ArmorCons",
}


@dataclass(frozen=True)
class ScoringWeights:
    """User weights for the six scoring dimensions, as entered (not normalized)."""
    ttk: float = 0.0
    sustain: float = 0.0
    handling: float = 0.0
    range: float = 0.0
    reload: float = 0.0
    armor: float = 0.0

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "ScoringWeights":
        """Read weights from a mapping; missing or negative entries count as 0."""
        parsed = {}
        for key in WEIGHT_KEYS:
            weight = safe_num(values.get(key))
            if weight is not None and weight < 0:
                logger.warning(f"Negative weight for {key} ({weight}) treated as 0")
                weight = 0.0
            parsed[key] = weight or 0.0
        return cls(**parsed)

    @classmethod
    def from_preset(cls, preset: str) -> "ScoringWeights":
        """Weights of a named preset; unknown names fall back to META."""
        table = PRESET_WEIGHTS.get(preset.upper()) if preset else None
        if table is None:
            if preset and preset.upper() != CUSTOM_PRESET:
                logger.warning(f"Unknown preset {preset!r}, using META")
            table = PRESET_WEIGHTS["META"]
        return cls.from_mapping(table)

    def as_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in WEIGHT_KEYS}

    @property
    def total(self) -> float:
        return sum(self.as_dict().values())

    @property
    def is_valid(self) -> bool:
        return self.total > 0

    def normalized(self) -> Dict[str, float]:
        """Weights rescaled to sum to 1 (all zeros when every weight is 0)."""
        total = self.total
        if total <= 0:
            return {key: 0.0 for key in WEIGHT_KEYS}
        return {key: value / total for key, value in self.as_dict().items()}


@dataclass(frozen=True)
class ScoreResult:
    score01: Optional[float] = None
    score: Optional[float] = None

    @property
    def is_scored(self) -> bool:
        return self.score01 is not None


def compute_score(normalized: Mapping[str, Optional[float]], weights: ScoringWeights) -> ScoreResult:
    """Weighted average over dimensions with a positive weight and a value.

    A weapon with no scorable dimension gets no score at all rather than 0.
    """
    weight_sum = 0.0
    accum = 0.0
    for weight_key, weight in weights.normalized().items():
        value = normalized.get(WEIGHT_METRIC_MAP[weight_key])
        if weight > 0 and is_number(value):
            weight_sum += weight
            accum += weight * value

    if weight_sum <= 0:
        return ScoreResult()

    score01 = clamp(accum / weight_sum, 0.0, 1.0)
    return ScoreResult(score01=score01, score=to_score100(score01))

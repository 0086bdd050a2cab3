# Core scoring pipeline (pure, no web dependencies)
from .constants import ArmorTier, Zone, DistanceBand, DISTANCE_BANDS, PRESET_WEIGHTS
from .weapon_record import WeaponRecord
from .zone_resolver import resolve_ttk, resolve_stk
from .metrics import METRIC_REGISTRY, MetricDefinition, MetricContext, RawMetrics, build_context
from .population_stats import PopulationStats, MetricRange
from .scoring import ScoringWeights, ScoreResult
from .sorting import SortSpec
from .pipeline import ControlState, PipelineState, PipelineResult, ScoredWeapon, recompute
from .data_loader import load_weapon_records

__all__ = [
    "ArmorTier",
    "Zone",
    "DistanceBand",
    "DISTANCE_BANDS",
    "PRESET_WEIGHTS",
    "WeaponRecord",
    "resolve_ttk",
    "resolve_stk",
    "METRIC_REGISTRY",
    "MetricDefinition",
    "MetricContext",
    "RawMetrics",
    "build_context",
    "PopulationStats",
    "MetricRange",
    "ScoringWeights",
    "ScoreResult",
    "SortSpec",
    "ControlState",
    "PipelineState",
    "PipelineResult",
    "ScoredWeapon",
    "recompute",
    "load_weapon_records",
]

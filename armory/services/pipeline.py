"""Scoring pipeline.

One call to recompute() takes the full dataset plus the current controls and
rebuilds every scored row from scratch:

    records -> context -> raw metrics -> population stats -> normalized
            -> composite score -> secondary rankings -> sorted rows

There is no module-level state; identical inputs produce identical output.

Usage:
    from armory.services.pipeline import ControlState, PipelineState, recompute

    state = PipelineState(records=records, controls=ControlState(armor="H"))
    result = recompute(state)
    for row in result.rows:
        print(row.name, row.score)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .constants import (
    ALL_CATEGORIES,
    CUSTOM_PRESET,
    OUTLIER_SIGMA_THRESHOLD,
    PRESET_WEIGHTS,
    WEIGHT_KEYS,
    ArmorTier,
    Zone,
)
from .metrics import MetricContext, RawMetrics, build_context, compute_raw_metrics
from .normalizer import NormalizedMetrics, compute_normalized
from .population_stats import (
    CategorySummary,
    PopulationStats,
    compute_population_stats,
    summarize_by_category,
)
from .rankers import (
    BandScore,
    counter_ranks,
    counter_score,
    distance_band_scores,
    outlier_indices,
    role_dominance,
    skill_ceiling,
    skill_floor,
)
from .scoring import ScoringWeights, compute_score
from .sorting import SortSpec, sort_rows
from .validation import ValidationSummary, validate_metrics
from .weapon_record import WeaponRecord

logger = logging.getLogger(__name__)

CHART_METRICS = ("SCORE", "TTK")


@dataclass(frozen=True)
class ControlState:
    """User-selected controls for one update."""
    armor: str = "0"
    zone: str = "Overall"
    category: str = ALL_CATEGORIES
    search: str = ""
    chart_metric: str = "SCORE"
    preset: str = "META"
    weights: ScoringWeights = field(default_factory=lambda: ScoringWeights.from_preset("META"))

    @classmethod
    def from_mapping(cls, controls: Mapping[str, Any], strict: bool = False) -> "ControlState":
        """Build controls from a flat mapping of control names to values.

        Weights come from a named preset unless the preset is CUSTOM (or
        absent while explicit weights are given). With strict=True unknown
        armor/zone/chart values raise ValueError instead of resolving to
        missing data downstream.
        """
        armor = str(controls.get("armor", "0"))
        zone = str(controls.get("zone", "Overall"))
        chart_metric = str(controls.get("chartMetric", controls.get("chart_metric", "SCORE"))).upper()

        if strict:
            if ArmorTier.parse(armor) is None:
                raise ValueError(f"Unknown armor tier: {armor!r}")
            if Zone.parse(zone) is None:
                raise ValueError(f"Unknown zone: {zone!r}")
            if chart_metric not in CHART_METRICS:
                raise ValueError(f"Unknown chart metric: {chart_metric!r}")

        raw_weights = controls.get("weights")
        if not isinstance(raw_weights, Mapping):
            raw_weights = {key: controls[key] for key in WEIGHT_KEYS if key in controls}

        preset = controls.get("preset", controls.get("scoreMode"))
        if preset is None:
            preset = CUSTOM_PRESET if raw_weights else "META"
        preset = str(preset).upper()

        if preset in PRESET_WEIGHTS:
            weights = ScoringWeights.from_preset(preset)
        else:
            if strict and preset != CUSTOM_PRESET:
                raise ValueError(f"Unknown preset: {preset!r}")
            weights = ScoringWeights.from_mapping(raw_weights)

        return cls(
            armor=armor,
            zone=zone,
            category=str(controls.get("category") or ALL_CATEGORIES),
            search=str(controls.get("search") or ""),
            chart_metric=chart_metric,
            preset=preset,
            weights=weights,
        )

    @classmethod
    def parse(cls, controls: Mapping[str, Any]) -> "ControlState":
        """Strict variant of from_mapping."""
        return cls.from_mapping(controls, strict=True)


@dataclass(frozen=True)
class PipelineOptions:
    outlier_sigma_threshold: float = OUTLIER_SIGMA_THRESHOLD
    head_dep_high_percentile: float = 75.0
    missing_metric_warn_ratio: float = 0.3


@dataclass(frozen=True)
class PipelineState:
    records: Sequence[WeaponRecord]
    controls: ControlState = field(default_factory=ControlState)
    sort: SortSpec = field(default_factory=SortSpec)
    options: PipelineOptions = field(default_factory=PipelineOptions)


@dataclass
class ScoredWeapon:
    """A weapon with every derived metric for one update."""
    record: WeaponRecord
    raw: RawMetrics
    normalized: NormalizedMetrics
    score01: Optional[float] = None
    score: Optional[float] = None
    role_dominance_index: Optional[float] = None
    role_dominance_top10: bool = False
    outlier_index: Optional[float] = None
    outlier_warning: bool = False
    counter_score01: Optional[float] = None
    counter_score: Optional[float] = None
    counter_rank: Optional[float] = None
    counter_top10: bool = False
    distance_bands: Dict[str, BandScore] = field(default_factory=dict)
    skill_floor_score01: Optional[float] = None
    skill_floor_score: Optional[float] = None
    skill_ceiling_score01: Optional[float] = None
    skill_ceiling_score: Optional[float] = None
    head_dep_high: bool = False

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def category(self) -> str:
        return self.record.category

    @property
    def reloads_every_kill(self) -> Optional[bool]:
        return self.raw.reloads_every_kill


@dataclass(frozen=True)
class ChartPoint:
    name: str
    value: Optional[float]


@dataclass
class PipelineResult:
    rows: List[ScoredWeapon]
    stats: PopulationStats
    category_summaries: Dict[str, CategorySummary]
    validation: ValidationSummary
    context: MetricContext
    controls: ControlState
    total_count: int

    @property
    def status_text(self) -> str:
        return f"Showing {len(self.rows)} of {self.total_count}"

    @property
    def chart_title(self) -> str:
        if self.controls.chart_metric == "TTK":
            return f"Performance Landscape ({self.controls.zone} TTK vs Armor {self.controls.armor}, seconds)"
        return "Performance Landscape (Score 0-100)"

    def chart_series(self, limit: int = 15) -> List[ChartPoint]:
        """Leading rows of the sorted table with the selected chart value."""
        use_ttk = self.controls.chart_metric == "TTK"
        return [
            ChartPoint(name=row.name, value=row.raw.get("TTK") if use_ttk else row.score)
            for row in self.rows[:limit]
        ]

    def find(self, name: str) -> Optional[ScoredWeapon]:
        for row in self.rows:
            if row.name == name:
                return row
        return None


def filter_records(records: Sequence[WeaponRecord], category: str, search: str) -> List[WeaponRecord]:
    """Category match (or All) plus case-insensitive substring match on Name."""
    needle = (search or "").strip().lower()
    return [
        record for record in records
        if (category in (None, "", ALL_CATEGORIES) or record.category == category)
        and needle in record.name.lower()
    ]


def recompute(state: PipelineState) -> PipelineResult:
    controls = state.controls
    options = state.options

    ctx = build_context(state.records, controls.armor, controls.zone)
    working = filter_records(state.records, controls.category, controls.search)

    raws = [compute_raw_metrics(record, ctx) for record in working]
    stats = compute_population_stats(raws, options.head_dep_high_percentile)

    rows = []
    for record, raw in zip(working, raws):
        normalized = compute_normalized(raw, stats)
        result = compute_score(normalized, controls.weights)
        counter = counter_score(
            normalized.get("HeadDep"),
            normalized.get("ArmorCons"),
            normalized.get("ReloadPenalty"),
            normalized.get("KillsPerMag"),
        )
        floor = skill_floor(normalized)
        ceiling = skill_ceiling(normalized)
        rows.append(ScoredWeapon(
            record=record,
            raw=raw,
            normalized=normalized,
            score01=result.score01,
            score=result.score,
            counter_score01=counter.score01,
            counter_score=counter.score,
            distance_bands=distance_band_scores(record.range, raw.get("RangeScore"), result.score01),
            skill_floor_score01=floor.score01,
            skill_floor_score=floor.score,
            skill_ceiling_score01=ceiling.score01,
            skill_ceiling_score=ceiling.score,
            head_dep_high=stats.is_high_head_dependency(raw.get("HeadDep")),
        ))

    _apply_rankings(rows, options)

    summaries = summarize_by_category((row.category, row.score) for row in rows)
    validation = validate_metrics(rows, stats, controls.weights, options.missing_metric_warn_ratio)
    if not validation.weights_valid:
        logger.warning("All scoring weights are zero; no weapon can be scored")

    logger.debug(
        f"Recomputed {len(rows)}/{len(state.records)} weapons "
        f"(armor={controls.armor}, zone={controls.zone}, category={controls.category})"
    )

    return PipelineResult(
        rows=sort_rows(rows, state.sort),
        stats=stats,
        category_summaries=summaries,
        validation=validation,
        context=ctx,
        controls=controls,
        total_count=len(state.records),
    )


def _apply_rankings(rows: List[ScoredWeapon], options: PipelineOptions) -> None:
    """Fill in population-relative rankings on freshly built rows."""
    categories = [row.category for row in rows]

    dominance = role_dominance(categories, [row.score01 for row in rows])
    outliers = outlier_indices(categories, [row.score for row in rows], options.outlier_sigma_threshold)
    counters = counter_ranks([row.counter_score01 for row in rows])

    for row, dom, outlier, counter in zip(rows, dominance, outliers, counters):
        row.role_dominance_index = dom.index
        row.role_dominance_top10 = dom.top10
        row.outlier_index = outlier.index
        row.outlier_warning = outlier.warning
        row.counter_rank = counter.index
        row.counter_top10 = counter.top10

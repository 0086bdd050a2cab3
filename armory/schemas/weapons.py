from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from ..services.constants import CUSTOM_PRESET, WEIGHT_KEYS
from ..services.pipeline import ControlState, PipelineResult, ScoredWeapon
from ..services.scoring import ScoringWeights
from ..services.sorting import SortSpec


class WeightsIn(BaseModel):
    ttk: float = Field(0, ge=0)
    sustain: float = Field(0, ge=0)
    handling: float = Field(0, ge=0)
    range: float = Field(0, ge=0)
    reload: float = Field(0, ge=0)
    armor: float = Field(0, ge=0)


class ScoreControls(BaseModel):
    armor: str = Field("0", pattern="^(0|L|M|H)$")
    zone: str = Field("Overall", pattern="^(Head|Body|Leg|Overall)$")
    category: str = "All"
    search: str = ""
    chart_metric: str = Field("SCORE", pattern="^(SCORE|TTK)$")
    # None: CUSTOM when weights are given, else the configured default preset
    preset: Optional[str] = Field(None, pattern="^(META|CQC|MID|LONG|CUSTOM)$")
    weights: Optional[WeightsIn] = None
    sort: str = "Score"
    direction: str = Field("desc", pattern="^(asc|desc)$")

    def resolved_preset(self, default_preset: str = "META") -> str:
        if self.preset:
            return self.preset
        return CUSTOM_PRESET if self.weights is not None else default_preset.upper()

    def to_control_state(self, default_preset: str = "META") -> ControlState:
        preset = self.resolved_preset(default_preset)
        if preset == CUSTOM_PRESET:
            weights = ScoringWeights.from_mapping(self.weights.model_dump() if self.weights else {})
        else:
            weights = ScoringWeights.from_preset(preset)
        return ControlState(
            armor=self.armor,
            zone=self.zone,
            category=self.category,
            search=self.search,
            chart_metric=self.chart_metric,
            preset=preset,
            weights=weights,
        )

    def to_sort_spec(self) -> SortSpec:
        return SortSpec(key=self.sort, direction=self.direction)


class ScoreRequest(ScoreControls):
    records: List[Dict[str, Any]]  # flat sheet rows, numeric cells already typed


class ArmorBreakOut(BaseModel):
    delta_l: Optional[float] = None
    delta_m: Optional[float] = None
    delta_h: Optional[float] = None
    avg_delta: Optional[float] = None


class BandScoreOut(BaseModel):
    score01: Optional[float] = None
    score: Optional[float] = None


class ScoredWeaponResponse(BaseModel):
    name: str
    category: str
    record: Dict[str, Any]
    raw: Dict[str, Optional[float]]
    normalized: Dict[str, Optional[float]]
    armor_breakpoint: ArmorBreakOut
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
    distance_bands: Dict[str, BandScoreOut] = {}
    skill_floor_score: Optional[float] = None
    skill_ceiling_score: Optional[float] = None
    head_dep_high: bool = False
    reloads_every_kill: Optional[bool] = None

    @classmethod
    def from_scored(cls, row: ScoredWeapon) -> "ScoredWeaponResponse":
        brk = row.raw.armor_break
        return cls(
            name=row.name,
            category=row.category,
            record=row.record.to_row(),
            raw=dict(row.raw.values),
            normalized=dict(row.normalized),
            armor_breakpoint=ArmorBreakOut(
                delta_l=brk.delta_l, delta_m=brk.delta_m, delta_h=brk.delta_h, avg_delta=brk.avg_delta
            ),
            score01=row.score01,
            score=row.score,
            role_dominance_index=row.role_dominance_index,
            role_dominance_top10=row.role_dominance_top10,
            outlier_index=row.outlier_index,
            outlier_warning=row.outlier_warning,
            counter_score01=row.counter_score01,
            counter_score=row.counter_score,
            counter_rank=row.counter_rank,
            counter_top10=row.counter_top10,
            distance_bands={
                key: BandScoreOut(score01=band.score01, score=band.score)
                for key, band in row.distance_bands.items()
            },
            skill_floor_score=row.skill_floor_score,
            skill_ceiling_score=row.skill_ceiling_score,
            head_dep_high=row.head_dep_high,
            reloads_every_kill=row.reloads_every_kill,
        )


class MetricRangeOut(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    count: int = 0


class CategorySummaryOut(BaseModel):
    count: int
    mean: Optional[float] = None
    stddev: Optional[float] = None


class ValidationOut(BaseModel):
    ok_text: str
    missing_text: str
    warnings: List[str] = []
    weights_valid: bool = True


class ChartPointOut(BaseModel):
    name: str
    value: Optional[float] = None


class ChartResponse(BaseModel):
    title: str
    metric: str
    points: List[ChartPointOut]

    @classmethod
    def from_result(cls, result: PipelineResult, limit: int) -> "ChartResponse":
        return cls(
            title=result.chart_title,
            metric=result.controls.chart_metric,
            points=[ChartPointOut(name=p.name, value=p.value) for p in result.chart_series(limit)],
        )


class ScoreResponse(BaseModel):
    status: str
    total_count: int
    rows: List[ScoredWeaponResponse]
    stats: Dict[str, MetricRangeOut]
    head_dep_p75: Optional[float] = None
    category_summaries: Dict[str, CategorySummaryOut]
    validation: ValidationOut
    chart: ChartResponse

    @classmethod
    def from_result(cls, result: PipelineResult, chart_limit: int = 15) -> "ScoreResponse":
        return cls(
            status=result.status_text,
            total_count=result.total_count,
            rows=[ScoredWeaponResponse.from_scored(row) for row in result.rows],
            stats={
                key: MetricRangeOut(min=rng.min, max=rng.max, count=rng.count)
                for key, rng in result.stats.ranges.items()
            },
            head_dep_p75=result.stats.head_dep_p75,
            category_summaries={
                cat: CategorySummaryOut(count=s.count, mean=s.mean, stddev=s.stddev)
                for cat, s in result.category_summaries.items()
            },
            validation=ValidationOut(
                ok_text=result.validation.ok_text,
                missing_text=result.validation.missing_text,
                warnings=result.validation.warnings,
                weights_valid=result.validation.weights_valid,
            ),
            chart=ChartResponse.from_result(result, chart_limit),
        )


class DistanceBandOut(BaseModel):
    key: str
    label: str
    min: float
    max: Optional[float] = None  # None = unbounded


class PresetsResponse(BaseModel):
    presets: Dict[str, Dict[str, float]]
    weight_keys: List[str] = list(WEIGHT_KEYS)
    distance_bands: List[DistanceBandOut]

"""Metric registry and per-weapon raw metric calculators.

Each metric is described once by a MetricDefinition (key, label, direction,
raw getter, normalizer). The statistics, normalization and scoring stages
iterate over METRIC_REGISTRY instead of repeating per-metric logic.

Calculators return None whenever a required input is missing or violates a
domain constraint; they never raise for data gaps. The handling index is the
one exception: missing sub-scores count as zero.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .constants import OVERALL_HIT_WEIGHTS, ArmorTier, Zone
from .numeric import clamp, is_number, normalize, positive, stddev
from .weapon_record import WeaponRecord
from .zone_resolver import resolve_stk, resolve_ttk


class Direction(Enum):
    HIGHER_BETTER = "higherBetter"
    LOWER_BETTER = "lowerBetter"
    # Reported as-is, never inverted
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class MetricContext:
    """Per-update inputs shared by every calculator."""
    armor: Optional[ArmorTier]
    zone: Optional[Zone]
    hit_weights: Dict[Zone, float] = field(default_factory=lambda: dict(OVERALL_HIT_WEIGHTS))
    category_max_range: Dict[str, float] = field(default_factory=dict)
    category_max_dpc: Dict[str, float] = field(default_factory=dict)
    weight_range: Optional[Tuple[float, float]] = None


def build_context(
    records: Iterable[WeaponRecord],
    armor,
    zone,
    hit_weights: Dict[Zone, float] = OVERALL_HIT_WEIGHTS,
) -> MetricContext:
    """Build the calculator context from the full (unfiltered) dataset.

    Category maxima and the weight range are taken over every record so that
    per-weapon values stay put when the table is filtered.
    """
    max_range: Dict[str, float] = {}
    max_dpc: Dict[str, float] = {}
    weights: List[float] = []

    for record in records:
        category = record.category
        rng = positive(record.range)
        if rng is not None:
            max_range[category] = max(max_range.get(category, 0.0), rng)

        dpc = damage_per_cycle(record)
        if dpc is not None:
            max_dpc[category] = max(max_dpc.get(category, 0.0), dpc)

        if is_number(record.weight):
            weights.append(record.weight)

    weight_range = (min(weights), max(weights)) if weights else None

    return MetricContext(
        armor=ArmorTier.parse(armor),
        zone=Zone.parse(zone),
        hit_weights=dict(hit_weights),
        category_max_range=max_range,
        category_max_dpc=max_dpc,
        weight_range=weight_range,
    )


# ============================================================================
# CALCULATORS
# ============================================================================

@dataclass(frozen=True)
class ArmorBreakpoint:
    """Body TTK against each armor tier as a ratio of unarmored Body TTK."""
    delta_l: Optional[float] = None
    delta_m: Optional[float] = None
    delta_h: Optional[float] = None
    avg_delta: Optional[float] = None


@dataclass(frozen=True)
class ArmorPenDelta:
    """Heavy-vs-medium TTK difference."""
    delta_seconds: Optional[float] = None
    delta_ratio: Optional[float] = None


def zone_ttk(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    return resolve_ttk(record, ctx.zone, ctx.armor, ctx.hit_weights)


def zone_stk(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    return resolve_stk(record, ctx.zone, ctx.armor, ctx.hit_weights)


def overall_ttk(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    return resolve_ttk(record, Zone.OVERALL, ctx.armor, ctx.hit_weights)


def sustained_dps(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    """Magazine damage over the time to empty and reload it.

    The fire rate is inferred from (STK - 1) shots fired during the TTK, so
    one-shot kills (STK <= 1) cannot produce a value.
    """
    dmg = positive(record.dmg)
    mag = positive(record.mag)
    reload = record.reload
    if dmg is None or mag is None or not is_number(reload) or reload < 0:
        return None

    ttk = positive(zone_ttk(record, ctx))
    stk = zone_stk(record, ctx)
    if ttk is None or not is_number(stk) or stk <= 1:
        return None

    shots_per_sec = (stk - 1) / ttk
    time_firing = (mag - 1) / shots_per_sec
    cycle = time_firing + reload
    if cycle <= 0:
        return None
    return (mag * dmg) / cycle


def handling_index(record: WeaponRecord, ctx: Optional[MetricContext] = None) -> float:
    """Weighted handling blend; missing sub-scores count as zero."""
    stability = record.stability if is_number(record.stability) else 0.0
    agility = record.agility if is_number(record.agility) else 0.0
    stealth = record.stealth if is_number(record.stealth) else 0.0
    return stability * 0.4 + agility * 0.4 + stealth * 0.2


def armor_consistency(
    record: WeaponRecord,
    zone,
    hit_weights: Dict[Zone, float] = OVERALL_HIT_WEIGHTS,
) -> Optional[float]:
    """1.0 when heavy armor adds no TTK, falling to 0 as it doubles it."""
    ttk_0 = positive(resolve_ttk(record, zone, ArmorTier.NONE, hit_weights))
    ttk_h = positive(resolve_ttk(record, zone, ArmorTier.HEAVY, hit_weights))
    if ttk_0 is None or ttk_h is None:
        return None
    return clamp(1 - (ttk_h - ttk_0) / ttk_0, 0.0, 1.0)


def ttk_volatility(
    record: WeaponRecord,
    zone,
    hit_weights: Dict[Zone, float] = OVERALL_HIT_WEIGHTS,
) -> Optional[float]:
    """Sample stddev of TTK across the four armor tiers."""
    return stddev(resolve_ttk(record, zone, tier, hit_weights) for tier in ArmorTier)


def armor_breakpoint(record: WeaponRecord) -> ArmorBreakpoint:
    ttk_0 = positive(record.ttk_at(Zone.BODY, ArmorTier.NONE))
    ttk_l = positive(record.ttk_at(Zone.BODY, ArmorTier.LIGHT))
    ttk_m = positive(record.ttk_at(Zone.BODY, ArmorTier.MEDIUM))
    ttk_h = positive(record.ttk_at(Zone.BODY, ArmorTier.HEAVY))
    if None in (ttk_0, ttk_l, ttk_m, ttk_h):
        return ArmorBreakpoint()

    delta_l = ttk_l / ttk_0
    delta_m = ttk_m / ttk_0
    delta_h = ttk_h / ttk_0
    return ArmorBreakpoint(
        delta_l=delta_l,
        delta_m=delta_m,
        delta_h=delta_h,
        avg_delta=(delta_l + delta_m + delta_h) / 3,
    )


def armor_pen_effectiveness(
    record: WeaponRecord,
    zone,
    hit_weights: Dict[Zone, float] = OVERALL_HIT_WEIGHTS,
) -> ArmorPenDelta:
    ttk_m = positive(resolve_ttk(record, zone, ArmorTier.MEDIUM, hit_weights))
    ttk_h = positive(resolve_ttk(record, zone, ArmorTier.HEAVY, hit_weights))
    if ttk_m is None or ttk_h is None:
        return ArmorPenDelta()
    delta_seconds = ttk_h - ttk_m
    return ArmorPenDelta(delta_seconds=delta_seconds, delta_ratio=delta_seconds / ttk_m)


def headshot_dependency(record: WeaponRecord, armor) -> Optional[float]:
    """Body TTK over Head TTK; large values mean the weapon leans on headshots."""
    tier = ArmorTier.parse(armor)
    if tier is None:
        return None
    body = positive(record.ttk_at(Zone.BODY, tier))
    head = positive(record.ttk_at(Zone.HEAD, tier))
    if body is None or head is None:
        return None
    return body / head


def crit_leverage(record: WeaponRecord, armor) -> Optional[float]:
    """Seconds saved by headshots, scaled by the crit multiplier."""
    tier = ArmorTier.parse(armor)
    if tier is None:
        return None
    body = positive(record.ttk_at(Zone.BODY, tier))
    head = positive(record.ttk_at(Zone.HEAD, tier))
    crit = positive(record.crit_multi)
    if body is None or head is None or crit is None:
        return None
    return (body - head) * crit


def damage_per_cycle(record: WeaponRecord, ctx: Optional[MetricContext] = None) -> Optional[float]:
    mag = positive(record.mag)
    dmg = positive(record.dmg)
    if mag is None or dmg is None:
        return None
    return mag * dmg


def damage_per_cycle_base(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    """Damage per cycle as a fraction of the category's best."""
    dpc = damage_per_cycle(record)
    best = positive(ctx.category_max_dpc.get(record.category))
    if dpc is None or best is None:
        return None
    return clamp(dpc / best, 0.0, 1.0)


def weight_factor(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    if ctx.weight_range is None:
        return None
    lo, hi = ctx.weight_range
    return normalize(record.weight, lo, hi)


def exposure_time(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    """Overall TTK stretched by how heavy the weapon is relative to the pool."""
    ttk = overall_ttk(record, ctx)
    factor = weight_factor(record, ctx)
    if not is_number(ttk) or factor is None:
        return None
    return ttk * (1 + factor)


def mobility_cost(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    weight = record.weight
    agility = positive(record.agility)
    ttk = overall_ttk(record, ctx)
    if not is_number(weight) or agility is None or not is_number(ttk):
        return None
    return (weight / agility) * ttk


def kills_per_mag(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    mag = positive(record.mag)
    stk = positive(zone_stk(record, ctx))
    if mag is None or stk is None:
        return None
    return float(math.floor(mag / stk))


def reload_tax(reload: Optional[float], ttk: Optional[float]) -> Optional[float]:
    """Share of an engagement cycle spent reloading."""
    if not is_number(reload) or not is_number(ttk) or reload < 0 or ttk < 0:
        return None
    total = reload + ttk
    if total == 0:
        return None
    return reload / total


def range_score(record: WeaponRecord, ctx: MetricContext) -> Optional[float]:
    rng = positive(record.range)
    best = positive(ctx.category_max_range.get(record.category))
    if rng is None or best is None:
        return None
    return clamp(rng / best, 0.0, 1.0)


# ============================================================================
# REGISTRY
# ============================================================================

@dataclass
class RawMetrics:
    """Raw metric values for one weapon under one context."""
    values: Dict[str, Optional[float]]
    armor_break: ArmorBreakpoint = field(default_factory=ArmorBreakpoint)
    dpc_norm_base: Optional[float] = None

    def get(self, key: str) -> Optional[float]:
        return self.values.get(key)

    @property
    def reloads_every_kill(self) -> Optional[bool]:
        kills = self.values.get("KillsPerMag")
        return None if kills is None else kills <= 1


RawGetter = Callable[[WeaponRecord, MetricContext], Optional[float]]
Normalizer = Callable[["MetricDefinition", RawMetrics, Dict], Optional[float]]


def default_normalize(metric: "MetricDefinition", raw: RawMetrics, stats: Dict) -> Optional[float]:
    stat = stats.get(metric.key)
    if stat is None:
        return None
    return normalize(raw.get(metric.key), stat.min, stat.max)


def _normalize_damage_per_cycle(metric: "MetricDefinition", raw: RawMetrics, stats: Dict) -> Optional[float]:
    if raw.dpc_norm_base is not None:
        return raw.dpc_norm_base
    return default_normalize(metric, raw, stats)


def _normalize_weight_factor(metric: "MetricDefinition", raw: RawMetrics, stats: Dict) -> Optional[float]:
    value = raw.get(metric.key)
    return clamp(value, 0.0, 1.0) if value is not None else None


@dataclass(frozen=True)
class MetricDefinition:
    key: str
    label: str
    direction: Direction
    get_raw: RawGetter
    normalizer: Normalizer = default_normalize
    # Included in population min/max ranges
    ranged: bool = True

    def normalize(self, raw: RawMetrics, stats: Dict) -> Optional[float]:
        return self.normalizer(self, raw, stats)


METRIC_REGISTRY: Tuple[MetricDefinition, ...] = (
    MetricDefinition("TTK", "Time to Kill", Direction.LOWER_BETTER, zone_ttk),
    MetricDefinition("STK", "Shots to Kill", Direction.LOWER_BETTER, zone_stk),
    MetricDefinition("Sustain", "Sustained DPS", Direction.HIGHER_BETTER, sustained_dps),
    MetricDefinition("Handling", "Handling", Direction.HIGHER_BETTER, handling_index),
    MetricDefinition("RangeScore", "Range Score", Direction.HIGHER_BETTER, range_score),
    MetricDefinition(
        "ReloadPenalty", "Reload Penalty", Direction.LOWER_BETTER,
        lambda record, ctx: reload_tax(record.reload, zone_ttk(record, ctx)),
    ),
    MetricDefinition(
        "ArmorCons", "Armor Consistency", Direction.HIGHER_BETTER,
        lambda record, ctx: armor_consistency(record, ctx.zone, ctx.hit_weights),
    ),
    MetricDefinition(
        "ArmorBreak", "Armor Breakpoint", Direction.LOWER_BETTER,
        lambda record, ctx: armor_breakpoint(record).avg_delta,
    ),
    MetricDefinition(
        "Volatility", "TTK Volatility", Direction.LOWER_BETTER,
        lambda record, ctx: ttk_volatility(record, ctx.zone, ctx.hit_weights),
    ),
    MetricDefinition("ExposureTime", "Exposure Time", Direction.LOWER_BETTER, exposure_time),
    MetricDefinition("MobilityCost", "Mobility Cost", Direction.LOWER_BETTER, mobility_cost),
    MetricDefinition(
        "WeightFactor", "Weight Factor", Direction.NEUTRAL, weight_factor,
        normalizer=_normalize_weight_factor, ranged=False,
    ),
    MetricDefinition("KillsPerMag", "Kills per Mag", Direction.HIGHER_BETTER, kills_per_mag),
    MetricDefinition(
        "DamagePerCycle", "Damage per Cycle", Direction.HIGHER_BETTER, damage_per_cycle,
        normalizer=_normalize_damage_per_cycle,
    ),
    MetricDefinition(
        "CritLeverage", "Crit Leverage", Direction.HIGHER_BETTER,
        lambda record, ctx: crit_leverage(record, ctx.armor),
    ),
    MetricDefinition(
        "HeadDep", "Headshot Dependency", Direction.LOWER_BETTER,
        lambda record, ctx: headshot_dependency(record, ctx.armor),
    ),
    MetricDefinition(
        "ArmorPen", "Armor Pen Delta", Direction.LOWER_BETTER,
        lambda record, ctx: armor_pen_effectiveness(record, ctx.zone, ctx.hit_weights).delta_ratio,
    ),
    MetricDefinition(
        "ArmorPenSeconds", "Armor Pen Delta (s)", Direction.LOWER_BETTER,
        lambda record, ctx: armor_pen_effectiveness(record, ctx.zone, ctx.hit_weights).delta_seconds,
    ),
)


def compute_raw_metrics(record: WeaponRecord, ctx: MetricContext) -> RawMetrics:
    """Run every registered calculator against one weapon."""
    values = {metric.key: metric.get_raw(record, ctx) for metric in METRIC_REGISTRY}
    return RawMetrics(
        values=values,
        armor_break=armor_breakpoint(record),
        dpc_norm_base=damage_per_cycle_base(record, ctx),
    )

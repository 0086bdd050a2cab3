"""Resolve TTK/STK for a hit zone and armor tier.

The synthetic "Overall" zone blends Head/Body/Leg figures with the fixed hit
distribution, skipping zones that have no value.
"""

from typing import Dict, Optional, Union

from .constants import HIT_ZONES, OVERALL_HIT_WEIGHTS, ArmorTier, Zone
from .numeric import weighted_average
from .weapon_record import WeaponRecord

ZoneLike = Union[Zone, str]
ArmorLike = Union[ArmorTier, str]


def _resolve(
    table: Dict,
    zone: ZoneLike,
    armor: ArmorLike,
    hit_weights: Dict[Zone, float],
) -> Optional[float]:
    zone_key = Zone.parse(zone)
    armor_key = ArmorTier.parse(armor)
    if zone_key is None or armor_key is None:
        return None
    if zone_key is not Zone.OVERALL:
        return table.get((zone_key, armor_key))
    return weighted_average(
        (hit_weights.get(hit_zone, 0.0), table.get((hit_zone, armor_key)))
        for hit_zone in HIT_ZONES
    )


def resolve_ttk(
    weapon: WeaponRecord,
    zone: ZoneLike,
    armor: ArmorLike,
    hit_weights: Dict[Zone, float] = OVERALL_HIT_WEIGHTS,
) -> Optional[float]:
    """Time to kill in seconds, or None when unavailable."""
    return _resolve(weapon.ttk, zone, armor, hit_weights)


def resolve_stk(
    weapon: WeaponRecord,
    zone: ZoneLike,
    armor: ArmorLike,
    hit_weights: Dict[Zone, float] = OVERALL_HIT_WEIGHTS,
) -> Optional[float]:
    """Shots to kill (may be fractional for Overall), or None when unavailable."""
    return _resolve(weapon.stk, zone, armor, hit_weights)

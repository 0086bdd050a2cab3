"""Domain constants for weapon balance analytics.

Hit zones, armor tiers, the fixed hit distribution used for the synthetic
"Overall" zone, the distance bands and the scoring weight presets.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class Zone(Enum):
    HEAD = "Head"
    BODY = "Body"
    LEG = "Leg"
    OVERALL = "Overall"

    @classmethod
    def parse(cls, value) -> Optional["Zone"]:
        """Look up a zone by its label, returning None when unrecognized."""
        if isinstance(value, cls):
            return value
        for zone in cls:
            if zone.value == value:
                return zone
        return None


class ArmorTier(Enum):
    NONE = "0"
    LIGHT = "L"
    MEDIUM = "M"
    HEAVY = "H"

    @classmethod
    def parse(cls, value) -> Optional["ArmorTier"]:
        """Look up an armor tier by its label, returning None when unrecognized."""
        if isinstance(value, cls):
            return value
        label = str(value) if value is not None else None
        for tier in cls:
            if tier.value == label:
                return tier
        return None


# Physical hit zones that carry their own TTK/STK columns
HIT_ZONES = (Zone.HEAD, Zone.BODY, Zone.LEG)
ARMOR_TIERS = (ArmorTier.NONE, ArmorTier.LIGHT, ArmorTier.MEDIUM, ArmorTier.HEAVY)

# Hit distribution used to build the "Overall" zone
OVERALL_HIT_WEIGHTS: Dict[Zone, float] = {
    Zone.HEAD: 0.20,
    Zone.BODY: 0.70,
    Zone.LEG: 0.10,
}

UNKNOWN_CATEGORY = "Unknown"
ALL_CATEGORIES = "All"

CSV_FILE = "arc_raiders_final.csv"


@dataclass(frozen=True)
class DistanceBand:
    """An engagement distance band in meters (max may be infinite)."""
    key: str
    label: str
    min: float
    max: float


DISTANCE_BANDS = (
    DistanceBand(key="CQC", label="CQC", min=0.0, max=10.0),
    DistanceBand(key="Close", label="Close", min=10.0, max=25.0),
    DistanceBand(key="Mid", label="Mid", min=25.0, max=40.0),
    DistanceBand(key="Long", label="Long", min=40.0, max=float("inf")),
)

# Scoring dimensions in display order
WEIGHT_KEYS = ("ttk", "sustain", "handling", "range", "reload", "armor")

PRESET_WEIGHTS: Dict[str, Dict[str, float]] = {
    "META": {"ttk": 30, "sustain": 20, "handling": 15, "range": 15, "reload": 10, "armor": 10},
    "CQC": {"ttk": 35, "sustain": 10, "handling": 25, "range": 5, "reload": 20, "armor": 5},
    "MID": {"ttk": 25, "sustain": 20, "handling": 15, "range": 25, "reload": 10, "armor": 5},
    "LONG": {"ttk": 15, "sustain": 5, "handling": 15, "range": 35, "reload": 10, "armor": 20},
}
CUSTOM_PRESET = "CUSTOM"

# Percent of a population flagged as "top" by the percentile rankers
TOP_DECILE = 0.1
OUTLIER_SIGMA_THRESHOLD = 1.5

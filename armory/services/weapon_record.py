"""Weapon record model.

A WeaponRecord is one row of the weapon sheet. Zone/armor columns such as
"Body TTK M" are parsed once into tables keyed by (Zone, ArmorTier) so the
rest of the pipeline never builds column names from strings.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import ARMOR_TIERS, HIT_ZONES, UNKNOWN_CATEGORY, ArmorTier, Zone
from .numeric import safe_num

ZoneArmorKey = Tuple[Zone, ArmorTier]

# Sheet column names for the scalar attributes
NUMERIC_COLUMNS = {
    "dmg": "DMG",
    "mag": "Mag",
    "reload": "Reload",
    "range": "Range",
    "stability": "Stability",
    "agility": "Agility",
    "stealth": "Stealth",
    "weight": "Weight",
    "sell": "Sell",
    "crit_multi": "Crit Multi",
    "dps": "DPS",
}

TEXT_COLUMNS = {
    "firing_mode": "Firing Mode",
    "armor_pen": "Armor Pen",
    "rarity": "R",
    "notes": "Notes",
}


def zone_column(zone: Zone, kind: str, armor: ArmorTier) -> str:
    """Column label for a zone/armor figure, e.g. ("Head", "TTK", "H") -> "Head TTK H"."""
    return f"{zone.value} {kind} {armor.value}"


def zone_columns() -> Dict[str, Tuple[str, ZoneArmorKey]]:
    """All zone/armor column labels mapped to (kind, key)."""
    columns = {}
    for zone in HIT_ZONES:
        for armor in ARMOR_TIERS:
            for kind in ("TTK", "STK"):
                columns[zone_column(zone, kind, armor)] = (kind, (zone, armor))
    return columns


@dataclass(frozen=True, eq=False)
class WeaponRecord:
    """A single weapon row with typed TTK/STK tables.

    The tables are read-only views; records compare and hash by identity.
    """
    name: str
    category: str = UNKNOWN_CATEGORY
    dmg: Optional[float] = None
    mag: Optional[float] = None
    reload: Optional[float] = None
    range: Optional[float] = None
    stability: Optional[float] = None
    agility: Optional[float] = None
    stealth: Optional[float] = None
    weight: Optional[float] = None
    sell: Optional[float] = None
    crit_multi: Optional[float] = None
    dps: Optional[float] = None
    firing_mode: Optional[str] = None
    armor_pen: Optional[str] = None
    rarity: Optional[str] = None
    notes: Optional[str] = None
    ttk: Mapping[ZoneArmorKey, Optional[float]] = field(default_factory=dict)
    stk: Mapping[ZoneArmorKey, Optional[float]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "ttk", MappingProxyType(dict(self.ttk)))
        object.__setattr__(self, "stk", MappingProxyType(dict(self.stk)))

    def ttk_at(self, zone: Zone, armor: ArmorTier) -> Optional[float]:
        return self.ttk.get((zone, armor))

    def stk_at(self, zone: Zone, armor: ArmorTier) -> Optional[float]:
        return self.stk.get((zone, armor))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WeaponRecord":
        """Build a record from a flat sheet row (column label -> value)."""
        values: Dict[str, Any] = {
            attr: safe_num(row.get(column)) for attr, column in NUMERIC_COLUMNS.items()
        }
        for attr, column in TEXT_COLUMNS.items():
            text = row.get(column)
            values[attr] = str(text) if text not in (None, "") else None

        ttk: Dict[ZoneArmorKey, Optional[float]] = {}
        stk: Dict[ZoneArmorKey, Optional[float]] = {}
        for column, (kind, key) in zone_columns().items():
            target = ttk if kind == "TTK" else stk
            target[key] = safe_num(row.get(column))

        category = row.get("Category")
        return cls(
            name=str(row.get("Name") or ""),
            category=str(category) if category not in (None, "") else UNKNOWN_CATEGORY,
            ttk=ttk,
            stk=stk,
            **values,
        )

    def to_row(self) -> Dict[str, Any]:
        """Flatten back to sheet column labels."""
        row: Dict[str, Any] = {"Name": self.name, "Category": self.category}
        for attr, column in NUMERIC_COLUMNS.items():
            row[column] = getattr(self, attr)
        for attr, column in TEXT_COLUMNS.items():
            row[column] = getattr(self, attr)
        for column, (kind, key) in zone_columns().items():
            table = self.ttk if kind == "TTK" else self.stk
            row[column] = table.get(key)
        return row

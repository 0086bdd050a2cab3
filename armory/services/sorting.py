"""Table sorting for scored weapon rows."""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .numeric import is_number

ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    key: str = "Score"
    direction: str = DESC

    @property
    def descending(self) -> bool:
        return self.direction != ASC


def update_sort_state(current: SortSpec, key: str) -> SortSpec:
    """Clicking the active column flips direction; a new column starts descending (Name ascending)."""
    if current.key == key:
        return SortSpec(key=key, direction=ASC if current.direction == DESC else DESC)
    return SortSpec(key=key, direction=ASC if key == "Name" else DESC)


def _raw(key: str) -> Callable:
    return lambda row: row.raw.get(key)


def _normalized(key: str) -> Callable:
    return lambda row: row.normalized.get(key)


SORT_VALUE_GETTERS: Dict[str, Callable] = {
    "Score": lambda row: row.score01,
    "RoleDom": lambda row: row.role_dominance_index,
    "OutlierIndex": lambda row: row.outlier_index,
    "CounterScore": lambda row: row.counter_score01,
    "TTK": _raw("TTK"),
    "STK": _raw("STK"),
    "DPS": lambda row: row.record.dps,
    "DamagePerCycle": _raw("DamagePerCycle"),
    "Sustain": _raw("Sustain"),
    "Reload": lambda row: row.record.reload,
    "Handling": _raw("Handling"),
    "Range": lambda row: row.record.range,
    "HeadDep": _raw("HeadDep"),
    "CritLeverage": _raw("CritLeverage"),
    "ArmorCons": _raw("ArmorCons"),
    "Armor": _raw("ArmorCons"),
    "ArmorPen": _raw("ArmorPen"),
    "ArmorBP": _raw("ArmorBreak"),
    "SkillCeiling": lambda row: row.skill_ceiling_score01,
    "SkillFloor": lambda row: row.skill_floor_score01,
    "Consistency": _normalized("Consistency"),
    "Vol": _raw("Volatility"),
    "Exposure": _raw("ExposureTime"),
    "Mobility": _raw("MobilityCost"),
    "KillsPerMag": _raw("KillsPerMag"),
}

SORT_KEYS = ("Name",) + tuple(SORT_VALUE_GETTERS)


def sort_value(row, key: str) -> Optional[float]:
    getter = SORT_VALUE_GETTERS.get(key, SORT_VALUE_GETTERS["Score"])
    return getter(row)


def sort_rows(rows: Sequence, spec: SortSpec) -> List:
    """Sort rows by the SortSpec key and direction; rows without a value always go last."""
    if spec.key == "Name":
        return sorted(rows, key=lambda row: row.name.casefold(), reverse=spec.descending)

    present = [row for row in rows if is_number(sort_value(row, spec.key))]
    missing = [row for row in rows if not is_number(sort_value(row, spec.key))]
    present.sort(key=lambda row: sort_value(row, spec.key), reverse=spec.descending)
    return present + missing

"""
CSV loader for the weapon sheet.

Reads the exported sheet (one weapon per row, first row is the header) into
immutable WeaponRecord objects. Numeric-looking cells are coerced to floats,
empty cells become None and repeated header rows or rows without a Name are
skipped.

Usage:
    from armory.services.data_loader import load_weapon_records

    records = load_weapon_records("data/arc_raiders_final.csv")
"""

import csv
import io
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .constants import CSV_FILE
from .weapon_record import NUMERIC_COLUMNS, TEXT_COLUMNS, WeaponRecord, zone_columns

logger = logging.getLogger(__name__)

# Data directory
DATA_DIR = Path(__file__).parent.parent.parent / "data"

NUMERIC_HEADERS = set(NUMERIC_COLUMNS.values()) | set(zone_columns())
TEXT_HEADERS = {"Name", "Category"} | set(TEXT_COLUMNS.values())


def coerce_cell(value: Optional[str]) -> Any:
    """Dynamic typing for a CSV cell: float, None for blanks, else the stripped text."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    # Thousands separators ("1,250")
    candidate = text.replace(",", "")
    try:
        return float(candidate)
    except ValueError:
        return text


def parse_rows(lines: Iterable[str], source: str = "<memory>") -> List[Dict[str, Any]]:
    """Parse CSV lines into dict rows with coerced values."""
    rows = []
    reader = csv.DictReader(lines)
    for line_num, raw in enumerate(reader, start=2):
        row = {}
        for key, value in raw.items():
            if not key:
                continue
            key = key.strip()
            if key in TEXT_HEADERS:
                row[key] = value.strip() if value and value.strip() else None
            else:
                row[key] = coerce_cell(value)
        name = row.get("Name")
        if not name or name == "Name":
            continue

        for column in NUMERIC_HEADERS:
            value = row.get(column)
            if isinstance(value, str):
                logger.warning(f"{source}:{line_num} {name}: non-numeric {column} {value!r} ignored")
                row[column] = None

        if not row.get("Category"):
            logger.warning(f"{source}:{line_num} {name}: missing Category")
        rows.append(row)
    return rows


def load_weapon_records(path: Union[str, Path, None] = None) -> List[WeaponRecord]:
    """Load weapon records from a CSV file.

    Relative paths are resolved against the working directory first, then the
    package data directory.
    """
    csv_path = Path(path) if path else DATA_DIR / CSV_FILE
    if not csv_path.is_absolute() and not csv_path.exists():
        csv_path = DATA_DIR / csv_path.name
    if not csv_path.exists():
        raise FileNotFoundError(f"Weapon sheet not found: {csv_path}")

    logger.info(f"Loading weapon sheet from {csv_path}")
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        rows = parse_rows(f, source=csv_path.name)

    records = records_from_rows(rows)
    logger.info(f"Loaded {len(records)} weapons")
    return records


def load_weapon_records_from_text(text: str) -> List[WeaponRecord]:
    return records_from_rows(parse_rows(io.StringIO(text)))


def records_from_rows(rows: Iterable[Dict[str, Any]]) -> List[WeaponRecord]:
    """Build records from already-typed rows, warning about duplicate names."""
    records = []
    seen = set()
    for row in rows:
        record = WeaponRecord.from_row(row)
        if record.name in seen:
            logger.warning(f"Duplicate weapon name {record.name!r}")
        seen.add(record.name)
        records.append(record)
    return records

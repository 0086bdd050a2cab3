"""Shared fixtures for the scoring pipeline tests."""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from armory.services.weapon_record import WeaponRecord


def build_row(name="Test", category="SMG", ttk=None, stk=None, **attrs):
    """Build a flat sheet row.

    ttk/stk are dicts keyed by (zone, tier) label pairs, e.g. {("Body", "H"): 0.9}.
    Other keyword arguments use sheet column names with spaces as underscores.
    """
    row = {"Name": name, "Category": category}
    for key, value in attrs.items():
        row[key.replace("_", " ")] = value
    for (zone, tier), value in (ttk or {}).items():
        row[f"{zone} TTK {tier}"] = value
    for (zone, tier), value in (stk or {}).items():
        row[f"{zone} STK {tier}"] = value
    return row


@pytest.fixture
def make_row():
    return build_row


@pytest.fixture
def make_weapon():
    def _make(**kwargs):
        return WeaponRecord.from_row(build_row(**kwargs))
    return _make


@pytest.fixture
def smg_row():
    """Single SMG used for the end-to-end scenario (heavy armor columns only)."""
    return build_row(
        name="Scenario SMG",
        category="SMG",
        DMG=25,
        Mag=30,
        Reload=1.5,
        Range=20,
        Stability=60,
        Agility=70,
        Stealth=40,
        ttk={("Head", "H"): 0.6, ("Body", "H"): 0.9, ("Leg", "H"): 1.2},
        stk={("Head", "H"): 3, ("Body", "H"): 5, ("Leg", "H"): 7},
    )

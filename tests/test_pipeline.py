"""
Tests for the scoring pipeline.

Run with: pytest tests/test_pipeline.py -v
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from armory.services.pipeline import (
    ControlState, PipelineState, filter_records, recompute
)
from armory.services.scoring import ScoringWeights
from armory.services.sorting import SortSpec
from armory.services.validation import WEIGHTS_ZERO_MESSAGE
from armory.services.weapon_record import WeaponRecord


def roster(make_weapon):
    """A small mixed roster with full unarmored body data."""
    return [
        make_weapon(
            name="Stinger", category="SMG", DMG=20, Mag=30, Reload=1.5, Range=20,
            Stability=50, Agility=80, Stealth=60, Weight=3,
            ttk={("Head", "0"): 0.4, ("Body", "0"): 0.8, ("Leg", "0"): 1.0, ("Body", "H"): 1.2},
            stk={("Head", "0"): 3, ("Body", "0"): 5, ("Leg", "0"): 6, ("Body", "H"): 7},
        ),
        make_weapon(
            name="Buzzer", category="SMG", DMG=15, Mag=40, Reload=2.0, Range=15,
            Stability=40, Agility=85, Stealth=70, Weight=2,
            ttk={("Head", "0"): 0.5, ("Body", "0"): 0.9, ("Leg", "0"): 1.1, ("Body", "H"): 1.6},
            stk={("Head", "0"): 4, ("Body", "0"): 7, ("Leg", "0"): 8, ("Body", "H"): 10},
        ),
        make_weapon(
            name="Longbow", category="Rifle", DMG=60, Mag=8, Reload=3.0, Range=80,
            Stability=70, Agility=30, Stealth=20, Weight=6,
            ttk={("Head", "0"): 0.3, ("Body", "0"): 1.4, ("Leg", "0"): 1.8, ("Body", "H"): 1.5},
            stk={("Head", "0"): 1, ("Body", "0"): 2, ("Leg", "0"): 3, ("Body", "H"): 3},
        ),
        make_weapon(name="Mystery", category="Special"),
    ]


class TestScenario:
    """Single weapon under heavy armor and the META preset."""

    def test_single_weapon_scores(self, smg_row):
        record = WeaponRecord.from_row(smg_row)
        state = PipelineState(records=[record], controls=ControlState(armor="H", zone="Overall"))
        result = recompute(state)
        row = result.rows[0]

        assert row.score == 50.0
        assert row.role_dominance_index == 100.0
        assert row.role_dominance_top10
        assert row.counter_score == 50.0
        assert row.counter_rank == 100.0
        assert row.skill_floor_score == 50.0
        assert row.skill_ceiling_score == 50.0
        assert row.outlier_index is None
        assert not row.outlier_warning

    def test_single_weapon_raw_values(self, smg_row):
        record = WeaponRecord.from_row(smg_row)
        result = recompute(PipelineState(records=[record], controls=ControlState(armor="H")))
        row = result.rows[0]

        assert row.raw.get("TTK") == pytest.approx(0.87)
        assert row.raw.get("STK") == pytest.approx(4.8)
        assert row.raw.get("Handling") == pytest.approx(60.0)
        assert row.raw.get("KillsPerMag") == 6
        assert row.raw.get("RangeScore") == 1.0
        assert row.distance_bands["Close"].score == 50.0
        assert row.distance_bands["Mid"].score == 40.0


class TestRecompute:
    """Tests for the full recompute pass."""

    def test_deterministic(self, make_weapon):
        state = PipelineState(records=roster(make_weapon))
        first = recompute(state)
        second = recompute(state)
        assert [r.name for r in first.rows] == [r.name for r in second.rows]
        assert [r.score for r in first.rows] == [r.score for r in second.rows]
        assert [r.counter_rank for r in first.rows] == [r.counter_rank for r in second.rows]

    def test_rows_sorted_by_score(self, make_weapon):
        result = recompute(PipelineState(records=roster(make_weapon)))
        scores = [r.score for r in result.rows]
        assert scores == sorted(scores, reverse=True)
        # only handling (blank stats count as 0) is scoreable
        assert result.rows[-1].name == "Mystery"
        assert result.rows[-1].score == 0.0

    def test_unscored_weapon_goes_last_without_ranks(self, make_weapon):
        controls = ControlState(preset="CUSTOM", weights=ScoringWeights(ttk=1))
        result = recompute(PipelineState(records=roster(make_weapon), controls=controls))
        assert result.rows[-1].name == "Mystery"
        mystery = result.find("Mystery")
        assert mystery.score is None
        assert mystery.role_dominance_index is None
        assert not mystery.role_dominance_top10
        assert mystery.outlier_index is None

    def test_scores_in_range(self, make_weapon):
        for armor in ("0", "L", "M", "H"):
            for zone in ("Head", "Body", "Leg", "Overall"):
                result = recompute(PipelineState(
                    records=roster(make_weapon),
                    controls=ControlState(armor=armor, zone=zone),
                ))
                for row in result.rows:
                    assert row.score is None or 0.0 <= row.score <= 100.0
                    for value in row.normalized.values():
                        assert value is None or 0.0 <= value <= 1.0

    def test_head_dependency_flag(self, make_weapon):
        result = recompute(PipelineState(records=roster(make_weapon)))
        # Body/Head: Stinger 2.0, Buzzer 1.8, Longbow 4.67
        assert result.find("Longbow").head_dep_high
        assert not result.find("Buzzer").head_dep_high

    def test_category_summaries(self, make_weapon):
        result = recompute(PipelineState(records=roster(make_weapon)))
        assert result.category_summaries["SMG"].count == 2
        assert result.category_summaries["Rifle"].stddev is None


class TestFiltering:
    def test_filter_by_category_and_search(self, make_weapon):
        records = roster(make_weapon)
        assert [r.name for r in filter_records(records, "SMG", "")] == ["Stinger", "Buzzer"]
        assert [r.name for r in filter_records(records, "All", "bow")] == ["Longbow"]
        assert [r.name for r in filter_records(records, "All", "  STING ")] == ["Stinger"]

    def test_status_text(self, make_weapon):
        records = roster(make_weapon)
        result = recompute(PipelineState(records=records, controls=ControlState(category="SMG")))
        assert result.status_text == "Showing 2 of 4"

    def test_range_score_stable_under_filter(self, make_weapon):
        """Category range maxima come from the full dataset."""
        records = roster(make_weapon)
        full = recompute(PipelineState(records=records))
        filtered = recompute(PipelineState(records=records, controls=ControlState(search="Buzzer")))
        assert filtered.find("Buzzer").raw.get("RangeScore") == full.find("Buzzer").raw.get("RangeScore")
        assert filtered.find("Buzzer").raw.get("RangeScore") == pytest.approx(0.75)


class TestWeights:
    """Tests for weights flowing through the pipeline."""

    def test_zero_weights(self, make_weapon):
        controls = ControlState(preset="CUSTOM", weights=ScoringWeights())
        result = recompute(PipelineState(records=roster(make_weapon), controls=controls))
        assert all(row.score is None for row in result.rows)
        assert not result.validation.weights_valid
        assert WEIGHTS_ZERO_MESSAGE in result.validation.warnings

    def test_single_dimension_matches_normalized(self, make_weapon):
        controls = ControlState(preset="CUSTOM", weights=ScoringWeights(handling=1))
        result = recompute(PipelineState(records=roster(make_weapon), controls=controls))
        for row in result.rows:
            handling = row.normalized.get("Handling")
            assert row.score01 == pytest.approx(handling)

    def test_validation_flags_sparse_metrics(self, make_weapon):
        result = recompute(PipelineState(records=roster(make_weapon)))
        # CritLeverage needs a crit multiplier no weapon has
        assert any("CritLeverage" in warning for warning in result.validation.warnings)
        assert result.validation.weights_valid


class TestControlState:
    """Tests for reading controls from request-like mappings."""

    def test_defaults(self):
        controls = ControlState.from_mapping({})
        assert controls.armor == "0"
        assert controls.zone == "Overall"
        assert controls.preset == "META"
        assert controls.weights == ScoringWeights.from_preset("META")

    def test_explicit_weights_mean_custom(self):
        controls = ControlState.from_mapping({"weights": {"ttk": 1}})
        assert controls.preset == "CUSTOM"
        assert controls.weights == ScoringWeights(ttk=1)

    def test_preset_overrides_weights(self):
        controls = ControlState.from_mapping({"preset": "long", "ttk": 99})
        assert controls.preset == "LONG"
        assert controls.weights == ScoringWeights.from_preset("LONG")

    def test_lenient_unknown_values(self):
        controls = ControlState.from_mapping({"armor": "X", "zone": "Chest"})
        assert controls.armor == "X"

    def test_strict_rejects_unknown_values(self):
        with pytest.raises(ValueError):
            ControlState.parse({"armor": "X"})
        with pytest.raises(ValueError):
            ControlState.parse({"zone": "Chest"})
        with pytest.raises(ValueError):
            ControlState.parse({"chartMetric": "DPS"})
        with pytest.raises(ValueError):
            ControlState.parse({"preset": "SNIPER"})

    def test_unknown_zone_yields_missing_data(self, make_weapon):
        controls = ControlState.from_mapping({"zone": "Chest"})
        result = recompute(PipelineState(records=roster(make_weapon), controls=controls))
        assert all(row.raw.get("TTK") is None for row in result.rows)


class TestChart:
    def test_score_series(self, make_weapon):
        result = recompute(PipelineState(records=roster(make_weapon)))
        series = result.chart_series(limit=2)
        assert len(series) == 2
        assert series[0].name == result.rows[0].name
        assert series[0].value == result.rows[0].score
        assert result.chart_title == "Performance Landscape (Score 0-100)"

    def test_ttk_series_follows_sort(self, make_weapon):
        controls = ControlState(chart_metric="TTK", zone="Body")
        state = PipelineState(records=roster(make_weapon), controls=controls, sort=SortSpec("TTK", "asc"))
        result = recompute(state)
        values = [point.value for point in result.chart_series()]
        assert values[:3] == pytest.approx([0.8, 0.9, 1.4])
        assert "Body TTK" in result.chart_title


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

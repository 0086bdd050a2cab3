"""
Tests for the weapons API.

Run with: pytest tests/test_api.py -v
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fastapi.testclient import TestClient

from armory.config import get_settings
from armory.main import app
from armory.schemas.weapons import ScoreControls

BASE = "/api/v1/weapons"


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def long_default_preset(monkeypatch):
    monkeypatch.setenv("DEFAULT_PRESET", "LONG")
    get_settings.cache_clear()
    yield
    monkeypatch.delenv("DEFAULT_PRESET")
    get_settings.cache_clear()


class TestService:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestPresets:
    def test_presets(self, client):
        data = client.get(f"{BASE}/presets").json()
        assert set(data["presets"]) == {"META", "CQC", "MID", "LONG"}
        assert data["presets"]["META"]["ttk"] == 30
        assert data["weight_keys"] == ["ttk", "sustain", "handling", "range", "reload", "armor"]
        bands = {band["key"]: band for band in data["distance_bands"]}
        assert bands["Long"]["max"] is None
        assert bands["Close"]["min"] == 10


class TestControlResolution:
    """Tests for resolving the preset of request controls."""

    def test_no_preset_no_weights_uses_default(self):
        controls = ScoreControls().to_control_state("LONG")
        assert controls.preset == "LONG"
        assert controls.weights.range == 35

    def test_weights_without_preset(self):
        controls = ScoreControls(weights={"handling": 1}).to_control_state("META")
        assert controls.preset == "CUSTOM"
        assert controls.weights.handling == 1
        assert controls.weights.total == 1

    def test_named_preset_wins(self):
        controls = ScoreControls(preset="CQC", weights={"handling": 1}).to_control_state()
        assert controls.preset == "CQC"
        assert controls.weights.ttk == 35

    def test_custom_without_weights(self):
        controls = ScoreControls(preset="CUSTOM").to_control_state()
        assert not controls.weights.is_valid


class TestScoreDataset:
    """Tests for scoring the bundled sheet."""

    def test_default_controls(self, client):
        response = client.get(f"{BASE}/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Showing 9 of 9"
        assert len(data["rows"]) == 9
        assert "TTK" in data["stats"]
        assert len(data["chart"]["points"]) == 9

    def test_rows_sorted_by_score(self, client):
        rows = client.get(f"{BASE}/").json()["rows"]
        scores = [row["score"] for row in rows if row["score"] is not None]
        assert scores == sorted(scores, reverse=True)

    def test_category_filter(self, client):
        data = client.get(f"{BASE}/", params={"category": "SMG"}).json()
        assert data["status"] == "Showing 2 of 9"
        assert {row["category"] for row in data["rows"]} == {"SMG"}

    def test_search(self, client):
        data = client.get(f"{BASE}/", params={"search": "osp"}).json()
        assert [row["name"] for row in data["rows"]] == ["Osprey"]

    def test_sort_by_name(self, client):
        rows = client.get(f"{BASE}/", params={"sort": "Name", "direction": "asc"}).json()["rows"]
        names = [row["name"] for row in rows]
        assert names == sorted(names, key=str.casefold)

    def test_custom_weights(self, client):
        params = {"preset": "CUSTOM", "handling": 1}
        rows = client.get(f"{BASE}/", params=params).json()["rows"]
        for row in rows:
            assert row["score01"] == pytest.approx(row["normalized"]["Handling"])

    def test_weights_without_preset_are_custom(self, client):
        custom = client.get(f"{BASE}/", params={"preset": "CUSTOM", "handling": 1}).json()["rows"]
        implied = client.get(f"{BASE}/", params={"handling": 1}).json()["rows"]
        assert [(r["name"], r["score"]) for r in implied] == [(r["name"], r["score"]) for r in custom]
        for row in implied:
            assert row["score01"] == pytest.approx(row["normalized"]["Handling"])

    def test_named_preset_overrides_weights(self, client):
        meta = client.get(f"{BASE}/", params={"preset": "META"}).json()["rows"]
        mixed = client.get(f"{BASE}/", params={"preset": "META", "handling": 1}).json()["rows"]
        assert [r["score"] for r in mixed] == [r["score"] for r in meta]

    def test_configured_default_preset(self, client, long_default_preset):
        default = client.get(f"{BASE}/").json()["rows"]
        long_rows = client.get(f"{BASE}/", params={"preset": "LONG"}).json()["rows"]
        assert [(r["name"], r["score"]) for r in default] == [(r["name"], r["score"]) for r in long_rows]

    def test_zero_custom_weights(self, client):
        data = client.get(f"{BASE}/", params={"preset": "CUSTOM"}).json()
        assert all(row["score"] is None for row in data["rows"])
        assert data["validation"]["weights_valid"] is False

    @pytest.mark.parametrize("params", [
        {"zone": "Chest"},
        {"armor": "X"},
        {"chart_metric": "DPS"},
        {"preset": "SNIPER"},
        {"direction": "up"},
        {"preset": "CUSTOM", "ttk": -1},
    ])
    def test_invalid_controls(self, client, params):
        assert client.get(f"{BASE}/", params=params).status_code == 422


class TestScoreRecords:
    """Tests for scoring rows posted in the body."""

    def test_scenario(self, client, smg_row):
        response = client.post(f"{BASE}/score", json={
            "armor": "H",
            "zone": "Overall",
            "records": [smg_row],
        })
        assert response.status_code == 200
        row = response.json()["rows"][0]
        assert row["name"] == "Scenario SMG"
        assert row["score"] == 50.0
        assert row["role_dominance_index"] == 100.0
        assert row["role_dominance_top10"] is True
        assert row["counter_rank"] == 100.0
        assert row["outlier_index"] is None
        assert row["distance_bands"]["Close"]["score"] == 50.0

    def test_custom_weights_in_body(self, client, smg_row, make_row):
        other = make_row(name="Other", category="SMG", Stability=10, Agility=10, Stealth=10)
        response = client.post(f"{BASE}/score", json={
            "preset": "CUSTOM",
            "weights": {"handling": 1},
            "records": [smg_row, other],
        })
        rows = {row["name"]: row for row in response.json()["rows"]}
        assert rows["Scenario SMG"]["score"] == 100.0
        assert rows["Other"]["score"] == 0.0

    def test_weights_without_preset_are_custom(self, client, smg_row, make_row):
        other = make_row(name="Other", category="SMG", Stability=10, Agility=10, Stealth=10)
        response = client.post(f"{BASE}/score", json={
            "weights": {"handling": 1},
            "records": [smg_row, other],
        })
        rows = {row["name"]: row for row in response.json()["rows"]}
        assert rows["Scenario SMG"]["score"] == 100.0
        assert rows["Other"]["score"] == 0.0

    def test_empty_records(self, client):
        data = client.post(f"{BASE}/score", json={"records": []}).json()
        assert data["rows"] == []
        assert data["status"] == "Showing 0 of 0"

    def test_negative_weight_rejected(self, client):
        response = client.post(f"{BASE}/score", json={
            "preset": "CUSTOM", "weights": {"ttk": -1}, "records": [],
        })
        assert response.status_code == 422


class TestWeaponDetail:
    def test_detail(self, client):
        response = client.get(f"{BASE}/Osprey", params={"armor": "H"})
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Osprey"
        assert data["record"]["Range"] == 90
        assert "HeadDep" in data["raw"]

    def test_detail_matches_table(self, client):
        table = client.get(f"{BASE}/", params={"category": "SMG"}).json()["rows"]
        detail = client.get(f"{BASE}/Bettina", params={"category": "SMG"}).json()
        row = next(r for r in table if r["name"] == "Bettina")
        assert detail["score"] == row["score"]

    def test_not_found(self, client):
        response = client.get(f"{BASE}/Nonexistent")
        assert response.status_code == 404
        assert response.json()["detail"] == "Weapon not found"


class TestChart:
    def test_chart_limit(self, client):
        data = client.get(f"{BASE}/chart", params={"limit": 3}).json()
        assert len(data["points"]) == 3
        assert data["metric"] == "SCORE"

    def test_ttk_chart(self, client):
        data = client.get(f"{BASE}/chart", params={"chart_metric": "TTK", "zone": "Body"}).json()
        assert data["metric"] == "TTK"
        assert "Body TTK" in data["title"]

    def test_limit_bounds(self, client):
        assert client.get(f"{BASE}/chart", params={"limit": 0}).status_code == 422


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import List, Optional
import math

from ...config import get_settings
from ...schemas.weapons import (
    ScoreControls, ScoreRequest, ScoreResponse, ScoredWeaponResponse,
    ChartResponse, PresetsResponse, DistanceBandOut, WeightsIn
)
from ...services.constants import DISTANCE_BANDS, PRESET_WEIGHTS
from ...services.data_loader import records_from_rows
from ...services.pipeline import PipelineOptions, PipelineResult, PipelineState, recompute
from ...services.weapon_record import WeaponRecord

router = APIRouter()


def get_weapons(request: Request) -> List[WeaponRecord]:
    """Dependency for the weapon dataset loaded at startup."""
    return getattr(request.app.state, "weapons", None) or []


def query_controls(
    armor: str = Query("0", pattern="^(0|L|M|H)$"),
    zone: str = Query("Overall", pattern="^(Head|Body|Leg|Overall)$"),
    category: str = Query("All"),
    search: str = Query(""),
    chart_metric: str = Query("SCORE", pattern="^(SCORE|TTK)$"),
    preset: Optional[str] = Query(None, pattern="^(META|CQC|MID|LONG|CUSTOM)$"),
    ttk: Optional[float] = Query(None, ge=0),
    sustain: Optional[float] = Query(None, ge=0),
    handling: Optional[float] = Query(None, ge=0),
    range: Optional[float] = Query(None, ge=0),
    reload: Optional[float] = Query(None, ge=0),
    armor_weight: Optional[float] = Query(None, ge=0),
    sort: str = Query("Score"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
) -> ScoreControls:
    """Control state from query parameters (armor weight is `armor_weight`).

    Any weight given without a preset scores with those weights (CUSTOM).
    """
    given = (ttk, sustain, handling, range, reload, armor_weight)
    weights = None
    if any(value is not None for value in given):
        weights = WeightsIn(
            ttk=ttk or 0, sustain=sustain or 0, handling=handling or 0,
            range=range or 0, reload=reload or 0, armor=armor_weight or 0,
        )
    return ScoreControls(
        armor=armor, zone=zone, category=category, search=search,
        chart_metric=chart_metric, preset=preset, weights=weights,
        sort=sort, direction=direction,
    )


def _run(records: List[WeaponRecord], controls: ScoreControls) -> PipelineResult:
    settings = get_settings()
    state = PipelineState(
        records=records,
        controls=controls.to_control_state(settings.default_preset),
        sort=controls.to_sort_spec(),
        options=PipelineOptions(
            outlier_sigma_threshold=settings.outlier_sigma_threshold,
            head_dep_high_percentile=settings.head_dep_high_percentile,
            missing_metric_warn_ratio=settings.missing_metric_warn_ratio,
        ),
    )
    return recompute(state)


@router.get("/presets", response_model=PresetsResponse)
async def list_presets():
    """Scoring weight presets and distance bands."""
    return PresetsResponse(
        presets=PRESET_WEIGHTS,
        distance_bands=[
            DistanceBandOut(
                key=band.key, label=band.label, min=band.min,
                max=band.max if math.isfinite(band.max) else None,
            )
            for band in DISTANCE_BANDS
        ],
    )


@router.get("/", response_model=ScoreResponse)
async def score_dataset(
    controls: ScoreControls = Depends(query_controls),
    weapons: List[WeaponRecord] = Depends(get_weapons),
):
    """Score the loaded weapon sheet under the given controls."""
    result = _run(weapons, controls)
    return ScoreResponse.from_result(result, get_settings().chart_row_limit)


@router.post("/score", response_model=ScoreResponse)
async def score_records(request: ScoreRequest):
    """Score weapon rows supplied in the request body."""
    records = records_from_rows(request.records)
    result = _run(records, request)
    return ScoreResponse.from_result(result, get_settings().chart_row_limit)


@router.get("/chart", response_model=ChartResponse)
async def chart_series(
    controls: ScoreControls = Depends(query_controls),
    weapons: List[WeaponRecord] = Depends(get_weapons),
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Chart series (Score or TTK) for the leading rows of the sorted table."""
    result = _run(weapons, controls)
    return ChartResponse.from_result(result, limit or get_settings().chart_row_limit)


@router.get("/{name}", response_model=ScoredWeaponResponse)
async def get_weapon(
    name: str,
    controls: ScoreControls = Depends(query_controls),
    weapons: List[WeaponRecord] = Depends(get_weapons),
):
    """Detail row for one weapon, normalized against the same working set as the table."""
    result = _run(weapons, controls)
    row = result.find(name)
    if row is None:
        raise HTTPException(status_code=404, detail="Weapon not found")
    return ScoredWeaponResponse.from_scored(row)

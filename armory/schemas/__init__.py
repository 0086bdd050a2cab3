from .weapons import (
    WeightsIn, ScoreControls, ScoreRequest,
    ScoredWeaponResponse, ScoreResponse, ChartResponse, PresetsResponse
)

__all__ = [
    "WeightsIn", "ScoreControls", "ScoreRequest",
    "ScoredWeaponResponse", "ScoreResponse", "ChartResponse", "PresetsResponse",
]

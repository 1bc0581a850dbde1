from typing import List, Optional

from zenithfit.schemas.common import CamelModel
from zenithfit.schemas.nutrition import MacroTotals
from zenithfit.schemas.profile import MacroTargets


class MuscleGroupVolume(CamelModel):
    name: str
    volume: float


class VolumeResponse(CamelModel):
    groups: List[MuscleGroupVolume]
    all_groups: List[str]


class NextSession(CamelModel):
    day_number: int
    name: str
    exercise_count: int
    locked: bool


class AnalyticsSummary(CamelModel):
    completed_sessions: int
    total_sessions: int
    completion_rate: float
    next_session: Optional[NextSession] = None
    nutrition_today: MacroTotals
    targets: Optional[MacroTargets] = None

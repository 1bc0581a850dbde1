from datetime import datetime
from typing import Dict, Iterable, Optional

from zenithfit.schemas.analytics import AnalyticsSummary, MuscleGroupVolume, NextSession, VolumeResponse
from zenithfit.schemas.nutrition import MacroTotals
from zenithfit.schemas.profile import MacroTargets
from zenithfit.schemas.workout import OTHER_MUSCLE_GROUP, WorkoutPlan
from zenithfit.services.workout_service import is_day_locked


def muscle_group_volume(plan: WorkoutPlan) -> Dict[str, float]:
    """Completed weight x reps per muscle group over completed sessions."""
    volume: Dict[str, float] = {}
    for session in plan.sessions:
        if not session.completed_date:
            continue
        for exercise in session.exercises:
            group = exercise.muscle_group or OTHER_MUSCLE_GROUP
            lifted = sum(s.weight * s.reps for s in exercise.actual_sets if s.completed)
            volume[group] = volume.get(group, 0) + lifted
    return volume


def volume_report(plan: WorkoutPlan, groups: Optional[Iterable[str]] = None) -> VolumeResponse:
    volume = muscle_group_volume(plan)
    selected = set(groups or [])
    rows = [
        MuscleGroupVolume(name=name, volume=value)
        for name, value in volume.items()
        if not selected or name in selected
    ]
    rows.sort(key=lambda row: row.volume, reverse=True)
    return VolumeResponse(groups=rows, all_groups=sorted(volume))


def plan_summary(
    plan: WorkoutPlan,
    nutrition_today: MacroTotals,
    targets: Optional[MacroTargets] = None,
    now: Optional[datetime] = None,
) -> AnalyticsSummary:
    completed = [s for s in plan.sessions if s.completed_date]
    total = len(plan.sessions)
    upcoming = next((s for s in plan.sessions if not s.completed_date), None)

    next_session = None
    if upcoming is not None:
        next_session = NextSession(
            day_number=upcoming.day_number,
            name=upcoming.name,
            exercise_count=len(upcoming.exercises),
            locked=is_day_locked(plan.start_date, upcoming.day_number, now),
        )

    return AnalyticsSummary(
        completed_sessions=len(completed),
        total_sessions=total,
        completion_rate=round(len(completed) / total * 100, 1) if total else 0.0,
        next_session=next_session,
        nutrition_today=nutrition_today,
        targets=targets,
    )

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from zenithfit.core.dependencies import get_document_store
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.schemas.analytics import AnalyticsSummary, VolumeResponse
from zenithfit.services.analytics_service import plan_summary, volume_report
from zenithfit.services.nutrition_service import tally, today_key

router = APIRouter()


async def _plan_or_404(store: DocumentStore):
    plan = await store.get_workout_plan()
    if plan is None:
        raise HTTPException(status_code=404, detail="No workout plan yet, complete onboarding first")
    return plan


@router.get("/summary", response_model=AnalyticsSummary)
async def summary(store: DocumentStore = Depends(get_document_store)):
    """Dashboard numbers: plan consistency, next session, today's intake against targets."""
    plan = await _plan_or_404(store)
    profile = await store.get_profile()
    logs = await store.get_nutrition_logs()
    return plan_summary(
        plan,
        nutrition_today=tally(logs, today_key()),
        targets=profile.macro_targets if profile else None,
    )


@router.get("/volume", response_model=VolumeResponse)
async def volume(
    groups: Optional[List[str]] = Query(default=None),
    store: DocumentStore = Depends(get_document_store),
):
    plan = await _plan_or_404(store)
    return volume_report(plan, groups)

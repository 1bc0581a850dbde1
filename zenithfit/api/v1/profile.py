import logging

from fastapi import APIRouter, Depends, HTTPException, status

from zenithfit.core.dependencies import get_ai_service, get_document_store
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.schemas.profile import (
    OnboardingPersistence,
    OnboardingRequest,
    OnboardingResponse,
    ProfileEnvelope,
    UserProfile,
)
from zenithfit.schemas.workout import WorkoutPlan
from zenithfit.services.ai_service import AIService, AIServiceError
from zenithfit.services.nutrition_calculator import NutritionCalculator
from zenithfit.services.persistence import persist
from zenithfit.services.workout_service import plan_view, utc_timestamp

router = APIRouter()
logger = logging.getLogger(__name__)

PLAN_DURATION_WEEKS = 4


@router.get("", response_model=ProfileEnvelope)
async def get_profile(store: DocumentStore = Depends(get_document_store)):
    """
    Current profile and where the client should go next.

    A missing profile, or one whose plan was never saved, routes back to onboarding.
    """
    profile = await store.get_profile()
    if profile is None:
        return ProfileEnvelope(profile=None, next="onboarding")
    return ProfileEnvelope(profile=profile, next="dashboard" if profile.has_plan else "onboarding")


@router.post("/onboarding", response_model=OnboardingResponse)
async def complete_onboarding(
    data: OnboardingRequest,
    store: DocumentStore = Depends(get_document_store),
    ai: AIService = Depends(get_ai_service),
):
    """Compute macro targets, generate the weekly plan and save both."""
    profile = UserProfile(
        **data.model_dump(),
        macro_targets=NutritionCalculator.macro_targets(data),
        has_plan=False,
    )

    try:
        sessions = await ai.generate_workout_plan(profile)
    except AIServiceError as e:
        logger.error("Plan generation failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to initialize your plan. Please check your connection and try again.",
        )

    plan = WorkoutPlan(
        title=f"{profile.goal.value} Plan",
        duration_weeks=PLAN_DURATION_WEEKS,
        start_date=utc_timestamp(),
        sessions=sessions,
    )
    plan_saved = await persist(store, "workout plan", store.save_workout_plan(plan))

    profile.has_plan = True
    profile_saved = await persist(store, "profile", store.save_profile(profile))

    return OnboardingResponse(
        profile=profile,
        plan=plan_view(plan),
        persisted=OnboardingPersistence(plan=plan_saved, profile=profile_saved),
    )

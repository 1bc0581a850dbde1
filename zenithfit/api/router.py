from fastapi import APIRouter
from zenithfit.api.v1.auth import router as auth_router
from zenithfit.api.v1.profile import router as profile_router
from zenithfit.api.v1.workouts import router as workouts_router
from zenithfit.api.v1.nutrition import router as nutrition_router
from zenithfit.api.v1.coach import router as coach_router
from zenithfit.api.v1.analytics import router as analytics_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(profile_router, prefix="/profile", tags=["profile"])
api_router.include_router(workouts_router, prefix="/workouts", tags=["workouts"])
api_router.include_router(nutrition_router, prefix="/nutrition", tags=["nutrition"])
api_router.include_router(coach_router, prefix="/coach", tags=["coach"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])

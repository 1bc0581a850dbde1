from pydantic import Field
from typing import Optional

from zenithfit.models.profile import FitnessGoalEnum, FitnessLevelEnum, DietGoalEnum
from zenithfit.schemas.common import CamelModel, PersistOutcome
from zenithfit.schemas.workout import PlanView

class MacroTargets(CamelModel):
    calories: int
    protein: int
    carbs: int
    fat: int

class OnboardingRequest(CamelModel):
    name: str = Field(min_length=1, max_length=80)
    age: int = Field(ge=12, le=100)
    weight: float = Field(gt=0, le=400, description="Body weight in kg")
    height: float = Field(gt=0, le=260, description="Height in cm")
    goal: FitnessGoalEnum
    level: FitnessLevelEnum
    diet_goal: DietGoalEnum = DietGoalEnum.maintain
    days_per_week: int = Field(ge=1, le=7)
    equipment: str = "Full Gym"
    constraints: str = ""
    current_format: str = "Full Body"

class UserProfile(OnboardingRequest):
    macro_targets: MacroTargets
    has_plan: bool = False

class ProfileEnvelope(CamelModel):
    profile: Optional[UserProfile] = None
    next: str = "onboarding"

class OnboardingPersistence(CamelModel):
    plan: PersistOutcome
    profile: PersistOutcome

class OnboardingResponse(CamelModel):
    profile: UserProfile
    plan: PlanView
    persisted: OnboardingPersistence

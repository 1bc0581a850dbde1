from typing import List, Optional
from uuid import uuid4

from pydantic import Field

from zenithfit.schemas.common import CamelModel, PersistOutcome
from zenithfit.schemas.profile import MacroTargets


class NutritionLog(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    date: str  # ISO timestamp, day bucket is its prefix
    meal_name: str
    calories: float = 0
    protein: float = 0
    fat: float = 0
    carbs: float = 0
    image_url: Optional[str] = None


DEFAULT_MEAL_NAME = "Unnamed Meal"


class MealLogCreate(CamelModel):
    meal_name: str = Field(default=DEFAULT_MEAL_NAME, max_length=120)
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    image_url: Optional[str] = None
    generate_image: bool = True


class FoodAnalysis(CamelModel):
    meal_name: str
    calories: int
    protein: int
    fat: int
    carbs: int


class FoodAnalysisResponse(CamelModel):
    analysis: FoodAnalysis
    image_url: Optional[str] = None
    # ready to POST to /nutrition/logs once the user confirms
    draft: MealLogCreate


class MacroTotals(CamelModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class DailySummary(CamelModel):
    day: str
    totals: MacroTotals
    targets: Optional[MacroTargets] = None
    logs: List[NutritionLog] = []


class LogCreatedResponse(CamelModel):
    log: NutritionLog
    persisted: PersistOutcome

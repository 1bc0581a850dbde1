"""
Meal journal helpers: building log entries and summing a day's macros.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from zenithfit.schemas.nutrition import DEFAULT_MEAL_NAME, FoodAnalysis, MacroTotals, MealLogCreate, NutritionLog


def today_key(now: Optional[datetime] = None) -> str:
    """UTC calendar day used as the default journal bucket, e.g. "2024-06-01"."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date().isoformat()


def logs_for_day(logs: Iterable[NutritionLog], day: str) -> List[NutritionLog]:
    # Bucketing is a plain prefix match on the stored ISO timestamp
    return [log for log in logs if log.date.startswith(day)]


def tally(logs: Iterable[NutritionLog], day: str) -> MacroTotals:
    totals = MacroTotals()
    for log in logs_for_day(logs, day):
        totals.calories += log.calories
        totals.protein += log.protein
        totals.carbs += log.carbs
        totals.fat += log.fat
    return totals


def build_log(data: MealLogCreate, image_url: Optional[str] = None, now: Optional[datetime] = None) -> NutritionLog:
    now = now or datetime.now(timezone.utc)
    return NutritionLog(
        date=now.isoformat(),
        meal_name=data.meal_name.strip() or DEFAULT_MEAL_NAME,
        calories=data.calories,
        protein=data.protein,
        fat=data.fat,
        carbs=data.carbs,
        image_url=image_url or data.image_url,
    )


def from_analysis(analysis: FoodAnalysis) -> MealLogCreate:
    return MealLogCreate(
        meal_name=analysis.meal_name,
        calories=analysis.calories,
        protein=analysis.protein,
        fat=analysis.fat,
        carbs=analysis.carbs,
    )


def prepend_log(logs: List[NutritionLog], log: NutritionLog) -> List[NutritionLog]:
    """The journal is kept newest first."""
    return [log, *logs]

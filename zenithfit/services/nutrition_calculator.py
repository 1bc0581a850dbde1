from typing import Dict

from zenithfit.models.profile import DietGoalEnum
from zenithfit.schemas.profile import MacroTargets, OnboardingRequest


class NutritionCalculator:
    # Onboarding has no activity question, everyone is treated as moderately active
    ACTIVITY_MULTIPLIER = 1.55

    CALORIE_ADJUSTMENTS = {
        DietGoalEnum.cut: -500,
        DietGoalEnum.maintain: 0,
        DietGoalEnum.bulk: 300,
    }

    PROTEIN_PER_KG = 2.2
    FAT_SHARE = 0.25

    @classmethod
    def calculate_bmr(cls, weight: float, height: float, age: int) -> float:
        """Mifflin-St Jeor with the male constant (the profile has no sex field)."""
        return 10 * weight + 6.25 * height - 5 * age + 5

    @classmethod
    def calculate_tdee(cls, bmr: float) -> float:
        return bmr * cls.ACTIVITY_MULTIPLIER

    @classmethod
    def calculate_calories(cls, tdee: float, diet_goal: DietGoalEnum) -> int:
        adjustment = cls.CALORIE_ADJUSTMENTS.get(diet_goal, 0)
        return round(tdee + adjustment)

    @classmethod
    def calculate_macros(cls, calories: int, weight: float) -> Dict[str, int]:
        protein_g = round(weight * cls.PROTEIN_PER_KG)
        fat_g = round(calories * cls.FAT_SHARE / 9)
        carbs_kcal = max(calories - protein_g * 4 - fat_g * 9, 0)
        carbs_g = round(carbs_kcal / 4)

        return {
            "protein": protein_g,
            "carbs": carbs_g,
            "fat": fat_g
        }

    @classmethod
    def macro_targets(cls, data: OnboardingRequest) -> MacroTargets:
        bmr = cls.calculate_bmr(weight=data.weight, height=data.height, age=data.age)
        calories = cls.calculate_calories(cls.calculate_tdee(bmr), data.diet_goal)
        return MacroTargets(calories=calories, **cls.calculate_macros(calories, data.weight))

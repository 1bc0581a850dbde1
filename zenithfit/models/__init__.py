from zenithfit.models.user import User
from zenithfit.models.profile import Profile
from zenithfit.models.workout import WorkoutPlan, ExerciseHistory
from zenithfit.models.nutrition import NutritionJournal
from zenithfit.models.chat import ChatSession, ChatMessage

__all__ = [
    "User", "Profile",
    "WorkoutPlan", "ExerciseHistory",
    "NutritionJournal",
    "ChatSession", "ChatMessage",
]

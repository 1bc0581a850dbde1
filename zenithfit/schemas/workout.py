from enum import Enum
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import Field, field_validator

from zenithfit.schemas.common import CamelModel, PersistOutcome

MUSCLE_GROUPS = ("Chest", "Back", "Legs", "Shoulders", "Arms", "Core", "Cardio")
OTHER_MUSCLE_GROUP = "Other"


def normalize_muscle_group(value: Optional[str]) -> str:
    if not value:
        return OTHER_MUSCLE_GROUP
    for group in MUSCLE_GROUPS:
        if value.strip().lower() == group.lower():
            return group
    return OTHER_MUSCLE_GROUP


class SessionStatus(str, Enum):
    locked = "locked"
    rest = "rest"
    pending = "pending"
    active = "active"
    completed = "completed"


class ExerciseSet(CamelModel):
    weight: float = 0
    reps: int = 0
    completed: bool = False


class Exercise(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    muscle_group: str = OTHER_MUSCLE_GROUP
    target_sets: int = Field(default=3, ge=0)
    target_reps: str = "10"
    rest_time: int = 60
    actual_sets: List[ExerciseSet] = []
    notes: Optional[str] = None

    @field_validator("muscle_group", mode="before")
    @classmethod
    def _normalize_group(cls, value):
        return normalize_muscle_group(value)

    @field_validator("target_reps", mode="before")
    @classmethod
    def _reps_as_text(cls, value):
        # the model sometimes answers 10 instead of "10"
        return str(value) if value is not None else "10"


class WorkoutSession(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    day_number: int = Field(ge=1)
    name: str
    is_rest_day: bool = False
    exercises: List[Exercise] = []
    completed_date: Optional[str] = None


class WorkoutPlan(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    duration_weeks: int = 4
    start_date: str
    sessions: List[WorkoutSession] = []


class ExerciseHistoryEntry(CamelModel):
    weight: float
    reps: int


class HistoryUpdate(CamelModel):
    name: str
    weight: float
    reps: int


class SetUpdate(CamelModel):
    weight: Optional[float] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)
    completed: Optional[bool] = None


class SessionView(WorkoutSession):
    locked: bool
    status: SessionStatus
    scheduled_date: str


class PlanView(CamelModel):
    id: str
    title: str
    duration_weeks: int
    start_date: str
    sessions: List[SessionView]


class SessionActionResponse(CamelModel):
    session: SessionView
    persisted: PersistOutcome


class FinishSessionResponse(SessionActionResponse):
    history_updates: List[HistoryUpdate]
    history_persisted: Dict[str, PersistOutcome] = {}


class GeneratedExercise(CamelModel):
    name: str
    muscle_group: Optional[str] = None
    target_sets: int = 3
    target_reps: str = "10"
    rest_time: int = 60

    @field_validator("target_reps", mode="before")
    @classmethod
    def _reps_as_text(cls, value):
        return str(value) if value is not None else "10"


class GeneratedSession(CamelModel):
    """One day of the weekly routine as returned by the AI service (no ids yet)."""

    day_number: int
    name: str
    is_rest_day: bool
    exercises: List[GeneratedExercise] = []

    def to_session(self) -> WorkoutSession:
        return WorkoutSession(
            day_number=self.day_number,
            name=self.name,
            is_rest_day=self.is_rest_day,
            exercises=[] if self.is_rest_day else [
                Exercise(
                    name=ex.name,
                    muscle_group=ex.muscle_group,
                    target_sets=ex.target_sets,
                    target_reps=ex.target_reps,
                    rest_time=ex.rest_time,
                    actual_sets=[],
                )
                for ex in self.exercises
            ],
        )

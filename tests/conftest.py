"""
Shared fixtures for the ZenithFit backend tests.

Strategy:
- The test FastAPI app is built without startup events (no database, no MinIO).
- UserRepository is replaced by an AsyncMock (mock_repo) in every auth test.
- Document endpoints get an AsyncMock DocumentStore (mock_store) through
  get_document_store, and get_current_user is replaced by the fixture user.
- The AI service is a StubAIService with canned answers; nothing leaves the process.
- Streamed coach turns are committed into `committed_turns` instead of the database.
- JWT tokens are minted with auth_service.create_access_token() to exercise the auth dependency.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI
from datetime import datetime, timedelta
from typing import AsyncGenerator, List, Optional

from zenithfit.api.router import api_router
from zenithfit.core.db import get_db
from zenithfit.core.dependencies import (
    get_ai_service,
    get_chat_committer,
    get_current_user,
    get_document_store,
    get_user_repository,
)
from zenithfit.models.profile import DietGoalEnum, FitnessGoalEnum, FitnessLevelEnum
from zenithfit.models.user import User
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.repositories.user_repository import UserRepository
from zenithfit.schemas.common import PersistOutcome
from zenithfit.schemas.nutrition import FoodAnalysis
from zenithfit.schemas.profile import MacroTargets, UserProfile
from zenithfit.schemas.workout import Exercise, WorkoutPlan, WorkoutSession
from zenithfit.services.ai_service import AIServiceError
from zenithfit.services.auth_service import auth_service


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def create_test_app() -> FastAPI:
    """Test FastAPI app without startup events."""
    test_app = FastAPI(title="ZenithFit Test App")
    test_app.include_router(api_router, prefix="/api/v1")
    return test_app


def make_auth_headers(user: User) -> dict:
    """Authorization header with a valid JWT for the given user."""
    access_token = auth_service.create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {access_token}"}


def make_profile(**overrides) -> UserProfile:
    data = dict(
        name="Alex",
        age=30,
        weight=80,
        height=180,
        goal=FitnessGoalEnum.hypertrophy,
        level=FitnessLevelEnum.intermediate,
        diet_goal=DietGoalEnum.cut,
        days_per_week=4,
        equipment="Full Gym",
        constraints="",
        current_format="Upper/Lower",
        macro_targets=MacroTargets(calories=2259, protein=176, carbs=247, fat=63),
        has_plan=True,
    )
    data.update(overrides)
    return UserProfile(**data)


def make_week() -> List[WorkoutSession]:
    """Day 1 upper body, day 2 lower body, day 3 rest."""
    return [
        WorkoutSession(
            id="session-1",
            day_number=1,
            name="Upper Body",
            exercises=[
                Exercise(id="bench", name="Bench Press", muscle_group="Chest", target_sets=3, target_reps="5"),
                Exercise(id="row", name="Barbell Row", muscle_group="Back", target_sets=3, target_reps="8"),
            ],
        ),
        WorkoutSession(
            id="session-2",
            day_number=2,
            name="Lower Body",
            exercises=[Exercise(id="squat", name="Back Squat", muscle_group="Legs", target_sets=4, target_reps="6")],
        ),
        WorkoutSession(id="session-3", day_number=3, name="Rest", is_rest_day=True),
    ]


def make_plan(start_date: Optional[str] = None, sessions: Optional[List[WorkoutSession]] = None) -> WorkoutPlan:
    """A plan that starts today unless told otherwise, so day 1 is open and day 2 is locked."""
    return WorkoutPlan(
        id="plan-1",
        title="Muscle Building Plan",
        duration_weeks=4,
        start_date=start_date or datetime.now().isoformat(),
        sessions=sessions if sessions is not None else make_week(),
    )


def days_ago(days: int) -> str:
    return (datetime.now() - timedelta(days=days)).isoformat()


class StubAIService:
    """Canned stand-in for AIService. Set `fail` to make every call raise AIServiceError."""

    def __init__(self):
        self.fail = False
        self.plan_sessions: List[WorkoutSession] = make_week()
        self.analysis = FoodAnalysis(meal_name="Chicken Bowl", calories=650, protein=45, fat=18, carbs=70)
        self.image: Optional[str] = "data:image/png;base64,iVBORw0KGgo="
        self.reply_chunks: List[str] = ["Listen, ", "squat ", "deep."]
        self.calls: List[tuple] = []

    def _maybe_fail(self):
        if self.fail:
            raise AIServiceError("Gemini API error: 429 - quota exceeded")

    async def generate_workout_plan(self, profile):
        self.calls.append(("plan", profile.name))
        self._maybe_fail()
        return [s.model_copy(deep=True) for s in self.plan_sessions]

    async def analyze_food_image(self, image, mime_type="image/jpeg"):
        self.calls.append(("analyze", mime_type))
        self._maybe_fail()
        return self.analysis

    async def generate_food_image(self, description):
        self.calls.append(("image", description))
        self._maybe_fail()
        return self.image

    async def stream_coach_reply(self, profile, message, history=None):
        self.calls.append(("chat", message, list(history or [])))
        self._maybe_fail()
        for chunk in self.reply_chunks:
            yield chunk


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def user_fixture() -> User:
    return User(
        id=1,
        email="test@example.com",
        password=auth_service.hash_password("password123"),
        created_at=datetime.utcnow(),
    )


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_repo() -> AsyncMock:
    """UserRepository mock for the auth endpoints."""
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def mock_db() -> MagicMock:
    """
    Database session mock for code that talks to get_db directly.
    execute() returns a MagicMock with the usual result accessors preset.
    """
    session = AsyncMock()
    default_result = MagicMock()
    default_result.scalar_one_or_none.return_value = None
    default_result.scalar_one.return_value = 0
    default_result.scalars.return_value.all.return_value = []
    session.execute.return_value = default_result
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_store(user_fixture) -> AsyncMock:
    """DocumentStore mock: an empty account until a test fills it in."""
    store = AsyncMock(spec=DocumentStore)
    store.user_id = user_fixture.id
    store.get_profile.return_value = None
    store.get_workout_plan.return_value = None
    store.get_nutrition_logs.return_value = []
    store.get_exercise_history.return_value = {}
    store.list_chat_sessions.return_value = []
    store.get_chat_session.return_value = None
    return store


@pytest.fixture
def stub_ai() -> StubAIService:
    return StubAIService()


@pytest.fixture
def committed_turns() -> list:
    return []


@pytest.fixture
def fake_committer(committed_turns):
    async def commit(session_id, message_id, user_text, model_text):
        committed_turns.append((session_id, message_id, user_text, model_text))
        return PersistOutcome()

    return commit


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(mock_repo, mock_db) -> AsyncGenerator[AsyncClient, None]:
    """
    Anonymous client: get_user_repository -> mock_repo.
    Used for the auth endpoints and for checking that the rest require a token.
    """
    app = create_test_app()
    app.dependency_overrides[get_user_repository] = lambda: mock_repo
    app.dependency_overrides[get_db] = lambda: mock_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def user_client(
    user_fixture, mock_repo, mock_db, mock_store, stub_ai, fake_committer
) -> AsyncGenerator[AsyncClient, None]:
    """
    Client authenticated as user_fixture.
    get_document_store -> mock_store, get_ai_service -> stub_ai.
    """
    app = create_test_app()
    app.dependency_overrides[get_user_repository] = lambda: mock_repo
    app.dependency_overrides[get_current_user] = lambda: user_fixture
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_document_store] = lambda: mock_store
    app.dependency_overrides[get_ai_service] = lambda: stub_ai
    app.dependency_overrides[get_chat_committer] = lambda: fake_committer
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

"""
Unit tests for DocumentStore against a mocked AsyncSession.

Checks row <-> document mapping and the write paths; SQL itself is left to
the database.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from zenithfit.models.chat import ChatMessage as ChatMessageRow
from zenithfit.models.chat import ChatSession as ChatSessionRow
from zenithfit.models.nutrition import NutritionJournal
from zenithfit.models.profile import Profile
from zenithfit.models.workout import ExerciseHistory
from zenithfit.models.workout import WorkoutPlan as WorkoutPlanRow
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.schemas.chat import ChatMessage
from zenithfit.schemas.nutrition import NutritionLog
from tests.conftest import make_plan, make_profile

pytestmark = pytest.mark.unit

T0 = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)


def result_with(value=None, count=None, rows=None) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = count
    result.scalars.return_value.all.return_value = rows or []
    return result


@pytest.mark.asyncio
async def test_get_profile_missing_returns_none(mock_db):
    assert await DocumentStore(mock_db, 1).get_profile() is None


@pytest.mark.asyncio
async def test_save_profile_creates_row(mock_db):
    store = DocumentStore(mock_db, 1)
    await store.save_profile(make_profile())

    row = mock_db.add.call_args.args[0]
    assert isinstance(row, Profile)
    assert row.user_id == 1
    assert row.target_calories == 2259
    assert row.has_plan is True
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_profile_round_trips_through_row(mock_db):
    store = DocumentStore(mock_db, 1)
    await store.save_profile(make_profile())
    row = mock_db.add.call_args.args[0]

    mock_db.execute.return_value = result_with(row)
    profile = await store.get_profile()

    assert profile == make_profile()


@pytest.mark.asyncio
async def test_save_workout_plan_stores_camel_case_sessions(mock_db):
    store = DocumentStore(mock_db, 1)
    await store.save_workout_plan(make_plan(start_date="2024-06-01T08:00:00"))

    row = mock_db.add.call_args.args[0]
    assert isinstance(row, WorkoutPlanRow)
    assert row.plan_id == "plan-1"
    assert row.sessions[0]["dayNumber"] == 1
    assert row.sessions[0]["exercises"][0]["actualSets"] == []


@pytest.mark.asyncio
async def test_get_workout_plan_reads_row(mock_db):
    plan = make_plan(start_date="2024-06-01T08:00:00")
    row = WorkoutPlanRow(
        user_id=1, plan_id=plan.id, title=plan.title, duration_weeks=4, start_date=plan.start_date,
        sessions=[s.model_dump(mode="json", by_alias=True) for s in plan.sessions],
    )
    mock_db.execute.return_value = result_with(row)

    assert await DocumentStore(mock_db, 1).get_workout_plan() == plan


@pytest.mark.asyncio
async def test_save_nutrition_logs_replaces_journal(mock_db):
    journal = NutritionJournal(user_id=1, logs=[])
    mock_db.execute.return_value = result_with(journal)

    await DocumentStore(mock_db, 1).save_nutrition_logs([NutritionLog(date="2024-06-01T08:00", meal_name="Oats", calories=350)])

    assert journal.logs[0]["mealName"] == "Oats"
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_get_exercise_history_maps_by_name(mock_db):
    rows = [ExerciseHistory(user_id=1, name="Bench Press", weight=80, reps=5)]
    mock_db.execute.return_value = result_with(rows=rows)

    history = await DocumentStore(mock_db, 1).get_exercise_history()

    assert history["Bench Press"].weight == 80
    assert history["Bench Press"].reps == 5


@pytest.mark.asyncio
async def test_upsert_exercise_history_updates_existing_row(mock_db):
    row = ExerciseHistory(user_id=1, name="Bench Press", weight=80, reps=5)
    mock_db.execute.return_value = result_with(row)

    await DocumentStore(mock_db, 1).upsert_exercise_history("Bench Press", 82.5, 5)

    assert row.weight == 82.5
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_append_chat_turn_positions_after_existing_messages(mock_db):
    session_row = ChatSessionRow(id="c1", user_id=1, title="New Conversation", last_modified=T0)
    mock_db.execute.side_effect = [result_with(session_row), result_with(count=4)]
    messages = [
        ChatMessage(id="u1", role="user", text="hi", timestamp=T0),
        ChatMessage(id="m1", role="model", text="hello", timestamp=T0),
    ]

    await DocumentStore(mock_db, 1).append_chat_turn("c1", messages, "hi", T0)

    added = [call.args[0] for call in mock_db.add.call_args_list]
    assert all(isinstance(m, ChatMessageRow) for m in added)
    assert [m.position for m in added] == [4, 5]
    assert session_row.title == "hi"
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_append_chat_turn_unknown_session_raises(mock_db):
    with pytest.raises(LookupError):
        await DocumentStore(mock_db, 1).append_chat_turn("missing", [], "t", T0)

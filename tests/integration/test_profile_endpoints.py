"""
Integration tests for /api/v1/profile*.

Covered:
- GET /profile: routing to onboarding or dashboard
- POST /profile/onboarding: macro targets, plan generation, save order and
  persistence reporting, AI failure handling, input validation
"""

import pytest
from sqlalchemy.exc import OperationalError

from tests.conftest import make_profile

pytestmark = pytest.mark.integration

ONBOARDING = {
    "name": "Alex",
    "age": 30,
    "weight": 80,
    "height": 180,
    "goal": "Muscle Building",
    "level": "Intermediate",
    "dietGoal": "Cut",
    "daysPerWeek": 4,
    "equipment": "Full Gym",
    "constraints": "Bad left knee",
    "currentFormat": "Upper/Lower",
}


# ---------------------------------------------------------------------------
# GET /profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_profile_without_profile_routes_to_onboarding(user_client, mock_store):
    response = await user_client.get("/api/v1/profile")

    assert response.status_code == 200
    assert response.json() == {"profile": None, "next": "onboarding"}


@pytest.mark.asyncio
async def test_get_profile_without_saved_plan_routes_to_onboarding(user_client, mock_store):
    mock_store.get_profile.return_value = make_profile(has_plan=False)

    response = await user_client.get("/api/v1/profile")

    assert response.json()["next"] == "onboarding"
    assert response.json()["profile"]["name"] == "Alex"


@pytest.mark.asyncio
async def test_get_profile_with_plan_routes_to_dashboard(user_client, mock_store):
    mock_store.get_profile.return_value = make_profile()

    response = await user_client.get("/api/v1/profile")

    data = response.json()
    assert data["next"] == "dashboard"
    assert data["profile"]["macroTargets"]["calories"] == 2259


@pytest.mark.asyncio
async def test_get_profile_without_token_is_rejected(client):
    response = await client.get("/api/v1/profile")
    assert response.status_code in (401, 403)


# ---------------------------------------------------------------------------
# POST /profile/onboarding
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_onboarding_computes_targets_and_saves_plan_then_profile(user_client, mock_store, stub_ai):
    calls = []
    mock_store.save_workout_plan.side_effect = lambda plan: calls.append(("plan", plan))
    mock_store.save_profile.side_effect = lambda profile: calls.append(("profile", profile))

    response = await user_client.post("/api/v1/profile/onboarding", json=ONBOARDING)

    assert response.status_code == 200
    data = response.json()
    assert data["profile"]["macroTargets"] == {"calories": 2259, "protein": 176, "carbs": 247, "fat": 63}
    assert data["profile"]["hasPlan"] is True
    assert data["plan"]["title"] == "Muscle Building Plan"
    assert data["plan"]["durationWeeks"] == 4
    assert [s["dayNumber"] for s in data["plan"]["sessions"]] == [1, 2, 3]
    assert data["plan"]["sessions"][0]["locked"] is False
    assert data["persisted"] == {"plan": {"ok": True, "error": None}, "profile": {"ok": True, "error": None}}

    assert [kind for kind, _ in calls] == ["plan", "profile"]
    assert calls[1][1].has_plan is True
    assert stub_ai.calls == [("plan", "Alex")]


@pytest.mark.asyncio
async def test_onboarding_ai_failure_returns_502_and_saves_nothing(user_client, mock_store, stub_ai):
    stub_ai.fail = True

    response = await user_client.post("/api/v1/profile/onboarding", json=ONBOARDING)

    assert response.status_code == 502
    assert "plan" in response.json()["detail"]
    mock_store.save_workout_plan.assert_not_called()
    mock_store.save_profile.assert_not_called()


@pytest.mark.asyncio
async def test_onboarding_reports_failed_plan_save(user_client, mock_store):
    mock_store.save_workout_plan.side_effect = OperationalError("INSERT", {}, Exception("db down"))

    response = await user_client.post("/api/v1/profile/onboarding", json=ONBOARDING)

    assert response.status_code == 200
    persisted = response.json()["persisted"]
    assert persisted["plan"]["ok"] is False
    assert persisted["profile"]["ok"] is True


@pytest.mark.asyncio
async def test_onboarding_defaults_to_maintenance(user_client, mock_store):
    body = {k: v for k, v in ONBOARDING.items() if k != "dietGoal"}
    body.update(weight=70, height=175)

    response = await user_client.post("/api/v1/profile/onboarding", json=body)

    assert response.json()["profile"]["dietGoal"] == "Maintain"
    assert response.json()["profile"]["macroTargets"]["calories"] == 2556


@pytest.mark.asyncio
@pytest.mark.parametrize("field, value", [
    ("age", 5),
    ("weight", 0),
    ("daysPerWeek", 8),
    ("goal", "Get Swole"),
])
async def test_onboarding_invalid_input_returns_422(user_client, mock_store, field, value):
    response = await user_client.post("/api/v1/profile/onboarding", json={**ONBOARDING, field: value})
    assert response.status_code == 422

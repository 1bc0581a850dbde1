from fastapi import APIRouter, Depends, HTTPException, status

from zenithfit.core.dependencies import get_document_store
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.schemas.workout import (
    FinishSessionResponse,
    PlanView,
    SessionActionResponse,
    SessionView,
    SetUpdate,
    WorkoutPlan,
)
from zenithfit.services.persistence import persist
from zenithfit.services.workout_service import (
    DayLockedError,
    ExerciseNotFoundError,
    InvalidSetIndexError,
    RestDayError,
    SessionCompletedError,
    SessionNotFoundError,
    WorkoutError,
    complete_session,
    find_session,
    is_day_locked,
    plan_view,
    replace_session,
    scheduled_day,
    session_view,
    start_session,
    update_set,
)

router = APIRouter()

ERROR_STATUS = {
    SessionNotFoundError: status.HTTP_404_NOT_FOUND,
    ExerciseNotFoundError: status.HTTP_404_NOT_FOUND,
    RestDayError: status.HTTP_400_BAD_REQUEST,
    InvalidSetIndexError: status.HTTP_400_BAD_REQUEST,
    DayLockedError: status.HTTP_403_FORBIDDEN,
    SessionCompletedError: status.HTTP_409_CONFLICT,
}


def http_error(error: WorkoutError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST),
        detail=str(error),
    )


async def load_plan(store: DocumentStore) -> WorkoutPlan:
    plan = await store.get_workout_plan()
    if plan is None:
        raise HTTPException(status_code=404, detail="No workout plan yet, complete onboarding first")
    return plan


def ensure_unlocked(plan: WorkoutPlan, day_number: int) -> None:
    if is_day_locked(plan.start_date, day_number):
        raise DayLockedError(f"Day {day_number} unlocks on {scheduled_day(plan.start_date, day_number)}")


@router.get("/plan", response_model=PlanView)
async def get_plan(store: DocumentStore = Depends(get_document_store)):
    plan = await load_plan(store)
    return plan_view(plan)


@router.get("/sessions/{day_number}", response_model=SessionView)
async def get_session(day_number: int, store: DocumentStore = Depends(get_document_store)):
    plan = await load_plan(store)
    try:
        return session_view(find_session(plan, day_number), plan)
    except WorkoutError as e:
        raise http_error(e)


@router.post("/sessions/{day_number}/start", response_model=SessionActionResponse)
async def start_workout(day_number: int, store: DocumentStore = Depends(get_document_store)):
    """Open a session, pre-filling empty exercises from the exercise history."""
    plan = await load_plan(store)
    history = await store.get_exercise_history()
    try:
        plan, session = start_session(plan, day_number, history)
    except WorkoutError as e:
        raise http_error(e)

    saved = await persist(store, "workout plan", store.save_workout_plan(plan))
    return SessionActionResponse(session=session_view(session, plan), persisted=saved)


@router.patch(
    "/sessions/{day_number}/exercises/{exercise_id}/sets/{set_index}",
    response_model=SessionActionResponse,
)
async def edit_set(
    day_number: int,
    exercise_id: str,
    set_index: int,
    changes: SetUpdate,
    store: DocumentStore = Depends(get_document_store),
):
    plan = await load_plan(store)
    try:
        ensure_unlocked(plan, day_number)
        session = update_set(
            find_session(plan, day_number),
            exercise_id,
            set_index,
            weight=changes.weight,
            reps=changes.reps,
            completed=changes.completed,
        )
    except WorkoutError as e:
        raise http_error(e)

    plan = replace_session(plan, session)
    saved = await persist(store, "workout plan", store.save_workout_plan(plan))
    return SessionActionResponse(session=session_view(session, plan), persisted=saved)


@router.post("/sessions/{day_number}/finish", response_model=FinishSessionResponse)
async def finish_workout(day_number: int, store: DocumentStore = Depends(get_document_store)):
    """
    Stamp the session as completed and move the exercise history forward.

    History rows are upserted one by one after the plan is saved; a failed
    upsert is reported but does not undo the completion.
    """
    plan = await load_plan(store)
    try:
        ensure_unlocked(plan, day_number)
        finished, updates = complete_session(find_session(plan, day_number))
    except WorkoutError as e:
        raise http_error(e)

    plan = replace_session(plan, finished)
    saved = await persist(store, "workout plan", store.save_workout_plan(plan))

    history_saved = {}
    for update in updates:
        history_saved[update.name] = await persist(
            store,
            f"history for {update.name}",
            store.upsert_exercise_history(update.name, update.weight, update.reps),
        )

    return FinishSessionResponse(
        session=session_view(finished, plan),
        persisted=saved,
        history_updates=updates,
        history_persisted=history_saved,
    )

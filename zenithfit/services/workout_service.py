"""
Workout execution rules: day locking, progressive-overload hydration,
set editing and session completion.

Everything here is pure: functions take plan/session documents and return new
ones, persistence is left to the caller.
"""
from datetime import date, datetime, timedelta, timezone
from typing import List, Mapping, Optional, Tuple, Union

from zenithfit.schemas.workout import (
    ExerciseHistoryEntry,
    ExerciseSet,
    HistoryUpdate,
    PlanView,
    SessionStatus,
    SessionView,
    WorkoutPlan,
    WorkoutSession,
)

DateLike = Union[datetime, date, str]


class WorkoutError(Exception):
    """Base class for rule violations while driving a workout session."""


class SessionNotFoundError(WorkoutError):
    pass


class ExerciseNotFoundError(WorkoutError):
    pass


class RestDayError(WorkoutError):
    pass


class DayLockedError(WorkoutError):
    pass


class SessionCompletedError(WorkoutError):
    pass


class InvalidSetIndexError(WorkoutError):
    pass


def parse_timestamp(value: str) -> datetime:
    # fromisoformat only understands "Z" from 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.isoformat()


def local_day(value: DateLike) -> date:
    """Calendar day of `value` in server local time."""
    if isinstance(value, str):
        value = parse_timestamp(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def scheduled_day(start_date: DateLike, day_number: int) -> date:
    return local_day(start_date) + timedelta(days=day_number - 1)


def is_day_locked(start_date: DateLike, day_number: int, now: Optional[DateLike] = None) -> bool:
    """True while today is before the calendar day the session is scheduled for."""
    today = local_day(now if now is not None else datetime.now())
    return today < scheduled_day(start_date, day_number)


def session_status(session: WorkoutSession, start_date: DateLike, now: Optional[DateLike] = None) -> SessionStatus:
    if session.completed_date:
        return SessionStatus.completed
    if session.is_rest_day:
        return SessionStatus.rest
    if is_day_locked(start_date, session.day_number, now):
        return SessionStatus.locked
    if any(ex.actual_sets for ex in session.exercises):
        return SessionStatus.active
    return SessionStatus.pending


def session_view(session: WorkoutSession, plan: WorkoutPlan, now: Optional[DateLike] = None) -> SessionView:
    return SessionView(
        **session.model_dump(),
        locked=is_day_locked(plan.start_date, session.day_number, now),
        status=session_status(session, plan.start_date, now),
        scheduled_date=scheduled_day(plan.start_date, session.day_number).isoformat(),
    )


def find_session(plan: WorkoutPlan, day_number: int) -> WorkoutSession:
    for session in plan.sessions:
        if session.day_number == day_number:
            return session
    raise SessionNotFoundError(f"No session for day {day_number}")


def replace_session(plan: WorkoutPlan, session: WorkoutSession) -> WorkoutPlan:
    """Return a copy of `plan` with the session of the same id swapped in place."""
    updated = plan.model_copy(deep=True)
    updated.sessions = [session if s.id == session.id else s for s in updated.sessions]
    return updated


def hydrate_session(session: WorkoutSession, history: Mapping[str, ExerciseHistoryEntry]) -> WorkoutSession:
    """
    Pre-fill empty exercises with the last weight/reps recorded under the same
    exercise name. Exercises that already have sets, or no history, are kept as is.
    """
    hydrated = session.model_copy(deep=True)
    for exercise in hydrated.exercises:
        if exercise.actual_sets or exercise.name not in history:
            continue
        last = history[exercise.name]
        exercise.actual_sets = [
            ExerciseSet(weight=last.weight, reps=last.reps, completed=False)
            for _ in range(exercise.target_sets)
        ]
    return hydrated


def start_session(
    plan: WorkoutPlan,
    day_number: int,
    history: Mapping[str, ExerciseHistoryEntry],
    now: Optional[DateLike] = None,
) -> Tuple[WorkoutPlan, WorkoutSession]:
    session = find_session(plan, day_number)
    if session.is_rest_day:
        raise RestDayError(f"Day {day_number} is a rest day")
    if session.completed_date:
        raise SessionCompletedError(f"Day {day_number} is already completed")
    if is_day_locked(plan.start_date, day_number, now):
        raise DayLockedError(f"Day {day_number} unlocks on {scheduled_day(plan.start_date, day_number)}")

    hydrated = hydrate_session(session, history)
    return replace_session(plan, hydrated), hydrated


def update_set(
    session: WorkoutSession,
    exercise_id: str,
    set_index: int,
    weight: Optional[float] = None,
    reps: Optional[int] = None,
    completed: Optional[bool] = None,
) -> WorkoutSession:
    if session.completed_date:
        raise SessionCompletedError("Completed sessions are read-only")

    updated = session.model_copy(deep=True)
    exercise = next((ex for ex in updated.exercises if ex.id == exercise_id), None)
    if exercise is None:
        raise ExerciseNotFoundError(f"Exercise {exercise_id} is not part of this session")
    if set_index < 0 or set_index >= exercise.target_sets:
        raise InvalidSetIndexError(f"Set index must be between 0 and {exercise.target_sets - 1}")

    while len(exercise.actual_sets) <= set_index:
        exercise.actual_sets.append(ExerciseSet())

    current = exercise.actual_sets[set_index]
    if weight is not None:
        current.weight = weight
    if reps is not None:
        current.reps = reps
    if completed is not None:
        current.completed = completed
    return updated


def complete_session(
    session: WorkoutSession, now: Optional[datetime] = None
) -> Tuple[WorkoutSession, List[HistoryUpdate]]:
    """
    Stamp the session as completed and collect the new history baselines.

    Only the last recorded set of every exercise counts, and only if it was
    marked completed.
    """
    if session.is_rest_day:
        raise RestDayError("Rest days cannot be completed")
    if session.completed_date:
        raise SessionCompletedError("Session is already completed")

    updates = []
    for exercise in session.exercises:
        if not exercise.actual_sets:
            continue
        last_set = exercise.actual_sets[-1]
        if last_set.completed:
            updates.append(HistoryUpdate(name=exercise.name, weight=last_set.weight, reps=last_set.reps))

    finished = session.model_copy(deep=True)
    finished.completed_date = utc_timestamp(now)
    return finished, updates


def plan_view(plan: WorkoutPlan, now: Optional[DateLike] = None) -> PlanView:
    return PlanView(
        id=plan.id,
        title=plan.title,
        duration_weeks=plan.duration_weeks,
        start_date=plan.start_date,
        sessions=[session_view(s, plan, now) for s in plan.sessions],
    )

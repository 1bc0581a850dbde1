from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from zenithfit.models.chat import ChatMessage as ChatMessageRow
from zenithfit.models.chat import ChatSession as ChatSessionRow
from zenithfit.models.nutrition import NutritionJournal
from zenithfit.models.profile import Profile
from zenithfit.models.workout import ExerciseHistory
from zenithfit.models.workout import WorkoutPlan as WorkoutPlanRow
from zenithfit.schemas.chat import ChatMessage, ChatSession
from zenithfit.schemas.nutrition import NutritionLog
from zenithfit.schemas.profile import MacroTargets, UserProfile
from zenithfit.schemas.workout import ExerciseHistoryEntry, WorkoutPlan, WorkoutSession


def _profile_from_row(row: Profile) -> UserProfile:
    return UserProfile(
        name=row.name,
        age=row.age,
        weight=row.weight,
        height=row.height,
        goal=row.goal,
        level=row.level,
        diet_goal=row.diet_goal,
        days_per_week=row.days_per_week,
        equipment=row.equipment,
        constraints=row.constraints,
        current_format=row.current_format,
        macro_targets=MacroTargets(
            calories=row.target_calories,
            protein=row.target_protein,
            carbs=row.target_carbs,
            fat=row.target_fat,
        ),
        has_plan=row.has_plan,
    )


def _chat_from_row(row: ChatSessionRow) -> ChatSession:
    return ChatSession(
        id=row.id,
        title=row.title,
        last_modified=row.last_modified,
        messages=[
            ChatMessage(id=m.id, role=m.role, text=m.text, timestamp=m.timestamp)
            for m in row.messages
        ],
    )


class DocumentStore:
    """
    Per-user document persistence: profile, workout plan, nutrition journal,
    exercise history and coach conversations.

    One instance is bound to one database session and one authenticated user.
    Missing documents come back as None or empty collections.
    """

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def rollback(self) -> None:
        await self.db.rollback()

    # -- profile -----------------------------------------------------------

    async def _profile_row(self) -> Optional[Profile]:
        result = await self.db.execute(select(Profile).where(Profile.user_id == self.user_id))
        return result.scalar_one_or_none()

    async def get_profile(self) -> Optional[UserProfile]:
        row = await self._profile_row()
        return _profile_from_row(row) if row else None

    async def save_profile(self, profile: UserProfile) -> None:
        row = await self._profile_row()
        if row is None:
            row = Profile(user_id=self.user_id)
            self.db.add(row)

        row.name = profile.name
        row.age = profile.age
        row.weight = profile.weight
        row.height = profile.height
        row.goal = profile.goal
        row.level = profile.level
        row.diet_goal = profile.diet_goal
        row.days_per_week = profile.days_per_week
        row.equipment = profile.equipment
        row.constraints = profile.constraints
        row.current_format = profile.current_format
        row.target_calories = profile.macro_targets.calories
        row.target_protein = profile.macro_targets.protein
        row.target_carbs = profile.macro_targets.carbs
        row.target_fat = profile.macro_targets.fat
        row.has_plan = profile.has_plan
        await self.db.commit()

    # -- workout plan ------------------------------------------------------

    async def _plan_row(self) -> Optional[WorkoutPlanRow]:
        result = await self.db.execute(select(WorkoutPlanRow).where(WorkoutPlanRow.user_id == self.user_id))
        return result.scalar_one_or_none()

    async def get_workout_plan(self) -> Optional[WorkoutPlan]:
        row = await self._plan_row()
        if row is None:
            return None
        return WorkoutPlan(
            id=row.plan_id,
            title=row.title,
            duration_weeks=row.duration_weeks,
            start_date=row.start_date,
            sessions=[WorkoutSession.model_validate(s) for s in row.sessions or []],
        )

    async def save_workout_plan(self, plan: WorkoutPlan) -> None:
        row = await self._plan_row()
        if row is None:
            row = WorkoutPlanRow(user_id=self.user_id)
            self.db.add(row)

        row.plan_id = plan.id
        row.title = plan.title
        row.duration_weeks = plan.duration_weeks
        row.start_date = plan.start_date
        # a new list object so the JSON column is flagged as changed
        row.sessions = [s.model_dump(mode="json", by_alias=True) for s in plan.sessions]
        await self.db.commit()

    # -- nutrition ---------------------------------------------------------

    async def _journal_row(self) -> Optional[NutritionJournal]:
        result = await self.db.execute(select(NutritionJournal).where(NutritionJournal.user_id == self.user_id))
        return result.scalar_one_or_none()

    async def get_nutrition_logs(self) -> List[NutritionLog]:
        row = await self._journal_row()
        if row is None:
            return []
        return [NutritionLog.model_validate(item) for item in row.logs or []]

    async def save_nutrition_logs(self, logs: Sequence[NutritionLog]) -> None:
        row = await self._journal_row()
        if row is None:
            row = NutritionJournal(user_id=self.user_id)
            self.db.add(row)
        row.logs = [log.model_dump(mode="json", by_alias=True) for log in logs]
        await self.db.commit()

    # -- exercise history --------------------------------------------------

    async def get_exercise_history(self) -> Dict[str, ExerciseHistoryEntry]:
        result = await self.db.execute(select(ExerciseHistory).where(ExerciseHistory.user_id == self.user_id))
        return {
            row.name: ExerciseHistoryEntry(weight=row.weight, reps=row.reps)
            for row in result.scalars().all()
        }

    async def upsert_exercise_history(self, name: str, weight: float, reps: int) -> None:
        result = await self.db.execute(
            select(ExerciseHistory).where(
                ExerciseHistory.user_id == self.user_id,
                ExerciseHistory.name == name,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = ExerciseHistory(user_id=self.user_id, name=name)
            self.db.add(row)
        row.weight = weight
        row.reps = reps
        await self.db.commit()

    # -- coach conversations -----------------------------------------------

    async def list_chat_sessions(self) -> List[ChatSession]:
        result = await self.db.execute(
            select(ChatSessionRow)
            .where(ChatSessionRow.user_id == self.user_id)
            .options(selectinload(ChatSessionRow.messages))
            .order_by(ChatSessionRow.last_modified.desc())
        )
        return [_chat_from_row(row) for row in result.scalars().all()]

    async def get_chat_session(self, session_id: str) -> Optional[ChatSession]:
        result = await self.db.execute(
            select(ChatSessionRow)
            .where(ChatSessionRow.id == session_id, ChatSessionRow.user_id == self.user_id)
            .options(selectinload(ChatSessionRow.messages))
        )
        row = result.scalar_one_or_none()
        return _chat_from_row(row) if row else None

    async def create_chat_session(self, session: ChatSession) -> None:
        self.db.add(ChatSessionRow(
            id=session.id,
            user_id=self.user_id,
            title=session.title,
            last_modified=session.last_modified,
        ))
        await self.db.commit()

    async def append_chat_turn(
        self,
        session_id: str,
        messages: Sequence[ChatMessage],
        title: str,
        last_modified: datetime,
    ) -> None:
        """Append the two messages of a turn and bump title/lastModified in one commit."""
        result = await self.db.execute(
            select(ChatSessionRow).where(ChatSessionRow.id == session_id, ChatSessionRow.user_id == self.user_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise LookupError(f"Chat session {session_id} does not exist")

        count = await self.db.execute(
            select(func.count()).select_from(ChatMessageRow).where(ChatMessageRow.session_id == session_id)
        )
        position = count.scalar_one()
        for offset, message in enumerate(messages):
            self.db.add(ChatMessageRow(
                id=message.id,
                session_id=session_id,
                position=position + offset,
                role=message.role,
                text=message.text,
                timestamp=message.timestamp,
            ))
        row.title = title
        row.last_modified = last_modified
        await self.db.commit()

    # -- account -----------------------------------------------------------

    async def reset_user_data(self) -> None:
        """Forget everything stored for the user except the account itself."""
        session_ids = select(ChatSessionRow.id).where(ChatSessionRow.user_id == self.user_id)
        await self.db.execute(delete(ChatMessageRow).where(ChatMessageRow.session_id.in_(session_ids)))
        await self.db.execute(delete(ChatSessionRow).where(ChatSessionRow.user_id == self.user_id))
        await self.db.execute(delete(ExerciseHistory).where(ExerciseHistory.user_id == self.user_id))
        await self.db.execute(delete(NutritionJournal).where(NutritionJournal.user_id == self.user_id))
        await self.db.execute(delete(WorkoutPlanRow).where(WorkoutPlanRow.user_id == self.user_id))
        await self.db.execute(delete(Profile).where(Profile.user_id == self.user_id))
        await self.db.commit()

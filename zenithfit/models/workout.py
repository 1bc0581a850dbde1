from sqlalchemy import Column, Integer, String, Float, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from zenithfit.core.base import Base

class WorkoutPlan(Base):
    __tablename__ = "workout_plans"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    plan_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    duration_weeks = Column(Integer, nullable=False, default=4)
    start_date = Column(String, nullable=False)  # ISO timestamp
    sessions = Column(JSON, nullable=False, default=list)

    user = relationship("User", back_populates="workout_plan")

class ExerciseHistory(Base):
    __tablename__ = "exercise_history"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_exercise_history_user_name"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    weight = Column(Float, nullable=False, default=0)
    reps = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="exercise_history")

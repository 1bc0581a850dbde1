from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from zenithfit.core.base import Base
from datetime import datetime

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)
    refresh_token = Column(String, nullable=True, index=True)
    refresh_token_expires = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete")
    workout_plan = relationship("WorkoutPlan", back_populates="user", uselist=False, cascade="all, delete")
    nutrition_journal = relationship("NutritionJournal", back_populates="user", uselist=False, cascade="all, delete")
    exercise_history = relationship("ExerciseHistory", back_populates="user", cascade="all, delete")
    chat_sessions = relationship("ChatSession", back_populates="user", cascade="all, delete")

import enum
from sqlalchemy import Column, Integer, String, Float, Enum, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from zenithfit.core.base import Base
from datetime import datetime

class FitnessGoalEnum(str, enum.Enum):
    strength = "Strength"
    hypertrophy = "Muscle Building"
    weight_loss = "Weight Loss"
    endurance = "Endurance"
    general_health = "General Health"

class FitnessLevelEnum(str, enum.Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"

class DietGoalEnum(str, enum.Enum):
    cut = "Cut"
    maintain = "Maintain"
    bulk = "Bulk"

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    weight = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    goal = Column(Enum(FitnessGoalEnum), nullable=False)
    level = Column(Enum(FitnessLevelEnum), nullable=False)
    diet_goal = Column(Enum(DietGoalEnum), nullable=False, default=DietGoalEnum.maintain)
    days_per_week = Column(Integer, nullable=False)
    equipment = Column(String, nullable=False, default="")
    constraints = Column(String, nullable=False, default="")
    current_format = Column(String, nullable=False, default="")

    # Derived once at onboarding
    target_calories = Column(Integer, nullable=False)
    target_protein = Column(Integer, nullable=False)
    target_carbs = Column(Integer, nullable=False)
    target_fat = Column(Integer, nullable=False)

    has_plan = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")

from sqlalchemy import Column, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from zenithfit.core.base import Base

class NutritionJournal(Base):
    __tablename__ = "nutrition_journals"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    logs = Column(JSON, nullable=False, default=list)  # newest first

    user = relationship("User", back_populates="nutrition_journal")

import logging

from zenithfit.core.base import Base
from zenithfit.core.config import settings
from zenithfit.core.db import engine

# Every model has to be imported so the metadata knows its table
from zenithfit.models.user import User
from zenithfit.models.profile import Profile
from zenithfit.models.workout import WorkoutPlan, ExerciseHistory
from zenithfit.models.nutrition import NutritionJournal
from zenithfit.models.chat import ChatSession, ChatMessage

logger = logging.getLogger(__name__)


async def init_database():
    """Create missing tables, dropping everything first when RESET_DATABASE is set."""
    async with engine.begin() as conn:
        if settings.RESET_DATABASE:
            logger.warning("RESET_DATABASE=true, dropping all tables")
            await conn.run_sync(Base.metadata.drop_all)

        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")

import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zenithfit.core.db import AsyncSessionLocal, get_db
from zenithfit.core.config import settings
from zenithfit.models.user import User
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.repositories.user_repository import UserRepository
from zenithfit.schemas.common import PersistOutcome
from zenithfit.services.ai_service import AIService, ai_service
from zenithfit.services.auth_service import credentials_exception
from zenithfit.services.chat_service import commit_turn

logger = logging.getLogger(__name__)


security = HTTPBearer()


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    """Repository factory injected into endpoints through Depends."""
    return UserRepository(db)


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        repo: UserRepository = Depends(get_user_repository),
) -> User:
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception()
    except JWTError:
        raise credentials_exception()

    user = await repo.get_by_id(int(user_id))
    if user is None:
        raise credentials_exception()

    return user


def get_document_store(
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
) -> DocumentStore:
    return DocumentStore(db, current_user.id)


def get_ai_service() -> AIService:
    return ai_service


def get_chat_committer(current_user: User = Depends(get_current_user)):
    """
    Commit callback for streamed coach turns.

    The stream outlives the request's own database session, so the final write
    opens a fresh one.
    """
    user_id = current_user.id

    async def commit(session_id: str, message_id: str, user_text: str, model_text: str) -> PersistOutcome:
        try:
            async with AsyncSessionLocal() as db:
                return await commit_turn(DocumentStore(db, user_id), session_id, message_id, user_text, model_text)
        except SQLAlchemyError as e:
            logger.error("Storing chat turn for session %s failed: %s", session_id, e, exc_info=True)
            return PersistOutcome(ok=False, error="Could not save chat turn")

    return commit

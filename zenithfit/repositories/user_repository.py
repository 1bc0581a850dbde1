from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from zenithfit.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Account rows and their refresh token bookkeeping."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        # accounts created before emails were normalized may still be mixed case
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def get_by_refresh_token(self, refresh_token: str) -> Optional[User]:
        """Owner of a refresh token that is still on record; None once it was rotated or revoked."""
        result = await self.db.execute(select(User).where(User.refresh_token == refresh_token))
        return result.scalar_one_or_none()

    async def save_refresh_token(self, user: User, refresh_token: str, expires: datetime) -> None:
        user.refresh_token = refresh_token
        user.refresh_token_expires = expires
        await self.db.commit()

    async def revoke_refresh_token(self, user: User) -> None:
        user.refresh_token = None
        user.refresh_token_expires = None
        await self.db.commit()

    async def create_user(self, email: str, password_hash: str) -> User:
        user = User(email=normalize_email(email), password=password_hash, created_at=datetime.utcnow())
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

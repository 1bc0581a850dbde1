import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

import bcrypt
from fastapi import HTTPException, status
from jose import jwt, JWTError

from zenithfit.core.config import settings
from zenithfit.models.user import User
from zenithfit.repositories.user_repository import UserRepository
from zenithfit.schemas.auth import AuthResponse, UserLogin, UserRegister

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.SECRET_KEY = settings.SECRET_KEY
        self.REFRESH_SECRET_KEY = settings.REFRESH_SECRET_KEY
        self.ALGORITHM = settings.ALGORITHM
        self.ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        self.REFRESH_TOKEN_EXPIRE_DAYS = settings.REFRESH_TOKEN_EXPIRE_DAYS

    def hash_password(self, password: str) -> str:
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
        return hashed.decode('utf-8')

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        if not hashed_password:
            return False
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except ValueError:
            # not a bcrypt hash
            return False

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.SECRET_KEY, algorithm=self.ALGORITHM)

    def create_refresh_token(self, data: dict) -> str:
        to_encode = data.copy()
        expire = datetime.utcnow() + timedelta(days=self.REFRESH_TOKEN_EXPIRE_DAYS)
        # jti keeps two tokens issued within the same second distinct
        to_encode.update({"exp": expire, "jti": uuid4().hex})
        return jwt.encode(to_encode, self.REFRESH_SECRET_KEY, algorithm=self.ALGORITHM)

    def refresh_subject(self, refresh_token: str) -> Optional[int]:
        try:
            payload = jwt.decode(refresh_token, self.REFRESH_SECRET_KEY, algorithms=[self.ALGORITHM])
        except JWTError:
            return None
        sub = payload.get("sub")
        return int(sub) if sub is not None else None

    async def issue_tokens(self, repo: UserRepository, user: User) -> AuthResponse:
        access_token = self.create_access_token(data={"sub": str(user.id)})
        refresh_token = self.create_refresh_token(data={"sub": str(user.id)})
        await repo.save_refresh_token(
            user,
            refresh_token,
            datetime.utcnow() + timedelta(days=self.REFRESH_TOKEN_EXPIRE_DAYS),
        )
        return AuthResponse(access_token=access_token, refresh_token=refresh_token, token_type="bearer")

    async def authenticate_user(self, repo: UserRepository, login_data: UserLogin) -> Optional[User]:
        user = await repo.get_by_email(login_data.email)
        if not user or not self.verify_password(login_data.password, user.password):
            return None
        return user

    async def register_user(self, repo: UserRepository, user_data: UserRegister) -> User:
        if await repo.get_by_email(user_data.email):
            raise HTTPException(status_code=400, detail="A user with this email already exists")

        return await repo.create_user(user_data.email, self.hash_password(user_data.password))

    async def rotate_refresh_token(self, repo: UserRepository, refresh_token: str) -> Optional[AuthResponse]:
        """
        Swap a refresh token for a new token pair.

        A correctly signed token that is no longer on record has already been
        used: the owner's current token is revoked so both parties must log in again.
        """
        user_id = self.refresh_subject(refresh_token)
        if user_id is None:
            return None

        user = await repo.get_by_refresh_token(refresh_token)
        if user is None:
            victim = await repo.get_by_id(user_id)
            if victim is not None:
                logger.warning("Refresh token reuse detected for user %s", user_id)
                await repo.revoke_refresh_token(victim)
            return None

        if not user.refresh_token_expires or user.refresh_token_expires < datetime.utcnow():
            return None

        return await self.issue_tokens(repo, user)

    async def logout_user(self, repo: UserRepository, refresh_token: str) -> bool:
        user_id = self.refresh_subject(refresh_token)
        if user_id is None:
            return False
        user = await repo.get_by_id(user_id)
        if user is None:
            return False
        await repo.revoke_refresh_token(user)
        return True


auth_service = AuthService()


def credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired access token",
        headers={"WWW-Authenticate": "Bearer"},
    )

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from zenithfit.core.db import get_db
from zenithfit.core.dependencies import get_current_user, get_user_repository
from zenithfit.models.user import User
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.repositories.user_repository import UserRepository
from zenithfit.schemas.auth import UserLogin, UserRegister, AuthResponse, RefreshTokenRequest, UserRead
from zenithfit.services.auth_service import auth_service

router = APIRouter()


@router.post("/register", response_model=AuthResponse)
async def register(user: UserRegister, repo: UserRepository = Depends(get_user_repository)):
    """Create an account and hand out the first token pair."""
    new_user = await auth_service.register_user(repo, user)
    return await auth_service.issue_tokens(repo, new_user)


@router.post("/login", response_model=AuthResponse)
async def login(user: UserLogin, repo: UserRepository = Depends(get_user_repository)):
    authenticated_user = await auth_service.authenticate_user(repo, user)
    if not authenticated_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await auth_service.issue_tokens(repo, authenticated_user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(request: RefreshTokenRequest, repo: UserRepository = Depends(get_user_repository)):
    """Rotate the refresh token; a replayed token revokes the session."""
    tokens = await auth_service.rotate_refresh_token(repo, request.refresh_token)
    if tokens is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )
    return tokens


@router.post("/logout")
async def logout(
    request: RefreshTokenRequest,
    reset: bool = False,
    repo: UserRepository = Depends(get_user_repository),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the refresh token. With `reset=true` the user's stored documents are wiped too."""
    user_id = auth_service.refresh_subject(request.refresh_token)
    if not await auth_service.logout_user(repo, request.refresh_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    if reset:
        await DocumentStore(db, user_id).reset_user_data()
    return {"success": True, "reset": reset}


@router.get("/me", response_model=UserRead)
async def me(current_user: User = Depends(get_current_user)):
    return current_user

"""Authentication endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from agriinsight.core.config import Settings
from agriinsight.core.dependencies import get_auth_service, get_current_user_id, get_db, get_settings_dep
from agriinsight.schemas.auth import LoginRequest, MessageResponse
from agriinsight.schemas.user import UserCreate, UserRead
from agriinsight.services.auth import AuthService
from agriinsight.services.users import DuplicateUserError, StorageError, get_user_by_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        await auth_service.register(session, payload)
    except DuplicateUserError as exc:
        logger.info("Registration rejected for %s: duplicate username or email", payload.username)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StorageError as exc:
        logger.exception("Registration failed for %s", payload.username)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from exc
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=MessageResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings_dep),
) -> MessageResponse:
    try:
        user = await auth_service.authenticate(session, payload.username, payload.password)
    except StorageError as exc:
        logger.exception("Login lookup failed for %s", payload.username)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from exc
    if not user:
        logger.info("Failed login for %s", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    response.set_cookie(
        key=settings.session_cookie_name,
        value=auth_service.issue_token(user),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="strict",
        max_age=settings.session_max_age_seconds,
    )
    logger.info("User %s logged in", user.username)
    return MessageResponse(message="Logged in successfully")


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings_dep)) -> MessageResponse:
    # Tokens are not tracked server-side; a copied token stays valid until it expires.
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="strict",
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserRead)
async def get_current_user_info(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
) -> UserRead:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return UserRead.model_validate(user)

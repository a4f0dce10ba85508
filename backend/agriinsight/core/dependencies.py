"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from agriinsight.core.config import Settings
from agriinsight.core.security import InvalidSessionError
from agriinsight.db.session import Database
from agriinsight.services.agronomy import AgronomicDataProvider
from agriinsight.services.auth import AuthService

logger = logging.getLogger(__name__)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(database: Database = Depends(get_database)) -> AsyncIterator[AsyncSession]:
    async with database.session() as session:
        yield session


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_data_provider(request: Request) -> AgronomicDataProvider:
    return request.app.state.data_provider


def get_current_user_id(
    request: Request,
    settings: Settings = Depends(get_settings_dep),
    auth_service: AuthService = Depends(get_auth_service),
) -> int:
    """Resolve the user id from the session cookie.

    A missing cookie is 403, a present but invalid or expired one is 401.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No token provided")

    try:
        claims = auth_service.verify_token(token)
    except InvalidSessionError as exc:
        logger.debug("Rejected session token: %s", exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized") from exc

    return claims.user_id

"""Credential store: persistence of users and their password hashes."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agriinsight.models.user import User


class DuplicateUserError(ValueError):
    """Raised when the username or email is already registered."""


class StorageError(RuntimeError):
    """Raised when the database fails for any reason other than a duplicate."""


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    return await session.get(User, user_id)


async def create_user(session: AsyncSession, username: str, email: str, password_hash: str) -> User:
    user = User(username=username, email=email, password_hash=password_hash)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateUserError("Username or email already exists") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StorageError("Could not store user") from exc
    return user

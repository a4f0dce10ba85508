"""Registration, login and session verification."""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from agriinsight.core.security import PasswordHasher, SessionClaims, SessionSigner
from agriinsight.models.user import User
from agriinsight.schemas.user import UserCreate
from agriinsight.services import users as user_store
from agriinsight.services.users import StorageError

logger = logging.getLogger(__name__)


class AuthService:
    """Combine the credential store, password hashing and session signing.

    Logout has no server-side counterpart: sessions are signed tokens, so the
    client only drops its cookie.
    """

    def __init__(self, hasher: PasswordHasher, signer: SessionSigner) -> None:
        self.hasher = hasher
        self.signer = signer

    async def register(self, session: AsyncSession, payload: UserCreate) -> User:
        password_hash = await run_in_threadpool(self.hasher.hash, payload.password)
        user = await user_store.create_user(session, payload.username, payload.email, password_hash)
        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    async def authenticate(self, session: AsyncSession, username: str, password: str) -> User | None:
        """Return the user for valid credentials, ``None`` otherwise.

        An unknown username still pays for one hash verification so the two
        failure cases cannot be told apart by timing.
        """
        try:
            user = await user_store.get_user_by_username(session, username)
        except SQLAlchemyError as exc:
            raise StorageError("Could not load user") from exc

        if user is None:
            await run_in_threadpool(self.hasher.dummy_verify)
            return None
        if not await run_in_threadpool(self.hasher.verify, password, user.password_hash):
            return None
        return user

    def issue_token(self, user: User) -> str:
        return self.signer.dumps(user.id)

    def verify_token(self, token: str) -> SessionClaims:
        return self.signer.loads(token)

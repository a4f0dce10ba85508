"""Security helpers for password hashing and session signing."""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from itsdangerous import BadData, TimestampSigner, URLSafeTimedSerializer
from passlib.context import CryptContext

from .config import get_settings

Clock = Callable[[], float]


class InvalidSessionError(ValueError):
    """Raised when a session token is tampered, expired or malformed."""


class PasswordHasher:
    """Hash and verify user passwords using salted bcrypt."""

    def __init__(self, rounds: int | None = None) -> None:
        rounds = rounds or get_settings().password_hash_rounds
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        return self._context.verify(password, hashed)

    def dummy_verify(self) -> bool:
        """Spend the same work as a real verification, for unknown usernames."""

        return self._context.dummy_verify()


class _ClockedTimestampSigner(TimestampSigner):
    """Timestamp signer that reads time from an injectable clock."""

    def __init__(self, *args: Any, clock: Clock = time.time, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._clock = clock

    def get_timestamp(self) -> int:
        return int(self._clock())


@dataclass(frozen=True, slots=True)
class SessionClaims:
    user_id: int
    issued_at: datetime
    expires_at: datetime


class SessionSigner:
    """Sign and unsign short-lived session payloads.

    Tokens are stateless: verification checks the signature and the age
    embedded by the signer, nothing is looked up server-side. A token stays
    valid until it expires even after the client logs out.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        max_age: int | None = None,
        salt: str = "agriinsight-session",
        clock: Clock | None = None,
    ) -> None:
        settings = get_settings()
        self.max_age = max_age if max_age is not None else settings.session_max_age_seconds
        self._serializer = URLSafeTimedSerializer(
            secret_key or settings.secret_key,
            salt=salt,
            signer=_ClockedTimestampSigner,
            signer_kwargs={"clock": clock or time.time},
        )

    def dumps(self, user_id: int) -> str:
        return self._serializer.dumps({"uid": user_id})

    def loads(self, token: str) -> SessionClaims:
        try:
            payload, signed_at = self._serializer.loads(token, max_age=self.max_age, return_timestamp=True)
        except BadData as exc:
            raise InvalidSessionError("Invalid or expired session token") from exc

        user_id = payload.get("uid") if isinstance(payload, dict) else None
        if not isinstance(user_id, int):
            raise InvalidSessionError("Session token carries no user id")

        issued_at = signed_at.astimezone(timezone.utc)
        return SessionClaims(
            user_id=user_id,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self.max_age),
        )

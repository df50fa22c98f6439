"""
app/services/auth_service.py

Password hashing and bearer token issuance / verification.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from app.config import get_auth_settings

PASSWORD_HASH_METHOD = "pbkdf2:sha256"


class InvalidTokenError(ValueError):
    """
    Raised when a bearer token is malformed, tampered with, or expired.
    """


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class AuthService:
    """
    Stateless helpers around the configured signing secret.
    """

    def __init__(self, *, secret: str, algorithm: str = "HS256", expires_hours: int = 24) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(hours=expires_hours)

    @staticmethod
    def hash_password(password: str) -> str:
        return generate_password_hash(password, method=PASSWORD_HASH_METHOD)

    @staticmethod
    def verify_password(password_hash: str, password: str) -> bool:
        return check_password_hash(password_hash, password)

    def issue_token(self, user_id: uuid.UUID, *, now: datetime | None = None) -> IssuedToken:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self._expires
        token = jwt.encode(
            {"sub": str(user_id), "iat": issued_at, "exp": expires_at},
            self._secret,
            algorithm=self._algorithm,
        )
        return IssuedToken(token=token, expires_at=expires_at)

    def decode_token(self, token: str) -> uuid.UUID:
        """
        Return the user id carried by a valid token.
        """

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Invalid token.") from exc

        try:
            return uuid.UUID(str(payload["sub"]))
        except ValueError as exc:
            raise InvalidTokenError("Invalid token subject.") from exc


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    settings = get_auth_settings()
    return AuthService(
        secret=settings.jwt_secret,
        algorithm=settings.algorithm,
        expires_hours=settings.expires_hours,
    )

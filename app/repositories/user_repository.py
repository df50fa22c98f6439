"""
app/repositories/user_repository.py

Persistence helpers for application users.
"""

from __future__ import annotations

import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.models.user import User
from db.repositories.errors import UserExistsError


class UserRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: uuid.UUID) -> User | None:
        return self._session.get(User, user_id)

    def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username.strip())
        return self._session.execute(stmt).scalars().first()

    def find_existing(self, *, username: str, email: str) -> User | None:
        stmt = select(User).where(
            or_(User.username == username.strip(), User.email == email.strip().lower())
        )
        return self._session.execute(stmt).scalars().first()

    def create(self, *, username: str, email: str, password_hash: str) -> User:
        """
        Insert a new user. Raises UserExistsError on username/email collision.
        """

        if self.find_existing(username=username, email=email) is not None:
            raise UserExistsError("User already exists")

        user = User(
            username=username.strip(),
            email=email.strip().lower(),
            password_hash=password_hash,
        )
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise UserExistsError("User already exists") from exc
        self._session.refresh(user)
        return user

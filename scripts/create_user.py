"""
Create an application user directly in the target store.

Usage: python -m scripts.create_user <username> <email> <password>
"""

from __future__ import annotations

import sys

from app.repositories.user_repository import UserRepository
from app.services.auth_service import AuthService
from db.repositories.errors import UserExistsError
from db.session import SessionLocal

USAGE = "Usage: python -m scripts.create_user <username> <email> <password>"


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 3:
        print(USAGE, file=sys.stderr)
        return 1

    username, email, password = args
    with SessionLocal() as db:
        users = UserRepository(db)
        try:
            user = users.create(
                username=username,
                email=email,
                password_hash=AuthService.hash_password(password),
            )
        except UserExistsError:
            print(f"User {username!r} or email {email!r} already exists; nothing to do.")
            return 0

    print(f"Created user {user.username} ({user.email}) id={user.id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

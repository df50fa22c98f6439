"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation, stores and auth.
"""

from __future__ import annotations

from fastapi import Depends, File, Header, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.repositories.pacing_target_repository import PacingTargetRepository
from app.repositories.reference_repository import ReferenceRepository
from app.repositories.user_repository import UserRepository
from app.services.auth_service import InvalidTokenError, get_auth_service
from db.models.user import User
from db.session import get_db, get_reference_db

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(file: UploadFile | None = File(None)) -> UploadFile:
    """
    Validate that a file was sent and that it is a CSV by extension or MIME type.
    """

    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def get_target_repository(db: Session = Depends(get_db)) -> PacingTargetRepository:
    return PacingTargetRepository(db)


def get_reference_repository(db: Session = Depends(get_reference_db)) -> ReferenceRepository:
    return ReferenceRepository(db)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    authorization: str | None = Header(default=None),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """
    Resolve the bearer token to a stored user or reject with 401.
    """

    if not authorization:
        raise _unauthorized("No token, authorization denied")
    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid authorization header format")

    try:
        user_id = get_auth_service().decode_token(authorization[len("Bearer ") :].strip())
    except InvalidTokenError as exc:
        raise _unauthorized(str(exc)) from exc

    user = users.get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user

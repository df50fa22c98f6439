"""
app/api/routers/auth_router.py

Registration, login and auth health endpoints.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_user_repository
from app.repositories.user_repository import UserRepository
from app.schemas.auth import (
    AuthHealthResponse,
    AuthResponse,
    DatabaseStatus,
    EnvironmentStatus,
    LoginRequest,
    RegisterRequest,
    UserSummary,
)
from app.services.auth_service import AuthService, get_auth_service
from db.repositories.errors import UserExistsError
from db.session import check_database_connection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _has_env(*names: str) -> bool:
    return any(os.getenv(name, "").strip() for name in names)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Create a user and return a bearer token for it.

    Raises HTTP 400 if the username or email is already taken.
    """

    try:
        user = users.create(
            username=body.username,
            email=body.email,
            password_hash=auth_service.hash_password(body.password),
        )
    except UserExistsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists") from exc

    logger.info("Registered user id=%s username=%s", user.id, user.username)
    issued = auth_service.issue_token(user.id)
    return AuthResponse(
        message="User registered successfully",
        token=issued.token,
        user=UserSummary.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    user = users.get_by_username(body.username)
    if user is None or not auth_service.verify_password(user.password_hash, body.password):
        logger.info("Rejected login for username=%s", body.username.strip())
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    issued = auth_service.issue_token(user.id)
    return AuthResponse(
        message="Login successful",
        token=issued.token,
        user=UserSummary.model_validate(user),
    )


@router.get("/health", response_model=AuthHealthResponse)
def auth_health(database_connected: bool = Depends(check_database_connection)) -> AuthHealthResponse:
    return AuthHealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=DatabaseStatus(connected=database_connected),
        environment=EnvironmentStatus(
            has_jwt_secret=_has_env("JWT_SECRET"),
            has_database_url=_has_env("DATABASE_URL", "LOCAL_DATABASE_URL", "CLOUD_DATABASE_URL"),
            has_reference_database_url=_has_env("REFERENCE_DATABASE_URL"),
        ),
    )

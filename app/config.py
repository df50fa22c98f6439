"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_UPLOAD_MAX_BYTES = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class AuthSettings:
    """
    Bearer token settings.
    """

    jwt_secret: str
    algorithm: str = "HS256"
    expires_hours: int = 24


@dataclass(frozen=True)
class UploadSettings:
    """
    Runtime settings for CSV upload, validation and import.
    """

    max_bytes: int = DEFAULT_UPLOAD_MAX_BYTES
    staging_dir: str = "data/uploads"
    uniqueness_fail_open: bool = True
    log_validation_errors: bool = True


@dataclass(frozen=True)
class APISettings:
    """
    HTTP surface settings.
    """

    cors_allow_origins: tuple[str, ...] = ("*",)


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """
    Return cached auth settings.

    Raises RuntimeError if JWT_SECRET is missing.
    """

    secret = _get_optional_str_env("JWT_SECRET")
    if secret is None:
        raise RuntimeError("JWT_SECRET must be set.")
    return AuthSettings(
        jwt_secret=secret,
        algorithm=_get_str_env("JWT_ALGORITHM", "HS256"),
        expires_hours=max(1, _get_int_env("JWT_EXPIRES_HOURS", 24)),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload settings from environment variables.
    """

    return UploadSettings(
        max_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", DEFAULT_UPLOAD_MAX_BYTES)),
        staging_dir=_get_str_env("UPLOAD_STAGING_DIR", "data/uploads"),
        uniqueness_fail_open=_get_bool_env("UPLOAD_UNIQUENESS_FAIL_OPEN", True),
        log_validation_errors=_get_bool_env("UPLOAD_LOG_VALIDATION_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> APISettings:
    """
    Return cached HTTP settings.
    """

    raw_origins = _get_str_env("CORS_ALLOW_ORIGINS", "*")
    origins = tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip())
    return APISettings(cors_allow_origins=origins or ("*",))

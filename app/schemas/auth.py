"""
app/schemas/auth.py

Request / response schemas for registration and login.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=3, description="Username must have at least 3 characters.")
    email: str = Field(..., pattern=_EMAIL_PATTERN, description="A valid email address.")
    password: str = Field(..., min_length=6, description="Password must have at least 6 characters.")


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    id: uuid.UUID
    username: str
    email: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserSummary


class DatabaseStatus(BaseModel):
    connected: bool


class EnvironmentStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_jwt_secret: bool
    has_database_url: bool
    has_reference_database_url: bool


class AuthHealthResponse(BaseModel):
    status: str
    timestamp: str
    database: DatabaseStatus
    environment: EnvironmentStatus

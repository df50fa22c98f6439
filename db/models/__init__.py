"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.pacing_target import PacingTarget
from db.models.user import User

__all__ = [
    "PacingTarget",
    "User",
]

"""
app/repositories package marker.
"""

from app.repositories.pacing_target_repository import PacingTargetRepository
from app.repositories.reference_repository import ReferenceRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "PacingTargetRepository",
    "ReferenceRepository",
    "UserRepository",
]

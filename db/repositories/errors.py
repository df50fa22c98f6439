"""
Repository-layer exceptions for target, reference and staging storage flows.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for repository failures."""


class TargetStoreError(StoreError):
    """Raised when the target store cannot be read or written."""


class DuplicateTargetError(TargetStoreError):
    """Raised when a write violates the pacing target uniqueness key."""


class ReferenceStoreError(StoreError):
    """Raised when reference data (clients, tags) cannot be read."""


class UserExistsError(StoreError):
    """Raised when a username or email is already registered."""


class FileStorageError(StoreError):
    """Raised when staging or deleting an uploaded file fails."""

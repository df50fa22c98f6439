"""
Repository layer exports.
"""

from db.repositories.errors import (
    DuplicateTargetError,
    FileStorageError,
    ReferenceStoreError,
    StoreError,
    TargetStoreError,
    UserExistsError,
)
from db.repositories.storage import StagingFileStorage
from db.repositories.types import ReferenceStore, StagedFile, TargetStore

__all__ = [
    "DuplicateTargetError",
    "FileStorageError",
    "ReferenceStore",
    "ReferenceStoreError",
    "StagedFile",
    "StagingFileStorage",
    "StoreError",
    "TargetStore",
    "TargetStoreError",
    "UserExistsError",
]

"""
Store interfaces consumed by the import pipeline, plus staging metadata.

The validation and commit services only depend on these protocols, so tests
and alternative backends can substitute their own implementations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from app.domain.pacing_target import PacingTargetInput, ReferenceTag, TargetKey


class TargetStore(Protocol):
    def exists(self, key: TargetKey) -> bool:
        ...

    def insert_many(self, records: Sequence[PacingTargetInput]) -> int:
        ...


class ReferenceStore(Protocol):
    def get_active_tag(self, *, client_subgroup_id: int, tag_id: int) -> ReferenceTag | None:
        ...

    def get_client_name(self, client_subgroup_id: int) -> str | None:
        ...


@dataclass(frozen=True)
class StagedFile:
    file_name: str
    path: Path
    size_bytes: int
    stored_at: datetime

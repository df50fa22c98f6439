"""
app/domain/pacing_target.py

Domain models used by the CSV import flow and target persistence.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

CSV_COLUMNS: tuple[str, ...] = (
    "client_subgroup_id",
    "tag_id",
    "tag_name",
    "tag_header",
    "channel_id",
    "month",
    "year",
    "spends_target",
)


@dataclass(frozen=True)
class TargetKey:
    """
    Uniqueness key of a pacing target.
    """

    client_subgroup_id: int
    channel: int
    tag_type: str
    tag_id: int
    month: str

    def describe(self) -> str:
        return (
            f"client_subgroup_id={self.client_subgroup_id}, channel_id={self.channel}, "
            f"tag_id={self.tag_id}, and month={self.month}"
        )


@dataclass(frozen=True)
class ReferenceTag:
    """
    One active tag row from the reference store.
    """

    client_subgroup_id: int
    tag_id: int
    tag_type_id: int
    tag_name: str

    @property
    def tag_header(self) -> str:
        return "Category" if self.tag_type_id == 1 else "Sub Category"


@dataclass(frozen=True)
class TargetCandidate:
    """
    Normalized CSV row that passed validation, prior to client name resolution.
    """

    row_number: int
    client_subgroup_id: int
    tag_name: str
    channel: int
    tag_type: str
    tag_id: int
    month: str
    spends_target: Decimal

    @property
    def key(self) -> TargetKey:
        return TargetKey(
            client_subgroup_id=self.client_subgroup_id,
            channel=self.channel,
            tag_type=self.tag_type,
            tag_id=self.tag_id,
            month=self.month,
        )


@dataclass(frozen=True)
class PacingTargetInput:
    """
    Typed pacing target prepared for persistence.
    """

    client_name: str
    client_subgroup_id: int
    tag_name: str
    channel: int
    tag_type: str
    tag_id: int
    month: str
    spends_target: Decimal
    created_by: uuid.UUID
    modified_by: uuid.UUID
    status: bool = True

    @property
    def key(self) -> TargetKey:
        return TargetKey(
            client_subgroup_id=self.client_subgroup_id,
            channel=self.channel,
            tag_type=self.tag_type,
            tag_id=self.tag_id,
            month=self.month,
        )


@dataclass(frozen=True)
class RowError:
    """
    One CSV row validation error.
    """

    row_number: int
    code: str
    error: str
    details: str
    data: Mapping[str, str | None]


@dataclass(frozen=True)
class RowWarning:
    """
    Non-blocking note about a row, e.g. a skipped uniqueness check.
    """

    row_number: int
    code: str
    details: str


@dataclass
class ValidationReport:
    """
    Outcome of one validation pass over a parsed CSV file.
    """

    total_rows: int = 0
    valid_rows: int = 0
    empty_rows: int = 0
    errors: list[RowError] = field(default_factory=list)
    warnings: list[RowWarning] = field(default_factory=list)
    candidates: list[TargetCandidate] = field(default_factory=list)

    @property
    def error_rows(self) -> int:
        return len(self.errors)

    @property
    def can_import(self) -> bool:
        return not self.errors


class ImportOutcome:
    COMMITTED = "committed"
    REJECTED = "rejected"
    NO_DATA = "no_data"
    CONFLICT = "conflict"
    STORE_FAILED = "store_failed"


@dataclass(frozen=True)
class ImportResult:
    """
    Outcome of one commit attempt.
    """

    outcome: str
    report: ValidationReport
    saved_targets: int = 0
    conflicts: list[RowError] = field(default_factory=list)
    store_error: str | None = None

    @property
    def committed(self) -> bool:
        return self.outcome == ImportOutcome.COMMITTED

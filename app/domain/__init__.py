"""
app/domain package marker.
"""

from app.domain.pacing_target import (
    CSV_COLUMNS,
    ImportOutcome,
    ImportResult,
    PacingTargetInput,
    ReferenceTag,
    RowError,
    RowWarning,
    TargetCandidate,
    TargetKey,
    ValidationReport,
)

__all__ = [
    "CSV_COLUMNS",
    "ImportOutcome",
    "ImportResult",
    "PacingTargetInput",
    "ReferenceTag",
    "RowError",
    "RowWarning",
    "TargetCandidate",
    "TargetKey",
    "ValidationReport",
]

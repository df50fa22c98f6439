"""
app/validators/duplicate_detector.py

Detects rows of one upload that share a pacing target key.

Key fields are compared in normalized form where they parse (so month "08"
and "8" collide) and as trimmed text where they do not. Every colliding row
is reported; none is preferred over the others.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from typing import Any, Hashable, Mapping

from app.validators.csv_validator import canonical_month, is_completely_empty_row, parse_int
from db.models.pacing_target import TagType


def _int_or_text(value: Any) -> Hashable:
    parsed = parse_int(value)
    if parsed is not None:
        return parsed
    return "" if value is None else str(value).strip()


def duplicate_key(row: Mapping[str, Any]) -> tuple[Hashable, ...]:
    """
    Build the in-file uniqueness key for one raw row.
    """

    tag_header = row.get("tag_header")
    tag_id = 0 if tag_header == TagType.ACCOUNT else _int_or_text(row.get("tag_id"))
    month: Hashable = canonical_month(row.get("month"), row.get("year"))
    if month is None:
        month = (_int_or_text(row.get("month")), _int_or_text(row.get("year")))
    return (
        _int_or_text(row.get("client_subgroup_id")),
        _int_or_text(row.get("channel_id")),
        tag_header,
        tag_id,
        month,
    )


class DuplicateDetector:
    """
    Counts key occurrences across all non-empty rows of one upload.
    """

    def __init__(self, rows: Sequence[Mapping[str, Any]]) -> None:
        self._counts: Counter[tuple[Hashable, ...]] = Counter(
            duplicate_key(row) for row in rows if not is_completely_empty_row(row)
        )

    def is_duplicate(self, row: Mapping[str, Any]) -> bool:
        return self._counts[duplicate_key(row)] > 1

    @staticmethod
    def describe(row: Mapping[str, Any]) -> str:
        return (
            f"{row.get('tag_header')} entry already exists for "
            f"client_subgroup_id={row.get('client_subgroup_id')}, channel_id={row.get('channel_id')}, "
            f"tag_id={row.get('tag_id')}, month={row.get('month')}, and year={row.get('year')} "
            "in this upload"
        )

"""
app/validators/csv_validator.py

Row-level validation and type parsing for pacing target CSV uploads.

Checks run in a fixed order and the first failing check decides the row's
error. Reference tags are looked up only once every syntactic check passed.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from app.domain.pacing_target import CSV_COLUMNS, ReferenceTag, RowError, TargetCandidate
from app.failure_codes import RowErrorCode
from db.models.pacing_target import ALLOWED_CHANNEL_IDS, ALLOWED_TAG_TYPES, TagType
from db.repositories.types import ReferenceStore

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_YEAR_PATTERN = re.compile(r"^\d{4}$")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return all(str(item).strip() == "" for item in value)
    return str(value).strip() == ""


def is_completely_empty_row(row: Mapping[Any, Any]) -> bool:
    """
    Return True when all values in the row are empty or whitespace.
    """

    return all(is_blank(value) for value in row.values())


def parse_int(value: Any) -> int | None:
    """
    Parse a plain base-10 integer (sign allowed, surrounding whitespace ignored).
    """

    if value is None:
        return None
    raw = str(value).strip()
    if not _INTEGER_PATTERN.match(raw):
        return None
    return int(raw)


def parse_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    raw = str(value).strip()
    if not _NUMBER_PATTERN.match(raw):
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


def canonical_month(month: Any, year: Any) -> str | None:
    """
    Combine a 1-12 month and a four digit year into ``YYYY-MM``.
    """

    month_number = parse_int(month)
    if month_number is None or not 1 <= month_number <= 12:
        return None
    year_text = "" if year is None else str(year).strip()
    if not _YEAR_PATTERN.match(year_text):
        return None
    return f"{year_text}-{month_number:02d}"


def raw_row_data(row: Mapping[Any, Any]) -> dict[str, str | None]:
    """
    JSON-safe copy of a parsed row; overflow cells without a header are dropped.
    """

    return {str(key): value for key, value in row.items() if key is not None and not isinstance(value, list)}


class RowRejected(Exception):
    """
    Internal signal carrying the first failed check for a row.
    """

    def __init__(self, code: str, error: str, details: str) -> None:
        super().__init__(details)
        self.code = code
        self.error = error
        self.details = details


class CSVRowValidator:
    """
    Validates one raw CSV row and normalizes it into a target candidate.
    """

    def __init__(self, reference_store: ReferenceStore) -> None:
        self._reference_store = reference_store

    def validate_row(
        self,
        *,
        row: Mapping[str, Any],
        row_number: int,
    ) -> tuple[TargetCandidate | None, RowError | None]:
        """
        Validate one non-empty row.

        Store failures during the reference lookup are not caught here.
        """

        try:
            candidate = self._check(row=row, row_number=row_number)
        except RowRejected as rejected:
            return None, RowError(
                row_number=row_number,
                code=rejected.code,
                error=rejected.error,
                details=rejected.details,
                data=raw_row_data(row),
            )
        return candidate, None

    def _check(self, *, row: Mapping[str, Any], row_number: int) -> TargetCandidate:
        if any(is_blank(row.get(column)) for column in CSV_COLUMNS):
            raise RowRejected(
                RowErrorCode.MISSING_FIELDS,
                "Missing required fields",
                "All fields are required: " + ", ".join(CSV_COLUMNS),
            )

        client_subgroup_id = parse_int(row["client_subgroup_id"])
        if client_subgroup_id is None:
            raise RowRejected(
                RowErrorCode.INVALID_CLIENT_ID,
                "Invalid client_subgroup_id",
                "client_subgroup_id must be a valid number",
            )

        tag_header = row["tag_header"]
        is_account = tag_header == TagType.ACCOUNT
        if is_account:
            tag_id = 0
        else:
            parsed_tag_id = parse_int(row["tag_id"])
            if parsed_tag_id is None:
                raise RowRejected(
                    RowErrorCode.INVALID_TAG_ID,
                    "Invalid tag_id",
                    "tag_id must be a valid number",
                )
            tag_id = parsed_tag_id

        channel = parse_int(row["channel_id"])
        if channel is None or channel not in ALLOWED_CHANNEL_IDS:
            raise RowRejected(
                RowErrorCode.INVALID_CHANNEL,
                "Invalid channel_id",
                "channel_id must be one of: " + ", ".join(str(value) for value in ALLOWED_CHANNEL_IDS),
            )

        spends_target = parse_decimal(row["spends_target"])
        if spends_target is None or not spends_target.is_finite() or spends_target < 0:
            raise RowRejected(
                RowErrorCode.INVALID_SPENDS_TARGET,
                "Invalid spends_target",
                "spends_target must be a non-negative number (>= 0)",
            )

        if tag_header not in ALLOWED_TAG_TYPES:
            raise RowRejected(
                RowErrorCode.INVALID_TAG_HEADER,
                "Invalid tag_header",
                "tag_header must be either 'Category', 'Sub Category', or 'Account'",
            )

        month = self._check_month(row)
        tag_name = str(row["tag_name"]).strip()

        if is_account:
            if tag_name != "Account":
                raise RowRejected(
                    RowErrorCode.INVALID_ACCOUNT_NAME,
                    "Invalid Account tag name",
                    "Tag name for Account type must be exactly 'Account'",
                )
        else:
            self._check_reference_tag(
                client_subgroup_id=client_subgroup_id,
                tag_id=tag_id,
                tag_name=tag_name,
                raw_tag_name=str(row["tag_name"]),
                tag_header=tag_header,
            )

        return TargetCandidate(
            row_number=row_number,
            client_subgroup_id=client_subgroup_id,
            tag_name=tag_name,
            channel=channel,
            tag_type=tag_header,
            tag_id=tag_id,
            month=month,
            spends_target=spends_target,
        )

    @staticmethod
    def _check_month(row: Mapping[str, Any]) -> str:
        month_number = parse_int(row["month"])
        if month_number is None or not 1 <= month_number <= 12:
            raise RowRejected(
                RowErrorCode.INVALID_MONTH,
                "Invalid month format",
                "Month must be a number between 1-12",
            )
        month = canonical_month(row["month"], row["year"])
        if month is None:
            raise RowRejected(
                RowErrorCode.INVALID_MONTH,
                "Invalid month format",
                "Year must be a 4-digit number",
            )
        return month

    def _check_reference_tag(
        self,
        *,
        client_subgroup_id: int,
        tag_id: int,
        tag_name: str,
        raw_tag_name: str,
        tag_header: str,
    ) -> ReferenceTag:
        tag = self._reference_store.get_active_tag(
            client_subgroup_id=client_subgroup_id,
            tag_id=tag_id,
        )
        if tag is None:
            raise RowRejected(
                RowErrorCode.TAG_NOT_FOUND,
                "Tag validation failed",
                f"No active tag found with client_subgroup_id={client_subgroup_id} and tag_id={tag_id}",
            )
        if tag.tag_name != tag_name:
            raise RowRejected(
                RowErrorCode.TAG_NAME_MISMATCH,
                "Tag name mismatch",
                f"Tag name '{raw_tag_name}' doesn't match database value '{tag.tag_name}'",
            )
        if tag.tag_header != tag_header:
            raise RowRejected(
                RowErrorCode.TAG_HEADER_MISMATCH,
                "Tag header mismatch",
                f"Tag header '{tag_header}' doesn't match database value '{tag.tag_header}'",
            )
        return tag

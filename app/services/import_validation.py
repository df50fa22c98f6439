"""
app/services/import_validation.py

Validation pipeline shared by the validate and import endpoints.

For every row, in file order:

    1. row-level field checks (including the reference tag lookup)
    2. in-file duplicate detection
    3. existing-target lookup in the target store

Rows are independent: a failure in one row never stops the others. The
pipeline only reads from the stores.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Mapping

from app.domain.pacing_target import RowError, RowWarning, TargetCandidate, ValidationReport
from app.failure_codes import RowErrorCode, RowWarningCode
from app.validators.csv_validator import CSVRowValidator, is_completely_empty_row, raw_row_data
from app.validators.duplicate_detector import DuplicateDetector
from db.repositories.errors import TargetStoreError
from db.repositories.types import ReferenceStore, TargetStore

logger = logging.getLogger(__name__)

HEADER_ROW_OFFSET = 2


def row_numbers(row_count: int, line_numbers: Sequence[int] | None = None) -> list[int]:
    """
    Report numbers for parsed rows: the physical line each row starts on.

    Without parser line numbers, rows are assumed to follow the header one
    line each.
    """

    if line_numbers is None:
        return [index + HEADER_ROW_OFFSET for index in range(row_count)]
    if len(line_numbers) != row_count:
        raise ValueError("line_numbers must have one entry per row.")
    return list(line_numbers)


class ImportValidationPipeline:
    """
    Runs the per-row checks and aggregates a ValidationReport.
    """

    def __init__(
        self,
        *,
        uniqueness_fail_open: bool = True,
        log_validation_errors: bool = True,
    ) -> None:
        self._uniqueness_fail_open = uniqueness_fail_open
        self._log_validation_errors = log_validation_errors

    def run(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        target_store: TargetStore,
        reference_store: ReferenceStore,
        line_numbers: Sequence[int] | None = None,
    ) -> ValidationReport:
        report = ValidationReport(total_rows=len(rows))
        validator = CSVRowValidator(reference_store)
        duplicates = DuplicateDetector(rows)

        for row_number, row in zip(row_numbers(len(rows), line_numbers), rows):
            if is_completely_empty_row(row):
                report.empty_rows += 1
                continue

            try:
                candidate = self._evaluate_row(
                    row=row,
                    row_number=row_number,
                    validator=validator,
                    duplicates=duplicates,
                    target_store=target_store,
                    report=report,
                )
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected failure while validating CSV row=%s", row_number)
                self._record_error(
                    report,
                    RowError(
                        row_number=row_number,
                        code=RowErrorCode.DATA_PROCESSING_ERROR,
                        error="Data processing error",
                        details=str(exc) or exc.__class__.__name__,
                        data=raw_row_data(row),
                    ),
                )
                continue

            if candidate is not None:
                report.valid_rows += 1
                report.candidates.append(candidate)

        return report

    def _evaluate_row(
        self,
        *,
        row: Mapping[str, Any],
        row_number: int,
        validator: CSVRowValidator,
        duplicates: DuplicateDetector,
        target_store: TargetStore,
        report: ValidationReport,
    ) -> TargetCandidate | None:
        candidate, error = validator.validate_row(row=row, row_number=row_number)
        if error is not None:
            self._record_error(report, error)
            return None

        if duplicates.is_duplicate(row):
            self._record_error(
                report,
                RowError(
                    row_number=row_number,
                    code=RowErrorCode.DUPLICATE_IN_CSV,
                    error=f"Duplicate {candidate.tag_type} in CSV",
                    details=duplicates.describe(row),
                    data=raw_row_data(row),
                ),
            )
            return None

        error = self._check_existing(candidate=candidate, row=row, target_store=target_store, report=report)
        if error is not None:
            self._record_error(report, error)
            return None

        return candidate

    def _check_existing(
        self,
        *,
        candidate: TargetCandidate,
        row: Mapping[str, Any],
        target_store: TargetStore,
        report: ValidationReport,
    ) -> RowError | None:
        key = candidate.key
        try:
            exists = target_store.exists(key)
        except TargetStoreError as exc:
            if not self._uniqueness_fail_open:
                return RowError(
                    row_number=candidate.row_number,
                    code=RowErrorCode.STORE_UNAVAILABLE,
                    error="Uniqueness check unavailable",
                    details=f"Could not check existing targets for {key.describe()}: {exc}",
                    data=raw_row_data(row),
                )
            logger.warning(
                "Existing-target check skipped row=%s key=%s: %s",
                candidate.row_number,
                key,
                exc,
            )
            report.warnings.append(
                RowWarning(
                    row_number=candidate.row_number,
                    code=RowWarningCode.UNIQUENESS_CHECK_SKIPPED,
                    details=f"Existing targets could not be checked for {key.describe()}",
                )
            )
            return None

        if not exists:
            return None
        return already_exists_error(candidate, row)

    def _record_error(self, report: ValidationReport, error: RowError) -> None:
        if self._log_validation_errors:
            logger.warning(
                "CSV validation error row=%s code=%s details=%s",
                error.row_number,
                error.code,
                error.details,
            )
        report.errors.append(error)


def already_exists_error(candidate: TargetCandidate, row: Mapping[str, Any]) -> RowError:
    return RowError(
        row_number=candidate.row_number,
        code=RowErrorCode.ALREADY_EXISTS,
        error=f"{candidate.tag_type} already exists",
        details=f"{candidate.tag_type} entry already exists in database for {candidate.key.describe()}",
        data=raw_row_data(row),
    )

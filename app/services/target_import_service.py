"""
app/services/target_import_service.py

Service layer for pacing target CSV uploads.

Both entry points stage the upload on local disk, parse it, and run the shared
validation pipeline. ``import_upload`` additionally commits the rows, but only
when the whole file validates cleanly:

    Uploaded -> Parsed -> Validating -> Rejected | Validated
    Validated -> Committing -> Committed | CommitFailed

The staged file is removed before either call returns, on every path.
"""

from __future__ import annotations

import csv
import logging
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from fastapi import UploadFile

from app.config import get_upload_settings
from app.domain.pacing_target import (
    CSV_COLUMNS,
    ImportOutcome,
    ImportResult,
    PacingTargetInput,
    RowError,
    TargetCandidate,
    ValidationReport,
)
from app.logging_utils import log_event
from app.services.import_validation import ImportValidationPipeline, already_exists_error, row_numbers
from db.repositories.errors import DuplicateTargetError, ReferenceStoreError, TargetStoreError
from db.repositories.storage import StagingFileStorage
from db.repositories.types import ReferenceStore, StagedFile, TargetStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVHeaderValidationError(ValueError):
    """
    Raised when CSV shape/header validation fails.
    """


class UploadTooLargeError(ValueError):
    """
    Raised when an upload exceeds the configured size limit.
    """


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


@dataclass
class ParsedCSV:
    """
    Data rows of a staged CSV and the physical line each row starts on.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    line_numbers: list[int] = field(default_factory=list)


def read_csv_rows(path: Path) -> ParsedCSV:
    """
    Parse a staged CSV file into row mappings keyed by trimmed header names.

    A bare blank line is kept as an all-empty row so it is counted as an
    Empty row and later rows keep their physical line numbers.
    """

    try:
        with path.open("r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.reader(handle)
            headers = next(reader, [])
            if not headers:
                raise CSVHeaderValidationError("CSV header row is missing.")

            fieldnames = [header.strip() for header in headers]
            missing = [column for column in CSV_COLUMNS if column not in fieldnames]
            if missing:
                raise CSVHeaderValidationError(
                    "CSV header is missing required columns: " + ", ".join(missing)
                )

            parsed = ParsedCSV()
            while True:
                line_number = reader.line_num + 1
                values = next(reader, None)
                if values is None:
                    break
                parsed.rows.append(_row_mapping(fieldnames, values))
                parsed.line_numbers.append(line_number)
            return parsed
    except UnicodeDecodeError as exc:
        raise CSVHeaderValidationError("CSV must be UTF-8 encoded.") from exc
    except csv.Error as exc:
        raise CSVHeaderValidationError(f"Invalid CSV format: {exc}") from exc


def _row_mapping(fieldnames: Sequence[str], values: Sequence[str]) -> dict[str, Any]:
    if not values:
        return {name: "" for name in fieldnames}

    row: dict[Any, Any] = dict(zip(fieldnames, values))
    for name in fieldnames[len(values):]:
        row.setdefault(name, None)
    if len(values) > len(fieldnames):
        row[None] = list(values[len(fieldnames):])
    return row


def template_csv() -> str:
    return ",".join(CSV_COLUMNS)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TargetImportService:
    """
    Coordinates staging, parsing, validation and batch persistence.
    """

    def __init__(
        self,
        *,
        max_upload_bytes: int,
        storage: StagingFileStorage,
        pipeline: ImportValidationPipeline | None = None,
    ) -> None:
        self._max_upload_bytes = max(1, max_upload_bytes)
        self._storage = storage
        self._pipeline = pipeline or ImportValidationPipeline()

    # ------------------------------------------------------------------
    # Upload entry points
    # ------------------------------------------------------------------

    def validate_upload(
        self,
        *,
        upload_file: UploadFile,
        target_store: TargetStore,
        reference_store: ReferenceStore,
    ) -> ValidationReport:
        with self._staged(upload_file) as staged:
            parsed = read_csv_rows(staged.path)
            report = self.validate_rows(
                parsed.rows,
                target_store=target_store,
                reference_store=reference_store,
                line_numbers=parsed.line_numbers,
            )

        log_event(
            logger,
            logging.INFO,
            "csv_validated",
            file_name=staged.file_name,
            total_rows=report.total_rows,
            valid_rows=report.valid_rows,
            empty_rows=report.empty_rows,
            error_rows=report.error_rows,
            warnings=len(report.warnings),
        )
        return report

    def import_upload(
        self,
        *,
        upload_file: UploadFile,
        target_store: TargetStore,
        reference_store: ReferenceStore,
        user_id: uuid.UUID,
    ) -> ImportResult:
        with self._staged(upload_file) as staged:
            parsed = read_csv_rows(staged.path)
            result = self.commit_rows(
                parsed.rows,
                target_store=target_store,
                reference_store=reference_store,
                user_id=user_id,
                line_numbers=parsed.line_numbers,
            )

        log_event(
            logger,
            logging.INFO if result.committed else logging.WARNING,
            "csv_import_finished",
            file_name=staged.file_name,
            outcome=result.outcome,
            total_rows=result.report.total_rows,
            error_rows=result.report.error_rows,
            saved_targets=result.saved_targets,
            user_id=user_id,
        )
        return result

    # ------------------------------------------------------------------
    # Row-level operations
    # ------------------------------------------------------------------

    def validate_rows(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        target_store: TargetStore,
        reference_store: ReferenceStore,
        line_numbers: Sequence[int] | None = None,
    ) -> ValidationReport:
        return self._pipeline.run(
            rows,
            target_store=target_store,
            reference_store=reference_store,
            line_numbers=line_numbers,
        )

    def commit_rows(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        target_store: TargetStore,
        reference_store: ReferenceStore,
        user_id: uuid.UUID,
        line_numbers: Sequence[int] | None = None,
    ) -> ImportResult:
        """
        Re-validate ``rows`` and insert them as one batch if every row passes.

        Nothing is written when any row fails. Insert atomicity is that of the
        target store's transaction.
        """

        report = self.validate_rows(
            rows,
            target_store=target_store,
            reference_store=reference_store,
            line_numbers=line_numbers,
        )
        if not report.can_import:
            return ImportResult(outcome=ImportOutcome.REJECTED, report=report)
        if not report.candidates:
            return ImportResult(outcome=ImportOutcome.NO_DATA, report=report)

        records = self._build_records(report.candidates, reference_store=reference_store, user_id=user_id)
        try:
            saved = target_store.insert_many(records)
        except DuplicateTargetError:
            logger.warning("Batch insert hit the target key constraint; re-checking %d rows", len(records))
            conflicts = self._find_conflicts(
                report.candidates,
                rows_by_number=dict(zip(row_numbers(len(rows), line_numbers), rows)),
                target_store=target_store,
            )
            return ImportResult(outcome=ImportOutcome.CONFLICT, report=report, conflicts=conflicts)
        except TargetStoreError as exc:
            logger.error("Batch insert of %d pacing targets failed: %s", len(records), exc)
            return ImportResult(outcome=ImportOutcome.STORE_FAILED, report=report, store_error=str(exc))

        return ImportResult(outcome=ImportOutcome.COMMITTED, report=report, saved_targets=saved)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _staged(self, upload_file: UploadFile) -> Iterator[StagedFile]:
        content = self._read_bounded(upload_file)
        staged = self._storage.save(file_name=upload_file.filename or "upload.csv", content=content)
        try:
            yield staged
        finally:
            self._storage.delete_quietly(staged)

    def _read_bounded(self, upload_file: UploadFile) -> bytes:
        raw_file = upload_file.file
        raw_file.seek(0)
        content = raw_file.read(self._max_upload_bytes + 1)
        if len(content) > self._max_upload_bytes:
            raise UploadTooLargeError(
                f"Uploaded file exceeds the {self._max_upload_bytes} byte limit."
            )
        return content

    def _build_records(
        self,
        candidates: Sequence[TargetCandidate],
        *,
        reference_store: ReferenceStore,
        user_id: uuid.UUID,
    ) -> list[PacingTargetInput]:
        client_names: dict[int, str] = {}
        records: list[PacingTargetInput] = []
        for candidate in candidates:
            client_id = candidate.client_subgroup_id
            if client_id not in client_names:
                client_names[client_id] = self._resolve_client_name(client_id, reference_store)
            records.append(
                PacingTargetInput(
                    client_name=client_names[client_id],
                    client_subgroup_id=client_id,
                    tag_name=candidate.tag_name,
                    channel=candidate.channel,
                    tag_type=candidate.tag_type,
                    tag_id=candidate.tag_id,
                    month=candidate.month,
                    spends_target=candidate.spends_target,
                    created_by=user_id,
                    modified_by=user_id,
                )
            )
        return records

    @staticmethod
    def _resolve_client_name(client_subgroup_id: int, reference_store: ReferenceStore) -> str:
        fallback = f"Client {client_subgroup_id}"
        try:
            name = reference_store.get_client_name(client_subgroup_id)
        except ReferenceStoreError as exc:
            logger.warning("Client name lookup failed id=%s: %s", client_subgroup_id, exc)
            return fallback
        return name or fallback

    @staticmethod
    def _find_conflicts(
        candidates: Sequence[TargetCandidate],
        *,
        rows_by_number: Mapping[int, Mapping[str, Any]],
        target_store: TargetStore,
    ) -> list[RowError]:
        conflicts: list[RowError] = []
        for candidate in candidates:
            try:
                exists = target_store.exists(candidate.key)
            except TargetStoreError as exc:
                logger.warning("Conflict re-check failed row=%s: %s", candidate.row_number, exc)
                continue
            if exists:
                conflicts.append(already_exists_error(candidate, rows_by_number[candidate.row_number]))
        return conflicts


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_target_import_service() -> TargetImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_upload_settings()
    return TargetImportService(
        max_upload_bytes=settings.max_bytes,
        storage=StagingFileStorage(settings.staging_dir),
        pipeline=ImportValidationPipeline(
            uniqueness_fail_open=settings.uniqueness_fail_open,
            log_validation_errors=settings.log_validation_errors,
        ),
    )

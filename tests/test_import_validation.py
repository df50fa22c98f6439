"""
tests/test_import_validation.py

Pytest tests for the shared validation pipeline.

No database: stores are in-memory fakes from conftest.

Coverage
--------
- Upload scenarios A-F
- Empty rows are counted, never reported
- Row numbering (header is line 1)
- Check ordering (field errors win over duplicates)
- Uniqueness check fail-open warning and fail-closed error
- Unexpected reference failures become DataProcessingError
- Idempotence across repeated runs
"""

from __future__ import annotations

import pytest
from conftest import FakeReferenceStore, FakeTargetStore, SEARCH_TAG, empty_row, make_row, scenario_a_key

from app.domain.pacing_target import ReferenceTag
from app.failure_codes import RowErrorCode, RowWarningCode
from app.services.import_validation import ImportValidationPipeline
from db.repositories.errors import ReferenceStoreError, TargetStoreError


@pytest.fixture()
def pipeline() -> ImportValidationPipeline:
    return ImportValidationPipeline()


def _codes(report) -> list[str]:
    return [error.code for error in report.errors]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_a_valid_row_passes_with_canonical_month(self, pipeline, target_store, reference_store) -> None:
        report = pipeline.run([make_row()], target_store=target_store, reference_store=reference_store)

        assert report.can_import is True
        assert report.errors == []
        assert report.valid_rows == 1
        assert report.candidates[0].month == "2025-08"

    def test_b_reference_name_mismatch(self, pipeline, target_store) -> None:
        reference_store = FakeReferenceStore(
            tags=[ReferenceTag(client_subgroup_id=5, tag_id=10, tag_type_id=1, tag_name="Display")]
        )
        report = pipeline.run([make_row()], target_store=target_store, reference_store=reference_store)

        assert _codes(report) == [RowErrorCode.TAG_NAME_MISMATCH]
        assert report.can_import is False

    def test_c_identical_rows_are_both_duplicates(self, pipeline, target_store, reference_store) -> None:
        report = pipeline.run(
            [make_row(), make_row()],
            target_store=target_store,
            reference_store=reference_store,
        )

        assert _codes(report) == [RowErrorCode.DUPLICATE_IN_CSV, RowErrorCode.DUPLICATE_IN_CSV]
        assert [error.row_number for error in report.errors] == [2, 3]
        assert report.errors[0].error == "Duplicate Category in CSV"
        assert report.valid_rows == 0

    def test_d_negative_spends_target(self, pipeline, target_store, reference_store) -> None:
        report = pipeline.run(
            [make_row(spends_target="-5")],
            target_store=target_store,
            reference_store=reference_store,
        )

        assert _codes(report) == [RowErrorCode.INVALID_SPENDS_TARGET]

    def test_e_existing_target_blocks_import(self, pipeline, reference_store) -> None:
        target_store = FakeTargetStore(existing=[scenario_a_key()])
        report = pipeline.run([make_row()], target_store=target_store, reference_store=reference_store)

        assert _codes(report) == [RowErrorCode.ALREADY_EXISTS]
        assert report.errors[0].error == "Category already exists"
        assert report.errors[0].details == (
            "Category entry already exists in database for "
            "client_subgroup_id=5, channel_id=1, tag_id=10, and month=2025-08"
        )
        assert report.can_import is False

    def test_f_header_only_file(self, pipeline, target_store, reference_store) -> None:
        report = pipeline.run([], target_store=target_store, reference_store=reference_store)

        assert report.total_rows == 0
        assert report.valid_rows == 0
        assert report.empty_rows == 0
        assert report.errors == []
        assert report.can_import is True


# ---------------------------------------------------------------------------
# Row accounting
# ---------------------------------------------------------------------------


class TestRowAccounting:
    def test_empty_rows_are_counted_not_reported(self, pipeline, target_store, reference_store) -> None:
        rows = [empty_row(), make_row(), empty_row()]
        report = pipeline.run(rows, target_store=target_store, reference_store=reference_store)

        assert report.total_rows == 3
        assert report.empty_rows == 2
        assert report.valid_rows == 1
        assert report.errors == []

    def test_row_numbers_count_the_header_line(self, pipeline, target_store, reference_store) -> None:
        rows = [make_row(), empty_row(), make_row(channel_id="3")]
        report = pipeline.run(rows, target_store=target_store, reference_store=reference_store)

        assert [error.row_number for error in report.errors] == [4]

    def test_parser_line_numbers_are_reported(self, pipeline, target_store, reference_store) -> None:
        rows = [make_row(channel_id="2"), make_row(channel_id="3")]
        report = pipeline.run(rows, target_store=target_store, reference_store=reference_store, line_numbers=[2, 4])

        assert [error.row_number for error in report.errors] == [4]

    def test_line_numbers_must_match_rows(self, pipeline, target_store, reference_store) -> None:
        with pytest.raises(ValueError):
            pipeline.run([make_row()], target_store=target_store, reference_store=reference_store, line_numbers=[])

    def test_every_row_is_checked_after_a_failure(self, pipeline, target_store, reference_store) -> None:
        rows = [make_row(client_subgroup_id="x"), make_row(channel_id="3"), make_row()]
        report = pipeline.run(rows, target_store=target_store, reference_store=reference_store)

        assert _codes(report) == [RowErrorCode.INVALID_CLIENT_ID, RowErrorCode.INVALID_CHANNEL]
        assert report.valid_rows == 1

    def test_field_error_wins_over_duplicate(self, pipeline, target_store, reference_store) -> None:
        rows = [make_row(tag_id="99"), make_row(tag_id="99")]
        report = pipeline.run(rows, target_store=target_store, reference_store=reference_store)

        assert _codes(report) == [RowErrorCode.TAG_NOT_FOUND, RowErrorCode.TAG_NOT_FOUND]

    def test_invalid_row_still_collides_with_a_valid_one(self, pipeline, target_store, reference_store) -> None:
        rows = [make_row(), make_row(spends_target="-1")]
        report = pipeline.run(rows, target_store=target_store, reference_store=reference_store)

        assert _codes(report) == [RowErrorCode.DUPLICATE_IN_CSV, RowErrorCode.INVALID_SPENDS_TARGET]

    def test_duplicates_are_not_looked_up_in_the_store(self, pipeline, target_store, reference_store) -> None:
        pipeline.run([make_row(), make_row()], target_store=target_store, reference_store=reference_store)

        assert target_store.exists_calls == []

    def test_validation_is_idempotent(self, pipeline, reference_store) -> None:
        target_store = FakeTargetStore(existing=[scenario_a_key()])
        rows = [make_row(), make_row(channel_id="2"), make_row(month="13"), empty_row()]

        first = pipeline.run(rows, target_store=target_store, reference_store=reference_store)
        second = pipeline.run(rows, target_store=target_store, reference_store=reference_store)

        assert first.errors == second.errors
        assert first.can_import == second.can_import
        assert first.valid_rows == second.valid_rows == 1


# ---------------------------------------------------------------------------
# Store failures
# ---------------------------------------------------------------------------


class TestStoreFailures:
    def test_uniqueness_check_fails_open_with_warning(self, pipeline, target_store, reference_store) -> None:
        target_store.exists_error = TargetStoreError("connection refused")
        report = pipeline.run([make_row()], target_store=target_store, reference_store=reference_store)

        assert report.errors == []
        assert report.valid_rows == 1
        assert report.can_import is True
        assert [warning.code for warning in report.warnings] == [RowWarningCode.UNIQUENESS_CHECK_SKIPPED]
        assert report.warnings[0].row_number == 2

    def test_uniqueness_check_fails_closed_when_configured(self, target_store, reference_store) -> None:
        pipeline = ImportValidationPipeline(uniqueness_fail_open=False)
        target_store.exists_error = TargetStoreError("connection refused")
        report = pipeline.run([make_row()], target_store=target_store, reference_store=reference_store)

        assert _codes(report) == [RowErrorCode.STORE_UNAVAILABLE]
        assert report.warnings == []
        assert report.can_import is False

    def test_reference_failure_becomes_data_processing_error(self, pipeline, target_store) -> None:
        reference_store = FakeReferenceStore(tags=[SEARCH_TAG])
        reference_store.tag_error = ReferenceStoreError("Reference data is unavailable.")
        rows = [make_row(), make_row(tag_header="Account", tag_name="Account", channel_id="2")]

        report = pipeline.run(rows, target_store=target_store, reference_store=reference_store)

        assert _codes(report) == [RowErrorCode.DATA_PROCESSING_ERROR]
        assert report.errors[0].details == "Reference data is unavailable."
        assert report.valid_rows == 1

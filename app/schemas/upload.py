"""
app/schemas/upload.py

Response schemas for CSV upload endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.pacing_target import ImportResult, RowError, RowWarning, ValidationReport


class RowErrorResponse(BaseModel):
    """
    API response model for one row-level validation error.
    """

    row: int = Field(..., ge=1)
    code: str
    error: str
    details: str
    data: dict[str, str | None] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, error: RowError) -> "RowErrorResponse":
        return cls(
            row=error.row_number,
            code=error.code,
            error=error.error,
            details=error.details,
            data=dict(error.data),
        )


class RowWarningResponse(BaseModel):
    row: int = Field(..., ge=1)
    code: str
    details: str

    @classmethod
    def from_domain(cls, warning: RowWarning) -> "RowWarningResponse":
        return cls(row=warning.row_number, code=warning.code, details=warning.details)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidationSummaryResponse(_CamelModel):
    """
    Result of POST /api/upload/validate.
    """

    message: str
    total_rows: int = Field(..., ge=0)
    valid_rows: int = Field(..., ge=0)
    empty_rows: int = Field(..., ge=0)
    error_rows: int = Field(..., ge=0)
    errors: list[RowErrorResponse] = Field(default_factory=list)
    warnings: list[RowWarningResponse] = Field(default_factory=list)
    can_import: bool

    @classmethod
    def from_report(cls, report: ValidationReport) -> "ValidationSummaryResponse":
        message = (
            "CSV validation successful! You can now import the data."
            if report.can_import
            else "CSV validation failed. Please fix the errors and try again."
        )
        return cls(
            message=message,
            total_rows=report.total_rows,
            valid_rows=report.valid_rows,
            empty_rows=report.empty_rows,
            error_rows=report.error_rows,
            errors=[RowErrorResponse.from_domain(error) for error in report.errors],
            warnings=[RowWarningResponse.from_domain(warning) for warning in report.warnings],
            can_import=report.can_import,
        )


class ImportSummaryResponse(_CamelModel):
    """
    Result of POST /api/upload/csv.
    """

    message: str
    total_rows: int = Field(..., ge=0)
    valid_rows: int = Field(..., ge=0)
    error_rows: int = Field(..., ge=0)
    errors: list[RowErrorResponse] = Field(default_factory=list)
    warnings: list[RowWarningResponse] = Field(default_factory=list)
    saved_targets: int = Field(..., ge=0)
    store_error: str | None = None

    @classmethod
    def from_result(cls, result: ImportResult, *, message: str) -> "ImportSummaryResponse":
        report = result.report
        row_errors = report.errors or result.conflicts
        return cls(
            message=message,
            total_rows=report.total_rows,
            valid_rows=report.valid_rows if result.committed or result.store_error else 0,
            error_rows=len(row_errors),
            errors=[RowErrorResponse.from_domain(error) for error in row_errors],
            warnings=[RowWarningResponse.from_domain(warning) for warning in report.warnings],
            saved_targets=result.saved_targets,
            store_error=result.store_error,
        )

"""
app/api/routers/upload_router.py

Pacing target CSV upload endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    get_csv_upload,
    get_current_user,
    get_reference_repository,
    get_target_repository,
)
from app.domain.pacing_target import ImportOutcome, ImportResult
from app.repositories.pacing_target_repository import PacingTargetRepository
from app.repositories.reference_repository import ReferenceRepository
from app.schemas.upload import ImportSummaryResponse, ValidationSummaryResponse
from app.services.target_import_service import (
    CSVHeaderValidationError,
    TargetImportService,
    UploadTooLargeError,
    get_target_import_service,
    template_csv,
)
from db.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])

TEMPLATE_FILE_NAME = "pacing-targets-template.csv"

_OUTCOME_STATUS = {
    ImportOutcome.COMMITTED: status.HTTP_200_OK,
    ImportOutcome.REJECTED: status.HTTP_400_BAD_REQUEST,
    ImportOutcome.NO_DATA: status.HTTP_400_BAD_REQUEST,
    ImportOutcome.CONFLICT: status.HTTP_409_CONFLICT,
    ImportOutcome.STORE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _import_message(result: ImportResult) -> str:
    if result.outcome == ImportOutcome.COMMITTED:
        return f"Successfully imported {result.saved_targets} pacing targets"
    if result.outcome == ImportOutcome.REJECTED:
        return "CSV validation failed. No data was imported. Please fix all errors and try again."
    if result.outcome == ImportOutcome.NO_DATA:
        return "No valid data found in CSV"
    if result.outcome == ImportOutcome.CONFLICT:
        return "Some pacing targets were created by another request. No data was imported."
    return "Failed to save pacing targets. No data was imported."


def _file_error(exc: Exception) -> HTTPException:
    if isinstance(exc, UploadTooLargeError):
        return HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/validate", response_model=ValidationSummaryResponse)
def validate_csv(
    file: UploadFile = Depends(get_csv_upload),
    target_store: PacingTargetRepository = Depends(get_target_repository),
    reference_store: ReferenceRepository = Depends(get_reference_repository),
    import_service: TargetImportService = Depends(get_target_import_service),
    _user: User = Depends(get_current_user),
) -> ValidationSummaryResponse:
    """
    Validate a CSV without saving anything.

    Always answers 200 once the file itself is readable; row problems are
    reported in the body.
    """

    try:
        report = import_service.validate_upload(
            upload_file=file,
            target_store=target_store,
            reference_store=reference_store,
        )
    except (CSVHeaderValidationError, UploadTooLargeError) as exc:
        raise _file_error(exc) from exc
    except Exception as exc:
        logger.exception("CSV validation failed unexpectedly file=%s", file.filename)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error during CSV validation",
        ) from exc
    finally:
        file.file.close()

    return ValidationSummaryResponse.from_report(report)


@router.post("/csv", response_model=ImportSummaryResponse)
def import_csv(
    file: UploadFile = Depends(get_csv_upload),
    target_store: PacingTargetRepository = Depends(get_target_repository),
    reference_store: ReferenceRepository = Depends(get_reference_repository),
    import_service: TargetImportService = Depends(get_target_import_service),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """
    Validate and import a CSV. Rows are saved only if every row is valid.
    """

    try:
        result = import_service.import_upload(
            upload_file=file,
            target_store=target_store,
            reference_store=reference_store,
            user_id=user.id,
        )
    except (CSVHeaderValidationError, UploadTooLargeError) as exc:
        raise _file_error(exc) from exc
    except Exception as exc:
        logger.exception("CSV import failed unexpectedly file=%s", file.filename)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error during CSV import",
        ) from exc
    finally:
        file.file.close()

    body = ImportSummaryResponse.from_result(result, message=_import_message(result))
    return JSONResponse(
        status_code=_OUTCOME_STATUS[result.outcome],
        content=body.model_dump(
            mode="json",
            by_alias=True,
            exclude={"store_error"} if result.store_error is None else None,
        ),
    )


@router.get("/template")
def download_template(_user: User = Depends(get_current_user)) -> Response:
    return Response(
        content=template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILE_NAME}"'},
    )

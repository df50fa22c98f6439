"""
app/services package marker.
"""

from app.services.auth_service import AuthService, InvalidTokenError, get_auth_service
from app.services.import_validation import ImportValidationPipeline
from app.services.target_import_service import (
    CSVHeaderValidationError,
    TargetImportService,
    UploadTooLargeError,
    get_target_import_service,
)

__all__ = [
    "AuthService",
    "CSVHeaderValidationError",
    "ImportValidationPipeline",
    "InvalidTokenError",
    "TargetImportService",
    "UploadTooLargeError",
    "get_auth_service",
    "get_target_import_service",
]

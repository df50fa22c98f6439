"""
app/schemas package marker.
"""

from app.schemas.auth import AuthHealthResponse, AuthResponse, LoginRequest, RegisterRequest, UserSummary
from app.schemas.tags import ClientListResponse, ClientTagsResponse, TagDetailResponse, TagResponse, TagSearchResponse
from app.schemas.targets import (
    MessageResponse,
    TargetCreateRequest,
    TargetResponse,
    TargetUpdateRequest,
    ToggleStatusResponse,
)
from app.schemas.upload import (
    ImportSummaryResponse,
    RowErrorResponse,
    RowWarningResponse,
    ValidationSummaryResponse,
)

__all__ = [
    "AuthHealthResponse",
    "AuthResponse",
    "ClientListResponse",
    "ClientTagsResponse",
    "ImportSummaryResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "RowErrorResponse",
    "RowWarningResponse",
    "TagDetailResponse",
    "TagResponse",
    "TagSearchResponse",
    "TargetCreateRequest",
    "TargetResponse",
    "TargetUpdateRequest",
    "ToggleStatusResponse",
    "UserSummary",
    "ValidationSummaryResponse",
]

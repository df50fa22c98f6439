"""
app/api/routers/tags_router.py

Read-only client and tag lookups backed by the reference store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_current_user, get_reference_repository
from app.repositories.reference_repository import ReferenceRepository, account_tag
from app.schemas.tags import (
    ClientListResponse,
    ClientResponse,
    ClientTagsResponse,
    TagDetailResponse,
    TagResponse,
    TagSearchResponse,
)
from db.models.pacing_target import TagType
from db.models.user import User
from db.repositories.errors import ReferenceStoreError

router = APIRouter(prefix="/api/tags", tags=["tags"])

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 20


def _reference_unavailable(exc: ReferenceStoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("/clients", response_model=ClientListResponse)
def list_clients(
    repository: ReferenceRepository = Depends(get_reference_repository),
    _user: User = Depends(get_current_user),
) -> ClientListResponse:
    try:
        rows = repository.list_clients()
    except ReferenceStoreError as exc:
        raise _reference_unavailable(exc) from exc
    return ClientListResponse(clients=[ClientResponse(**row) for row in rows])


@router.get("/client/{client_subgroup_id}", response_model=ClientTagsResponse)
def list_client_tags(
    client_subgroup_id: int,
    repository: ReferenceRepository = Depends(get_reference_repository),
    _user: User = Depends(get_current_user),
) -> ClientTagsResponse:
    try:
        rows = repository.list_tags(client_subgroup_id)
    except ReferenceStoreError as exc:
        raise _reference_unavailable(exc) from exc
    return ClientTagsResponse(
        client_subgroup_id=client_subgroup_id,
        tags=[TagResponse(**row) for row in rows],
    )


@router.get("/search/{client_subgroup_id}", response_model=TagSearchResponse)
def search_client_tags(
    client_subgroup_id: int,
    q: str = Query(default=""),
    repository: ReferenceRepository = Depends(get_reference_repository),
    _user: User = Depends(get_current_user),
) -> TagSearchResponse:
    query = q.strip()
    if len(query) < MIN_SEARCH_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query must be at least 2 characters long",
        )
    try:
        rows = repository.search_tags(client_subgroup_id, query, limit=SEARCH_LIMIT)
    except ReferenceStoreError as exc:
        raise _reference_unavailable(exc) from exc
    return TagSearchResponse(
        client_subgroup_id=client_subgroup_id,
        search_query=query,
        tags=[TagResponse(**row) for row in rows],
    )


@router.get("/filtered/{client_subgroup_id}", response_model=list[TagResponse])
def list_filtered_tags(
    client_subgroup_id: int,
    tag_type: str | None = Query(default=None, alias="tagType"),
    repository: ReferenceRepository = Depends(get_reference_repository),
    _user: User = Depends(get_current_user),
) -> list[TagResponse]:
    """
    Tags for the target form. ``Account`` yields the single synthetic Account tag.
    """

    if tag_type == TagType.ACCOUNT:
        return [TagResponse(**account_tag(client_subgroup_id))]
    try:
        rows = repository.list_tags(client_subgroup_id, tag_header=tag_type, order_by_type=False)
    except ReferenceStoreError as exc:
        raise _reference_unavailable(exc) from exc
    return [TagResponse(**row) for row in rows]


@router.get("/tag/{tag_id}", response_model=TagDetailResponse)
def get_tag(
    tag_id: int,
    repository: ReferenceRepository = Depends(get_reference_repository),
    _user: User = Depends(get_current_user),
) -> TagDetailResponse:
    try:
        row = repository.get_tag(tag_id)
    except ReferenceStoreError as exc:
        raise _reference_unavailable(exc) from exc
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return TagDetailResponse(tag=TagResponse(**row))

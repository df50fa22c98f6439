"""
app/api/routers/targets_router.py

Pacing target CRUD endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_current_user, get_target_repository
from app.domain.pacing_target import PacingTargetInput
from app.repositories.pacing_target_repository import PacingTargetRepository
from app.schemas.targets import (
    MessageResponse,
    TargetCreateRequest,
    TargetResponse,
    TargetUpdateRequest,
    ToggleStatusResponse,
)
from db.models.pacing_target import PacingTarget, TagType
from db.models.user import User
from db.repositories.errors import DuplicateTargetError, TargetStoreError

router = APIRouter(prefix="/api/targets", tags=["targets"])


def _get_or_404(repository: PacingTargetRepository, target_id: uuid.UUID) -> PacingTarget:
    target = repository.get(target_id)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found")
    return target


def _store_failure(exc: TargetStoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=list[TargetResponse])
def list_targets(
    month: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$"),
    client_subgroup_id: str | None = Query(default=None, alias="clientSubgroupId"),
    search: str | None = Query(default=None),
    repository: PacingTargetRepository = Depends(get_target_repository),
    _user: User = Depends(get_current_user),
) -> list[TargetResponse]:
    """
    List targets newest first. ``clientSubgroupId=all`` disables the client filter.
    """

    client_filter: int | None = None
    if client_subgroup_id and client_subgroup_id != "all":
        try:
            client_filter = int(client_subgroup_id)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="clientSubgroupId must be a number or 'all'",
            ) from exc

    targets = repository.list_targets(
        month=month,
        client_subgroup_id=client_filter,
        search=(search or "").strip() or None,
    )
    return [TargetResponse.from_model(target) for target in targets]


@router.get("/{target_id}", response_model=TargetResponse)
def get_target(
    target_id: uuid.UUID,
    repository: PacingTargetRepository = Depends(get_target_repository),
    _user: User = Depends(get_current_user),
) -> TargetResponse:
    return TargetResponse.from_model(_get_or_404(repository, target_id))


@router.post("", response_model=TargetResponse, status_code=status.HTTP_201_CREATED)
def create_target(
    body: TargetCreateRequest,
    repository: PacingTargetRepository = Depends(get_target_repository),
    user: User = Depends(get_current_user),
) -> TargetResponse:
    """
    Create one target.

    Raises HTTP 409 if a target with the same client, channel, tag and month
    already exists.
    """

    record = PacingTargetInput(
        client_name=body.client_name,
        client_subgroup_id=body.client_subgroup_id,
        tag_name=body.tag_name,
        channel=body.channel,
        tag_type=body.tag_type,
        tag_id=0 if body.tag_type == TagType.ACCOUNT else body.tag_id,
        month=body.month,
        spends_target=body.spends_target,
        created_by=user.id,
        modified_by=user.id,
    )
    try:
        target = repository.create(record)
    except DuplicateTargetError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{record.tag_type} entry already exists for {record.key.describe()}",
        ) from exc
    except TargetStoreError as exc:
        raise _store_failure(exc) from exc
    return TargetResponse.from_model(target)


@router.put("/{target_id}", response_model=TargetResponse)
def update_target(
    target_id: uuid.UUID,
    body: TargetUpdateRequest,
    repository: PacingTargetRepository = Depends(get_target_repository),
    user: User = Depends(get_current_user),
) -> TargetResponse:
    target = _get_or_404(repository, target_id)
    try:
        target = repository.update_spends_target(
            target,
            spends_target=body.spends_target,
            modified_by=user.id,
        )
    except TargetStoreError as exc:
        raise _store_failure(exc) from exc
    return TargetResponse.from_model(target)


@router.patch("/{target_id}/toggle-status", response_model=ToggleStatusResponse)
def toggle_target_status(
    target_id: uuid.UUID,
    repository: PacingTargetRepository = Depends(get_target_repository),
    user: User = Depends(get_current_user),
) -> ToggleStatusResponse:
    target = _get_or_404(repository, target_id)
    try:
        target = repository.toggle_status(target, modified_by=user.id)
    except TargetStoreError as exc:
        raise _store_failure(exc) from exc
    return ToggleStatusResponse(message="Status updated successfully", status=target.status)


@router.delete("/{target_id}", response_model=MessageResponse)
def delete_target(
    target_id: uuid.UUID,
    repository: PacingTargetRepository = Depends(get_target_repository),
    _user: User = Depends(get_current_user),
) -> MessageResponse:
    target = _get_or_404(repository, target_id)
    try:
        repository.delete(target)
    except TargetStoreError as exc:
        raise _store_failure(exc) from exc
    return MessageResponse(message="Target deleted successfully")

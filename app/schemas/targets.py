"""
app/schemas/targets.py

Request / response schemas for pacing target CRUD.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from db.models.pacing_target import ALLOWED_CHANNEL_IDS, PacingTarget, TagType
from db.models.user import User

TagTypeLiteral = Literal["Category", "Sub Category", "Account"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class UserRef(BaseModel):
    id: uuid.UUID
    username: str

    @classmethod
    def from_model(cls, user: User | None) -> "UserRef | None":
        if user is None:
            return None
        return cls(id=user.id, username=user.username)


class TargetCreateRequest(_CamelModel):
    client_name: str = Field(..., min_length=1)
    client_subgroup_id: int
    tag_name: str = Field(..., min_length=1)
    channel: int
    tag_type: TagTypeLiteral
    tag_id: int = 0
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    spends_target: Decimal = Field(..., ge=0)

    @field_validator("channel")
    @classmethod
    def _channel_allowed(cls, value: int) -> int:
        if value not in ALLOWED_CHANNEL_IDS:
            allowed = ", ".join(str(channel) for channel in ALLOWED_CHANNEL_IDS)
            raise ValueError(f"channel must be one of: {allowed}")
        return value

    @model_validator(mode="after")
    def _tag_id_required_for_tags(self) -> "TargetCreateRequest":
        if self.tag_type != TagType.ACCOUNT and self.tag_id <= 0:
            raise ValueError("Tag ID must be a valid number for Category/Sub Category types")
        return self


class TargetUpdateRequest(_CamelModel):
    spends_target: Decimal = Field(..., ge=0)


class TargetResponse(_CamelModel):
    id: uuid.UUID
    client_name: str
    client_subgroup_id: int
    tag_name: str
    channel: int
    tag_type: str
    tag_id: int
    month: str
    spends_target: float
    status: bool
    created_by: UserRef | None = None
    modified_by: UserRef | None = None
    last_modified: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, target: PacingTarget) -> "TargetResponse":
        return cls(
            id=target.id,
            client_name=target.client_name,
            client_subgroup_id=target.client_subgroup_id,
            tag_name=target.tag_name,
            channel=target.channel,
            tag_type=target.tag_type,
            tag_id=target.tag_id,
            month=target.month,
            spends_target=float(target.spends_target),
            status=target.status,
            created_by=UserRef.from_model(target.created_by),
            modified_by=UserRef.from_model(target.modified_by),
            last_modified=target.last_modified,
            created_at=target.created_at,
            updated_at=target.updated_at,
        )


class ToggleStatusResponse(BaseModel):
    message: str
    status: bool


class MessageResponse(BaseModel):
    message: str

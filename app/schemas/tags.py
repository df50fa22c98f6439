"""
app/schemas/tags.py

Response schemas for reference data lookups.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TagResponse(BaseModel):
    client_subgroup_id: int
    tag_id: int
    tag_type_id: int
    tag_name: str
    tag_header: str | None = None


class ClientResponse(BaseModel):
    id: int
    client_subgroup_name: str | None = None


class ClientListResponse(BaseModel):
    clients: list[ClientResponse]


class TagDetailResponse(BaseModel):
    tag: TagResponse


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClientTagsResponse(_CamelModel):
    client_subgroup_id: int
    tags: list[TagResponse]


class TagSearchResponse(_CamelModel):
    client_subgroup_id: int
    search_query: str
    tags: list[TagResponse]

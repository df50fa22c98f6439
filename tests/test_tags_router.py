"""
tests/test_tags_router.py

HTTP tests for /api/tags against an in-memory reference repository.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_current_user, get_reference_repository
from app.main import app
from db.repositories.errors import ReferenceStoreError

TAGS = [
    {"client_subgroup_id": 5, "tag_id": 10, "tag_type_id": 1, "tag_name": "Search", "tag_header": "Category"},
    {"client_subgroup_id": 5, "tag_id": 11, "tag_type_id": 2, "tag_name": "Display", "tag_header": "Sub Category"},
]


class FakeReferenceRepository:
    def __init__(self) -> None:
        self.fail = False
        self.list_tags_calls: list[tuple[int, str | None]] = []

    def _guard(self) -> None:
        if self.fail:
            raise ReferenceStoreError("Reference data is unavailable.")

    def list_clients(self) -> list[dict]:
        self._guard()
        return [{"id": 5, "client_subgroup_name": "Acme Retail"}]

    def list_tags(self, client_subgroup_id: int, *, tag_header=None, order_by_type=True) -> list[dict]:
        self._guard()
        self.list_tags_calls.append((client_subgroup_id, tag_header))
        headers = {tag_header} if tag_header in ("Category", "Sub Category") else {"Category", "Sub Category"}
        return [tag for tag in TAGS if tag["client_subgroup_id"] == client_subgroup_id and tag["tag_header"] in headers]

    def search_tags(self, client_subgroup_id: int, query: str, *, limit: int = 20) -> list[dict]:
        self._guard()
        return [tag for tag in TAGS if query.lower() in tag["tag_name"].lower()][:limit]

    def get_tag(self, tag_id: int) -> dict | None:
        self._guard()
        return next((tag for tag in TAGS if tag["tag_id"] == tag_id), None)


@pytest.fixture()
def repository() -> FakeReferenceRepository:
    return FakeReferenceRepository()


@pytest.fixture()
def client(repository: FakeReferenceRepository) -> Iterator[TestClient]:
    app.dependency_overrides[get_reference_repository] = lambda: repository
    app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=uuid.uuid4(), username="planner")
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_list_clients(client: TestClient) -> None:
    assert client.get("/api/tags/clients").json() == {
        "clients": [{"id": 5, "client_subgroup_name": "Acme Retail"}]
    }


def test_client_tags(client: TestClient) -> None:
    body = client.get("/api/tags/client/5").json()

    assert body["clientSubgroupId"] == 5
    assert [tag["tag_id"] for tag in body["tags"]] == [10, 11]


def test_search_requires_two_characters(client: TestClient) -> None:
    response = client.get("/api/tags/search/5", params={"q": "s"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Search query must be at least 2 characters long"}


def test_search(client: TestClient) -> None:
    body = client.get("/api/tags/search/5", params={"q": "disp"}).json()

    assert body["searchQuery"] == "disp"
    assert [tag["tag_name"] for tag in body["tags"]] == ["Display"]


def test_filtered_account_is_synthetic(client: TestClient, repository: FakeReferenceRepository) -> None:
    body = client.get("/api/tags/filtered/5", params={"tagType": "Account"}).json()

    assert body == [
        {"client_subgroup_id": 5, "tag_id": 0, "tag_type_id": 0, "tag_name": "Account", "tag_header": "Account"}
    ]
    assert repository.list_tags_calls == []


def test_filtered_by_type(client: TestClient) -> None:
    body = client.get("/api/tags/filtered/5", params={"tagType": "Sub Category"}).json()

    assert [tag["tag_name"] for tag in body] == ["Display"]


def test_tag_lookup(client: TestClient) -> None:
    assert client.get("/api/tags/tag/10").json()["tag"]["tag_name"] == "Search"

    missing = client.get("/api/tags/tag/999")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Tag not found"}


def test_reference_outage(client: TestClient, repository: FakeReferenceRepository) -> None:
    repository.fail = True

    response = client.get("/api/tags/clients")

    assert response.status_code == 503

"""
tests/test_upload_router.py

HTTP tests for /api/upload. Stores, the import service and the current user
are replaced through ``app.dependency_overrides``; no database is touched.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest
from conftest import FakeReferenceStore, FakeTargetStore, build_csv, empty_row, make_row, scenario_a_key
from fastapi.testclient import TestClient

from app.api.dependencies import (
    get_current_user,
    get_reference_repository,
    get_target_repository,
    get_user_repository,
)
from app.main import app
from app.services.import_validation import ImportValidationPipeline
from app.services.target_import_service import TargetImportService, get_target_import_service
from db.repositories.errors import DuplicateTargetError, TargetStoreError
from db.repositories.storage import StagingFileStorage

PLANNER = SimpleNamespace(id=uuid.UUID("00000000-0000-0000-0000-0000000000aa"), username="planner")


@pytest.fixture()
def staging_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture()
def client(
    target_store: FakeTargetStore,
    reference_store: FakeReferenceStore,
    staging_dir: Path,
) -> Iterator[TestClient]:
    service = TargetImportService(
        max_upload_bytes=4096,
        storage=StagingFileStorage(staging_dir),
        pipeline=ImportValidationPipeline(),
    )
    app.dependency_overrides[get_target_repository] = lambda: target_store
    app.dependency_overrides[get_reference_repository] = lambda: reference_store
    app.dependency_overrides[get_target_import_service] = lambda: service
    app.dependency_overrides[get_current_user] = lambda: PLANNER
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _csv_file(content: bytes, filename: str = "targets.csv") -> dict:
    return {"file": (filename, content, "text/csv")}


# ---------------------------------------------------------------------------
# /api/upload/validate
# ---------------------------------------------------------------------------


class TestValidateEndpoint:
    def test_valid_file(self, client: TestClient, staging_dir: Path) -> None:
        response = client.post("/api/upload/validate", files=_csv_file(build_csv([make_row(), empty_row()])))

        assert response.status_code == 200
        body = response.json()
        assert body["totalRows"] == 2
        assert body["validRows"] == 1
        assert body["emptyRows"] == 1
        assert body["errorRows"] == 0
        assert body["errors"] == []
        assert body["warnings"] == []
        assert body["canImport"] is True
        assert not staging_dir.exists() or list(staging_dir.iterdir()) == []

    def test_row_errors_still_answer_200(self, client: TestClient) -> None:
        response = client.post(
            "/api/upload/validate",
            files=_csv_file(build_csv([make_row(), make_row(channel_id="3")])),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["canImport"] is False
        assert body["errorRows"] == 1
        error = body["errors"][0]
        assert error["row"] == 3
        assert error["code"] == "InvalidChannel"
        assert error["error"] == "Invalid channel_id"
        assert error["data"]["channel_id"] == "3"

    def test_header_only_file(self, client: TestClient) -> None:
        response = client.post("/api/upload/validate", files=_csv_file(build_csv([])))

        assert response.status_code == 200
        body = response.json()
        assert (body["totalRows"], body["validRows"], body["emptyRows"]) == (0, 0, 0)
        assert body["errors"] == []
        assert body["canImport"] is True

    def test_skipped_uniqueness_check_is_a_warning(self, client: TestClient, target_store: FakeTargetStore) -> None:
        target_store.exists_error = TargetStoreError("timeout")

        response = client.post("/api/upload/validate", files=_csv_file(build_csv([make_row()])))

        body = response.json()
        assert body["canImport"] is True
        assert body["warnings"][0]["code"] == "UniquenessCheckSkipped"
        assert body["warnings"][0]["row"] == 2

    def test_missing_file(self, client: TestClient) -> None:
        response = client.post("/api/upload/validate")

        assert response.status_code == 400
        assert response.json() == {"detail": "No file uploaded"}

    def test_non_csv_file(self, client: TestClient) -> None:
        response = client.post(
            "/api/upload/validate",
            files={"file": ("targets.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Only CSV files are allowed."}

    def test_missing_columns(self, client: TestClient) -> None:
        response = client.post("/api/upload/validate", files=_csv_file(b"client_subgroup_id\n5\n"))

        assert response.status_code == 400
        assert "missing required columns" in response.json()["detail"]

    def test_oversized_file(self, client: TestClient) -> None:
        rows = [make_row(channel_id=str(index)) for index in range(200)]

        response = client.post("/api/upload/validate", files=_csv_file(build_csv(rows)))

        assert response.status_code == 413


# ---------------------------------------------------------------------------
# /api/upload/csv
# ---------------------------------------------------------------------------


class TestImportEndpoint:
    def test_successful_import(self, client: TestClient, target_store: FakeTargetStore) -> None:
        content = build_csv([make_row(), make_row(channel_id="2")])

        response = client.post("/api/upload/csv", files=_csv_file(content))

        assert response.status_code == 200
        body = response.json()
        assert body["savedTargets"] == 2
        assert body["totalRows"] == 2
        assert body["validRows"] == 2
        assert body["errorRows"] == 0
        assert body["errors"] == []
        assert "storeError" not in body
        assert {record.created_by for record in target_store.inserted} == {PLANNER.id}

    def test_validation_failure_imports_nothing(self, client: TestClient, target_store: FakeTargetStore) -> None:
        content = build_csv([make_row(), make_row(channel_id="2", spends_target="-5")])

        response = client.post("/api/upload/csv", files=_csv_file(content))

        assert response.status_code == 400
        body = response.json()
        assert body["validRows"] == 0
        assert body["savedTargets"] == 0
        assert body["errorRows"] == 1
        assert body["errors"][0]["code"] == "InvalidSpendsTarget"
        assert target_store.inserted == []

    def test_existing_target_rejects_import(self, client: TestClient, target_store: FakeTargetStore) -> None:
        target_store.existing.add(scenario_a_key())

        response = client.post("/api/upload/csv", files=_csv_file(build_csv([make_row()])))

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "AlreadyExists"

    def test_no_data(self, client: TestClient) -> None:
        response = client.post("/api/upload/csv", files=_csv_file(build_csv([empty_row()])))

        assert response.status_code == 400
        assert response.json()["message"] == "No valid data found in CSV"

    def test_conflict_at_commit(self, client: TestClient, target_store: FakeTargetStore) -> None:
        target_store.insert_error = DuplicateTargetError("duplicate key")
        target_store.keys_added_by_other_writer = {scenario_a_key()}

        response = client.post("/api/upload/csv", files=_csv_file(build_csv([make_row()])))

        assert response.status_code == 409
        body = response.json()
        assert body["savedTargets"] == 0
        assert body["errors"][0]["code"] == "AlreadyExists"

    def test_store_failure(self, client: TestClient, target_store: FakeTargetStore) -> None:
        target_store.insert_error = TargetStoreError("Failed to insert pacing targets.")

        response = client.post("/api/upload/csv", files=_csv_file(build_csv([make_row()])))

        assert response.status_code == 500
        body = response.json()
        assert body["errors"] == []
        assert body["savedTargets"] == 0
        assert body["storeError"] == "Failed to insert pacing targets."


# ---------------------------------------------------------------------------
# /api/upload/template and auth
# ---------------------------------------------------------------------------


class TestTemplateEndpoint:
    def test_template_download(self, client: TestClient) -> None:
        response = client.get("/api/upload/template")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="pacing-targets-template.csv"' in response.headers["content-disposition"]
        assert response.text == (
            "client_subgroup_id,tag_id,tag_name,tag_header,channel_id,month,year,spends_target"
        )


def test_upload_requires_a_token() -> None:
    app.dependency_overrides[get_user_repository] = lambda: SimpleNamespace(get=lambda user_id: None)
    try:
        response = TestClient(app).get("/api/upload/template")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

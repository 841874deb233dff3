"""Unit tests for the FastAPI adapter – uploads, validation dependency and error mapping."""
from __future__ import annotations

import io

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from starlette.datastructures import Headers, UploadFile

# Imported at module level so FastAPI can resolve string-form annotations
# (from __future__ import annotations makes every hint a lazy string).
from blobstage.adapters.fastapi import (
    FastAPIExceptionMapper,
    upload_rules_dep,
    upload_source,
    upload_sources,
)
from blobstage.application.files import (
    FileValidator,
    InMemoryContainerService,
    RawUpload,
    StagingService,
)
from blobstage.config.settings.staging import StagingSettings
from blobstage.kernel.errors import (
    DomainError,
    InfrastructureError,
    NameResolutionExhaustedError,
    UploadFailedError,
)


# ---------------------------------------------------------------------------
# upload_source / upload_sources
# ---------------------------------------------------------------------------


class TestUploadSource:
    def test_maps_upload_file(self) -> None:
        file = UploadFile(
            io.BytesIO(b"hello"),
            size=5,
            filename="a.txt",
            headers=Headers({"content-type": "text/plain"}),
        )
        source = upload_source(file)
        assert source.filename == "a.txt"
        assert source.content_type == "text/plain"
        assert source.content_length == 5
        assert source.stream is file.file

    def test_missing_metadata_defaults(self) -> None:
        source = upload_source(UploadFile(io.BytesIO(b"")))
        assert source.filename == ""
        assert source.content_type == "application/octet-stream"
        assert source.content_length is None

    def test_none_entries_skipped(self) -> None:
        files = [UploadFile(io.BytesIO(b"a"), filename="a"), None]
        assert [s.filename for s in upload_sources(files)] == ["a"]


# ---------------------------------------------------------------------------
# upload_rules_dep + StagingService
# ---------------------------------------------------------------------------


rules = upload_rules_dep(FileValidator(max_size_bytes=10, content_types=["text/"]))


def make_app(containers: InMemoryContainerService) -> FastAPI:
    app = FastAPI()
    FastAPIExceptionMapper().register(app)
    service = StagingService(containers, StagingSettings(container_name="Docs"))

    @app.post("/files")
    async def upload(sources: list[RawUpload] = Depends(rules)) -> dict[str, list[str]]:
        return {"keys": service.stage(sources)}

    return app


class TestUploadEndpoint:
    def test_files_are_staged_with_unique_names(self) -> None:
        containers = InMemoryContainerService()
        client = TestClient(make_app(containers))
        resp = client.post(
            "/files",
            files=[
                ("files", ("a.txt", b"first", "text/plain")),
                ("files", ("a.txt", b"second", "text/plain")),
            ],
        )
        assert resp.status_code == 200
        assert resp.json() == {"keys": ["a.txt", "a (1).txt"]}
        store = containers.containers["docs"]
        assert store.get("a (1).txt") == b"second"

    def test_second_request_does_not_overwrite(self) -> None:
        containers = InMemoryContainerService()
        client = TestClient(make_app(containers))
        payload = [("files", ("a.txt", b"v1", "text/plain"))]
        client.post("/files", files=payload)
        resp = client.post("/files", files=[("files", ("a.txt", b"v2", "text/plain"))])
        assert resp.json() == {"keys": ["a (1).txt"]}
        assert containers.containers["docs"].get("a.txt") == b"v1"

    def test_invalid_upload_rejected_with_422(self) -> None:
        containers = InMemoryContainerService()
        client = TestClient(make_app(containers))
        resp = client.post(
            "/files",
            files=[
                ("files", ("ok.txt", b"ok", "text/plain")),
                ("files", ("pic.png", b"\x89PNG", "image/png")),
            ],
        )
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert len(detail) == 1
        assert "pic.png" in detail[0]
        assert containers.containers == {}

    def test_oversized_upload_rejected(self) -> None:
        client = TestClient(make_app(InMemoryContainerService()))
        resp = client.post("/files", files=[("files", ("big.txt", b"x" * 11, "text/plain"))])
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# FastAPIExceptionMapper
# ---------------------------------------------------------------------------


def _raising_app(exc: Exception) -> TestClient:
    app = FastAPI()
    FastAPIExceptionMapper().register(app)

    @app.get("/boom")
    async def boom() -> None:
        raise exc

    return TestClient(app, raise_server_exceptions=False)


class TestExceptionMapper:
    @pytest.mark.parametrize(
        ("exc", "status", "code"),
        [
            (NameResolutionExhaustedError("a.txt", 3), 409, "name_resolution_exhausted"),
            (UploadFailedError("a.txt", OSError("disk"), uploaded=["b.txt"]), 502, "upload_failed"),
            (InfrastructureError("store down"), 503, "infrastructure_error"),
            (DomainError("bad"), 422, "domain_error"),
        ],
    )
    def test_status_and_body(self, exc: Exception, status: int, code: str) -> None:
        resp = _raising_app(exc).get("/boom")
        assert resp.status_code == status
        assert resp.json()["code"] == code

    def test_validation_error_is_400(self) -> None:
        from blobstage.application.files import FileValidationError

        resp = _raising_app(FileValidationError(["too big"])).get("/boom")
        assert resp.status_code == 400
        body = resp.json()
        assert body["errors"] == [{"message": "too big"}]

    def test_upload_failure_reports_written_keys(self) -> None:
        exc = UploadFailedError("a.txt", OSError("disk"), uploaded=["b.txt"])
        body = _raising_app(exc).get("/boom").json()
        assert body["detail"] == {"save_name": "a.txt", "uploaded": ["b.txt"]}
        assert "OSError" in body["cause"]

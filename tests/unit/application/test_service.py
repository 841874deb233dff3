"""Unit tests for StagingService."""
from __future__ import annotations

import asyncio

import pytest

from blobstage.application.files import (
    BatchStagedEvent,
    FileValidationError,
    FileValidator,
    InMemoryBlobStore,
    InMemoryContainerService,
    RawUpload,
    StagingService,
)
from blobstage.config.settings.staging import StagingSettings
from blobstage.kernel.errors import InvalidInputError, NameResolutionExhaustedError
from blobstage.testing import image_bytes_gen


def _sources(*names: str) -> list[RawUpload]:
    return [RawUpload.from_bytes(n, "text/plain", n.encode()) for n in names]


@pytest.fixture
def containers() -> InMemoryContainerService:
    return InMemoryContainerService()


# ---------------------------------------------------------------------------
# stage()
# ---------------------------------------------------------------------------


class TestStage:
    def test_end_to_end(self, containers: InMemoryContainerService) -> None:
        service = StagingService(containers, StagingSettings(container_name="User Docs"))
        keys = service.stage(_sources("a.txt", "a.txt"))
        assert keys == ["a.txt", "a (1).txt"]
        store = containers.containers["user-docs"]
        assert store.public_read is True
        assert store.get("a (1).txt") == b"a.txt"

    def test_existing_blobs_are_kept(self, containers: InMemoryContainerService) -> None:
        settings = StagingSettings(container_name="docs")
        service = StagingService(containers, settings)
        service.stage(_sources("report.pdf"))
        keys = service.stage(_sources("report.pdf"))
        assert keys == ["report (1).pdf"]
        event = service.events[-1]
        assert event.renamed == {"report.pdf": "report (1).pdf"}

    def test_emits_event(self, containers: InMemoryContainerService) -> None:
        service = StagingService(containers, StagingSettings(container_name="docs"))
        service.stage(_sources("a.txt", "bb.txt"))
        assert service.events == [
            BatchStagedEvent(container="docs", keys=("a.txt", "bb.txt"), renamed={}, size_bytes=11)
        ]

    def test_name_transform(self, containers: InMemoryContainerService) -> None:
        service = StagingService(containers, StagingSettings(container_name="docs"))
        keys = service.stage(_sources("A.TXT"), lambda name: f"inbox/{name.lower()}")
        assert keys == ["inbox/a.txt"]

    def test_validation_runs_before_anything_is_written(
        self, containers: InMemoryContainerService
    ) -> None:
        service = StagingService(
            containers,
            StagingSettings(container_name="docs"),
            validator=FileValidator(max_size_bytes=3),
        )
        with pytest.raises(FileValidationError):
            service.stage(_sources("long-name.txt"))
        assert containers.containers == {}
        assert service.events == []

    def test_images_are_scaled_when_configured(self, containers: InMemoryContainerService) -> None:
        settings = StagingSettings(container_name="pics", image_max_dimension=64)
        service = StagingService(containers, settings)
        sources = [RawUpload.from_bytes("big.png", "image/png", image_bytes_gen(256, 128))]
        service.stage(sources)
        store = containers.containers["pics"]
        assert store.content_type("big.png") == "image/jpeg"

    def test_attempt_ceiling_from_settings(self, containers: InMemoryContainerService) -> None:
        store = containers.ensure_container("docs")
        for key in ("a.txt", "a (1).txt"):
            store.put_stream(key, "text/plain", RawUpload.from_bytes(key, "text/plain", b"").stream)  # type: ignore[arg-type]
        service = StagingService(containers, StagingSettings(container_name="docs", max_name_attempts=1))
        sources = _sources("a.txt")
        with pytest.raises(NameResolutionExhaustedError):
            service.stage(sources)
        assert sources[0].stream.closed  # type: ignore[union-attr]

    def test_container_failure_closes_streams(self) -> None:
        class Failing(InMemoryContainerService):
            def ensure_container(self, canonical_name: str) -> InMemoryBlobStore:
                raise ConnectionError("down")

        sources = _sources("a.txt")
        service = StagingService(Failing(), StagingSettings(container_name="docs"))
        with pytest.raises(ConnectionError):
            service.stage(sources)
        assert sources[0].stream.closed  # type: ignore[union-attr]

    def test_failed_batch_build_closes_every_stream(self, containers: InMemoryContainerService) -> None:
        first, last = _sources("a.txt", "c.txt")
        sources = [first, RawUpload(stream=None, filename="b.txt"), last]
        service = StagingService(containers, StagingSettings(container_name="docs"))
        with pytest.raises(InvalidInputError):
            service.stage(sources)
        assert first.stream.closed  # type: ignore[union-attr]
        assert last.stream.closed  # type: ignore[union-attr]
        assert containers.containers == {}

    def test_rejected_validation_closes_streams(self, containers: InMemoryContainerService) -> None:
        service = StagingService(
            containers,
            StagingSettings(container_name="docs"),
            validator=FileValidator(max_size_bytes=3),
        )
        sources = _sources("long-name.txt")
        with pytest.raises(FileValidationError):
            service.stage(sources)
        assert sources[0].stream.closed  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# stage_async()
# ---------------------------------------------------------------------------


class TestStageAsync:
    def test_end_to_end(self, containers: InMemoryContainerService) -> None:
        settings = StagingSettings(container_name="docs", max_concurrency=2)
        service = StagingService(containers, settings)
        keys = asyncio.run(service.stage_async(_sources("a.txt", "b.txt", "a.txt")))
        assert sorted(keys) == ["a (1).txt", "a.txt", "b.txt"]
        assert len(service.events) == 1

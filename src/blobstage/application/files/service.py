"""Application files – StagingService: validate, name, provision and upload in one call."""
from __future__ import annotations

import dataclasses
from typing import Callable, Iterable

from blobstage.application.files.batch import UploadBatch
from blobstage.application.files.candidate import UploadCandidate, UploadSource
from blobstage.application.files.images import ImageNormalizer, image_candidate
from blobstage.application.files.store import ContainerService
from blobstage.application.files.uploader import BlobUploader, ensure_container
from blobstage.application.files.validator import FileValidator
from blobstage.config.settings.staging import StagingSettings

__all__ = ["BatchStagedEvent", "StagingService"]


def _close_sources(sources: Iterable[UploadSource]) -> None:
    for source in sources:
        if source.stream is not None:
            source.stream.close()


@dataclasses.dataclass(frozen=True)
class BatchStagedEvent:
    """Emitted after every candidate of a batch reached the store."""

    container: str
    keys: tuple[str, ...]
    renamed: dict[str, str]
    size_bytes: int


class StagingService:
    """Runs the whole staging flow for a list of uploads.

    1. validate the uploads (when a validator is configured);
    2. build an :class:`UploadBatch` with the configured attempt ceiling;
    3. ensure the container exists and is publicly readable;
    4. upload through :class:`BlobUploader`, scaling images when
       ``image_max_dimension`` is set.
    """

    def __init__(
        self,
        containers: ContainerService,
        settings: StagingSettings,
        validator: FileValidator | None = None,
    ) -> None:
        self._containers = containers
        self._settings = settings
        self._validator = validator
        self.events: list[BatchStagedEvent] = []

    def _prepare(
        self,
        sources: Iterable[UploadSource],
        name_transform: Callable[[str], str] | None,
    ) -> BlobUploader:
        items = list(sources)
        normalizer: ImageNormalizer | None = None
        factory = UploadCandidate.from_upload
        if self._settings.image_max_dimension is not None:
            normalizer = ImageNormalizer(
                self._settings.image_max_dimension,
                quality=self._settings.image_quality,
            )
            factory = image_candidate

        try:
            if self._validator is not None:
                self._validator.validate_or_raise(items)
            batch = UploadBatch.from_uploads(
                items,
                name_transform,
                factory=factory,
                max_attempts=self._settings.max_name_attempts,
            )
            container = ensure_container(self._settings.container_name, self._containers)
            return BlobUploader(
                container,
                batch,
                normalizer=normalizer,
                max_concurrency=self._settings.max_concurrency,
            )
        except Exception:
            _close_sources(items)
            raise

    def _emit(self, uploader: BlobUploader, keys: list[str]) -> None:
        self.events.append(
            BatchStagedEvent(
                container=self._settings.container_name,
                keys=tuple(keys),
                renamed=dict(uploader.renamed),
                size_bytes=sum(c.size_bytes for c in uploader.batch),
            )
        )

    def stage(
        self,
        sources: Iterable[UploadSource],
        name_transform: Callable[[str], str] | None = None,
    ) -> list[str]:
        """Stage *sources* synchronously; return the keys written."""
        uploader = self._prepare(sources, name_transform)
        with uploader.batch:
            keys = uploader.upload()
        self._emit(uploader, keys)
        return keys

    async def stage_async(
        self,
        sources: Iterable[UploadSource],
        name_transform: Callable[[str], str] | None = None,
    ) -> list[str]:
        uploader = self._prepare(sources, name_transform)
        with uploader.batch:
            keys = await uploader.upload_async()
        self._emit(uploader, keys)
        return keys

"""Application files – BlobUploader and container provisioning."""
from __future__ import annotations

import asyncio
import enum
import re
import threading
from typing import BinaryIO

from blobstage.application.files.batch import UploadBatch
from blobstage.application.files.candidate import UploadCandidate
from blobstage.application.files.images import ImageNormalizer
from blobstage.application.files.store import BlobStore, ContainerService
from blobstage.kernel.errors import InvalidInputError, InvariantViolationError, UploadFailedError
from blobstage.observability.logging import get_logger

__all__ = ["BlobUploader", "UploadState", "container_name", "ensure_container"]

logger = get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class UploadState(str, enum.Enum):
    INITIALIZED = "initialized"
    NAMES_LISTED = "names_listed"
    CONFLICTS_RESOLVED = "conflicts_resolved"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


def container_name(name: str) -> str:
    """Lower-case *name*, collapse every run outside ``[a-z0-9]`` to ``-`` and trim dashes.

    >>> container_name("  User Photos (2024)! ")
    'user-photos-2024'
    """
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def ensure_container(name: str, service: ContainerService) -> BlobStore:
    """Create (if needed) a publicly readable container for *name* and return it.

    Errors from *service* propagate unchanged.
    """
    canonical = container_name(name)
    if not canonical:
        raise InvalidInputError(
            "Container name has no usable characters",
            detail={"name": name},
        )
    container = service.ensure_container(canonical)
    service.set_public_read_access(container)
    logger.info("container.ensured", container=canonical, requested=name)
    return container


def _is_set(event: threading.Event | asyncio.Event | None) -> bool:
    return event is not None and event.is_set()


class BlobUploader:
    """Streams an :class:`UploadBatch` into a :class:`BlobStore`.

    Construction lists the keys already in *store* and renames clashing batch
    members straight away, so the batch is conflict-free before any upload
    method can run.  Candidates are written in batch order; each stream is
    rewound before the write and closed right after it.  The first failed
    write stops the run with :class:`UploadFailedError`.  Blobs written
    before the failure stay in the store.

    ``max_concurrency`` only affects :meth:`upload_async`: up to that many
    writes are in flight at once, dispatched in batch order.
    """

    def __init__(
        self,
        store: BlobStore,
        batch: UploadBatch,
        *,
        normalizer: ImageNormalizer | None = None,
        max_concurrency: int = 1,
    ) -> None:
        if max_concurrency < 1:
            raise InvalidInputError(
                "max_concurrency must be >= 1",
                detail={"max_concurrency": max_concurrency},
            )
        self._store = store
        self._batch = batch
        self._normalizer = normalizer
        self._max_concurrency = max_concurrency
        self._state = UploadState.INITIALIZED
        self.uploaded: list[str] = []

        existing = store.list_keys()
        self._state = UploadState.NAMES_LISTED
        logger.info("blob_uploader.names_listed", existing=len(existing), candidates=len(batch))

        self.renamed = batch.resolve_against(existing)
        self._state = UploadState.CONFLICTS_RESOLVED

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def batch(self) -> UploadBatch:
        return self._batch

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def upload(self, cancel_event: threading.Event | None = None) -> list[str]:
        """Upload every candidate in order; return the keys written.

        Setting *cancel_event* stops further writes; the state becomes
        ``CANCELLED`` and the candidates not yet written keep their streams
        open (close them with :meth:`UploadBatch.close`).
        """
        self._begin()
        for candidate in self._batch:
            if _is_set(cancel_event):
                return self._cancel()
            self._put(candidate)
        return self._complete()

    def _put(self, candidate: UploadCandidate) -> None:
        stream: BinaryIO | None = None
        try:
            stream, content_type = self._payload(candidate)
            self._store.put_stream(candidate.save_name, content_type, stream)
        except Exception as exc:
            raise self._fail(candidate, exc) from exc
        finally:
            self._release(candidate, stream)
        self._record(candidate)

    # ------------------------------------------------------------------
    # Async
    # ------------------------------------------------------------------

    async def upload_async(self, cancel_event: asyncio.Event | None = None) -> list[str]:
        """Async :meth:`upload`.

        Cancelling the calling task lets the write in flight finish before
        :class:`asyncio.CancelledError` propagates.
        """
        self._begin()
        if self._max_concurrency > 1:
            return await self._upload_bounded(cancel_event)
        for candidate in self._batch:
            if _is_set(cancel_event):
                return self._cancel()
            await self._put_async(candidate)
        return self._complete()

    async def _put_async(self, candidate: UploadCandidate) -> None:
        stream: BinaryIO | None = None
        try:
            stream, content_type = self._payload(candidate)
            write = asyncio.ensure_future(
                self._store.put_stream_async(candidate.save_name, content_type, stream)
            )
            try:
                await asyncio.shield(write)
            except asyncio.CancelledError:
                await self._drain(write, candidate)
                raise
        except Exception as exc:
            raise self._fail(candidate, exc) from exc
        finally:
            self._release(candidate, stream)
        self._record(candidate)

    async def _drain(self, write: asyncio.Future[None], candidate: UploadCandidate) -> None:
        self._state = UploadState.CANCELLED
        await asyncio.wait({write})
        written = not write.cancelled() and write.exception() is None
        if written:
            self._record(candidate)
        logger.warning(
            "blob_uploader.cancelled",
            in_flight=candidate.save_name,
            in_flight_written=written,
            uploaded=len(self.uploaded),
        )

    async def _upload_bounded(self, cancel_event: asyncio.Event | None) -> list[str]:
        semaphore = asyncio.Semaphore(self._max_concurrency)
        in_flight: set[asyncio.Task[None]] = set()
        failures: list[UploadFailedError] = []
        stopped = False

        async def run(candidate: UploadCandidate) -> None:
            try:
                await self._put_async(candidate)
            except UploadFailedError as exc:
                failures.append(exc)
            finally:
                semaphore.release()

        try:
            for candidate in self._batch:
                await semaphore.acquire()
                if failures or _is_set(cancel_event):
                    semaphore.release()
                    stopped = not failures
                    break
                task = asyncio.create_task(run(candidate))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
            if in_flight:
                await asyncio.wait(set(in_flight))
        except asyncio.CancelledError:
            # writes already dispatched run to completion; nothing new starts
            self._state = UploadState.CANCELLED
            if in_flight:
                await asyncio.wait(set(in_flight))
            logger.warning(
                "blob_uploader.cancelled",
                uploaded=len(self.uploaded),
                candidates=len(self._batch),
            )
            raise

        if failures:
            self._state = UploadState.FAILED
            raise failures[0]
        if stopped:
            return self._cancel()
        return self._complete()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _begin(self) -> None:
        if self._state is not UploadState.CONFLICTS_RESOLVED:
            raise InvariantViolationError(
                f"Cannot start an upload in state {self._state.value!r}",
                detail={"state": self._state.value},
            )
        self._state = UploadState.UPLOADING

    def _payload(self, candidate: UploadCandidate) -> tuple[BinaryIO, str]:
        candidate.rewind()
        if self._normalizer is None:
            return candidate.stream, candidate.content_type
        return self._normalizer.normalize(candidate)

    @staticmethod
    def _release(candidate: UploadCandidate, stream: BinaryIO | None) -> None:
        if stream is not None and stream is not candidate.stream:
            stream.close()
        candidate.close()

    def _record(self, candidate: UploadCandidate) -> None:
        self.uploaded.append(candidate.save_name)
        logger.debug("blob_uploader.put", key=candidate.save_name, size_bytes=candidate.size_bytes)

    def _fail(self, candidate: UploadCandidate, exc: Exception) -> UploadFailedError:
        self._state = UploadState.FAILED
        err = UploadFailedError(candidate.save_name, exc, uploaded=self.uploaded)
        logger.error("blob_uploader.failed", key=candidate.save_name, **err.log_fields())
        return err

    def _cancel(self) -> list[str]:
        self._state = UploadState.CANCELLED
        logger.warning("blob_uploader.cancelled", uploaded=len(self.uploaded), candidates=len(self._batch))
        return list(self.uploaded)

    def _complete(self) -> list[str]:
        self._state = UploadState.COMPLETED
        logger.info("blob_uploader.completed", uploaded=len(self.uploaded))
        return list(self.uploaded)
